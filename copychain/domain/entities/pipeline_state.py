"""Pipeline state owned by the step orchestrator, and its read-only views."""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping

INPUT_PHASE_INDEX = -1


class PipelinePhase(str, Enum):
    """Orchestrator state machine."""

    IDLE = "idle"
    STREAMING = "streaming"
    COMPLETED = "completed"
    FAILED = "failed"  # idle with an inline error marker


class GenerationStatus(str, Enum):
    """Outcome of one generate_step call."""

    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass
class PipelineState:
    """Mutable record. Only the orchestrator writes to it."""

    product_input: str = ""
    current_step_index: int = INPUT_PHASE_INDEX
    results: dict[str, str] = field(default_factory=dict)
    streaming_buffer: str = ""
    is_generating: bool = False
    phase: PipelinePhase = PipelinePhase.IDLE
    error: str | None = None


@dataclass(frozen=True)
class PipelineSnapshot:
    """Immutable view handed to observers (sidebar, output pane, CLI)."""

    product_input: str
    current_step_index: int
    results: Mapping[str, str]
    streaming_buffer: str
    is_generating: bool
    phase: PipelinePhase
    error: str | None

    @classmethod
    def of(cls, state: PipelineState) -> "PipelineSnapshot":
        return cls(
            product_input=state.product_input,
            current_step_index=state.current_step_index,
            results=MappingProxyType(dict(state.results)),
            streaming_buffer=state.streaming_buffer,
            is_generating=state.is_generating,
            phase=state.phase,
            error=state.error,
        )


@dataclass(frozen=True)
class GenerationResult:
    """What generate_step produced for one step."""

    step_id: str
    status: GenerationStatus
    text: str = ""
    error: str | None = None

    @property
    def completed(self) -> bool:
        return self.status is GenerationStatus.COMPLETED
