"""Step orchestrator - drives the copy pipeline one streamed step at a time."""

import asyncio
import logging
from collections.abc import Callable, Mapping, Sequence

from copychain.domain.entities.cancellation import CancellationHandle
from copychain.domain.entities.generation_context import (
    DEFAULT_GENERATION_CONTEXT,
    GenerationContext,
)
from copychain.domain.entities.pipeline_state import (
    INPUT_PHASE_INDEX,
    GenerationResult,
    GenerationStatus,
    PipelinePhase,
    PipelineSnapshot,
    PipelineState,
)
from copychain.domain.entities.steps import STEPS, StepDefinition
from copychain.domain.errors import GenerationCancelled, GenerationError
from copychain.domain.ports.gateway import GenerationGatewayPort, GenerationRequest
from copychain.domain.services.context_assembly import build_previous_context
from copychain.domain.services.navigation import is_step_selectable, selectable_steps
from copychain.infrastructure.streaming.sse_parser import iter_deltas

logger = logging.getLogger(__name__)

ERROR_MARKER = "❌ Error: "
PROVIDERS = ("deepseek", "openai")

PipelineListener = Callable[[PipelineSnapshot], None]


def error_marker(message: str) -> str:
    """Inline text shown in place of the output when a step fails."""
    return f"{ERROR_MARKER}{message}"


class StepOrchestrator:
    """Owns the pipeline state for one product and runs its steps.

    At most one generation is in flight. Starting a generation cancels the
    previous handle first; a superseded generation never writes to state.
    Observers get immutable snapshots through subscribe() and snapshot().
    """

    def __init__(
        self,
        gateway: GenerationGatewayPort,
        steps: Sequence[StepDefinition] = STEPS,
        provider: str = "deepseek",
        generation_context: GenerationContext | None = None,
        step_delay: float = 0.5,
    ) -> None:
        self._gateway = gateway
        self._steps = tuple(steps)
        self._state = PipelineState()
        self._handle: CancellationHandle | None = None
        self._listeners: list[PipelineListener] = []
        self._provider = provider
        self._generation_context = generation_context or DEFAULT_GENERATION_CONTEXT
        self._step_delay = step_delay
        self.set_provider(provider)

    @property
    def steps(self) -> tuple[StepDefinition, ...]:
        return self._steps

    @property
    def provider(self) -> str:
        return self._provider

    @property
    def generation_context(self) -> GenerationContext:
        return self._generation_context

    def snapshot(self) -> PipelineSnapshot:
        return PipelineSnapshot.of(self._state)

    def selectable(self) -> list[bool]:
        """Navigation flags for every step in catalog order."""
        s = self._state
        return selectable_steps(s.results, s.current_step_index, s.is_generating, self._steps)

    def subscribe(self, listener: PipelineListener) -> Callable[[], None]:
        """Register a snapshot listener; returns the unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def set_product_input(self, product_input: str) -> None:
        self._state.product_input = product_input
        self._publish()

    def set_generation_context(self, context: GenerationContext) -> None:
        """Applies to the next request; a generation in flight keeps its own copy."""
        self._generation_context = context

    def set_provider(self, provider: str) -> None:
        if provider not in PROVIDERS:
            raise ValueError(f"Invalid provider: {provider}")
        self._provider = provider

    def load_results(self, results: Mapping[str, str], product_input: str | None = None) -> None:
        """Hydrate committed results from a saved project.

        Unknown step ids are ignored. The current step moves to the last
        catalog step that has a result.
        """
        self.stop_generation()
        known = {s.id for s in self._steps}
        s = self._state
        s.results = {k: v for k, v in results.items() if k in known and v}
        if product_input is not None:
            s.product_input = product_input
        committed = [i for i, step in enumerate(self._steps) if step.id in s.results]
        s.current_step_index = committed[-1] if committed else INPUT_PHASE_INDEX
        s.streaming_buffer = (
            s.results[self._steps[s.current_step_index].id] if committed else ""
        )
        s.phase = PipelinePhase.COMPLETED if committed else PipelinePhase.IDLE
        s.error = None
        self._publish()

    def return_to_input(self) -> None:
        """Back to the product input form; committed results are kept."""
        self.stop_generation()
        s = self._state
        s.current_step_index = INPUT_PHASE_INDEX
        s.streaming_buffer = ""
        s.phase = PipelinePhase.IDLE
        s.error = None
        self._publish()

    def select_step(self, index: int) -> bool:
        """Open a step if the navigation policy allows it.

        A committed step shows its result; the next pending step opens
        empty, ready for generate_step. A generation in flight is stopped
        when a different step is opened.
        """
        s = self._state
        if not is_step_selectable(
            index, s.results, s.current_step_index, s.is_generating, self._steps
        ):
            return False
        if s.is_generating and index != s.current_step_index:
            self.stop_generation()
        if not s.is_generating:
            step = self._steps[index]
            s.current_step_index = index
            s.streaming_buffer = s.results.get(step.id, "")
            s.phase = PipelinePhase.COMPLETED if step.id in s.results else PipelinePhase.IDLE
            s.error = None
            self._publish()
        return True

    def stop_generation(self) -> None:
        """Cancel the in-flight generation, if any. Idempotent."""
        handle, self._handle = self._handle, None
        if handle is not None:
            handle.cancel()
        s = self._state
        if s.is_generating:
            s.is_generating = False
            s.phase = PipelinePhase.IDLE
            step = self._current_step()
            s.streaming_buffer = s.results.get(step.id, "") if step else ""
            self._publish()

    async def generate_step(
        self,
        step_index: int,
        continue_from: str | None = None,
    ) -> GenerationResult | None:
        """Stream one step and commit it on graceful end.

        Returns None for an index outside the catalog. Cancellation yields a
        CANCELLED result and leaves results untouched; any other generation
        error replaces the buffer with the inline error marker.
        """
        if not 0 <= step_index < len(self._steps):
            logger.warning("Ignoring generate_step for out-of-range index %s", step_index)
            return None
        step = self._steps[step_index]
        s = self._state
        previous_context = build_previous_context(step_index, s.results, self._steps)
        request = GenerationRequest(
            product_input=s.product_input,
            step=step.id,
            previous_context=previous_context or None,
            provider=self._provider,
            continue_from=continue_from or None,
            generation_context=self._generation_context,
        )

        if self._handle is not None:
            self._handle.cancel()
        handle = CancellationHandle()
        self._handle = handle

        s.current_step_index = step_index
        s.streaming_buffer = continue_from or ""
        s.is_generating = True
        s.phase = PipelinePhase.STREAMING
        s.error = None
        self._publish()

        try:
            async with self._gateway.open_stream(request, handle) as chunks:
                async for delta in iter_deltas(chunks):
                    if handle.cancelled:
                        raise GenerationCancelled()
                    s.streaming_buffer += delta
                    self._publish()
            if handle.cancelled:
                raise GenerationCancelled()
        except GenerationCancelled:
            logger.debug("Generation of %s cancelled", step.id)
            return GenerationResult(step.id, GenerationStatus.CANCELLED)
        except GenerationError as e:
            if self._handle is not handle:
                return GenerationResult(step.id, GenerationStatus.CANCELLED)
            logger.warning("Generation of %s failed: %s", step.id, e)
            self._handle = None
            s.streaming_buffer = error_marker(str(e))
            s.is_generating = False
            s.phase = PipelinePhase.FAILED
            s.error = str(e)
            self._publish()
            return GenerationResult(step.id, GenerationStatus.FAILED, error=str(e))
        except BaseException:
            # anything else propagates, but the pipeline must not stay busy
            if self._handle is handle:
                self._handle = None
                s.is_generating = False
                s.phase = PipelinePhase.IDLE
                self._publish()
            raise

        text = s.streaming_buffer
        s.results[step.id] = text
        s.is_generating = False
        s.phase = PipelinePhase.COMPLETED
        self._handle = None
        self._publish()
        return GenerationResult(step.id, GenerationStatus.COMPLETED, text=text)

    async def generate_all(self, start_index: int = 0) -> list[GenerationResult]:
        """Run steps in catalog order, stopping at the first one that does not complete."""
        outcomes: list[GenerationResult] = []
        for index in range(max(start_index, 0), len(self._steps)):
            if outcomes and self._step_delay > 0:
                await asyncio.sleep(self._step_delay)
            result = await self.generate_step(index)
            if result is None:
                break
            outcomes.append(result)
            if not result.completed:
                logger.info("generate_all stopped at %s (%s)", result.step_id, result.status.value)
                break
        return outcomes

    def _current_step(self) -> StepDefinition | None:
        index = self._state.current_step_index
        if 0 <= index < len(self._steps):
            return self._steps[index]
        return None

    def _publish(self) -> None:
        if not self._listeners:
            return
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:  # noqa: BLE001
                logger.exception("Pipeline listener failed")
