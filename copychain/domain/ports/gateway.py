"""Gateway Port - posting a generation request and receiving its byte stream."""

from contextlib import AbstractAsyncContextManager
from typing import Any, AsyncIterator, Literal, Protocol

from pydantic import BaseModel, ConfigDict

from copychain.domain.entities.cancellation import CancellationHandle
from copychain.domain.entities.generation_context import GenerationContext

Provider = Literal["deepseek", "openai"]


class GenerationRequest(BaseModel):
    """Wire body of POST /generate-copy.

    Frozen: a request never changes once it is in flight.
    """

    model_config = ConfigDict(frozen=True)

    # length limits are enforced by the server; its 400 surfaces as RequestRejected
    product_input: str
    step: str
    previous_context: str | None = None
    provider: Provider = "deepseek"
    continue_from: str | None = None
    generation_context: GenerationContext | None = None

    def to_wire(self) -> dict[str, Any]:
        """JSON body; absent optional fields are omitted."""
        return self.model_dump(mode="json", exclude_none=True)


class GenerationGatewayPort(Protocol):
    """Transport used by the step orchestrator."""

    def open_stream(
        self,
        request: GenerationRequest,
        handle: CancellationHandle,
    ) -> AbstractAsyncContextManager[AsyncIterator[bytes]]:
        """Authenticate, POST, and yield the raw response byte chunks.

        Raises Unauthenticated, RequestRejected, StreamUnavailable or
        TransportFailure on entry; the chunk iterator raises
        GenerationCancelled once the handle is cancelled.
        """
        ...
