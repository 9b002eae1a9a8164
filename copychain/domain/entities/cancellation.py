"""Cancellation handle for one in-flight step generation."""

import asyncio


class CancellationHandle:
    """Cooperative abort signal shared by the orchestrator and the stream reader.

    One handle per generation. Once cancelled it stays cancelled; a new
    generation always gets a fresh handle.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    async def wait(self) -> None:
        """Block until cancel() is called."""
        await self._event.wait()
