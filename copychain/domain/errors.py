"""Error taxonomy for step generation (client side) and the copy backend."""


class GenerationError(Exception):
    """Base class for failures of a single step generation attempt."""


class Unauthenticated(GenerationError):
    """No valid session credential; the network call must not be attempted."""

    def __init__(self, message: str = "Login required") -> None:
        super().__init__(message)


class RequestRejected(GenerationError):
    """Generation endpoint answered with a non-success status."""

    def __init__(self, message: str, status_code: int) -> None:
        super().__init__(message)
        self.status_code = status_code


class StreamUnavailable(GenerationError):
    """Response declared success but carried no readable body."""

    def __init__(self, message: str = "Stream not available") -> None:
        super().__init__(message)


class TransportFailure(GenerationError):
    """Network-level failure while sending the request or reading the stream."""


class GenerationCancelled(GenerationError):
    """User-initiated abort. Never surfaced as a visible error."""

    def __init__(self, message: str = "Generation cancelled") -> None:
        super().__init__(message)


class IdentityError(Exception):
    """Identity provider refused or could not complete an auth operation."""


class CopyServiceError(Exception):
    """Base class for errors raised while serving /generate-copy."""

    status_code: int = 500


class UnknownStepError(CopyServiceError):
    """Requested step id has no agent."""

    status_code = 400

    def __init__(self, step_id: str) -> None:
        super().__init__(f"Unknown step: {step_id}")
        self.step_id = step_id


class ProviderNotConfiguredError(CopyServiceError):
    """Selected provider has no API key configured."""

    def __init__(self, provider: str) -> None:
        super().__init__(f"{provider.upper()}_API_KEY is not configured")
        self.provider = provider


class ProviderRejectedError(CopyServiceError):
    """Provider API answered with a non-success status."""

    def __init__(self, provider: str, status: int, body: str = "") -> None:
        super().__init__(f"Error from {provider} API: {status}")
        self.provider = provider
        self.upstream_status = status
        self.body = body


class ProviderRateLimitedError(ProviderRejectedError):
    """Provider API answered 429."""

    status_code = 429

    def __init__(self, provider: str, body: str = "") -> None:
        super().__init__(provider, 429, body)
        self.args = ("Rate limit exceeded. Try again in a few moments.",)
