"""Domain-specific exceptions — framework-independent."""


class OnboardError(Exception):
    """Base class for all errors raised by the onboarding assistant core."""


class EntityNotFoundError(OnboardError):
    """Raised when a requested entity does not exist."""

    def __init__(self, entity_type: str, entity_id: int | str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} with id '{entity_id}' not found")


# ── Ingestion ────────────────────────────────────────────────────────


class IngestionError(OnboardError):
    """Base class for failures while turning a resource into chunks."""


class AcquisitionError(IngestionError):
    """Raised when a source cannot be fetched (network, permission, timeout)."""

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"Could not acquire '{source}': {reason}")


class UnsupportedFormatError(IngestionError):
    """Raised when a file extension has no text extractor."""

    def __init__(self, extension: str):
        self.extension = extension
        super().__init__(f"Unsupported file format: '{extension or '<none>'}'")


class InsufficientContentError(IngestionError):
    """Raised when extracted text is shorter than the minimum useful length."""

    def __init__(self, source: str, length: int, minimum: int):
        self.source = source
        self.length = length
        self.minimum = minimum
        super().__init__(
            f"Insufficient content from '{source}': {length} characters extracted, "
            f"at least {minimum} required"
        )


class EmbeddingAlignmentError(OnboardError):
    """Raised when the embedding provider returns a different number of vectors than requested.

    Fatal and never retried: chunk-to-vector pairing can no longer be trusted.
    """

    def __init__(self, expected: int, received: int, detail: str = ""):
        self.expected = expected
        self.received = received
        message = f"Embedding provider returned {received} vectors for {expected} inputs"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


# ── Query path ───────────────────────────────────────────────────────


class SynthesisError(OnboardError):
    """Raised when the completion call for an answer fails."""


class TenantMismatchError(OnboardError):
    """Raised when data belonging to one tenant surfaces in another tenant's scope.

    Must never happen in correct operation; treat it as a programming bug.
    """

    def __init__(self, expected_tenant: str, actual_tenant: str, subject: str):
        self.expected_tenant = expected_tenant
        self.actual_tenant = actual_tenant
        self.subject = subject
        super().__init__(
            f"Tenant mismatch for {subject}: expected '{expected_tenant}', got '{actual_tenant}'"
        )


class CacheBackendError(OnboardError):
    """Raised by cache backends when the key-value store is unreachable or fails."""


class ChatProviderError(OnboardError):
    """Raised when a chat provider returns an error.

    Provider-agnostic — works for OpenRouter, Groq, OpenAI, etc.
    """

    def __init__(self, provider: str, status_code: int, message: str):
        self.provider = provider
        self.status_code = status_code
        self.message = message
        super().__init__(f"[{provider}] {status_code}: {message}")
