# ai/errors.py
import openai

RATE_LIMIT_MARKERS = ("429", "resource_exhausted", "rate limit", "rate_limit", "quota")


class GenerationError(Exception):
    """
    Base class for failures around a generation operation.
    - operation: which call failed (e.g. "analyze_dream")
    - detail: diagnostic text for the log
    - user_message: text safe to show to the child on the error screen
    """

    def __init__(self, detail: str, operation: str = "", user_message: str | None = None):
        super().__init__(detail)
        self.detail = detail
        self.operation = operation
        self.user_message = user_message

    def __str__(self) -> str:
        if self.operation:
            return f"{self.operation}: {self.detail}"
        return self.detail


class InvalidInput(GenerationError):
    """Required user input is missing or out of range. The user is re-prompted."""


class SchemaViolation(GenerationError):
    """The backend answer could not be parsed or does not satisfy its contract."""


class ProviderError(GenerationError):
    pass


class TransientProviderError(ProviderError):
    """Rate-limit / exhausted-quota class failure."""


class TerminalProviderError(ProviderError):
    pass


def is_rate_limit_error(error: BaseException) -> bool:
    if isinstance(error, (openai.RateLimitError, TransientProviderError)):
        return True
    if getattr(error, "status_code", None) == 429 or getattr(error, "status", None) == 429:
        return True
    code = str(getattr(error, "code", "") or "").lower()
    message = str(error).lower()
    return any(marker in code or marker in message for marker in RATE_LIMIT_MARKERS)


def classify_provider_error(error: BaseException, operation: str) -> ProviderError:
    if isinstance(error, ProviderError):
        return error
    cls = TransientProviderError if is_rate_limit_error(error) else TerminalProviderError
    return cls(f"{type(error).__name__}: {error}", operation=operation)
