"""Application error taxonomy.

Every error raised by the analysis and aggregation services derives from
``AppError`` so the HTTP layer can map it to a status code and a
``{"error": kind, "detail": message}`` body without inspecting messages.
"""


class AppError(Exception):
    """Base class for errors surfaced to callers."""

    status_code: int = 500
    kind: str = "app_error"

    def __init__(self, message: str, **context):
        super().__init__(message)
        self.message = message
        self.context = context

    def to_dict(self) -> dict:
        return {"error": self.kind, "detail": self.message}


class InvalidInputError(AppError):
    """Empty query, unknown platform, malformed window parameters."""

    status_code = 400
    kind = "invalid_input"


class NotFoundError(AppError):
    """Unknown keyword or client."""

    status_code = 404
    kind = "not_found"


class ProviderError(AppError):
    """The external AI provider call failed or timed out. Not retried here."""

    status_code = 502
    kind = "provider_error"

    def __init__(self, message: str, cause: BaseException | None = None, **context):
        super().__init__(message, **context)
        self.cause = cause


class ComputationError(AppError):
    """Unexpected arithmetic/data failure. A programming defect, never recovered."""

    status_code = 500
    kind = "computation_error"
