"""
Application-level exception types.

Every failure the studio reports to a caller derives from `AppError`, so the
HTTP layer and the orchestration boundary can turn it into a user-visible
message without string matching.
"""

from __future__ import annotations


class AppError(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, *, detail: str | None = None) -> None:
        self.detail = detail or message
        super().__init__(message)


class InvalidLanguageSelection(AppError):
    """Raised when activating a language that has no ready overlay."""

    def __init__(self, code: str) -> None:
        super().__init__(
            f"language has no ready translation: {code}",
            detail=f"Language '{code}' is not translated yet.",
        )
        self.code = code


class EditRejected(AppError):
    """Raised when source text is edited while a translated overlay is shown."""


class UpstreamRequestFailed(AppError):
    """Raised when the translation service answers with a non-success status."""

    def __init__(self, status: int | None, body: str = "") -> None:
        label = status if status is not None else "transport error"
        super().__init__(f"Translation API request failed with status {label}.")
        self.status = status
        self.body = body[:500]


class UnparseableUpstreamResponse(AppError):
    """Raised when the upstream body holds no recoverable JSON object."""

    def __init__(self, body: str = "") -> None:
        super().__init__("Translation API returned an unreadable response.")
        self.body = body[:500]


class NormalizationFailed(AppError):
    """Raised when no requested language resolves to the expected text count."""


class NoTranslationsReady(AppError):
    """Raised when a batch export is requested with no complete overlay."""


class EmptyCaptureSurface(AppError):
    """Raised when an export is requested before the board has been rendered."""


class SessionBusyError(AppError):
    """Raised when a translate or export is requested while one is in flight."""


class EntityNotFoundError(AppError):
    """Raised when a session entity cannot be found."""

    def __init__(self, entity_type: str, entity_id: object) -> None:
        super().__init__(
            f"{entity_type} not found: {entity_id}",
            detail=f"{entity_type} not found",
        )
        self.entity_type = entity_type
        self.entity_id = entity_id
