import contextvars
from contextlib import contextmanager
import uuid

request_id_var: contextvars.ContextVar[str | None] = contextvars.ContextVar("request_id", default=None)
session_id_var: contextvars.ContextVar[str | None] = contextvars.ContextVar("session_id", default=None)
language_var: contextvars.ContextVar[str | None] = contextvars.ContextVar("language", default=None)


def set_request_id(request_id: str) -> contextvars.Token:
    """Store the current request ID in a context variable."""
    return request_id_var.set(request_id)


def reset_request_id(token: contextvars.Token) -> None:
    """Reset the request ID context variable to a previous state."""
    request_id_var.reset(token)


def get_request_id() -> str | None:
    """Retrieve the current request ID from the context."""
    return request_id_var.get()


def _normalize_id(value: uuid.UUID | str | None) -> str | None:
    if value is None:
        return None
    return str(value)


def get_session_id() -> str | None:
    """Retrieve the current studio session ID for logging."""
    return session_id_var.get()


def get_language() -> str | None:
    """Retrieve the storyboard language being processed, if any."""
    return language_var.get()


@contextmanager
def log_context(
    session_id: uuid.UUID | str | None = None,
    language: str | None = None,
):
    """Temporarily scope session/language context for structured logs."""
    tokens: list[tuple[contextvars.ContextVar[str | None], contextvars.Token]] = []
    if session_id is not None:
        tokens.append((session_id_var, session_id_var.set(_normalize_id(session_id))))
    if language is not None:
        tokens.append((language_var, language_var.set(language)))
    try:
        yield
    finally:
        for var, token in reversed(tokens):
            var.reset(token)
