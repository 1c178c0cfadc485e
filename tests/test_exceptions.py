"""Tests for application-level exception types."""

import pytest

from assetstudio.core.exceptions import (
    AppError,
    EditRejected,
    EmptyCaptureSurface,
    EntityNotFoundError,
    InvalidLanguageSelection,
    NoTranslationsReady,
    NormalizationFailed,
    SessionBusyError,
    UnparseableUpstreamResponse,
    UpstreamRequestFailed,
)


class TestAppError:
    def test_message_and_detail(self):
        err = AppError("something broke", detail="user-friendly msg")
        assert str(err) == "something broke"
        assert err.detail == "user-friendly msg"

    def test_detail_defaults_to_message(self):
        err = AppError("fallback message")
        assert err.detail == "fallback message"


class TestDomainExceptions:
    @pytest.mark.parametrize(
        "exc_class",
        [EditRejected, NormalizationFailed, NoTranslationsReady, EmptyCaptureSurface, SessionBusyError],
    )
    def test_inherits_app_error(self, exc_class):
        assert issubclass(exc_class, AppError)

    def test_invalid_language_selection(self):
        err = InvalidLanguageSelection("ja")
        assert err.code == "ja"
        assert "ja" in err.detail


class TestUpstreamErrors:
    def test_body_is_truncated(self):
        err = UpstreamRequestFailed(502, "x" * 900)
        assert err.status == 502
        assert len(err.body) == 500
        assert "502" in str(err)

    def test_transport_failure_has_no_status(self):
        err = UpstreamRequestFailed(None, "connect timeout")
        assert err.status is None
        assert "transport error" in str(err)
        assert err.detail == str(err)
        assert err.body == "connect timeout"

    def test_detail_is_the_status_message_not_the_body(self):
        err = UpstreamRequestFailed(503, "<html>Service Unavailable</html>")
        assert err.detail == "Translation API request failed with status 503."
        assert err.body == "<html>Service Unavailable</html>"

    def test_unparseable_body_kept_apart_from_detail(self):
        err = UnparseableUpstreamResponse("not json")
        assert err.detail == str(err)
        assert err.body == "not json"


class TestEntityNotFoundError:
    def test_includes_entity_type_and_id(self):
        err = EntityNotFoundError("Frame", "frame-9")
        assert "Frame" in str(err)
        assert "frame-9" in str(err)
        assert err.entity_type == "Frame"
        assert err.entity_id == "frame-9"

    def test_detail_is_user_friendly(self):
        assert EntityNotFoundError("Session", 42).detail == "Session not found"
