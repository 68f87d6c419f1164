from __future__ import annotations

import pytest

from sceneforge.errors import (
    ErrorKind,
    PermanentError,
    QuotaExceededError,
    TransientError,
    classify_error,
    classify_message,
    error_from_response,
)


def test_structured_errors_keep_their_kind():
    # Message text is ignored for typed errors
    assert classify_error(TransientError("quota exceeded")) == ErrorKind.TRANSIENT
    assert classify_error(QuotaExceededError("boom")) == ErrorKind.QUOTA_EXCEEDED
    assert classify_error(PermanentError("429")) == ErrorKind.PERMANENT


@pytest.mark.parametrize("message, kind", [
    ("Quota Exceeded for model", ErrorKind.QUOTA_EXCEEDED),
    ("할당량 초과", ErrorKind.QUOTA_EXCEEDED),
    ("HTTP 429", ErrorKind.TRANSIENT),
    ("RESOURCE_EXHAUSTED", ErrorKind.TRANSIENT),
    ("503 backend unavailable", ErrorKind.TRANSIENT),
    ("400 bad request", ErrorKind.PERMANENT),
])
def test_classify_message(message, kind):
    assert classify_message(message) == kind


def test_classify_untyped_error_without_message():
    assert classify_error(ValueError()) == ErrorKind.PERMANENT


def test_error_from_response_maps_status_codes():
    assert isinstance(error_from_response(429, "Quota exceeded for project", "Imagen"), QuotaExceededError)
    assert isinstance(error_from_response(429, "Rate limit, slow down", "Imagen"), TransientError)
    assert isinstance(error_from_response(503, "unavailable", "Veo"), TransientError)

    error = error_from_response(400, "bad prompt", "Imagen")
    assert isinstance(error, PermanentError)
    assert error.status_code == 400
    assert "Imagen error 400" in str(error)
