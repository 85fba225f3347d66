import pytest

from waitcast.app.notices import (
    FORMAT_MESSAGE,
    NETWORK_MESSAGE,
    NO_QUEUE_MESSAGE,
    STORE_CLOSED_MESSAGE,
    notice_for_error,
)
from waitcast.core.errors import ErrorCode, FormatError, ResponseError, TransportError


def test_store_closed_code_is_a_blocking_warning():
    notice = notice_for_error(ResponseError("HTTP 404: closed", status_code=404, error_code=ErrorCode.STORE_CLOSED))
    assert notice.kind == "blocking"
    assert notice.tone == "warning"
    assert notice.message == STORE_CLOSED_MESSAGE
    assert notice.requires_ack is True
    assert notice.auto_dismiss_seconds is None


def test_no_queue_code_is_a_blocking_success():
    notice = notice_for_error(ResponseError("x", status_code=404, error_code=ErrorCode.NO_QUEUE_NEEDED))
    assert (notice.kind, notice.tone, notice.message) == ("blocking", "success", NO_QUEUE_MESSAGE)


def test_calculation_error_is_transient():
    notice = notice_for_error(ResponseError("x", status_code=500, error_code=ErrorCode.CALCULATION_ERROR))
    assert notice.kind == "transient"
    assert notice.tone == "error"
    assert notice.auto_dismiss_seconds == 3


def test_error_code_wins_over_message_text():
    exc = ResponseError(
        "HTTP 404: 该店铺目前不需要排队",
        status_code=404,
        error_code=ErrorCode.STORE_CLOSED,
    )
    assert notice_for_error(exc).message == STORE_CLOSED_MESSAGE


def test_unknown_code_shows_backend_text():
    exc = ResponseError("HTTP 400: 该店铺目前不需要排队", status_code=400, raw_error_code="NEW_CODE")
    notice = notice_for_error(exc)
    assert notice.kind == "transient"
    assert "HTTP 400" in notice.message


@pytest.mark.parametrize(
    ("text", "body", "kind", "tone"),
    [
        ("HTTP 404: 该店铺在选择的日期期间未营业", None, "blocking", "warning"),
        ("HTTP 404: not found", {"message": "该店铺目前不需要排队"}, "blocking", "success"),
        ("HTTP 500: server error", None, "transient", "error"),
        ("HTTP 422: bad", None, "transient", "warning"),
        ("HTTP 404: nothing", None, "transient", "warning"),
    ],
)
def test_text_fallback_without_error_code(text, body, kind, tone):
    notice = notice_for_error(ResponseError(text, status_code=int(text[5:8]), body=body))
    assert (notice.kind, notice.tone) == (kind, tone)


def test_transport_and_format_errors():
    assert notice_for_error(TransportError("refused")).message == NETWORK_MESSAGE
    assert notice_for_error(FormatError("missing regions")).message == FORMAT_MESSAGE


def test_other_errors_surface_their_text():
    notice = notice_for_error(RuntimeError("unexpected"))
    assert notice.kind == "transient"
    assert notice.message == "unexpected"
    assert notice.title == "Error"
