"""
User-facing notices for failed requests.

Two display modes:
- blocking: the user must acknowledge it (actionable conditions such as a closed
  store, or "no queue, just walk in");
- transient: shown briefly and dismissed automatically (everything else).

The backend's `error_code` is authoritative. Only when it is missing do we fall
back to matching well-known phrases in the error text; that path is weaker and
exists for older backend responses that omit the code.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from waitcast.core.errors import ErrorCode, FormatError, ResponseError, TransportError

NoticeKind = Literal["blocking", "transient"]
NoticeTone = Literal["success", "warning", "error"]

TRANSIENT_SECONDS = 3

STORE_CLOSED_MESSAGE = "This store was not open on the selected dates. Try another date."
NO_QUEUE_MESSAGE = "No queue at this store right now. You can go straight in."
CALCULATION_ERROR_MESSAGE = "Statistics could not be calculated; the data may be malformed."
NETWORK_MESSAGE = "Network connection failed. Check your connection and try again."
FORMAT_MESSAGE = "The server returned data in an unexpected format."

# Phrases the backend puts in `error`/`message` when it omits `error_code`.
STORE_CLOSED_PHRASE = "该店铺在选择的日期期间未营业"
NO_QUEUE_PHRASE = "该店铺目前不需要排队"

_TITLES: dict[NoticeTone, str] = {"success": "Notice", "warning": "Attention", "error": "Error"}


@dataclass(frozen=True)
class Notice:
    kind: NoticeKind
    tone: NoticeTone
    message: str

    @property
    def title(self) -> str:
        return _TITLES[self.tone]

    @property
    def requires_ack(self) -> bool:
        return self.kind == "blocking"

    @property
    def auto_dismiss_seconds(self) -> int | None:
        return None if self.requires_ack else TRANSIENT_SECONDS


def _notice_for_code(code: ErrorCode) -> Notice:
    if code is ErrorCode.STORE_CLOSED:
        return Notice("blocking", "warning", STORE_CLOSED_MESSAGE)
    if code is ErrorCode.NO_QUEUE_NEEDED:
        return Notice("blocking", "success", NO_QUEUE_MESSAGE)
    return Notice("transient", "error", CALCULATION_ERROR_MESSAGE)


def _notice_for_text(text: str) -> Notice:
    if STORE_CLOSED_PHRASE in text:
        return Notice("blocking", "warning", STORE_CLOSED_MESSAGE)
    if NO_QUEUE_PHRASE in text:
        return Notice("blocking", "success", NO_QUEUE_MESSAGE)
    if "HTTP 500" in text:
        return Notice("transient", "error", "The server cannot handle the request right now. Try again later.")
    if "HTTP 422" in text:
        return Notice("transient", "warning", "Query failed. Check that the selected store and date are correct.")
    if "HTTP 404" in text:
        return Notice("transient", "warning", "No data found. Check the store or pick another date.")
    return Notice("transient", "error", text or "Unknown error")


def notice_for_error(exc: BaseException) -> Notice:
    """Map any request failure onto a display notice."""
    if isinstance(exc, ResponseError):
        if exc.error_code is not None:
            return _notice_for_code(exc.error_code)
        if exc.raw_error_code:
            # A code we do not know yet: show the backend's own text.
            return Notice("transient", "error", str(exc) or "Unknown error")
        text = str(exc)
        extra = exc.body.get("message") if isinstance(exc.body, dict) else None
        if extra and str(extra) not in text:
            text = f"{text} ({extra})"
        return _notice_for_text(text)
    if isinstance(exc, TransportError):
        return Notice("transient", "error", NETWORK_MESSAGE)
    if isinstance(exc, FormatError):
        return Notice("transient", "error", FORMAT_MESSAGE)
    return Notice("transient", "error", str(exc) or "Unknown error")
