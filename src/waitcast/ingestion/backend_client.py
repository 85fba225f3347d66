"""
Queue-statistics backend client.

This module is responsible only for:
- calling the read-only backend endpoints (regions, stores, dates, queue data,
  dining-time analysis),
- translating HTTP failures into `waitcast.core.errors` (`TransportError`,
  `ResponseError`, `FormatError`),
- parsing payloads into the typed models in `waitcast.domain.models`.

It intentionally does not implement any analysis; see `waitcast.analysis.*` for that.
"""

from __future__ import annotations

import logging
import time
from typing import Any

import httpx
from pydantic import TypeAdapter, ValidationError

from waitcast.config.settings import Settings
from waitcast.core.errors import ErrorCode, FormatError, ResponseError, TransportError
from waitcast.core.http import DEFAULT_USER_AGENT, get_json
from waitcast.domain.models import (
    PLACEHOLDER,
    ChartSeries,
    DiningAnalysisPayload,
    QueueSnapshot,
    Store,
)

logger = logging.getLogger(__name__)

_STORES_ADAPTER = TypeAdapter(list[Store])


def _error_from_body(body: Any, *, status_code: int) -> ResponseError:
    """Build a `ResponseError` from an error envelope `{error, error_code?, message?}`."""
    detail = None
    raw_code = None
    if isinstance(body, dict):
        detail = body.get("error") or body.get("message")
        raw_code = body.get("error_code")
    if not detail:
        detail = body if isinstance(body, str) and body.strip() else "server error"
    return ResponseError(
        f"HTTP {status_code}: {detail}",
        status_code=status_code,
        error_code=ErrorCode.parse(raw_code),
        raw_error_code=str(raw_code) if raw_code else None,
        body=body,
    )


def _response_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


def _display_value(value: Any) -> Any:
    return value if value not in (None, "") else PLACEHOLDER


def _display_rate(value: Any) -> float | str:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return round(float(value), 1)
    return PLACEHOLDER


class BackendClient:
    """Async client for the queue-statistics backend."""

    def __init__(self, settings: Settings, *, transport: httpx.AsyncBaseTransport | None = None):
        self._settings = settings
        self._transport = transport

    @property
    def base_url(self) -> str:
        return self._settings.backend.base_url.rstrip("/")

    async def _get(self, path: str, *, params: dict[str, Any] | None = None) -> Any:
        """GET a backend path and return its JSON body, raising taxonomy errors."""
        url = f"{self.base_url}{path}"
        logger.debug("GET %s params=%s", url, params)
        try:
            payload = await get_json(
                url,
                params=params,
                timeout_seconds=self._settings.app.http_timeout_seconds,
                transport=self._transport,
            )
        except httpx.HTTPStatusError as e:
            body = _response_body(e.response)
            logger.warning("Backend error %s for %s: %s", e.response.status_code, path, body)
            raise _error_from_body(body, status_code=e.response.status_code) from e
        except httpx.RequestError as e:
            logger.warning("Backend unreachable for %s: %s", path, e)
            raise TransportError(f"Network connection failed: {e}") from e
        except ValueError as e:
            raise FormatError(f"Backend returned a non-JSON body for {path}") from e

        if isinstance(payload, dict) and payload.get("error"):
            raise _error_from_body(payload, status_code=200)
        return payload

    @staticmethod
    def _require_list(payload: Any, key: str, path: str) -> list[Any]:
        if not isinstance(payload, dict) or not isinstance(payload.get(key), list):
            raise FormatError(f"Backend response for {path} is missing '{key}'")
        return payload[key]

    async def get_regions(self) -> list[str]:
        path = "/api/regions"
        regions = [str(r) for r in self._require_list(await self._get(path), "regions", path)]
        logger.info("Loaded %d regions", len(regions))
        return regions

    async def get_stores(self, region: str) -> list[Store]:
        path = "/api/stores"
        raw = self._require_list(await self._get(path, params={"region": region}), "stores", path)
        try:
            stores = _STORES_ADAPTER.validate_python(raw)
        except ValidationError as e:
            raise FormatError(f"Backend response for {path} has malformed stores: {e}") from e
        logger.info("Loaded %d stores for region %s", len(stores), region)
        return [s if s.region else s.model_copy(update={"region": region}) for s in stores]

    async def get_dates(self, store_id: int) -> list[str]:
        path = "/api/dates"
        dates = [str(d) for d in self._require_list(await self._get(path, params={"store_id": store_id}), "dates", path)]
        logger.info("Loaded %d dates for store %s", len(dates), store_id)
        return dates

    async def get_queue_snapshot(self, store_id: int, date: str) -> QueueSnapshot:
        """Queue statistics for one store and one day."""
        path = "/api/data"
        payload = await self._get(path, params={"store_id": store_id, "start_date": date, "end_date": date})
        if not isinstance(payload, dict):
            raise FormatError(f"Backend response for {path} is not an object")

        real_time = payload.get("real_time") or {}
        stats = payload.get("stats") or {}
        if not isinstance(real_time, dict) or not isinstance(stats, dict):
            raise FormatError(f"Backend response for {path} has malformed real_time/stats blocks")

        chart = None
        if payload.get("times") and payload.get("wait_data") and payload.get("calls_data"):
            try:
                chart = ChartSeries(
                    times=payload.get("times") or [],
                    wait_data=payload.get("wait_data") or [],
                    calls_data=payload.get("calls_data") or [],
                    new_tickets_data=payload.get("new_tickets_data") or [],
                )
            except ValidationError as e:
                logger.warning("Ignoring malformed chart series for store %s: %s", store_id, e)

        return QueueSnapshot(
            current_queue_count=_display_value(real_time.get("current_queue_count")),
            current_wait_time=_display_value(real_time.get("current_wait_time")),
            avg_calls=_display_rate(stats.get("avg_calls")),
            max_calls=_display_value(stats.get("max_calls")),
            avg_new_tickets=_display_rate(stats.get("avg_new_tickets")),
            max_new_tickets=_display_value(stats.get("max_new_tickets")),
            chart=chart,
        )

    async def get_dining_analysis(self, store_id: int, dining_time: str) -> DiningAnalysisPayload:
        """Historical draw-time records for a planned dining time."""
        path = "/api/dining-analysis"
        payload = await self._get(path, params={"store_id": store_id, "dining_time": dining_time})
        self._require_list(payload, "analysis_data", path)
        try:
            parsed = DiningAnalysisPayload.model_validate(
                {"analysis_data": payload["analysis_data"], "statistics": payload.get("statistics") or {}}
            )
        except ValidationError as e:
            raise FormatError(f"Backend response for {path} is malformed: {e}") from e
        logger.info("Loaded %d historical records for store %s at %s", len(parsed.analysis_data), store_id, dining_time)
        return parsed

    async def ping(self) -> dict[str, Any]:
        """Best-effort reachability probe (never raises)."""
        url = f"{self.base_url}/api/regions"
        started = time.monotonic()
        try:
            async with httpx.AsyncClient(
                timeout=self._settings.app.http_timeout_seconds, transport=self._transport
            ) as client:
                resp = await client.get(url, headers={"User-Agent": DEFAULT_USER_AGENT})
        except httpx.HTTPError as e:
            return {"ok": False, "url": url, "status_code": None, "elapsed_ms": None, "error": str(e)}
        elapsed_ms = int((time.monotonic() - started) * 1000)
        return {
            "ok": resp.status_code == 200,
            "url": url,
            "status_code": resp.status_code,
            "elapsed_ms": elapsed_ms,
            "error": None,
        }
