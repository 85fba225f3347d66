from __future__ import annotations

# This module is the "orchestrator" for the client.
# It wires together:
# - backend data (regions -> stores -> dates, queue snapshot, dining analysis)
# - geo resolution (default region at start-up)
# - analysis (classifier, statistics, suggestion)
# - persistence of the user's selection (AppContext + SelectionRepository)
#
# Every call takes the AppContext explicitly and mutates it in place. Calls are not
# serialized: if two selections are in flight, whichever finishes last wins.

import logging
from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

from waitcast.analysis.classifier import classify_all, filter_high_confidence
from waitcast.analysis.statistics import aggregate, with_external_means
from waitcast.analysis.suggestion import suggest
from waitcast.app.context import AppContext, SelectionRepository
from waitcast.config.settings import Settings
from waitcast.core.time import ensure_within_window
from waitcast.domain.models import DiningReport, QueueSnapshot, ResolvedRegion, Store
from waitcast.geo.resolver import GeoResolver
from waitcast.ingestion.backend_client import BackendClient

logger = logging.getLogger(__name__)


class WaitSession:
    def __init__(
        self,
        settings: Settings,
        client: BackendClient,
        resolver: GeoResolver,
        repository: SelectionRepository,
    ):
        self._settings = settings
        self._client = client
        self._resolver = resolver
        self._repository = repository

    async def start(self) -> tuple[AppContext, ResolvedRegion]:
        """Restore the persisted selection, then pick the default region and store."""
        persisted = self._repository.load()
        ctx = AppContext()
        ctx.regions = await self._client.get_regions()

        resolved = await self._resolver.resolve_default_region(
            ctx.regions, self._settings.selection.fallback_region
        )
        if resolved.name is None:
            logger.info("No default region could be selected")
            return ctx, resolved

        # The persisted region alone never overrides the resolved one; it only decides
        # whether the persisted store and date are reused.
        preferred_store_id = None
        if persisted.store is not None and persisted.region == resolved.name:
            preferred_store_id = persisted.store.id
        await self.select_region(
            ctx, resolved.name, preferred_store_id=preferred_store_id, preferred_date=persisted.date
        )
        return ctx, resolved

    async def select_region(
        self,
        ctx: AppContext,
        region: str,
        *,
        preferred_store_id: int | None = None,
        preferred_date: str | None = None,
    ) -> AppContext:
        if ctx.regions and region not in ctx.regions:
            raise LookupError(f"Unknown region: {region}")

        ctx.region = region
        ctx.store = None
        ctx.date = None
        ctx.stores = []
        ctx.dates = []

        ctx.stores = await self._client.get_stores(region)
        self._repository.save(ctx)

        store_ids = {s.id for s in ctx.stores}
        store_id = preferred_store_id if preferred_store_id in store_ids else None
        if store_id is None:
            default_id = self._settings.selection.default_store_ids.get(region)
            store_id = default_id if default_id in store_ids else None
        if store_id is not None:
            await self.select_store(ctx, store_id, preferred_date=preferred_date)
        return ctx

    async def select_store(self, ctx: AppContext, store_id: int, *, preferred_date: str | None = None) -> AppContext:
        store = next((s for s in ctx.stores if s.id == store_id), None)
        if store is None:
            raise LookupError(f"Unknown store id: {store_id}")

        ctx.store = store
        ctx.date = None
        ctx.dates = []

        ctx.dates = await self._client.get_dates(store.id)
        if preferred_date and preferred_date in ctx.dates:
            ctx.date = preferred_date
        elif ctx.dates:
            ctx.date = ctx.dates[0]
        self._repository.save(ctx)
        return ctx

    def select_date(self, ctx: AppContext, value: str) -> AppContext:
        if value not in ctx.dates:
            raise LookupError(f"No data for {value}")
        ctx.date = value
        self._repository.save(ctx)
        return ctx

    def select_relative_day(self, ctx: AppContext, days_ago: int, *, today: date | None = None) -> AppContext:
        """Select today (0) or yesterday (1) if the store has data for it."""
        if today is None:
            today = datetime.now(ZoneInfo(self._settings.app.timezone)).date()
        return self.select_date(ctx, (today - timedelta(days=days_ago)).isoformat())

    async def load_queue_snapshot(self, ctx: AppContext) -> QueueSnapshot:
        if ctx.store is None or not ctx.date:
            raise ValueError("Select a store and a date first")
        snapshot = await self._client.get_queue_snapshot(ctx.store.id, ctx.date)
        self._repository.save(ctx)
        return snapshot

    async def analyze(self, ctx: AppContext, planned_time: str) -> DiningReport:
        if ctx.store is None:
            raise ValueError("Select a store first")
        return await self.analyze_store(ctx.store, planned_time)

    async def analyze_store(self, store: Store, planned_time: str) -> DiningReport:
        """Estimate draw time and wait for `planned_time` at `store`.

        Raises:
            PlannedTimeRejected: Before any request, if `planned_time` is outside business hours.
        """
        hours = self._settings.business_hours
        planned = ensure_within_window(planned_time, open_time=hours.open, close_time=hours.close)

        payload = await self._client.get_dining_analysis(store.id, planned)
        records = payload.analysis_data

        # Point estimates use high-confidence records only; the suggestion and the
        # history list use everything.
        analysis = with_external_means(aggregate(filter_high_confidence(records)), payload.statistics)
        suggestion = suggest(records, cfg=self._settings.suggestion, statistics=payload.statistics)

        logger.info(
            "Analysis for store %s at %s: draw=%s wait=%s min (%d samples)",
            store.id,
            planned,
            analysis.estimated_draw_time,
            suggestion.avg_wait_minutes,
            analysis.sample_count,
        )
        return DiningReport(
            store=store,
            planned_time=planned,
            analysis=analysis,
            suggestion=suggestion,
            history=classify_all(records),
        )
