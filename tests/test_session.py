import asyncio
from datetime import date

import pytest

from waitcast.app.context import AppContext, SelectionRepository
from waitcast.app.session import WaitSession
from waitcast.config.settings import Settings
from waitcast.core.errors import PlannedTimeRejected
from waitcast.core.storage import JsonKeyValueStore
from waitcast.domain.models import DiningAnalysisPayload, HistoricalRecord, QueueSnapshot, Store
from waitcast.geo.resolver import GeoResolver


class StubPlatform:
    def __init__(self, status=False):
        self.status = status

    async def permission_status(self):
        return self.status

    async def authorize(self):
        return False

    async def current_location(self):
        raise AssertionError("location should not be requested")


class StubClient:
    def __init__(self, regions=("杭州", "上海"), records=()):
        self.regions = list(regions)
        self.stores = {
            "杭州": [Store(id=3011, name="湖滨店", region="杭州"), Store(id=3012, name="西溪店", region="杭州")],
            "上海": [Store(id=2001, name="来福士店", region="上海")],
        }
        self.dates = {3011: ["2026-10-18", "2026-10-17"], 3012: ["2026-10-18", "2026-10-17"], 2001: ["2026-10-18"]}
        self.records = list(records)
        self.calls = []

    async def get_regions(self):
        self.calls.append("regions")
        return list(self.regions)

    async def get_stores(self, region):
        self.calls.append(("stores", region))
        return list(self.stores.get(region, []))

    async def get_dates(self, store_id):
        self.calls.append(("dates", store_id))
        return list(self.dates.get(store_id, []))

    async def get_queue_snapshot(self, store_id, day):
        self.calls.append(("snapshot", store_id, day))
        return QueueSnapshot(current_queue_count=12)

    async def get_dining_analysis(self, store_id, dining_time):
        self.calls.append(("analysis", store_id, dining_time))
        return DiningAnalysisPayload(analysis_data=self.records)


def _settings() -> Settings:
    return Settings.model_validate({"selection": {"fallback_region": "杭州", "default_store_ids": {"杭州": 3011}}})


def _session(tmp_path, client, *, status=False):
    repo = SelectionRepository(JsonKeyValueStore(tmp_path / "state.json"))
    return WaitSession(_settings(), client, GeoResolver(StubPlatform(status)), repo), repo


def test_start_falls_back_and_selects_default_store(tmp_path):
    client = StubClient()
    session, repo = _session(tmp_path, client)

    ctx, resolved = asyncio.run(session.start())
    assert resolved.source == "fallback"
    assert ctx.region == "杭州"
    assert ctx.store.id == 3011
    assert ctx.date == "2026-10-18"

    persisted = repo.load()
    assert (persisted.region, persisted.store.id, persisted.date) == ("杭州", 3011, "2026-10-18")


def test_start_prefers_persisted_store_and_date(tmp_path):
    client = StubClient()
    session, repo = _session(tmp_path, client)
    repo.save(AppContext(region="杭州", store=Store(id=3012, name="西溪店", region="杭州"), date="2026-10-17"))

    ctx, _ = asyncio.run(session.start())
    assert ctx.store.id == 3012
    assert ctx.date == "2026-10-17"


def test_start_without_supported_fallback_selects_nothing(tmp_path):
    client = StubClient(regions=["上海"])
    session, _ = _session(tmp_path, client)

    ctx, resolved = asyncio.run(session.start())
    assert resolved.name is None
    assert ctx.region is None
    assert ctx.store is None
    assert ctx.regions == ["上海"]
    assert client.calls == ["regions"]


def test_select_region_without_default_store_leaves_store_unset(tmp_path):
    client = StubClient()
    session, _ = _session(tmp_path, client)
    ctx = AppContext(regions=["杭州", "上海"])

    asyncio.run(session.select_region(ctx, "上海"))
    assert [s.id for s in ctx.stores] == [2001]
    assert ctx.store is None
    assert ctx.date is None


def test_select_region_rejects_unknown_region(tmp_path):
    session, _ = _session(tmp_path, StubClient())
    with pytest.raises(LookupError):
        asyncio.run(session.select_region(AppContext(regions=["杭州"]), "北京"))


def test_select_store_and_dates(tmp_path):
    session, repo = _session(tmp_path, StubClient())
    ctx = AppContext(stores=[Store(id=3012, name="西溪店", region="杭州")], region="杭州")

    asyncio.run(session.select_store(ctx, 3012, preferred_date="2026-10-17"))
    assert ctx.dates == ["2026-10-18", "2026-10-17"]
    assert ctx.date == "2026-10-17"

    with pytest.raises(LookupError):
        asyncio.run(session.select_store(ctx, 9999))

    session.select_date(ctx, "2026-10-18")
    assert repo.load().date == "2026-10-18"
    with pytest.raises(LookupError):
        session.select_date(ctx, "2020-01-01")


def test_select_relative_day(tmp_path):
    session, _ = _session(tmp_path, StubClient())
    ctx = AppContext(dates=["2026-10-18", "2026-10-17"])

    session.select_relative_day(ctx, 1, today=date(2026, 10, 18))
    assert ctx.date == "2026-10-17"
    with pytest.raises(LookupError):
        session.select_relative_day(ctx, 0, today=date(2026, 10, 20))


def test_load_queue_snapshot_requires_selection(tmp_path):
    client = StubClient()
    session, _ = _session(tmp_path, client)

    with pytest.raises(ValueError):
        asyncio.run(session.load_queue_snapshot(AppContext()))

    ctx = AppContext(store=Store(id=3011, name="湖滨店"), date="2026-10-18")
    snapshot = asyncio.run(session.load_queue_snapshot(ctx))
    assert snapshot.current_queue_count == 12
    assert client.calls[-1] == ("snapshot", 3011, "2026-10-18")


def test_analyze_combines_estimate_suggestion_and_history(tmp_path):
    records = [
        HistoricalRecord(date="2026-10-17", planned_time="18:30", drawn_time="17:40", confidence="high"),
        HistoricalRecord(date="2026-10-18", planned_time="18:30", drawn_time="18:10", confidence="high"),
        HistoricalRecord(date="2026-10-12", planned_time="18:30", drawn_time="16:00", confidence="low"),
    ]
    session, _ = _session(tmp_path, StubClient(records=records))
    ctx = AppContext(store=Store(id=3011, name="湖滨店"))

    report = asyncio.run(session.analyze(ctx, "18:30"))
    assert report.analysis.mean_draw_time == "17:55"
    assert report.analysis.sample_count == 2
    assert report.suggestion.avg_wait_minutes == 73
    assert report.suggestion.tier == "moderate"
    assert report.suggestion.estimated_queue_count == 24
    assert len(report.history) == 3
    assert report.history[0].weekday_label == "周六"
    assert report.history[1].is_weekend is True
    assert report.history[2].weekday_label == "周一"


def test_analyze_rejects_out_of_hours_before_any_request(tmp_path):
    client = StubClient()
    session, _ = _session(tmp_path, client)
    ctx = AppContext(store=Store(id=3011, name="湖滨店"))

    with pytest.raises(PlannedTimeRejected):
        asyncio.run(session.analyze(ctx, "09:00"))
    assert client.calls == []


def test_analyze_with_no_usable_records_returns_placeholders(tmp_path):
    session, _ = _session(tmp_path, StubClient(records=[]))
    report = asyncio.run(session.analyze(AppContext(store=Store(id=3011, name="湖滨店")), "12:00"))
    assert report.analysis.estimated_draw_time == "-"
    assert report.suggestion.tier == "none"


def test_start_does_not_restore_persisted_region_alone(tmp_path):
    client = StubClient()
    session, repo = _session(tmp_path, client)
    repo.save(AppContext(region="上海", store=Store(id=2001, name="来福士店", region="上海"), date="2026-10-18"))

    ctx, resolved = asyncio.run(session.start())
    assert resolved.source == "fallback"
    assert ctx.region == "杭州"
    assert ctx.store.id == 3011
