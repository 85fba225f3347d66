"""
Application context: the user's current region/store/date selection.

The context is a plain value passed into every session call. Persistence is an
explicit contract: `SelectionRepository.load()` once at start-up,
`SelectionRepository.save()` after each successful selection change. Loading is
best-effort; a missing or unreadable entry simply stays unset.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from pydantic import ValidationError

from waitcast.core.storage import JsonKeyValueStore
from waitcast.domain.models import Store

logger = logging.getLogger(__name__)

REGION_KEY = "selected_region"
STORE_KEY = "selected_store"
DATE_KEY = "selected_date"


@dataclass
class AppContext:
    region: str | None = None
    store: Store | None = None
    date: str | None = None

    # Choices offered for the current selection level.
    regions: list[str] = field(default_factory=list)
    stores: list[Store] = field(default_factory=list)
    dates: list[str] = field(default_factory=list)


class SelectionRepository:
    def __init__(self, store: JsonKeyValueStore):
        self._store = store

    def load(self) -> AppContext:
        ctx = AppContext()

        region = self._store.get(REGION_KEY)
        if isinstance(region, str) and region:
            ctx.region = region

        raw_store = self._store.get(STORE_KEY)
        if raw_store is not None:
            try:
                ctx.store = Store.model_validate(raw_store)
            except ValidationError as e:
                logger.debug("Ignoring persisted store: %s", e)

        date = self._store.get(DATE_KEY)
        if isinstance(date, str) and date:
            ctx.date = date
        return ctx

    def save(self, ctx: AppContext) -> None:
        try:
            self._store.update(
                {
                    REGION_KEY: ctx.region,
                    STORE_KEY: ctx.store.model_dump(mode="json") if ctx.store else None,
                    DATE_KEY: ctx.date,
                }
            )
        except OSError as e:
            logger.warning("Could not persist selection to %s: %s", self._store.path, e)
