"""
Process-wide logging set-up from the packaged `logging.yaml`.

Level precedence: explicit argument (CLI `--verbose`) > `app.log_level` in
settings (`WAITCAST_LOG_LEVEL`) > the YAML file itself.
"""

from __future__ import annotations

import copy
import logging.config

from waitcast.config.settings import get_logging_config, get_settings


def configure_logging(level: str | None = None) -> None:
    # dictConfig consumes the mapping it is given; work on a copy of the cached one.
    config = copy.deepcopy(get_logging_config())
    effective = (level or get_settings().app.log_level).upper()

    config.setdefault("root", {})["level"] = effective
    for handler in config.get("handlers", {}).values():
        if "level" in handler:
            handler["level"] = effective

    logging.config.dictConfig(config)
