"""Defaults for ingestion, scanning and history retention."""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_choice, env_float, env_int

DEFAULT_INGEST_BATCH_SIZE = 1000
DEFAULT_HISTORY_LIMIT = 50
DEFAULT_REPORT_RECENT = 10
DEFAULT_SCAN_COOLDOWN_SECONDS = 1.0
DEFAULT_AUTOSAVE_INTERVAL_SECONDS = 30.0
DEFAULT_COMPACT_INTERVAL_SECONDS = 30.0
DEFAULT_FIELD_DELIMITER = "\t"

REPARENT_POLICIES = frozenset({"preserve", "reject"})


@dataclass(frozen=True, slots=True)
class CheckConfig:
    ingest_batch_size: int = DEFAULT_INGEST_BATCH_SIZE
    history_limit: int = DEFAULT_HISTORY_LIMIT
    report_recent: int = DEFAULT_REPORT_RECENT
    scan_cooldown_seconds: float = DEFAULT_SCAN_COOLDOWN_SECONDS
    autosave_interval_seconds: float = DEFAULT_AUTOSAVE_INTERVAL_SECONDS
    compact_interval_seconds: float = DEFAULT_COMPACT_INTERVAL_SECONDS
    field_delimiter: str = DEFAULT_FIELD_DELIMITER
    box_reparent_policy: str = "preserve"


def get_check_config() -> CheckConfig:
    """Build a :class:`CheckConfig` from ``PALLETCHECK_*`` environment variables."""

    return CheckConfig(
        ingest_batch_size=env_int(
            "PALLETCHECK_INGEST_BATCH_SIZE", DEFAULT_INGEST_BATCH_SIZE, minimum=1
        ),
        history_limit=env_int("PALLETCHECK_HISTORY_LIMIT", DEFAULT_HISTORY_LIMIT, minimum=1),
        report_recent=env_int("PALLETCHECK_REPORT_RECENT", DEFAULT_REPORT_RECENT, minimum=1),
        scan_cooldown_seconds=env_float(
            "PALLETCHECK_SCAN_COOLDOWN", DEFAULT_SCAN_COOLDOWN_SECONDS
        ),
        autosave_interval_seconds=env_float(
            "PALLETCHECK_AUTOSAVE_INTERVAL", DEFAULT_AUTOSAVE_INTERVAL_SECONDS
        ),
        compact_interval_seconds=env_float(
            "PALLETCHECK_COMPACT_INTERVAL", DEFAULT_COMPACT_INTERVAL_SECONDS
        ),
        box_reparent_policy=env_choice(
            "PALLETCHECK_BOX_REPARENT_POLICY", "preserve", REPARENT_POLICIES
        ),
    )
