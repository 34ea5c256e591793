"""Durable storage of history view preferences across sessions."""

import json
import logging
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

from ..exceptions import PreferencesError
from ..utils.validation_helpers import parse_calendar_date, sanitize_time_period
from .models import DEFAULT_TIME_PERIOD, DateRange, TimePeriod

logger = logging.getLogger(__name__)

ONLY_MINE_KEY = "jobsHistory_onlyMine"
TIME_PERIOD_KEY = "jobsHistory_timePeriod"
DATE_RANGE_KEY = "jobsHistory_customDateRange"


class LocalStorage:
    """
    String key/value store backed by a single JSON file.

    Every value is stored as a string. A missing or unreadable file behaves
    like an empty store; writes go through a temp file and an atomic rename.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._items: Dict[str, str] = self._read()

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable preferences file {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring preferences file with unexpected content: {self.path}")
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _write(self) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(self._items, f, indent=2)
            os.replace(tmp_name, self.path)
        except OSError as e:
            raise PreferencesError(f"Failed to write preferences to {self.path}: {e}") from e

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        if self._items.get(key) == value:
            return
        self._items[key] = value
        self._write()

    def remove_item(self, key: str) -> None:
        if key not in self._items:
            return
        del self._items[key]
        self._write()


@dataclass
class HistoryPreferences:
    """View preferences restored when the history view is opened."""

    only_mine: bool = True
    time_period: TimePeriod = DEFAULT_TIME_PERIOD
    date_range: DateRange = field(default_factory=DateRange)


def _load_only_mine(raw: Optional[str]) -> bool:
    if raw is None:
        return True
    if raw in ("true", "false"):
        return raw == "true"
    logger.warning(f"Invalid stored onlyMine value {raw!r}, using default")
    return True


def _load_time_period(raw: Optional[str], default: TimePeriod) -> TimePeriod:
    if raw is None:
        return default
    period = sanitize_time_period(raw)
    if period is None:
        logger.warning(f"Invalid stored time period {raw!r}, using '{default.value}'")
        return default
    return period


def _load_date_range(raw: Optional[str]) -> DateRange:
    if raw is None:
        return DateRange()
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Stored custom date range is not valid JSON, ignoring it")
        return DateRange()
    if not isinstance(data, dict):
        logger.warning("Stored custom date range has unexpected shape, ignoring it")
        return DateRange()

    from_raw, to_raw = data.get("from"), data.get("to")
    from_date = parse_calendar_date(from_raw) if from_raw is not None else None
    to_date = parse_calendar_date(to_raw) if to_raw is not None else None
    if (from_raw is not None and from_date is None) or (to_raw is not None and to_date is None):
        logger.warning("Stored custom date range contains invalid dates, ignoring it")
        return DateRange()
    return DateRange(from_date=from_date, to_date=to_date)


def load_preferences(
    storage: LocalStorage,
    default_period: TimePeriod = DEFAULT_TIME_PERIOD,
) -> HistoryPreferences:
    """
    Restore preferences from storage.

    Each key fails open to its default independently; nothing here raises.

    Args:
        storage: Backing store
        default_period: Period used when none (or an invalid one) is stored

    Returns:
        HistoryPreferences instance
    """
    return HistoryPreferences(
        only_mine=_load_only_mine(storage.get_item(ONLY_MINE_KEY)),
        time_period=_load_time_period(storage.get_item(TIME_PERIOD_KEY), default_period),
        date_range=_load_date_range(storage.get_item(DATE_RANGE_KEY)),
    )


def save_only_mine(storage: LocalStorage, only_mine: bool) -> None:
    storage.set_item(ONLY_MINE_KEY, "true" if only_mine else "false")


def save_time_period(storage: LocalStorage, period: TimePeriod) -> None:
    storage.set_item(TIME_PERIOD_KEY, period.value)


def save_date_range(storage: LocalStorage, date_range: DateRange) -> None:
    """Persist the custom range, removing the key when the range is empty."""
    if date_range.is_empty:
        storage.remove_item(DATE_RANGE_KEY)
        return

    payload = {}
    if date_range.from_date is not None:
        payload["from"] = date_range.from_date.isoformat()
    if date_range.to_date is not None:
        payload["to"] = date_range.to_date.isoformat()
    storage.set_item(DATE_RANGE_KEY, json.dumps(payload))
