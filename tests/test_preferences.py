"""Tests for persisted history view preferences."""

import json
from datetime import date

import pytest

from jobs_history.exceptions import PreferencesError
from jobs_history.persistence.models import DateRange, TimePeriod
from jobs_history.persistence.preferences import (
    DATE_RANGE_KEY,
    ONLY_MINE_KEY,
    TIME_PERIOD_KEY,
    LocalStorage,
    load_preferences,
    save_date_range,
    save_only_mine,
    save_time_period,
)


@pytest.fixture
def storage_path(tmp_path):
    return tmp_path / "prefs" / "preferences.json"


class TestLocalStorage:

    def test_missing_file_is_empty(self, storage_path):
        storage = LocalStorage(storage_path)
        assert storage.get_item(ONLY_MINE_KEY) is None

    def test_values_survive_reopen(self, storage_path):
        LocalStorage(storage_path).set_item("k", "v")
        assert LocalStorage(storage_path).get_item("k") == "v"

    def test_remove_item(self, storage_path):
        storage = LocalStorage(storage_path)
        storage.set_item("k", "v")
        storage.remove_item("k")
        assert LocalStorage(storage_path).get_item("k") is None

    def test_corrupt_file_acts_as_empty(self, storage_path):
        storage_path.parent.mkdir(parents=True)
        storage_path.write_text("{not json")
        assert LocalStorage(storage_path).get_item("k") is None

    def test_non_utf8_file_acts_as_empty(self, storage_path):
        storage_path.parent.mkdir(parents=True)
        storage_path.write_bytes(b'{"jobsHistory_onlyMine": "\xff\xfe"}')

        storage = LocalStorage(storage_path)

        assert storage.get_item(ONLY_MINE_KEY) is None
        assert load_preferences(storage).only_mine is True

    def test_write_failure_raises_preferences_error(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("")
        storage = LocalStorage(blocker / "preferences.json")
        with pytest.raises(PreferencesError):
            storage.set_item("k", "v")


class TestLoadPreferences:

    def test_defaults_when_nothing_stored(self, storage_path):
        prefs = load_preferences(LocalStorage(storage_path))
        assert prefs.only_mine is True
        assert prefs.time_period is TimePeriod.LAST_48H
        assert prefs.date_range == DateRange()

    def test_default_period_is_configurable(self, storage_path):
        prefs = load_preferences(LocalStorage(storage_path), TimePeriod.THIS_WEEK)
        assert prefs.time_period is TimePeriod.THIS_WEEK

    def test_restores_saved_values(self, storage_path):
        storage = LocalStorage(storage_path)
        save_only_mine(storage, False)
        save_time_period(storage, TimePeriod.THIS_MONTH)
        save_date_range(storage, DateRange(date(2024, 1, 1), date(2024, 1, 3)))

        prefs = load_preferences(LocalStorage(storage_path))
        assert prefs.only_mine is False
        assert prefs.time_period is TimePeriod.THIS_MONTH
        assert prefs.date_range == DateRange(date(2024, 1, 1), date(2024, 1, 3))

    def test_malformed_date_range_falls_back_without_affecting_other_keys(self, storage_path):
        storage = LocalStorage(storage_path)
        storage.set_item(DATE_RANGE_KEY, "{oops")
        storage.set_item(ONLY_MINE_KEY, "false")
        storage.set_item(TIME_PERIOD_KEY, "last24h")

        prefs = load_preferences(storage)
        assert prefs.date_range == DateRange()
        assert prefs.only_mine is False
        assert prefs.time_period is TimePeriod.LAST_24H

    def test_invalid_values_fall_back(self, storage_path):
        storage = LocalStorage(storage_path)
        storage.set_item(ONLY_MINE_KEY, "maybe")
        storage.set_item(TIME_PERIOD_KEY, "lastDecade")
        storage.set_item(DATE_RANGE_KEY, json.dumps({"from": "not-a-date"}))

        prefs = load_preferences(storage)
        assert prefs.only_mine is True
        assert prefs.time_period is TimePeriod.LAST_48H
        assert prefs.date_range == DateRange()

    def test_open_ended_range_restored(self, storage_path):
        storage = LocalStorage(storage_path)
        storage.set_item(DATE_RANGE_KEY, json.dumps({"from": "2024-01-01"}))

        prefs = load_preferences(storage)
        assert prefs.date_range == DateRange(from_date=date(2024, 1, 1))


class TestSavePreferences:

    def test_only_mine_stored_as_string(self, storage_path):
        storage = LocalStorage(storage_path)
        save_only_mine(storage, True)
        assert storage.get_item(ONLY_MINE_KEY) == "true"

    def test_empty_range_removes_key(self, storage_path):
        storage = LocalStorage(storage_path)
        save_date_range(storage, DateRange(from_date=date(2024, 1, 1)))
        assert json.loads(storage.get_item(DATE_RANGE_KEY)) == {"from": "2024-01-01"}

        save_date_range(storage, DateRange())
        assert storage.get_item(DATE_RANGE_KEY) is None
        assert DATE_RANGE_KEY not in json.loads(storage_path.read_text())
