"""Utility modules for jobs_history."""

from .config_persistence import save_config_to_file
from .validation_helpers import parse_calendar_date, parse_timestamp, sanitize_time_period

__all__ = [
    'save_config_to_file',
    'parse_calendar_date',
    'parse_timestamp',
    'sanitize_time_period',
]
