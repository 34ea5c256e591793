"""Configuration persistence utilities."""

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..config import JobsHistoryConfig

logger = logging.getLogger(__name__)


def save_config_to_file(config: "JobsHistoryConfig") -> Path:
    """Save configuration to JSON file."""
    config_dir = Path.home() / ".config" / "jobs_history"
    config_dir.mkdir(parents=True, exist_ok=True)
    config_path = config_dir / "config.json"

    config_dict = {
        "backend": {
            "base_url": config.backend.base_url,
            "history_path": config.backend.history_path,
            "timeout_seconds": config.backend.timeout_seconds,
            "verify_ssl": config.backend.verify_ssl,
        },
        "history": {
            "search_debounce_ms": config.history.search_debounce_ms,
            "max_accumulated_records": config.history.max_accumulated_records,
            "default_time_period": config.history.default_time_period,
            "current_user_email": config.history.current_user_email,
        },
        "preferences": {
            "path": str(config.preferences.path) if config.preferences.path else None,
        },
    }

    with open(config_path, "w") as f:
        json.dump(config_dict, f, indent=2)

    logger.info(f"Configuration saved to {config_path}")
    return config_path
