"""Схема config.json по умолчанию."""

from __future__ import annotations

from typing import Any, Dict

# DEFAULT_CONFIG служит основой, поверх которой накладывается файл пользователя
DEFAULT_CONFIG: Dict[str, Any] = {
    "version": "1.0.0",
    "timeouts": {
        "restart_timeout_sec": 10,
        "stop_timeout_sec": 10,
        "pull_timeout_sec": 30,
    },
    "logging": {
        "level": "INFO",
        "colorize": True,
        "file_enabled": False,
        "directory": "",
        "max_file_size_mb": 10,
        "max_archived_files": 5,
    },
}
