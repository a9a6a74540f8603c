"""Реестр настроек fleetdock."""

from __future__ import annotations

import copy
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from fleetdock.fleet.models import FleetTimeouts
from fleetdock.settings.exceptions import SettingsIOError, SettingsNotFoundError, SettingsValidationError
from fleetdock.settings.groups import LoggingSettings, SettingsGroup, TimeoutsSettings
from fleetdock.settings.schemas import DEFAULT_CONFIG


class SettingsRegistry:
    """Управляет группами настроек одного запуска.

    Значения берутся из DEFAULT_CONFIG, поверх них накладывается config.json
    (если он есть), а затем аргументы командной строки через set_value.
    """

    def __init__(self, config_path: Optional[Path] = None) -> None:
        self._logger = logging.getLogger(__name__)
        self._file_path = config_path
        self._settings: Dict[str, SettingsGroup] = {
            "timeouts": TimeoutsSettings(),
            "logging": LoggingSettings(),
        }

    # --------------------------------------------------------------------- API
    def get_value(self, group: str, key: str, default: Any = None) -> Any:
        settings_group = self._settings.get(group)
        if not settings_group:
            if default is not None:
                return default
            raise SettingsNotFoundError(group, key)
        try:
            return settings_group.get(key)
        except SettingsNotFoundError:
            if default is not None:
                return default
            raise

    def set_value(self, group: str, key: str, value: Any) -> None:
        self._require_group(group).set(key, value)

    def get_group(self, group: str) -> SettingsGroup:
        return self._require_group(group)

    def load_from_disk(self, path: Optional[Path] = None) -> None:
        """Загружает config.json; отсутствующий файл означает значения по умолчанию."""

        target = path or self._file_path
        if target is None or not target.exists():
            self._logger.debug("Config file %s not found, using defaults.", target)
            return
        try:
            content = json.loads(target.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise SettingsIOError(target, str(exc)) from exc
        if not isinstance(content, dict):
            raise SettingsIOError(target, "top-level JSON value must be an object")

        merged = self._merge_with_defaults(content)
        for name, group in self._settings.items():
            group_data = merged.get(name, {})
            if isinstance(group_data, dict):
                group.from_dict(group_data)
        self.validate()
        self._logger.debug("Loaded settings from %s", target)

    def validate(self) -> bool:
        for name, group in self._settings.items():
            for key in group.keys():
                value = group.get(key)
                is_valid, error = group.validate(key, value)
                if not is_valid:
                    raise SettingsValidationError(
                        key=f"{name}.{key}",
                        value=value,
                        reason=error,
                    )
        return True

    def reset_to_defaults(self) -> None:
        for group in self._settings.values():
            group.reset_to_defaults()

    def timeouts(self) -> FleetTimeouts:
        """Собирает неизменяемый снимок таймаутов для операции."""

        group = self._require_group("timeouts")
        return FleetTimeouts(
            restart_timeout=group.get("restart_timeout_sec"),
            stop_timeout=group.get("stop_timeout_sec"),
            pull_timeout=group.get("pull_timeout_sec"),
        )

    # ----------------------------------------------------------------- helpers
    def _require_group(self, group: str) -> SettingsGroup:
        try:
            return self._settings[group]
        except KeyError:
            raise SettingsNotFoundError(group, None) from None

    @staticmethod
    def _merge_with_defaults(incoming: Dict[str, Any]) -> Dict[str, Any]:
        base = copy.deepcopy(DEFAULT_CONFIG)
        for key, value in incoming.items():
            if isinstance(value, dict) and isinstance(base.get(key), dict):
                base[key].update(value)
            else:
                base[key] = value
        return base
