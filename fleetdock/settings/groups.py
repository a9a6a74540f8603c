"""Группы настроек с валидацией значений."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Tuple

from fleetdock.settings.exceptions import SettingsNotFoundError, SettingsValidationError
from fleetdock.settings.validators import (
    EnumValidator,
    RangeValidator,
    TypeValidator,
    Validator,
    seconds_validator,
)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


class SettingsGroup(ABC):
    """Абстрактная база для конкретных групп настроек."""

    group_name: str = ""

    def __init__(self) -> None:
        self._defaults: Dict[str, Any] = {}
        self._validators: Dict[str, Validator] = {}
        self._values: Dict[str, Any] = {}
        self._initialize_defaults()
        self._setup_validators()
        self.reset_to_defaults()

    @abstractmethod
    def _initialize_defaults(self) -> None:
        """Задаёт значения по умолчанию для группы."""

    @abstractmethod
    def _setup_validators(self) -> None:
        """Привязывает валидаторы к ключам группы."""

    def keys(self) -> Tuple[str, ...]:
        return tuple(self._defaults.keys())

    def get(self, key: str) -> Any:
        """Возвращает значение настройки."""

        if key not in self._defaults:
            raise SettingsNotFoundError(self.group_name, key)
        return self._values[key]

    def validate(self, key: str, value: Any) -> Tuple[bool, str]:
        validator = self._validators.get(key)
        if not validator:
            return True, ""
        return validator.validate(value)

    def set(self, key: str, value: Any) -> None:
        """Сохраняет значение, выбрасывая ошибку при невалидных данных."""

        if key not in self._defaults:
            raise SettingsNotFoundError(self.group_name, key)
        is_valid, error = self.validate(key, value)
        if not is_valid:
            raise SettingsValidationError(
                key=f"{self.group_name}.{key}",
                value=value,
                reason=error,
            )
        self._values[key] = value

    def to_dict(self) -> Dict[str, Any]:
        return dict(self._values)

    def from_dict(self, data: Dict[str, Any]) -> None:
        """Заполняет значениями из словаря; неизвестные ключи игнорируются."""

        for key, value in data.items():
            if key in self._defaults:
                self.set(key, value)

    def reset_to_defaults(self) -> None:
        self._values = dict(self._defaults)


class TimeoutsSettings(SettingsGroup):
    """Таймауты операций над парком, в секундах."""

    group_name = "timeouts"

    def _initialize_defaults(self) -> None:
        self._defaults = {
            "restart_timeout_sec": 10,
            "stop_timeout_sec": 10,
            "pull_timeout_sec": 30,
        }

    def _setup_validators(self) -> None:
        self._validators = {
            "restart_timeout_sec": seconds_validator(0),
            "stop_timeout_sec": seconds_validator(0),
            # нулевое ожидание pull гарантированно завершилось бы таймаутом
            "pull_timeout_sec": seconds_validator(1),
        }


class LoggingSettings(SettingsGroup):
    """Настройки логирования."""

    group_name = "logging"

    def _initialize_defaults(self) -> None:
        self._defaults = {
            "level": "INFO",
            "colorize": True,
            "file_enabled": False,
            "directory": "",
            "max_file_size_mb": 10,
            "max_archived_files": 5,
        }

    def _setup_validators(self) -> None:
        self._validators = {
            "level": EnumValidator(LOG_LEVELS),
            "colorize": TypeValidator(bool),
            "file_enabled": TypeValidator(bool),
            "directory": TypeValidator(str),
            "max_file_size_mb": RangeValidator(1, 1000),
            "max_archived_files": RangeValidator(1, 50),
        }
