"""Валидаторы значений настроек."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Iterable, Optional, Tuple


class Validator(ABC):
    """Абстрактный валидатор значения."""

    @abstractmethod
    def validate(self, value: Any) -> Tuple[bool, str]:
        """Возвращает (True, "") при успехе либо (False, описание ошибки)."""


class TypeValidator(Validator):
    """Проверяет тип значения; bool подходит только там, где ожидается bool."""

    def __init__(self, expected_type: type) -> None:
        self.expected_type = expected_type

    def validate(self, value: Any) -> Tuple[bool, str]:
        if isinstance(value, bool) and self.expected_type is not bool:
            return False, f"Expected value of type {self.expected_type.__name__}, got bool"
        if isinstance(value, self.expected_type):
            return True, ""
        return (
            False,
            f"Expected value of type {self.expected_type.__name__}, got {type(value).__name__}",
        )


class RangeValidator(Validator):
    """Число в [min_value, max_value]; при integer=True допускаются только int."""

    def __init__(
        self,
        min_value: Optional[float] = None,
        max_value: Optional[float] = None,
        *,
        integer: bool = False,
    ) -> None:
        self.min_value = min_value
        self.max_value = max_value
        self._type_check = TypeValidator(int) if integer else None

    def validate(self, value: Any) -> Tuple[bool, str]:
        if self._type_check is not None:
            is_valid, error = self._type_check.validate(value)
            if not is_valid:
                return False, error
        elif isinstance(value, bool) or not isinstance(value, (int, float)):
            return False, f"Expected a number, got {type(value).__name__}"
        too_small = self.min_value is not None and value < self.min_value
        too_large = self.max_value is not None and value > self.max_value
        if too_small or too_large:
            return False, f"Value {value} is out of range [{self.min_value}, {self.max_value}]"
        return True, ""


class EnumValidator(Validator):
    """Проверяет, что значение входит в конечный набор."""

    def __init__(self, allowed_values: Iterable[Any]) -> None:
        self.allowed_values = list(allowed_values)

    def validate(self, value: Any) -> Tuple[bool, str]:
        if value in self.allowed_values:
            return True, ""
        return False, f"Value {value!r} not in allowed values: {self.allowed_values}"


def seconds_validator(min_value: int = 0, max_value: int = 3600) -> Validator:
    """Валидатор таймаута в целых секундах."""

    return RangeValidator(min_value, max_value, integer=True)
