"""Сбор ошибок, привязанных к хостам."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

LOGGER = logging.getLogger(__name__)


class DispatchTimeoutError(TimeoutError):
    """Параллельная операция не дождалась всех хостов за отведённое время."""

    def __init__(self, operation: str, timeout: float) -> None:
        self.operation = operation
        self.timeout = timeout
        super().__init__(f"Timeout while waiting for parallel {operation} ({timeout:g}s)")


@dataclass(frozen=True, slots=True)
class RemoteError:
    """Ошибка и хост, на котором она произошла."""

    error: BaseException
    host: str

    def __str__(self) -> str:
        return f"[{self.host}] {self.error}"


@dataclass(slots=True)
class DispatchResult:
    """Итог одного прохода по хостам.

    errors хранит ошибки в порядке обнаружения. Синтетическая ошибка
    таймаута не привязана к хосту и всегда идёт последней в flatten().
    """

    operation: str
    errors: List[RemoteError] = field(default_factory=list)
    timeout_error: Optional[DispatchTimeoutError] = None

    @property
    def ok(self) -> bool:
        return not self.errors and self.timeout_error is None

    def record(self, error: BaseException, host: str) -> None:
        self.errors.append(RemoteError(error, host))

    def add(self, remote_error: RemoteError) -> None:
        self.errors.append(remote_error)

    def log(self) -> None:
        """Пишет каждую ошибку в лог с порядковым номером (с единицы) и хостом."""

        for index, remote_error in enumerate(self.errors, start=1):
            LOGGER.error(
                " %s error %d: [%s] %s",
                self.operation,
                index,
                remote_error.host,
                remote_error.error,
            )
        if self.timeout_error is not None:
            LOGGER.error(" %s error %d: %s", self.operation, len(self.errors) + 1, self.timeout_error)

    def flatten(self) -> List[BaseException]:
        """Возвращает исходные исключения без привязки к хостам."""

        flat: List[BaseException] = [remote_error.error for remote_error in self.errors]
        if self.timeout_error is not None:
            flat.append(self.timeout_error)
        return flat
