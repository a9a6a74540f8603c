"""Модели данных операций над парком хостов."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from fleetdock.docker_api.models import ContainerRecord


@dataclass(frozen=True, slots=True)
class TargetImage:
    """Образ, которым управляет операция. Пустой tag означает latest."""

    name: str
    tag: str = ""

    @classmethod
    def parse(cls, value: str) -> "TargetImage":
        """Разбирает строку name[:tag], учитывая порт приватного registry."""

        last_slash = value.rfind("/")
        colon = value.rfind(":")
        if colon > last_slash:
            return cls(name=value[:colon], tag=value[colon + 1 :])
        return cls(name=value)

    def __str__(self) -> str:
        return f"{self.name}:{self.tag}" if self.tag else self.name


@dataclass(frozen=True, slots=True)
class FleetTimeouts:
    """Таймауты операций в секундах."""

    restart_timeout: int = 10  # ожидание остановки перед kill при restart
    stop_timeout: int = 10  # ожидание остановки перед kill при stop
    pull_timeout: int = 30  # общее ожидание параллельного pull/list


@dataclass(slots=True)
class HostStatus:
    """Состояние подходящих контейнеров одного хоста."""

    host: str
    containers: List[ContainerRecord] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class HostContents:
    """Содержимое файла, прочитанного из контейнера."""

    host: str
    container_id: str
    contents: str
