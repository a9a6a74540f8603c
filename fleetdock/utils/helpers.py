"""Различные вспомогательные функции."""

from __future__ import annotations

from typing import List

_SOCKET_SCHEMES = ("unix://", "tcp://", "http://", "https://", "ssh://")
SHORT_ID_LENGTH = 12


def host_to_base_url(raw_value: str) -> str:
    """Возвращает адрес daemon с корректным префиксом tcp://."""

    value = raw_value.strip()
    if not value:
        return value
    lowered = value.lower()
    if lowered.startswith(_SOCKET_SCHEMES):
        return value
    return f"tcp://{value}"


def parse_hosts(raw_value: str) -> List[str]:
    """Разбирает список хостов вида ip:port,ip:port.

    Порядок сохраняется, дубликаты не удаляются. Каждый элемент должен
    содержать ровно одно двоеточие и числовой порт.
    """

    hosts = [item.strip() for item in raw_value.split(",") if item.strip()]
    if not hosts:
        raise ValueError("Host list is empty")
    for host in hosts:
        parts = host.split(":")
        if len(parts) != 2 or not parts[0]:
            raise ValueError(f"Invalid IP:PORT pair provided: {host!r}")
        if not parts[1].isdigit():
            raise ValueError(f"Invalid port in host {host!r}")
    return hosts


def short_id(container_id: str) -> str:
    """Укорачивает идентификатор контейнера для логов."""

    return container_id[:SHORT_ID_LENGTH]
