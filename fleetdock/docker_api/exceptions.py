"""Исключения слоя docker_api."""

from __future__ import annotations

from typing import Optional


class DockerAPIError(Exception):
    """Любая ошибка обращения к удалённому Docker daemon."""

    def __init__(self, message: str, *, host: Optional[str] = None) -> None:
        self.message = message
        self.host = host
        super().__init__(message)
