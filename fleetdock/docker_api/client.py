"""Обёртка над docker-py с безопасной инициализацией."""

from __future__ import annotations

import logging
from typing import Any

import docker
from docker.errors import DockerException
from requests.exceptions import RequestException

from fleetdock.docker_api.exceptions import DockerAPIError
from fleetdock.utils.helpers import host_to_base_url

LOGGER = logging.getLogger(__name__)

# docker-py пробрасывает сетевые ошибки requests как есть
DOCKER_ERRORS = (DockerException, RequestException)


class DockerClientWrapper:
    """Управляет созданием и использованием docker API client для одного хоста."""

    def __init__(self, host: str, raw_client: Any | None = None) -> None:
        self.host = host  # адрес вида ip:port
        self._client = raw_client or self._create_client()

    def _create_client(self) -> Any:
        base_url = host_to_base_url(self.host)
        try:
            # docker-py запрашивает версию API при создании, поэтому
            # недоступный хост отсекается уже здесь.
            return docker.DockerClient(base_url=base_url)
        except DOCKER_ERRORS as exc:
            LOGGER.debug("Docker client init error for %s via %s: %s", self.host, base_url, exc)
            raise DockerAPIError(str(exc), host=self.host) from exc

    def get_raw_client(self) -> Any:
        """Возвращает внутренний docker client."""

        return self._client

    def close(self) -> None:
        """Закрывает HTTP-сессию docker client."""

        self._client.close()


def create_client(host: str) -> DockerClientWrapper:
    """Фабрика клиентов по умолчанию: одно подключение на хост."""

    return DockerClientWrapper(host)
