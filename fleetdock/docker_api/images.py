"""Функции для работы с образами Docker."""

from __future__ import annotations

import json
import logging
from typing import Optional, TextIO

from fleetdock.docker_api.client import DOCKER_ERRORS, DockerClientWrapper
from fleetdock.docker_api.exceptions import DockerAPIError

LOGGER = logging.getLogger(__name__)

DEFAULT_TAG = "latest"


def pull_image(
    client: DockerClientWrapper,
    repository: str,
    tag: str = "",
    *,
    sink: Optional[TextIO] = None,
) -> None:
    """Скачивает образ, записывая прогресс в sink построчно (JSON).

    Daemon сообщает об ошибке внутри потока прогресса, а не кодом ответа,
    поэтому каждый элемент проверяется на поле error.
    """

    raw = client.get_raw_client()
    effective_tag = tag or DEFAULT_TAG
    try:
        for chunk in raw.api.pull(repository, tag=effective_tag, stream=True, decode=True):
            if sink is not None:
                sink.write(json.dumps(chunk) + "\n")
            if isinstance(chunk, dict) and chunk.get("error"):
                raise DockerAPIError(str(chunk["error"]), host=client.host)
    except DOCKER_ERRORS as exc:
        raise DockerAPIError(str(exc), host=client.host) from exc
    LOGGER.debug("Pulled %s:%s on %s", repository, effective_tag, client.host)
