"""Функции для работы с контейнерами через Docker client."""

from __future__ import annotations

import io
import tarfile
from typing import List

from fleetdock.docker_api.client import DOCKER_ERRORS, DockerClientWrapper
from fleetdock.docker_api.exceptions import DockerAPIError
from fleetdock.docker_api.models import ContainerRecord


def list_containers(client: DockerClientWrapper) -> List[ContainerRecord]:
    """Возвращает запущенные контейнеры хоста в виде кратких записей."""

    raw = client.get_raw_client()
    try:
        containers = raw.containers.list(sparse=True)
    except DOCKER_ERRORS as exc:
        raise DockerAPIError(str(exc), host=client.host) from exc
    return [ContainerRecord.from_summary(container.attrs) for container in containers]


def inspect_container(client: DockerClientWrapper, container_id: str) -> ContainerRecord:
    """Возвращает подробную запись контейнера (docker inspect)."""

    raw = client.get_raw_client()
    try:
        container = raw.containers.get(container_id)
    except DOCKER_ERRORS as exc:
        raise DockerAPIError(str(exc), host=client.host) from exc
    return ContainerRecord.from_inspect(container.attrs)


def restart_container(client: DockerClientWrapper, container_id: str, timeout: int) -> None:
    """Перезапускает контейнер, ожидая timeout секунд перед kill."""

    raw = client.get_raw_client()
    try:
        raw.containers.get(container_id).restart(timeout=timeout)
    except DOCKER_ERRORS as exc:
        raise DockerAPIError(str(exc), host=client.host) from exc


def stop_container(client: DockerClientWrapper, container_id: str, timeout: int) -> None:
    """Останавливает контейнер, ожидая timeout секунд перед kill."""

    raw = client.get_raw_client()
    try:
        raw.containers.get(container_id).stop(timeout=timeout)
    except DOCKER_ERRORS as exc:
        raise DockerAPIError(str(exc), host=client.host) from exc


def read_file(client: DockerClientWrapper, container_id: str, path: str) -> str:
    """Копирует path из контейнера и возвращает текст первого элемента архива.

    Daemon отдаёт tar-архив; читается только первая запись. Если первая
    запись не является обычным файлом (например, каталог), возвращается
    пустая строка.
    """

    raw = client.get_raw_client()
    try:
        chunks, _stat = raw.containers.get(container_id).get_archive(path)
        archive = b"".join(chunks)
    except DOCKER_ERRORS as exc:
        raise DockerAPIError(str(exc), host=client.host) from exc

    try:
        with tarfile.open(fileobj=io.BytesIO(archive), mode="r") as tar:
            member = tar.next()
            if member is None:
                raise DockerAPIError(f"Empty archive for {path}", host=client.host)
            handle = tar.extractfile(member)
            if handle is None:
                return ""
            data = handle.read()
    except tarfile.TarError as exc:
        raise DockerAPIError(f"Cannot decode archive for {path}: {exc}", host=client.host) from exc
    return data.decode("utf-8", errors="replace")
