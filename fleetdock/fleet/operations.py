"""Операции над парком: pull, restart, stop, deploy, list, cat."""

from __future__ import annotations

import io
import logging
from typing import List, Optional, Sequence

from fleetdock.docker_api import containers, images
from fleetdock.docker_api.client import DockerClientWrapper, create_client
from fleetdock.docker_api.exceptions import DockerAPIError
from fleetdock.fleet.dispatch import ClientFactory, Dispatcher, DoneSignal, ErrorSignal
from fleetdock.fleet.filters import matches
from fleetdock.fleet.models import FleetTimeouts, HostContents, HostStatus, TargetImage
from fleetdock.fleet.streams import ResultStream

LOGGER = logging.getLogger(__name__)


class Fleet:
    """Набор хостов и образ, которым на них управляют.

    Каждая операция возвращает плоский список ошибок: пустой список означает
    полный успех. Таймауты читаются в начале операции, между операциями их
    можно заменить.
    """

    def __init__(
        self,
        hosts: Sequence[str],
        target: TargetImage,
        timeouts: Optional[FleetTimeouts] = None,
        client_factory: ClientFactory = create_client,
    ) -> None:
        self.hosts = list(hosts)
        self.target = target
        self.timeouts = timeouts or FleetTimeouts()
        self._client_factory = client_factory

    def _dispatcher(self) -> Dispatcher:
        return Dispatcher(self.hosts, self.target, self._client_factory)

    # ---------------------------------------------------------------- host-level
    def pull(self) -> List[BaseException]:
        """Параллельно скачивает образ на все хосты."""

        target = self.target
        timeouts = self.timeouts

        def pull_on_host(
            client: DockerClientWrapper, host: str, done: DoneSignal, fail: ErrorSignal
        ) -> None:
            # прогресс pull отбрасывается вместе с sink
            sink = io.StringIO()
            try:
                images.pull_image(client, target.name, target.tag, sink=sink)
            except DockerAPIError as exc:
                LOGGER.error("  - [%s] Pull: %s completed in error", host, target)
                fail(exc)
                return
            LOGGER.debug("  - [%s] Pull: %s completed", host, target)
            done()

        result = self._dispatcher().for_each_host_parallel(
            "pull", pull_on_host, timeout=timeouts.pull_timeout
        )
        return result.flatten()

    def list(self, results: ResultStream[HostStatus]) -> List[BaseException]:
        """Собирает состояние подходящих контейнеров каждого хоста.

        На каждый успешно опрошенный хост в results попадает один HostStatus.
        Ошибка inspect прекращает опрос оставшихся контейнеров этого хоста.
        Поток закрывается по завершении операции.
        """

        target = self.target
        timeouts = self.timeouts

        def list_host(
            client: DockerClientWrapper, host: str, done: DoneSignal, fail: ErrorSignal
        ) -> None:
            try:
                records = containers.list_containers(client)
            except DockerAPIError as exc:
                fail(exc)
                return

            status = HostStatus(host=host)
            for record in records:
                if not matches(record.image, target):
                    continue
                try:
                    status.containers.append(containers.inspect_container(client, record.identifier))
                except DockerAPIError as exc:
                    fail(exc)
                    return
            results.put(status)
            done()

        try:
            result = self._dispatcher().for_each_host_parallel(
                "list", list_host, timeout=timeouts.pull_timeout
            )
        finally:
            results.close()
        return result.flatten()

    # ----------------------------------------------------------- container-level
    def restart(self) -> List[BaseException]:
        """Перезапускает подходящие контейнеры хост за хостом."""

        grace = self.timeouts.restart_timeout

        def restart_one(client: DockerClientWrapper, host: str, container_id: str) -> None:
            containers.restart_container(client, container_id, grace)

        return self._dispatcher().for_each_container("restart", restart_one).flatten()

    def stop(self) -> List[BaseException]:
        """Останавливает подходящие контейнеры хост за хостом."""

        grace = self.timeouts.stop_timeout

        def stop_one(client: DockerClientWrapper, host: str, container_id: str) -> None:
            containers.stop_container(client, container_id, grace)

        return self._dispatcher().for_each_container("stop", stop_one).flatten()

    def cat(self, path: str, results: ResultStream[HostContents]) -> List[BaseException]:
        """Читает файл path из каждого подходящего контейнера."""

        def cat_one(client: DockerClientWrapper, host: str, container_id: str) -> None:
            contents = containers.read_file(client, container_id, path)
            results.put(HostContents(host=host, container_id=container_id, contents=contents))

        try:
            result = self._dispatcher().for_each_container("cat", cat_one)
        finally:
            results.close()
        return result.flatten()

    # ------------------------------------------------------------------ combined
    def deploy(self) -> List[BaseException]:
        """pull, затем restart, если pull прошёл без ошибок."""

        errors = self.pull()
        if errors:
            return errors
        return self.restart()
