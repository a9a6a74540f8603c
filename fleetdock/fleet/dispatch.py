"""Обход хостов: последовательный и параллельный с таймаутом.

Все методы `Dispatcher` возвращают `DispatchResult`. Ошибка на одном хосте
или контейнере никогда не прерывает обход остальных: она записывается в
результат вместе с адресом хоста, а итоговый список логируется в конце.
"""

from __future__ import annotations

import logging
import threading
import time
from queue import Empty, Queue
from typing import Callable, List, Optional, Sequence

from fleetdock.docker_api import containers
from fleetdock.docker_api.client import DockerClientWrapper
from fleetdock.fleet.errors import DispatchResult, DispatchTimeoutError, RemoteError
from fleetdock.fleet.filters import matches
from fleetdock.fleet.models import TargetImage
from fleetdock.utils.helpers import short_id

LOGGER = logging.getLogger(__name__)

ClientFactory = Callable[[str], DockerClientWrapper]
HostCallback = Callable[[DockerClientWrapper, str], None]
ContainerCallback = Callable[[DockerClientWrapper, str, str], None]
DoneSignal = Callable[[], None]
ErrorSignal = Callable[[BaseException], None]
ParallelCallback = Callable[[DockerClientWrapper, str, DoneSignal, ErrorSignal], None]


class _WorkerSignal:
    """Одноразовый канал результата воркера.

    Очередь не ограничена, поэтому отправка не блокирует воркер, даже если
    сборщик уже перестал слушать после таймаута. Учитывается только первый
    сигнал.
    """

    def __init__(self, operation: str, host: str, outcomes: "Queue[Optional[RemoteError]]") -> None:
        self._operation = operation
        self._host = host
        self._outcomes = outcomes
        self._sent = False

    def done(self) -> None:
        self._send(None)

    def fail(self, error: BaseException) -> None:
        self._send(RemoteError(error, self._host))

    def _send(self, outcome: Optional[RemoteError]) -> None:
        if self._sent:
            LOGGER.debug("  - [%s] %s already signalled, ignoring", self._host, self._operation)
            return
        self._sent = True
        if outcome is None:
            LOGGER.debug("  - [%s] completed %s", self._host, self._operation)
        else:
            LOGGER.debug("  - [%s] completed %s in error", self._host, self._operation)
        self._outcomes.put(outcome)


class Dispatcher:
    """Выполняет callback для каждого хоста (или контейнера) парка."""

    def __init__(
        self,
        hosts: Sequence[str],
        target: TargetImage,
        client_factory: ClientFactory,
    ) -> None:
        self.hosts = list(hosts)
        self.target = target
        self._client_factory = client_factory

    # ------------------------------------------------------------------ helpers
    def _acquire(self, host: str, result: DispatchResult) -> Optional[DockerClientWrapper]:
        """Создаёт клиента хоста; ошибка записывается в result."""

        try:
            return self._client_factory(host)
        except Exception as exc:
            LOGGER.debug("  - [%s] cannot connect: %s", host, exc)
            result.record(exc, host)
            return None

    def find_container_ids(self, client: DockerClientWrapper) -> List[str]:
        """Возвращает идентификаторы контейнеров хоста, подходящих под target."""

        return [
            record.identifier
            for record in containers.list_containers(client)
            if matches(record.image, self.target)
        ]

    # --------------------------------------------------------------- sequential
    def for_each_host(self, operation: str, callback: HostCallback) -> DispatchResult:
        """Вызывает callback(client, host) для каждого хоста по порядку."""

        result = DispatchResult(operation)
        LOGGER.info("Starting %s of %s on %d hosts", operation, self.target, len(self.hosts))

        for host in self.hosts:
            client = self._acquire(host, result)
            if client is None:
                continue
            LOGGER.debug("  - [%s] %s: %s", host, operation, self.target)
            try:
                callback(client, host)
            except Exception as exc:
                result.record(exc, host)
            finally:
                client.close()

        LOGGER.info("Completed %s of %s on %d hosts", operation, self.target, len(self.hosts))
        result.log()
        return result

    def for_each_container(self, operation: str, callback: ContainerCallback) -> DispatchResult:
        """Вызывает callback(client, host, container_id) для каждого подходящего контейнера.

        Если не удалось получить список контейнеров, ошибка записывается для
        хоста, и для него callback больше не вызывается.
        """

        result = DispatchResult(operation)
        LOGGER.info("Starting %s of %s on %d hosts", operation, self.target, len(self.hosts))

        for host in self.hosts:
            client = self._acquire(host, result)
            if client is None:
                continue
            LOGGER.debug("  - [%s] %s: %s", host, operation, self.target)
            try:
                self._visit_containers(operation, client, host, callback, result)
            finally:
                client.close()

        LOGGER.info("Completed %s of %s on %d hosts", operation, self.target, len(self.hosts))
        result.log()
        return result

    def _visit_containers(
        self,
        operation: str,
        client: DockerClientWrapper,
        host: str,
        callback: ContainerCallback,
        result: DispatchResult,
    ) -> None:
        try:
            container_ids = self.find_container_ids(client)
        except Exception as exc:
            result.record(exc, host)
            return

        for container_id in container_ids:
            LOGGER.debug("  - [%s] %s container %s", host, operation, short_id(container_id))
            try:
                callback(client, host, container_id)
            except Exception as exc:
                result.record(exc, host)

    # ----------------------------------------------------------------- parallel
    def for_each_host_parallel(
        self,
        operation: str,
        callback: ParallelCallback,
        timeout: float,
    ) -> DispatchResult:
        """Запускает по одному потоку на хост и ждёт их не дольше timeout секунд.

        callback(client, host, done, fail) сообщает результат вызовом done()
        или fail(exc); исключение, вылетевшее из callback, считается fail.
        Клиент создаётся внутри потока хоста, поэтому медленное подключение
        не задерживает остальные хосты; ошибка подключения приходит как fail.

        Срок ожидания фиксируется до обращения к любому daemon. По его
        истечении возвращаются накопленные ошибки и DispatchTimeoutError
        последней; незавершённые потоки не отменяются и не ожидаются.
        """

        result = DispatchResult(operation)
        outcomes: "Queue[Optional[RemoteError]]" = Queue()
        num_hosts = len(self.hosts)
        completed = 0
        errored = 0

        LOGGER.info("Starting %s of %s on %d hosts", operation, self.target, num_hosts)

        deadline = time.monotonic() + timeout
        for host in self.hosts:
            LOGGER.debug("  - [%s] start %s: %s", host, operation, self.target)
            signal = _WorkerSignal(operation, host, outcomes)
            threading.Thread(
                target=_run_worker,
                args=(self._client_factory, callback, host, signal),
                name=f"fleetdock-{operation}-{host}",
                daemon=True,
            ).start()

        while completed < num_hosts:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                result.timeout_error = DispatchTimeoutError(operation, timeout)
                LOGGER.error(
                    "%s timed out after %gs: %d of %d hosts completed",
                    operation,
                    timeout,
                    completed,
                    num_hosts,
                )
                result.log()
                return result
            try:
                outcome = outcomes.get(timeout=remaining)
            except Empty:
                continue

            completed += 1
            if outcome is not None:
                errored += 1
                result.add(outcome)
            LOGGER.debug(
                "  - %s status: %d of %d completed (%d completed in error)",
                operation,
                completed,
                num_hosts,
                errored,
            )

        LOGGER.info("Completed %s of %s on %d hosts", operation, self.target, num_hosts)
        result.log()
        return result


def _run_worker(
    client_factory: ClientFactory,
    callback: ParallelCallback,
    host: str,
    signal: _WorkerSignal,
) -> None:
    try:
        client = client_factory(host)
    except Exception as exc:
        LOGGER.debug("  - [%s] cannot connect: %s", host, exc)
        signal.fail(exc)
        return
    try:
        callback(client, host, signal.done, signal.fail)
    except Exception as exc:
        signal.fail(exc)
    finally:
        client.close()
