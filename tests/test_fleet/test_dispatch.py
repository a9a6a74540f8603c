"""Тесты последовательного и параллельного обхода хостов."""

from __future__ import annotations

import logging
import threading
import time
from typing import List, Tuple

import pytest

from fleetdock.docker_api.client import DockerClientWrapper
from fleetdock.docker_api.exceptions import DockerAPIError
from fleetdock.fleet.dispatch import Dispatcher
from fleetdock.fleet.errors import DispatchTimeoutError
from fleetdock.fleet.models import TargetImage
from tests.fakes import FakeContainer, FakeFleetBackend, FakeRawClient

HOSTS = ["10.0.0.1:2375", "10.0.0.2:2375", "10.0.0.3:2375", "10.0.0.4:2375"]


def make_dispatcher(backend: FakeFleetBackend, hosts: List[str] = HOSTS) -> Dispatcher:
    return Dispatcher(hosts, TargetImage("app"), backend)


def test_for_each_host_visits_every_host_despite_failures() -> None:
    backend = FakeFleetBackend(
        {host: FakeRawClient() for host in HOSTS},
        unreachable=HOSTS[:2],
    )
    visited: List[str] = []

    def callback(client: DockerClientWrapper, host: str) -> None:
        visited.append(host)
        if host == HOSTS[3]:
            raise DockerAPIError("boom", host=host)

    result = make_dispatcher(backend).for_each_host("check", callback)

    assert backend.connects == HOSTS
    assert visited == HOSTS[2:]
    assert [error.host for error in result.errors] == [HOSTS[0], HOSTS[1], HOSTS[3]]
    assert len(result.flatten()) == 3
    assert not result.ok


def test_for_each_container_skips_host_on_discovery_failure() -> None:
    daemons = {
        HOSTS[0]: FakeRawClient([FakeContainer("a1", "app:latest"), FakeContainer("a2", "db:latest")]),
        HOSTS[1]: FakeRawClient(list_error=DockerAPIError("daemon down")),
        HOSTS[2]: FakeRawClient([FakeContainer("c1", "app"), FakeContainer("c2", "app:latest")]),
    }
    backend = FakeFleetBackend(daemons)
    calls: List[Tuple[str, str]] = []

    def callback(client: DockerClientWrapper, host: str, container_id: str) -> None:
        calls.append((host, container_id))
        if container_id == "c1":
            raise DockerAPIError("no such container", host=host)

    result = make_dispatcher(backend, HOSTS[:3]).for_each_container("restart", callback)

    assert calls == [(HOSTS[0], "a1"), (HOSTS[2], "c1"), (HOSTS[2], "c2")]
    assert [error.host for error in result.errors] == [HOSTS[1], HOSTS[2]]
    assert "daemon down" in str(result.errors[0].error)


def test_sequential_errors_are_logged_with_index(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.ERROR)
    backend = FakeFleetBackend({}, unreachable=HOSTS[:2])

    make_dispatcher(backend, HOSTS[:2]).for_each_host("check", lambda client, host: None)

    messages = [record.getMessage() for record in caplog.records]
    assert f" check error 1: [{HOSTS[0]}] Cannot connect to {HOSTS[0]}" in messages
    assert f" check error 2: [{HOSTS[1]}] Cannot connect to {HOSTS[1]}" in messages


def test_parallel_all_hosts_succeed(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.DEBUG)
    backend = FakeFleetBackend({host: FakeRawClient() for host in HOSTS})

    def callback(client, host, done, fail) -> None:
        done()

    result = make_dispatcher(backend).for_each_host_parallel("pull", callback, timeout=5)

    assert result.ok
    assert result.flatten() == []
    messages = [record.getMessage() for record in caplog.records]
    for host in HOSTS:
        assert messages.count(f"  - [{host}] completed pull") == 1


def test_parallel_collects_worker_failures() -> None:
    backend = FakeFleetBackend({host: FakeRawClient() for host in HOSTS[:3]})

    def callback(client, host, done, fail) -> None:
        if host == HOSTS[0]:
            fail(DockerAPIError("pull failed", host=host))
        elif host == HOSTS[1]:
            raise RuntimeError("worker crashed")
        else:
            done()

    result = make_dispatcher(backend, HOSTS[:3]).for_each_host_parallel("pull", callback, timeout=5)

    assert sorted(error.host for error in result.errors) == [HOSTS[0], HOSTS[1]]
    assert result.timeout_error is None


def test_parallel_counts_connection_failures_as_outcomes() -> None:
    backend = FakeFleetBackend({HOSTS[1]: FakeRawClient()}, unreachable=[HOSTS[0]])

    def callback(client, host, done, fail) -> None:
        done()

    started = time.monotonic()
    result = make_dispatcher(backend, HOSTS[:2]).for_each_host_parallel("pull", callback, timeout=5)

    assert time.monotonic() - started < 5
    assert [error.host for error in result.errors] == [HOSTS[0]]
    assert result.timeout_error is None


def test_parallel_only_first_signal_counts() -> None:
    backend = FakeFleetBackend({host: FakeRawClient() for host in HOSTS[:2]})

    def callback(client, host, done, fail) -> None:
        done()
        fail(DockerAPIError("late failure", host=host))

    result = make_dispatcher(backend, HOSTS[:2]).for_each_host_parallel("pull", callback, timeout=5)

    assert result.ok


def test_parallel_timeout_when_worker_never_signals() -> None:
    backend = FakeFleetBackend({host: FakeRawClient() for host in HOSTS[:3]}, unreachable=[HOSTS[2]])
    release = threading.Event()

    def callback(client, host, done, fail) -> None:
        if host == HOSTS[0]:
            done()
            return
        release.wait()  # воркер зависает до конца теста

    timeout = 0.3
    started = time.monotonic()
    try:
        result = make_dispatcher(backend, HOSTS[:3]).for_each_host_parallel(
            "pull", callback, timeout=timeout
        )
        elapsed = time.monotonic() - started
    finally:
        release.set()

    assert elapsed >= timeout
    errors = result.flatten()
    assert isinstance(errors[-1], DispatchTimeoutError)
    assert "Timeout while waiting for parallel pull" in str(errors[-1])
    assert [error.host for error in result.errors] == [HOSTS[2]]


def test_parallel_deadline_is_shared_by_all_hosts() -> None:
    hosts = HOSTS[:3]
    backend = FakeFleetBackend({host: FakeRawClient() for host in hosts})
    release = threading.Event()
    delays = {hosts[0]: 0.1, hosts[1]: 0.2}

    def callback(client, host, done, fail) -> None:
        if host in delays:
            time.sleep(delays[host])
            done()
            return
        release.wait()

    timeout = 0.4
    started = time.monotonic()
    try:
        result = make_dispatcher(backend, hosts).for_each_host_parallel("pull", callback, timeout=timeout)
        elapsed = time.monotonic() - started
    finally:
        release.set()

    assert isinstance(result.timeout_error, DispatchTimeoutError)
    # единый срок: ожидание не растягивается на каждый пришедший сигнал
    assert elapsed < timeout * 2


def test_sequential_dispatch_closes_each_client() -> None:
    daemons = {
        HOSTS[0]: FakeRawClient([FakeContainer("a1", "app")]),
        HOSTS[1]: FakeRawClient(list_error=DockerAPIError("daemon down")),
        HOSTS[2]: FakeRawClient(),
    }
    backend = FakeFleetBackend(daemons)
    dispatcher = make_dispatcher(backend, HOSTS[:3])

    dispatcher.for_each_container("restart", lambda client, host, container_id: None)
    assert [daemons[host].close_calls for host in HOSTS[:3]] == [1, 1, 1]

    def failing(client: DockerClientWrapper, host: str) -> None:
        raise DockerAPIError("boom", host=host)

    dispatcher.for_each_host("check", failing)
    assert [daemons[host].close_calls for host in HOSTS[:3]] == [2, 2, 2]


def test_parallel_worker_closes_its_client() -> None:
    raw = FakeRawClient()
    backend = FakeFleetBackend({HOSTS[0]: raw})

    def callback(client, host, done, fail) -> None:
        done()

    result = make_dispatcher(backend, HOSTS[:1]).for_each_host_parallel("pull", callback, timeout=5)

    assert result.ok
    assert raw.closed.wait(timeout=5)


def test_parallel_slow_connections_do_not_add_up() -> None:
    def slow_factory(host: str) -> DockerClientWrapper:
        time.sleep(0.5)
        raise DockerAPIError(f"Cannot connect to {host}", host=host)

    started = time.monotonic()
    result = Dispatcher(HOSTS, TargetImage("app"), slow_factory).for_each_host_parallel(
        "pull", lambda client, host, done, fail: done(), timeout=1
    )
    elapsed = time.monotonic() - started

    # четыре подключения по 0.5 с идут одновременно
    assert elapsed < 1.2
    assert sorted(error.host for error in result.errors) == HOSTS
    assert result.timeout_error is None


def test_parallel_hanging_connection_is_bounded_by_deadline() -> None:
    backend = FakeFleetBackend({HOSTS[0]: FakeRawClient()})
    release = threading.Event()

    def factory(host: str) -> DockerClientWrapper:
        if host == HOSTS[1]:
            release.wait()
            raise DockerAPIError("Read timed out", host=host)
        return backend(host)

    timeout = 0.3
    started = time.monotonic()
    try:
        result = Dispatcher(HOSTS[:2], TargetImage("app"), factory).for_each_host_parallel(
            "pull", lambda client, host, done, fail: done(), timeout=timeout
        )
        elapsed = time.monotonic() - started
    finally:
        release.set()

    assert elapsed < timeout * 2
    assert result.errors == []
    assert isinstance(result.timeout_error, DispatchTimeoutError)
