"""Тесты разбора аргументов и точки входа."""

from __future__ import annotations

import io
import json
import logging
from pathlib import Path
from typing import Any, List

import pytest

from fleetdock import main as main_module
from fleetdock.cli import parse_args
from fleetdock.docker_api.exceptions import DockerAPIError
from fleetdock.docker_api.models import ContainerRecord
from fleetdock.fleet.models import HostContents, HostStatus, TargetImage
from fleetdock.main import initialize_settings, main, run_command

HOSTS = "10.0.0.1:2375,10.0.0.2:2375"


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("FLEETDOCK_HOME", str(tmp_path))
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


class FakeFleet:
    """Записывает вызванные операции вместо обращения к Docker."""

    instances: List["FakeFleet"] = []
    errors: List[BaseException] = []

    def __init__(self, hosts, target, timeouts=None, client_factory=None) -> None:
        self.hosts = hosts
        self.target = target
        self.timeouts = timeouts
        self.calls: List[str] = []
        FakeFleet.instances.append(self)

    def _record(self, name: str) -> List[BaseException]:
        self.calls.append(name)
        return list(FakeFleet.errors)

    def pull(self):
        return self._record("pull")

    def restart(self):
        return self._record("restart")

    def stop(self):
        return self._record("stop")

    def deploy(self):
        return self._record("deploy")

    def list(self, results):
        results.put(
            HostStatus(
                host="10.0.0.1:2375",
                containers=[
                    ContainerRecord(
                        identifier="0123456789abcdef",
                        image="app:latest",
                        running=True,
                        started_at="2024-05-01T10:00:00Z",
                    )
                ],
            )
        )
        results.put(HostStatus(host="10.0.0.2:2375"))
        results.close()
        return self._record("list")

    def cat(self, path, results):
        results.put(HostContents(host="10.0.0.1:2375", container_id="0123456789abcdef", contents="1.2.3"))
        results.close()
        return self._record(f"cat {path}")


@pytest.fixture
def fake_fleet(monkeypatch: pytest.MonkeyPatch):
    FakeFleet.instances = []
    FakeFleet.errors = []
    monkeypatch.setattr(main_module, "Fleet", FakeFleet)
    return FakeFleet


def test_parse_args_defaults_to_deploy() -> None:
    args = parse_args(["--image", "app", "--hosts", HOSTS])
    assert args.command == "deploy"
    assert args.hosts == ["10.0.0.1:2375", "10.0.0.2:2375"]
    assert args.target == TargetImage("app", "")


def test_parse_args_tag_handling() -> None:
    assert parse_args(["pull", "--image", "app:v2", "--hosts", HOSTS]).target == TargetImage("app", "v2")
    args = parse_args(["pull", "--image", "registry:5000/app:v1", "--tag", "v3", "--hosts", HOSTS])
    assert args.target == TargetImage("registry:5000/app", "v3")


@pytest.mark.parametrize(
    "argv",
    [
        ["cat", "--image", "app", "--hosts", HOSTS],
        ["restart", "--image", "app", "--hosts", HOSTS, "--path", "/etc/hostname"],
        ["restart", "--image", "app", "--hosts", "10.0.0.1"],
        ["restart", "--image", "app", "--hosts", "10.0.0.1:2375:1"],
        ["restart", "--hosts", HOSTS],
        ["reboot", "--image", "app", "--hosts", HOSTS],
        ["list", "--image", "app", "--hosts", HOSTS, "-v", "-q"],
    ],
)
def test_parse_args_usage_errors(argv: List[str], capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as excinfo:
        parse_args(argv)
    assert excinfo.value.code == 2
    assert "ERROR:" in capsys.readouterr().err


def test_initialize_settings_applies_overrides(tmp_path: Path) -> None:
    config = tmp_path / "custom.json"
    config.write_text(json.dumps({"timeouts": {"stop_timeout_sec": 4}}), encoding="utf-8")
    args = parse_args(
        [
            "stop",
            "--image",
            "app",
            "--hosts",
            HOSTS,
            "--config",
            str(config),
            "--pull-timeout",
            "60",
            "--restart-timeout",
            "2",
            "-q",
        ]
    )

    settings = initialize_settings(args)

    timeouts = settings.timeouts()
    assert (timeouts.pull_timeout, timeouts.restart_timeout, timeouts.stop_timeout) == (60, 2, 4)
    assert settings.get_value("logging", "level") == "ERROR"


def test_main_returns_zero_on_success(fake_fleet) -> None:
    assert main(["restart", "--image", "app", "--hosts", HOSTS, "--stop-timeout", "3"]) == 0
    fleet = fake_fleet.instances[0]
    assert fleet.calls == ["restart"]
    assert fleet.timeouts.stop_timeout == 3
    assert fleet.hosts == ["10.0.0.1:2375", "10.0.0.2:2375"]


def test_main_reports_errors_and_fails(fake_fleet, capsys: pytest.CaptureFixture[str]) -> None:
    fake_fleet.errors = [DockerAPIError("no such image"), TimeoutError("Timeout while waiting for parallel pull")]

    assert main(["pull", "--image", "app", "--hosts", HOSTS, "-q"]) == 1

    err = capsys.readouterr().err
    assert "fleetdock pull failed with 2 error(s)" in err
    assert "  - no such image" in err


def test_main_rejects_invalid_timeout(fake_fleet, capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["pull", "--image", "app", "--hosts", HOSTS, "--pull-timeout", "0"])
    assert excinfo.value.code == 2
    assert "pull_timeout_sec" in capsys.readouterr().err
    assert fake_fleet.instances == []


def test_run_command_list_prints_statuses(fake_fleet) -> None:
    out = io.StringIO()
    fleet: Any = fake_fleet(["10.0.0.1:2375"], TargetImage("app"))

    assert run_command(fleet, "list", out=out) == []

    lines = out.getvalue().splitlines()
    assert lines[0] == "10.0.0.1:2375"
    assert lines[1] == "  0123456789ab  app:latest  running  2024-05-01T10:00:00Z"
    assert lines[2] == "10.0.0.2:2375"
    assert lines[3] == "  (no matching containers)"


def test_run_command_cat_prints_contents(fake_fleet) -> None:
    out = io.StringIO()
    fleet: Any = fake_fleet(["10.0.0.1:2375"], TargetImage("app"))

    run_command(fleet, "cat", path="/app/VERSION", out=out)

    assert out.getvalue() == "==> 10.0.0.1:2375 (0123456789ab) <==\n1.2.3\n"
    assert fleet.calls == ["cat /app/VERSION"]
