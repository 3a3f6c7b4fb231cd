import subprocess

import pytest

from hs_client import HostRunner, LaunchError, NonZeroExit
from hs_client import transport as transport_mod
from hs_client.config_types import RunnerConfig
from hs_client.env import HsEnv
from hs_client.transport import Transport


class _Completed:
    def __init__(self, returncode: int = 0, stdout: str = ""):
        self.returncode = returncode
        self.stdout = stdout


def _capture(monkeypatch: pytest.MonkeyPatch, returncode: int = 0, stdout: str = "") -> list[dict]:
    calls: list[dict] = []

    def _run(cmd, **kwargs):
        calls.append({"cmd": cmd, **kwargs})
        return _Completed(returncode, stdout)

    monkeypatch.setattr(transport_mod.subprocess, "run", _run)
    return calls


def test_command_layout() -> None:
    t = Transport(RunnerConfig(exe="hs", home="/h", prefix=("--skip", "x")))

    assert t.command("ls -s 'a b'") == ["hs", "--no-alias", "-H", "/h", "--skip", "x", "ls", "-s", "a b"]
    assert t.command(["top"], all_visible=True) == [
        "hs", "--no-alias", "-H", "/h", "-s", "all", "--timeless", "--skip", "x", "top",
    ]


def test_command_without_home() -> None:
    assert Transport(RunnerConfig(exe="hs")).command(["ls"]) == ["hs", "--no-alias", "ls"]


def test_run_returns_stdout_and_merges_env(monkeypatch: pytest.MonkeyPatch) -> None:
    calls = _capture(monkeypatch, stdout="out\n")
    monkeypatch.setenv("KEEP_ME", "1")

    out = Transport(RunnerConfig(exe="hs")).run(["ls"], envs={"FOO": "bar"})

    assert out == "out\n"
    assert calls[0]["env"]["FOO"] == "bar"
    assert calls[0]["env"]["KEEP_ME"] == "1"
    assert calls[0]["stdout"] is subprocess.PIPE


def test_run_raises_on_failure(monkeypatch: pytest.MonkeyPatch) -> None:
    _capture(monkeypatch, returncode=3)

    with pytest.raises(NonZeroExit) as exc:
        Transport(RunnerConfig(exe="hs")).run(["cat", "x"])

    assert exc.value.exit_code == 3
    assert str(exc.value) == "Command `hs --no-alias cat x` exit with 3"


def test_probe_returns_none_on_failure(monkeypatch: pytest.MonkeyPatch) -> None:
    calls = _capture(monkeypatch, returncode=1)

    assert Transport(RunnerConfig(exe="hs")).probe(["which", "=x!"]) is None
    assert calls[0]["stderr"] is subprocess.DEVNULL


def test_exec_replaces_process(monkeypatch: pytest.MonkeyPatch) -> None:
    seen = []
    monkeypatch.setattr(transport_mod.os, "execvpe", lambda file, args, env: seen.append((file, args, env["A"])))

    Transport(RunnerConfig(exe="hs", home="/h")).exec(["=x!", "1"], envs={"A": "b"})

    assert seen == [("hs", ["hs", "--no-alias", "-H", "/h", "=x!", "1"], "b")]


def test_missing_executable_is_a_launch_error(tmp_path) -> None:
    exe = str(tmp_path / "no-such-hs")

    with pytest.raises(LaunchError, match="Cannot start") as exc:
        Transport(RunnerConfig(exe=exe)).run(["ls"])
    assert isinstance(exc.value.__cause__, FileNotFoundError)

    with pytest.raises(LaunchError):
        Transport(RunnerConfig(exe=exe)).probe(["which", "=x!"])


def test_timeout_is_a_launch_error(monkeypatch: pytest.MonkeyPatch) -> None:
    seen = []

    def _run(cmd, **kwargs):
        seen.append(kwargs["timeout"])
        raise subprocess.TimeoutExpired(cmd, kwargs["timeout"])

    monkeypatch.setattr(transport_mod.subprocess, "run", _run)

    with pytest.raises(LaunchError, match="timed out after 2.5s"):
        Transport(RunnerConfig(exe="hs", timeout_s=2.5)).run(["top"])
    assert seen == [2.5]


def test_exec_failure_is_a_launch_error(monkeypatch: pytest.MonkeyPatch) -> None:
    def _execvpe(file, args, env):
        raise PermissionError(13, "Permission denied")

    monkeypatch.setattr(transport_mod.os, "execvpe", _execvpe)

    with pytest.raises(LaunchError, match="Permission denied"):
        Transport(RunnerConfig(exe="hs")).exec(["=x!"])


def test_host_runner_history_commands(monkeypatch: pytest.MonkeyPatch) -> None:
    calls = _capture(monkeypatch, stdout="a\n  K=V\n")
    runner = HostRunner(RunnerConfig(exe="hs"))

    entries = runner.history_show("my/script", limit=5, offset=2, display="env")
    runner.history_rm("my/script", "3..5", display="env")

    assert entries[0].envs == [("K", "V")]
    assert calls[0]["cmd"][2:] == [
        "history", "show", "=my/script!", "--limit", "5", "--offset", "2", "--display", "env",
    ]
    assert calls[1]["cmd"][2:] == ["history", "rm", "=my/script!", "--display", "env", "--", "3..5"]


def test_host_runner_top_escapes_queries(monkeypatch: pytest.MonkeyPatch) -> None:
    calls = _capture(monkeypatch, stdout="1 2 3 a\n")
    runner = HostRunner(RunnerConfig(exe="hs"))

    procs = runner.top(["a*"], run_ids=[7])

    assert calls[0]["cmd"][2:] == ["top", "--id", "7", "a\\*"]
    assert procs[0].run_id == 2
    assert HostRunner.top_wait_args([1, 2]) == ["top", "--wait", "--id", "1", "--id", "2"]


def test_host_runner_edit_puts_content_last(monkeypatch: pytest.MonkeyPatch) -> None:
    calls = _capture(monkeypatch)
    runner = HostRunner(RunnerConfig(exe="hs"))

    runner.edit("n", content="echo -- hi", tags=["a", "b"], ty="sh", no_template=True, fast=True)

    assert calls[0]["cmd"][2:] == [
        "edit", "=n!", "-t", "a,b", "-T", "sh", "--no-template", "--fast", "--", "echo -- hi",
    ]


def test_host_runner_with_home_keeps_exe() -> None:
    runner = HostRunner(RunnerConfig(exe="hs", home="/a")).with_home("/b")
    assert runner.config == RunnerConfig(exe="hs", home="/b")


def test_hs_env_from_environ() -> None:
    env = HsEnv.from_environ({"HS_RUN_ID": "12", "HS_HOME": "/h", "NAME": ""})

    assert env.run_id() == 12
    assert env.get("home") == "/h"
    assert env.get("name") is None


def test_hs_env_require_missing() -> None:
    from hs_client import EnvError

    with pytest.raises(EnvError, match="HS_SOURCE"):
        HsEnv.from_environ({}).require("source")
