"""In-memory Command and ProcessHandle doubles for runner tests."""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from func_template_harness.commands.base import Command, CommandResult, ProcessHandle


@dataclass(kw_only=True)
class FakeProcessHandle(ProcessHandle):
    """Process double.

    ``exits_immediately`` simulates a crash on startup; ``terminate_error`` is
    raised by ``terminate`` while the process still looks alive.
    """

    exits_immediately: bool = False
    terminate_error: Exception | None = None
    terminated: bool = False
    terminate_calls: int = 0

    def is_alive(self) -> bool:
        return not (self.exits_immediately or self.terminated)

    async def terminate(self, timeout: float = 10) -> None:
        self.terminate_calls += 1
        if not self.is_alive():
            raise ProcessLookupError("process already exited")
        if self.terminate_error is not None:
            raise self.terminate_error
        self.terminated = True


@dataclass(frozen=True, kw_only=True)
class Call:
    """One recorded command execution."""

    args: Sequence[str]
    cwd: Path | None
    env: Mapping[str, str] | None = None


@dataclass(kw_only=True)
class FakeFuncCommand(Command):
    """Scripted stand-in for the ``func`` binary and prerequisite tools.

    ``func create`` writes ``func.yaml`` into the new function directory so the
    manifest check passes. Per-target behavior is scripted by function name:

    - ``fail_create``: names whose create exits non-zero
    - ``skip_manifest``: names whose create succeeds without writing func.yaml
    - ``fail_build``: names whose build exits non-zero
    - ``crash_on_start``: names whose run process exits immediately
    - ``terminate_errors``: exceptions raised when stopping a function's process
    - ``invoke_failures``: number of failing invokes before one succeeds
    - ``fail_commands``: other programs (e.g. ``npm``) that exit non-zero
    """

    fail_create: set[str] = field(default_factory=set)
    skip_manifest: set[str] = field(default_factory=set)
    fail_build: set[str] = field(default_factory=set)
    crash_on_start: set[str] = field(default_factory=set)
    terminate_errors: dict[str, Exception] = field(default_factory=dict)
    invoke_failures: dict[str, int] = field(default_factory=dict)
    fail_commands: set[str] = field(default_factory=set)
    binary: str = "func"

    calls: list[Call] = field(default_factory=list)
    processes: dict[str, FakeProcessHandle] = field(default_factory=dict)
    invoke_counts: dict[str, int] = field(default_factory=dict)

    def calls_for(self, subcommand: str) -> list[Call]:
        """Return recorded ``func <subcommand>`` calls."""
        return [
            c
            for c in self.calls
            if c.args[0] == self.binary and len(c.args) > 1 and c.args[1] == subcommand
        ]

    async def execute(
        self,
        args: Sequence[str],
        *,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
    ) -> CommandResult:
        self.calls.append(Call(args=tuple(args), cwd=cwd, env=env))

        if args[0] in self.fail_commands:
            return CommandResult(exit_status=1, output=f"{args[0]}: failed")
        if args[0] != self.binary or len(args) < 2:
            return CommandResult(exit_status=0)

        match args[1]:
            case "create":
                return self._create(args[2], cwd)
            case "build":
                name = _function_name(cwd)
                if name in self.fail_build:
                    return CommandResult(exit_status=1, output="build error")
            case "invoke":
                return self._invoke(_function_name(cwd))
        return CommandResult(exit_status=0)

    async def start(
        self,
        args: Sequence[str],
        *,
        cwd: Path | None = None,
        log_path: Path | None = None,
    ) -> FakeProcessHandle:
        self.calls.append(Call(args=tuple(args), cwd=cwd))
        name = _function_name(cwd)
        handle = FakeProcessHandle(
            exits_immediately=name in self.crash_on_start,
            terminate_error=self.terminate_errors.get(name),
        )
        self.processes[name] = handle
        return handle

    def _create(self, name: str, cwd: Path | None) -> CommandResult:
        if name in self.fail_create:
            return CommandResult(exit_status=1, output="template not found")

        assert cwd is not None
        function_dir = cwd / name
        function_dir.mkdir(parents=True, exist_ok=True)
        if name not in self.skip_manifest:
            (function_dir / "func.yaml").write_text(f"name: {name}\n")
        return CommandResult(exit_status=0)

    def _invoke(self, name: str) -> CommandResult:
        count = self.invoke_counts.get(name, 0) + 1
        self.invoke_counts[name] = count
        if count <= self.invoke_failures.get(name, 0):
            return CommandResult(exit_status=1, output="connection refused")
        return CommandResult(exit_status=0, output="OK")


def _function_name(cwd: Path | None) -> str:
    assert cwd is not None
    return cwd.name
