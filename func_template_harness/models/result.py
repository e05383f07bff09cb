"""Models for per-target execution state and results."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Literal, TypeAlias

if TYPE_CHECKING:
    from func_template_harness.commands.base import ProcessHandle

Outcome: TypeAlias = Literal["pending", "passed", "failed"]

LifecycleStep: TypeAlias = Literal[
    "created",
    "prereqs_run",
    "built",
    "started",
    "ready",
    "invoked",
]


@dataclass(kw_only=True)
class ExecutionState:
    """Mutable record of the target currently going through its lifecycle."""

    target_dir: Path
    process: "ProcessHandle | None" = None
    attempts: int = 0
    outcome: Outcome = "pending"
    step: LifecycleStep | None = None


@dataclass(frozen=True, kw_only=True)
class Result:
    """Outcome of one target's lifecycle.

    ``preserved_path`` is set only for failed targets, whose scratch
    directory is kept on disk for inspection.
    """

    name: str
    label: str
    outcome: Literal["passed", "failed"]
    preserved_path: Path | None = None
    failed_step: LifecycleStep | None = None
    message: str | None = None
    attempts: int = 0
    duration: float = field(default=0.0, compare=False)

    @property
    def passed(self) -> bool:
        return self.outcome == "passed"
