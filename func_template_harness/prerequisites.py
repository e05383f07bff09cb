"""Preparation steps some templates need before ``func build``."""

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path

from func_template_harness.commands.base import Command, CommandResult
from func_template_harness.models.target import Target

log = logging.getLogger(__name__)

ANY_TEMPLATE = "*"


@dataclass(frozen=True, kw_only=True)
class PrerequisiteStep:
    """A command run in the function directory before building."""

    description: str
    args: Sequence[str]

    async def run(self, command: Command, cwd: Path) -> CommandResult:
        log.info("%s", self.description)
        return await command.execute(self.args, cwd=cwd)


DEFAULT_PREREQUISITES: Mapping[tuple[str, str], PrerequisiteStep] = {
    ("go", "blog"): PrerequisiteStep(
        description="Building hugo static files", args=("make",)
    ),
    ("typescript", ANY_TEMPLATE): PrerequisiteStep(
        description="Running npm install", args=("npm", "install")
    ),
    ("rust", ANY_TEMPLATE): PrerequisiteStep(
        description="Running cargo build", args=("cargo", "build")
    ),
}


def find_prerequisite(
    target: Target,
    prerequisites: Mapping[tuple[str, str], PrerequisiteStep] = DEFAULT_PREREQUISITES,
) -> PrerequisiteStep | None:
    """Return the step for ``target``, or None when it needs no preparation.

    An exact (language, template) entry wins over a (language, "*") entry.
    """
    for key in (
        (target.language, target.template),
        (target.language, ANY_TEMPLATE),
    ):
        if (step := prerequisites.get(key)) is not None:
            return step
    return None
