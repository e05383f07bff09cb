"""Operations of the external ``func`` CLI used by the lifecycle."""

from dataclasses import dataclass
from pathlib import Path

from func_template_harness.commands.base import Command, CommandResult, ProcessHandle
from func_template_harness.config import REGISTRY_ENV_VAR, BuilderKind


@dataclass(frozen=True, kw_only=True)
class FuncCli:
    """Builds ``func`` invocations and runs them through a Command."""

    command: Command
    binary: str = "func"

    async def create(
        self,
        name: str,
        *,
        repository_uri: str,
        language: str,
        template: str,
        cwd: Path,
    ) -> CommandResult:
        """Create function ``name`` from a template, inside ``cwd``."""
        return await self.command.execute(
            [
                self.binary,
                "create",
                name,
                "-r",
                repository_uri,
                "-l",
                language,
                "-t",
                template,
            ],
            cwd=cwd,
        )

    async def build(
        self, *, builder: BuilderKind, registry: str, cwd: Path
    ) -> CommandResult:
        """Build the function in ``cwd`` with the given builder."""
        return await self.command.execute(
            [self.binary, "build", f"--builder={builder}"],
            cwd=cwd,
            env={REGISTRY_ENV_VAR: registry},
        )

    async def run(
        self, *, cwd: Path, log_path: Path | None = None
    ) -> ProcessHandle:
        """Start the already-built function in the background."""
        return await self.command.start(
            [self.binary, "run", "--build=false"],
            cwd=cwd,
            log_path=log_path,
        )

    async def invoke(self, *, cwd: Path, request_type: str = "GET") -> CommandResult:
        """Send one request to the running function."""
        return await self.command.execute(
            [self.binary, "invoke", f"--request-type={request_type}"],
            cwd=cwd,
        )
