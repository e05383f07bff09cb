"""Run configuration resolved from defaults and environment overrides."""

from collections.abc import Mapping
from pathlib import Path
from typing import Literal, TypeAlias

from pydantic import Field

from func_template_harness.models.base import Model

BuilderKind: TypeAlias = Literal["host", "pack"]

DEFAULT_BINARY = "func"
DEFAULT_REGISTRY = "quay.io/test"

# Languages whose templates build with the local "host" builder; every other
# language falls back to "pack".
HOST_ENABLED_LANGUAGES: frozenset[str] = frozenset({"go", "python"})

BINARY_ENV_VAR = "FUNC_BIN"
REGISTRY_ENV_VAR = "FUNC_REGISTRY"


class RunConfig(Model):
    """Execution parameters shared by every target of a run."""

    repository_root: Path = Field(..., description="Templates repository root")
    work_dir: Path = Field(..., description="Scratch root for created functions")
    binary_path: str = Field(default=DEFAULT_BINARY, description="func executable")
    registry: str = Field(default=DEFAULT_REGISTRY, description="Image registry")
    host_languages: frozenset[str] = Field(default=HOST_ENABLED_LANGUAGES)

    settle_delay: float = Field(default=2, ge=0, description="Seconds before liveness check")
    warmup_delay: float = Field(default=10, ge=0, description="Seconds before first invoke")
    invoke_retry_delay: float = Field(default=5, ge=0, description="Seconds between invokes")
    max_invoke_attempts: int = Field(default=5, ge=1)
    terminate_timeout: float = Field(default=10, ge=0)

    @property
    def repository_uri(self) -> str:
        """Template repository URI passed to ``func create``."""
        return self.repository_root.resolve().as_uri()

    def builder_for(self, language: str) -> BuilderKind:
        """Return the builder used for templates of ``language``."""
        return "host" if language in self.host_languages else "pack"


def resolve_run_config(
    environ: Mapping[str, str],
    *,
    repository_root: Path,
    work_dir: Path,
) -> RunConfig:
    """Build the run configuration.

    ``FUNC_BIN`` and ``FUNC_REGISTRY`` override the defaults; unset or empty
    values are ignored. Only the environment is read; ``work_dir`` is taken
    as given and not created here.
    """
    return RunConfig(
        repository_root=repository_root,
        work_dir=work_dir,
        binary_path=environ.get(BINARY_ENV_VAR) or DEFAULT_BINARY,
        registry=environ.get(REGISTRY_ENV_VAR) or DEFAULT_REGISTRY,
    )
