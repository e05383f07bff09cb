"""Runner driving each template target through its test lifecycle."""

import asyncio
import logging
import shutil
import time
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field

from func_template_harness.commands.base import Command, CommandResult
from func_template_harness.config import RunConfig
from func_template_harness.errors import StepFailedError
from func_template_harness.func_cli import FuncCli
from func_template_harness.models.result import ExecutionState, LifecycleStep, Result
from func_template_harness.models.target import Target
from func_template_harness.prerequisites import (
    DEFAULT_PREREQUISITES,
    PrerequisiteStep,
    find_prerequisite,
)

log = logging.getLogger(__name__)

MANIFEST_FILE = "func.yaml"
RUN_LOG_FILE = ".func-run.log"


@dataclass(frozen=True, kw_only=True)
class TemplateRunner:
    """Runs targets one at a time: create, prepare, build, run, invoke.

    A failing step only fails the current target. The background process
    started by ``func run`` is torn down before the target's result is
    emitted, and the target directory is removed only when it passed.
    """

    config: RunConfig
    command: Command
    prerequisites: Mapping[tuple[str, str], PrerequisiteStep] = field(
        default_factory=lambda: DEFAULT_PREREQUISITES
    )

    @property
    def func(self) -> FuncCli:
        return FuncCli(command=self.command, binary=self.config.binary_path)

    async def run(
        self,
        targets: Iterable[Target],
        on_result: Callable[[Result], None],
    ) -> None:
        """Run every target in order, reporting each result as it completes."""
        for target in targets:
            on_result(await self.run_target(target))

    async def run_target(self, target: Target) -> Result:
        """Drive one target through its lifecycle and return its result."""
        log.info("=" * 42)
        log.info("Testing: %s", target.label)
        log.info("=" * 42)

        state = ExecutionState(target_dir=self.config.work_dir / target.name)
        started_at = time.monotonic()
        failure: StepFailedError | None = None

        try:
            await self._run_lifecycle(target, state)
        except StepFailedError as e:
            failure = e
        except Exception as e:
            # Adapter errors (e.g. an unlaunchable binary) fail this target only.
            log.exception("Unexpected error while testing %s", target.label)
            failure = StepFailedError(state.step or "created", str(e))
        finally:
            await self._teardown(state)

        duration = time.monotonic() - started_at
        state.outcome = "passed" if failure is None else "failed"

        if failure is None:
            self._cleanup(state)
            log.info("PASSED: %s (%.1fs)", target.label, duration)
            return Result(
                name=target.name,
                label=target.label,
                outcome=state.outcome,
                attempts=state.attempts,
                duration=duration,
            )

        log.error(
            "FAILED: %s at step %s (preserved at %s)",
            target.label,
            failure.step,
            state.target_dir,
        )
        return Result(
            name=target.name,
            label=target.label,
            outcome=state.outcome,
            preserved_path=state.target_dir,
            failed_step=failure.step,
            message=failure.message,
            attempts=state.attempts,
            duration=duration,
        )

    async def _run_lifecycle(self, target: Target, state: ExecutionState) -> None:
        await self._create(target, state)
        await self._run_prerequisites(target, state)
        await self._build(target, state)
        await self._start(state)
        await self._wait_until_ready(state)
        await self._invoke(state)

    async def _create(self, target: Target, state: ExecutionState) -> None:
        state.step = "created"
        self.config.work_dir.mkdir(parents=True, exist_ok=True)
        log.info(
            "Creating function %s from %s (language=%s, template=%s)",
            target.name,
            self.config.repository_uri,
            target.language,
            target.template,
        )
        result = await self.func.create(
            target.name,
            repository_uri=self.config.repository_uri,
            language=target.language,
            template=target.template,
            cwd=self.config.work_dir,
        )
        _check(result, "created", f"func create failed for {target.label}")

        if not (state.target_dir / MANIFEST_FILE).is_file():
            raise StepFailedError(
                "created", f"No {MANIFEST_FILE} found after func create"
            )

    async def _run_prerequisites(self, target: Target, state: ExecutionState) -> None:
        state.step = "prereqs_run"
        log.info("Running prerequisites for %s", target.label)
        step = find_prerequisite(target, self.prerequisites)
        if step is None:
            log.info("No prerequisites needed")
            return

        result = await step.run(self.command, state.target_dir)
        _check(result, "prereqs_run", f"Prerequisite '{' '.join(step.args)}' failed")

    async def _build(self, target: Target, state: ExecutionState) -> None:
        state.step = "built"
        builder = self.config.builder_for(target.language)
        log.info("Building function with builder %s", builder)
        result = await self.func.build(
            builder=builder,
            registry=self.config.registry,
            cwd=state.target_dir,
        )
        _check(result, "built", f"Build failed for {target.label}")

    async def _start(self, state: ExecutionState) -> None:
        state.step = "started"
        log.info("Starting function")
        state.process = await self.func.run(
            cwd=state.target_dir, log_path=state.target_dir / RUN_LOG_FILE
        )

        await asyncio.sleep(self.config.settle_delay)
        if not state.process.is_alive():
            raise StepFailedError("started", "Failed to start function")

    async def _wait_until_ready(self, state: ExecutionState) -> None:
        state.step = "ready"
        log.info("Waiting for function to be ready...")
        await asyncio.sleep(self.config.warmup_delay)

    async def _invoke(self, state: ExecutionState) -> None:
        state.step = "invoked"
        max_attempts = self.config.max_invoke_attempts
        last: CommandResult | None = None

        while state.attempts < max_attempts:
            state.attempts += 1
            log.info("Invoke attempt %d of %d", state.attempts, max_attempts)
            last = await self.func.invoke(cwd=state.target_dir)
            if last.ok:
                log.info("Invoke succeeded!")
                return

            log.warning("Invoke failed, retrying...")
            if state.attempts < max_attempts:
                await asyncio.sleep(self.config.invoke_retry_delay)

        message = f"Invoke failed after {max_attempts} attempt(s)"
        if last is not None and (tail := last.tail()):
            message = f"{message}: {tail}"
        raise StepFailedError("invoked", message)

    async def _teardown(self, state: ExecutionState) -> None:
        process = state.process
        if process is None or not process.is_alive():
            return

        log.info("Stopping function")
        try:
            await process.terminate(timeout=self.config.terminate_timeout)
        except ProcessLookupError:
            log.debug("Function process already exited")
        except Exception:
            # Teardown never decides the outcome or stops the run.
            log.warning("Failed to stop function process", exc_info=True)

    def _cleanup(self, state: ExecutionState) -> None:
        if not state.target_dir.is_dir():
            return
        try:
            shutil.rmtree(state.target_dir)
        except OSError:
            log.error("Failed to clean up %s", state.target_dir, exc_info=True)
            return
        log.info("Cleaned up: %s", state.target_dir)


def _check(result: CommandResult, step: LifecycleStep, message: str) -> None:
    """Raise StepFailedError when ``result`` is not successful."""
    if result.ok:
        return
    log.error("%s (exit status %d)", message, result.exit_status)
    if tail := result.tail():
        log.error("Output:\n%s", tail)
        message = f"{message}: {tail}"
    raise StepFailedError(step, message)
