"""Exceptions raised by the harness."""

from func_template_harness.models.result import LifecycleStep


class HarnessError(Exception):
    """Base class for harness errors."""


class ConfigurationError(HarnessError):
    """Raised when the run cannot start, e.g. the templates root is missing."""


class StepFailedError(HarnessError):
    """Raised when a lifecycle step fails for the current target."""

    def __init__(self, step: LifecycleStep, message: str) -> None:
        super().__init__(message)
        self.step = step
        self.message = message
