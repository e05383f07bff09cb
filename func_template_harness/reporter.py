"""Accumulation and rendering of per-target results."""

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from func_template_harness.models.result import Result

STATUS_SYMBOLS = {
    "passed": "✅",
    "failed": "❌",
}


@dataclass(kw_only=True)
class Reporter:
    """Collects results in the order targets ran and renders the summary."""

    _results: list[Result] = field(default_factory=list)

    def record(self, result: Result) -> None:
        """Append the result of one target."""
        self._results.append(result)

    @property
    def results(self) -> Sequence[Result]:
        return tuple(self._results)

    @property
    def passed(self) -> Sequence[Result]:
        return tuple(r for r in self._results if r.outcome == "passed")

    @property
    def failed(self) -> Sequence[Result]:
        return tuple(r for r in self._results if r.outcome == "failed")

    def exit_code(self) -> int:
        """Return 1 if any target failed, else 0."""
        return 1 if self.failed else 0

    def render(self) -> str:
        """Render the passed and failed groups followed by the totals."""
        passed, failed = self.passed, self.failed
        lines = ["", "=" * 42, "SUMMARY".center(42), "=" * 42, ""]

        if passed:
            lines.append(f"PASSED ({len(passed)}):")
            lines.extend(f"  {STATUS_SYMBOLS['passed']} {r.name}" for r in passed)
        lines.append("")

        if failed:
            lines.append(f"FAILED ({len(failed)}):")
            for result in failed:
                lines.append(f"  {STATUS_SYMBOLS['failed']} {result.name}")
                lines.append(f"    Preserved at: {result.preserved_path}")
        lines.append("")

        lines.append(
            f"Passed: {len(passed)}, Failed: {len(failed)}, "
            f"Total: {len(self._results)}"
        )
        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        """Format the results for JSON output."""
        return {
            "total": len(self._results),
            "passed": len(self.passed),
            "failed": len(self.failed),
            "results": [
                {
                    "name": r.name,
                    "outcome": r.outcome,
                    "preserved_path": (
                        str(r.preserved_path) if r.preserved_path else None
                    ),
                    "failed_step": r.failed_step,
                    "message": r.message,
                    "attempts": r.attempts,
                    "duration": round(r.duration, 2),
                }
                for r in self._results
            ],
        }
