"""Command execution capabilities."""

from func_template_harness.commands.base import Command, CommandResult, ProcessHandle
from func_template_harness.commands.process import SubprocessCommand, SubprocessHandle

__all__ = [
    "Command",
    "CommandResult",
    "ProcessHandle",
    "SubprocessCommand",
    "SubprocessHandle",
]
