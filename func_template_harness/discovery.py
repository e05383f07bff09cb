"""Discover (language, template) targets in a templates repository."""

import logging
from collections.abc import Iterator
from pathlib import Path

from func_template_harness.errors import ConfigurationError
from func_template_harness.models.target import Target

log = logging.getLogger(__name__)

# Top-level directories that hold documentation or repository metadata.
EXCLUDED_DIRECTORIES: frozenset[str] = frozenset({"docs", ".github"})


def discover_targets(root: Path) -> Iterator[Target]:
    """Return the targets below ``root`` in a stable order.

    Languages are the first-level directories of ``root``, skipping hidden
    and excluded ones; templates are the directories inside each language.

    Args:
        root: Path to the templates repository

    Returns:
        A lazy iterator over the targets, to be consumed once

    Raises:
        ConfigurationError: If ``root`` does not exist or is not a directory

    """
    if not root.is_dir():
        raise ConfigurationError(f"Templates root '{root}' is not a directory")

    return _iter_targets(root)


def _iter_targets(root: Path) -> Iterator[Target]:
    for language_dir in _subdirectories(root):
        if is_excluded(language_dir.name):
            log.debug("Skipping non-language directory %s", language_dir.name)
            continue

        for template_dir in _subdirectories(language_dir):
            yield Target(language=language_dir.name, template=template_dir.name)


def is_excluded(name: str) -> bool:
    """Check if a top-level directory is not a language."""
    return name.startswith(".") or name in EXCLUDED_DIRECTORIES


def _subdirectories(path: Path) -> list[Path]:
    """Return the visible directories inside ``path``, sorted by name."""
    return sorted(
        child
        for child in path.iterdir()
        if child.is_dir() and not child.name.startswith(".")
    )
