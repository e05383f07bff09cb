"""Fixtures for integration tests."""

import stat
import sys
from pathlib import Path
from typing import Protocol

import pytest

FAKE_FUNC = '''#!{python}
"""Minimal stand-in for the func CLI."""

import os
import sys
import time
from pathlib import Path

command = sys.argv[1]

if command == "create":
    name = sys.argv[2]
    language = sys.argv[sys.argv.index("-l") + 1]
    if language == "broken":
        print("unknown language", file=sys.stderr)
        sys.exit(1)
    Path(name).mkdir()
    Path(name, "func.yaml").write_text(f"name: {{name}}\\n")
elif command == "build":
    Path("built").write_text(os.environ.get("FUNC_REGISTRY", ""))
elif command == "run":
    if Path("crash").exists():
        print("address already in use", flush=True)
        sys.exit(1)
    print("listening", flush=True)
    time.sleep(60)
elif command == "invoke":
    print("OK")
'''


class CreateTemplateFn(Protocol):
    """Protocol for template creation function."""

    def __call__(self, language: str, template: str) -> Path:
        """Create a template directory and return its path."""


@pytest.fixture
def fake_func(tmp_path: Path) -> Path:
    """Write an executable fake func binary and return its path."""
    path = tmp_path / "bin" / "func"
    path.parent.mkdir()
    path.write_text(FAKE_FUNC.format(python=sys.executable))
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


@pytest.fixture
def templates_root(tmp_path: Path) -> Path:
    """Create an empty templates repository."""
    root = tmp_path / "templates"
    root.mkdir()
    return root


@pytest.fixture
def create_template(templates_root: Path) -> CreateTemplateFn:
    """Return a function to create template directories."""

    def _create(language: str, template: str) -> Path:
        template_dir = templates_root / language / template
        template_dir.mkdir(parents=True, exist_ok=True)
        (template_dir / "handle.txt").write_text("template\n")
        return template_dir

    return _create
