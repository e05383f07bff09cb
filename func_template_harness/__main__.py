"""Allow running the harness with ``python -m func_template_harness``."""

from func_template_harness.cli import main

main()
