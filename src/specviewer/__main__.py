"""Allow running as ``python -m specviewer``."""

from specviewer.cli import main

main()
