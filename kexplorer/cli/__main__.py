"""Allow ``python -m kexplorer.cli`` execution."""

from kexplorer.cli.explore import main

main()
