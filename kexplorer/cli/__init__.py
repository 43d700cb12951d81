"""Command-line host for kexplorer.

- ``python -m kexplorer.cli`` / ``python -m kexplorer.cli.explore``: resolve
  artist images, post counts and gallery pages from the terminal.
"""
