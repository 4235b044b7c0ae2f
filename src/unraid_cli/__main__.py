"""Allow ``python -m unraid_cli``."""

from unraid_cli.cli import main

main()
