"""Allow ``python -m excel_cli``."""

from excel_cli.cli import main

main()
