"""Allow ``python -m animatch``."""

from animatch.cli.commands import main

main()
