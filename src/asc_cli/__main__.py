"""Allow running the CLI with ``python -m asc_cli``."""

from asc_cli.cli import main

if __name__ == "__main__":
    main()
