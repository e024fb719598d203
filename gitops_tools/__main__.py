"""Allow running as ``python -m gitops_tools``."""

from .cli import cli

if __name__ == "__main__":
    cli()
