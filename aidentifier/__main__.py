"""Entry point for python -m aidentifier."""

from .cli import parse_args
from .runners.headless import run_headless
from .runners.interactive import run_interactive


def main():
    """Main entry point."""
    config = parse_args()
    if config.display.interactive:
        run_interactive(config)
    else:
        run_headless(config)


if __name__ == "__main__":
    main()
