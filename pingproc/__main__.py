"""
Entry point for the pingproc CLI application.
"""

from pingproc.cli.main import app


def main():
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
