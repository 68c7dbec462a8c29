"""Exporter entry point."""

from scaleway_exporter.cli import main

if __name__ == "__main__":
    main()
