"""Allow running plugscout as `python -m plugscout`."""

from plugscout.cli.cli import main

if __name__ == "__main__":
    main()
