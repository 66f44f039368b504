"""Module entry for `python -m eidos`."""

from eidos.cli.app import main

if __name__ == "__main__":
    main()
