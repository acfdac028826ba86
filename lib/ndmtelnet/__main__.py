"""Entry point for ``python -m lib.ndmtelnet``."""

from lib.ndmtelnet.cli import main

if __name__ == "__main__":
    main()
