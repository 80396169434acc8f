"""Allow running the launcher with ``python -m freecol``."""

from freecol.main import main

if __name__ == "__main__":
    main()
