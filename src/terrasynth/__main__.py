"""Allow ``python -m terrasynth``."""

from .cli import main

if __name__ == "__main__":
    main()
