"""Entry point for python -m realmgen."""

from .cli import main

if __name__ == "__main__":
    main()
