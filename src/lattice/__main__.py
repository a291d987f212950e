"""Allow ``python -m lattice``."""

from lattice.cli import main

if __name__ == "__main__":
    main()
