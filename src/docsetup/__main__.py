"""Allow ``python -m docsetup``."""

from docsetup.cli import main

if __name__ == "__main__":
    main()
