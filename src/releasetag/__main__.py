"""Allow ``python -m releasetag``."""

from .cli import main

if __name__ == "__main__":
    main()
