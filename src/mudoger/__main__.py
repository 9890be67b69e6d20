"""Allow ``python -m mudoger``."""

import sys

from mudoger.cli.main import main

if __name__ == "__main__":
    sys.exit(main())
