"""Allow ``python -m iaprestore``."""

import sys

from iaprestore.ui.cli import main

if __name__ == "__main__":
    sys.exit(main())
