"""Allow ``python -m unwatched_browser``."""

import sys

from unwatched_browser.app import main

sys.exit(main())
