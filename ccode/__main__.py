"""Allow ``python -m ccode``."""

import sys

from ccode.cli.main import main


sys.exit(main())
