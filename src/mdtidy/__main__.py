"""Allow ``python -m mdtidy``."""

import sys

from mdtidy.cli import main

sys.exit(main())
