"""Entry point for ``python -m prediction_client``."""

import sys

from .cli import main

sys.exit(main())
