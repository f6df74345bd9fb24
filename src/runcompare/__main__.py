"""
Entry point for ``python -m runcompare``.
"""

import sys

from runcompare.cli import main

sys.exit(main())
