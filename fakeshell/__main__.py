"""Run FakeShell with ``python -m fakeshell``."""

import sys

from fakeshell.main import main

sys.exit(main())
