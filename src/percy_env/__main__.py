"""Entry point: python -m percy_env [--json] [--cwd DIR]"""
from __future__ import annotations

import sys

from percy_env._cli import run

if __name__ == "__main__":
    sys.exit(run())
