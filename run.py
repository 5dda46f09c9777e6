#!/usr/bin/env python3
"""termtab - Run the command line interface.

Usage:
    python run.py detect
    python run.py open ../my-worktree --label agent-1 -- claude
    # Or, once installed: termtab detect
"""

import sys

from termtab.cli import main

if __name__ == "__main__":
    sys.exit(main())
