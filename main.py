#!/usr/bin/env python3
"""
git-satis - Main Entry Point

Builds a static Composer repository from every tag and branch
of a git repository.
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))

from git_satis.cli import main

if __name__ == "__main__":
    main()
