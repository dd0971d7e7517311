"""
git-satis: static Composer repository builder.

Archives every tag and remote branch of a git repository into
per-commit zip files and maintains a cumulative packages.json
catalog pointing at them.
"""

__version__ = "1.0.0"
__author__ = "git-satis"
