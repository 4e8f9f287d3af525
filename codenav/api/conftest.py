"""
Root conftest.py for pytest.

Sets up the Python path so "from codenav.api.X import Y" works without an
installed distribution.
"""
import sys
from pathlib import Path

# Repository root (two levels above this directory)
repo_root = Path(__file__).resolve().parents[2]

if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))
