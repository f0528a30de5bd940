"""Pytest configuration for the named-block test suite."""

import sys
from pathlib import Path

# Add src/ for the package and tests/ for the helper modules
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))
sys.path.insert(0, str(Path(__file__).parent))
