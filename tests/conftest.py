"""Test configuration — ensure progression_analytics is importable."""
import sys
from pathlib import Path

# Add project root to path so `from progression_analytics.xxx import` works
sys.path.insert(0, str(Path(__file__).parent.parent))
