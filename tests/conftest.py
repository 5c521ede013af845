"""Test configuration — make the 531 engine modules importable as src.*"""
import sys
from pathlib import Path

# Project root on sys.path so `from src.planner_531 import ...` works without installing
sys.path.insert(0, str(Path(__file__).parent.parent))
