"""Pytest bootstrap for project imports."""

from pathlib import Path
import os
import sys

# Settings require a secret; tests never hit a real database.
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

# Ensure project root is on sys.path so `import skillbarter` works
PROJECT_ROOT = Path(__file__).resolve().parents[1]
project_root_str = str(PROJECT_ROOT)
if project_root_str not in sys.path:
    sys.path.insert(0, project_root_str)
