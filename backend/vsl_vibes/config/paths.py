"""
Paths configuration

Centralized directory paths for the application.
"""

import os
from pathlib import Path

# Base directories
APP_DIR = Path(__file__).parent.parent
BACKEND_DIR = APP_DIR.parent
DATA_DIR = Path(os.getenv("VSL_DATA_DIR", str(BACKEND_DIR / "data")))
PROJECT_DATA_DIR = DATA_DIR / "projects"
EXPORT_DIR = DATA_DIR / "exports"

# Ensure directories exist
PROJECT_DATA_DIR.mkdir(parents=True, exist_ok=True)
EXPORT_DIR.mkdir(parents=True, exist_ok=True)

__all__ = ["APP_DIR", "BACKEND_DIR", "DATA_DIR", "PROJECT_DATA_DIR", "EXPORT_DIR"]
