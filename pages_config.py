"""
Configuration settings for custom pages management.

Every value can be overridden through the environment.
"""

import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent

# Directory holding one YAML site definition per adapter
SITES_DIR = Path(os.environ.get("PAGES_SITES_DIR", BASE_DIR / "sites"))

# Directory where each site's page list is stored as JSON
STORAGE_DIR = Path(os.environ.get("PAGES_STORAGE_DIR", BASE_DIR / "output" / "custom_pages"))

# HTTP service
HOST = os.environ.get("PAGES_HOST", "127.0.0.1")
PORT = int(os.environ.get("PAGES_PORT", "8082"))

# Log level for entry points (DEBUG, INFO, WARNING, ...)
LOG_LEVEL = os.environ.get("PAGES_LOG_LEVEL", "INFO")

# URLs longer than this are rejected before any pattern matching
MAX_URL_LENGTH = 2048

# Retry defaults for retry_with_backoff
RETRY_MAX_ATTEMPTS = 3
RETRY_INITIAL_DELAY = 0.1
RETRY_BACKOFF_FACTOR = 2.0
