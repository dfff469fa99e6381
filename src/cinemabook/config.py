"""
CinemaBook client configuration
===============================

Everything is a module-level constant. Values that change per deployment can
be overridden through environment variables (or the CLI flags built on top
of them).
"""

import logging
import os
from pathlib import Path

# API
API_URL = os.environ.get("CINEMABOOK_API_URL", "http://localhost:5000")
REQUEST_TIMEOUT = float(os.environ.get("CINEMABOOK_TIMEOUT", "15"))

HEADERS = {
    'User-Agent': 'cinemabook-client/1.0',
    'Accept': 'application/json',
    'Accept-Language': 'vi-VN,vi;q=0.9,en;q=0.5',
}

# Session storage (token + logged-in user)
AUTH_PATH = Path(
    os.environ.get("CINEMABOOK_AUTH_FILE", Path.home() / ".config" / "cinemabook" / "auth.json")
)

# Exports
OUTPUT_DIR = Path(os.environ.get("CINEMABOOK_OUTPUT_DIR", "./cinema_data"))

# Logging
LOG_FORMAT = '%(asctime)s | %(levelname)-8s | %(message)s'
LOG_DATEFMT = '%H:%M:%S'


def setup_logging(verbose: bool = False) -> None:
    """Configure root logging once for the command-line entry point."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
        datefmt=LOG_DATEFMT,
    )
