"""
Configuration for the record mapper.
Values come from the environment, optionally seeded from a .env file.
"""

import os
from pathlib import Path
from typing import List

from dotenv import load_dotenv

load_dotenv()

# Database path configuration
DB_PATH = os.getenv("DB_PATH", "./data/records.db")

DEBUG = os.getenv("DEBUG", "false").lower() == "true"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# How DELETE builds its WHERE clause: every eligible column (row) or the key only
DELETE_MATCH = os.getenv("DELETE_MATCH", "row").lower()  # row|primary_key

# Sequence envelope marker, fixed for compatibility with stored data
SEQUENCE_MARKER = "ARR"

DELETE_MATCH_MODES = ("row", "primary_key")


def debug_enabled():
    """Check if debug mode is enabled."""
    return os.getenv("DEBUG", "false").lower() == "true"


def get_delete_match() -> str:
    """Get the configured delete match mode (row|primary_key)."""
    mode = os.getenv("DELETE_MATCH", DELETE_MATCH).lower()
    return mode if mode in DELETE_MATCH_MODES else "row"


def ensure_db_directory(db_path: str = DB_PATH) -> None:
    """Ensure the directory holding the database file exists."""
    if db_path == ":memory:":
        return
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)


def validate_config() -> List[str]:
    """Validate configuration and return any issues."""
    issues = []

    delete_match = os.getenv("DELETE_MATCH", DELETE_MATCH).lower()
    if delete_match not in DELETE_MATCH_MODES:
        issues.append(f"Invalid DELETE_MATCH: {delete_match}")

    if LOG_LEVEL not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
        issues.append(f"Invalid LOG_LEVEL: {LOG_LEVEL}")

    if not DB_PATH:
        issues.append("DB_PATH must not be empty")

    return issues
