"""Rolodex constants: filesystem layout, schema names, and defaults."""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Filesystem layout
# ---------------------------------------------------------------------------

ROLODEX_DIR_NAME = ".rolodex"
CONFIG_FILENAME = "config.toml"
DB_FILENAME = "people.sqlite"

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

TABLE_NAME = "PEOPLE"
COLUMN_ID = "ID"
COLUMN_FIRST_NAME = "FIRST_NAME"
COLUMN_LAST_NAME = "LAST_NAME"

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

DEFAULT_LOG_LEVEL = "INFO"
LOG_LINE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%H:%M:%S"
