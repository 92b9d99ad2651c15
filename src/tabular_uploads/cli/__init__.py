"""CLI for tabular uploads.

Provides commands for detecting schemas, creating tables and appending to them.

Usage:
    tabular-uploads detect orders.csv
    tabular-uploads create orders.csv --db uploads.duckdb
    tabular-uploads append more_orders.csv orders_20240101120000 --db uploads.duckdb

Environment:
    Loads .env file from current directory if present.
    Settings are read from TABULAR_UPLOADS_* variables.
"""

from tabular_uploads.cli.main import app, main

__all__ = ["app", "main"]
