"""Async database operations for the climate monitor.

This package provides async database operations using aiosqlite for non-blocking
database access throughout the application.

See connection.py for details on connection patterns (persistent vs pooled).
"""

from climate.lib.db.connection import ConnectionPool as ConnectionPool
from climate.lib.db.connection import Database as Database
from climate.lib.db.connection import close_db as close_db
from climate.lib.db.connection import create_schema as create_schema
from climate.lib.db.connection import get_db as get_db
from climate.lib.db.connection import init_db as init_db
from climate.lib.db.queries import get_latest_reading as get_latest_reading
from climate.lib.db.queries import get_readings_in_range as get_readings_in_range
from climate.lib.db.queries import get_readings_page as get_readings_page
from climate.lib.db.queries import period_bounds as period_bounds
from climate.lib.db.store import insert_reading as insert_reading
from climate.lib.db.types import InsertOutcome as InsertOutcome
from climate.lib.db.types import ReadingRow as ReadingRow
from climate.lib.db.types import ReadingsPage as ReadingsPage
from climate.lib.db.types import SQLParams as SQLParams
