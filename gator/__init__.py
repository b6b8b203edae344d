"""
Gator - Command-line RSS Aggregator
===================================

Multi-user RSS aggregation from the terminal: register users, add and follow
feeds, fetch them on an interval and browse the newest posts.

Main Components:
- Database: SQLite with connection pooling and schema management
- Configuration: JSON user config + environment variables with Pydantic validation
- Ingestion: HTTP fetching, feed parsing and publish date normalization
- Processing: one-feed-per-cycle ingestion pipeline and its scheduler
- Commands: name-dispatched handlers with login middleware
"""

__version__ = "1.0.0"
__author__ = "Gator Development Team"
__description__ = "Command-line RSS aggregator"

# Core imports for easy access
from .config.settings import load_settings, GatorSettings
from .database.schema import DatabaseSchema
from .utils.logging import configure_application_logging, get_logger_for_component
from .utils.exceptions import GatorError

__all__ = [
    "load_settings",
    "GatorSettings",
    "DatabaseSchema",
    "configure_application_logging",
    "get_logger_for_component",
    "GatorError",
]
