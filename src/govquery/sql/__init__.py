"""Local SQL validation and formatting."""

from govquery.sql.validator import (
    STATEMENT_KEYWORDS,
    SQLValidator,
    format_sql,
    parse_sql,
    validate_sql,
)

__all__ = [
    "STATEMENT_KEYWORDS",
    "SQLValidator",
    "parse_sql",
    "format_sql",
    "validate_sql",
]
