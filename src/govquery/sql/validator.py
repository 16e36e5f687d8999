"""Heuristic SQL pre-check for generated queries.

This is a cheap pre-filter, not a parser. It checks that a statement:
- Is not empty
- Starts with a recognized SQL keyword
- Has balanced parentheses
- Has a FROM clause when it is a SELECT

Statements that pass are formatted and given a shallow clause breakdown.
Many invalid statements pass these checks; the backend remains the authority
on whether SQL actually runs. Rejections are returned as data, never raised.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

from govquery.core.types import ShallowAST, SQLErrorKind, SQLParseResult

# Single-word keywords a statement may start with
STATEMENT_KEYWORDS = frozenset(
    {
        "SELECT", "INSERT", "UPDATE", "DELETE", "CREATE", "DROP", "ALTER", "WITH",
        "FROM", "WHERE", "HAVING", "LIMIT", "INDEX", "JOIN", "UNION", "INTERSECT",
        "EXCEPT", "AS", "ON", "AND", "OR", "NOT", "IN", "EXISTS", "BETWEEN", "LIKE",
        "COUNT", "SUM", "AVG", "MIN", "MAX", "DISTINCT", "ALL",
    }
)  # fmt: skip

# Comments, quoted literals and identifiers, masked so formatting never
# touches them. A bare NUL is masked too, so every placeholder in the masked
# text is one of ours.
_LITERAL_RE = re.compile(
    r"--[^\n]*|/\*[\s\S]*?\*/|'(?:[^']|'')*'|\"(?:[^\"]|\"\")*\"|\x00"
)
_PLACEHOLDER_RE = re.compile(r"\x00(\d+)\x00")
_LINE_END_RE = re.compile(r"\x00(\d+)\x00 ")

_CLAUSE_RE = re.compile(
    r"(?:^|\s+)(SELECT|FROM|WHERE|GROUP\s+BY|ORDER\s+BY|HAVING|LIMIT)\s+",
    re.IGNORECASE,
)
_JOIN_RE = re.compile(
    r"\s+((?:(?:LEFT|RIGHT|FULL)(?:\s+OUTER)?|INNER|CROSS|OUTER)\s+JOIN|JOIN)\s+",
    re.IGNORECASE,
)
_BOOLEAN_RE = re.compile(r"\s+(AND|OR)\s+", re.IGNORECASE)

_COLUMNS_RE = re.compile(r"\bSELECT\s+(.*?)\s+FROM\b", re.IGNORECASE)
_FROM_RE = re.compile(r"\bFROM\s+([^\s,;()]+)", re.IGNORECASE)
_WHERE_RE = re.compile(
    r"\bWHERE\s+(.*?)(?=\s+(?:GROUP\s+BY|ORDER\s+BY|HAVING|LIMIT)\b|$)", re.IGNORECASE
)
_GROUP_BY_RE = re.compile(
    r"\bGROUP\s+BY\s+(.*?)(?=\s+(?:ORDER\s+BY|HAVING|LIMIT)\b|$)", re.IGNORECASE
)
_ORDER_BY_RE = re.compile(r"\bORDER\s+BY\s+(.*?)(?=\s+LIMIT\b|$)", re.IGNORECASE)
_LIMIT_RE = re.compile(r"\bLIMIT\s+(\d+)", re.IGNORECASE)


def _mask_literals(sql: str) -> tuple[str, list[str]]:
    literals: list[str] = []

    def _store(match: re.Match[str]) -> str:
        literals.append(match.group(0))
        return f"\x00{len(literals) - 1}\x00"

    return _LITERAL_RE.sub(_store, sql), literals


def _unmask_literals(text: str, literals: list[str]) -> str:
    return _PLACEHOLDER_RE.sub(lambda m: literals[int(m.group(1))], text)


def _is_comment(literal: str) -> bool:
    return literal.startswith(("--", "/*"))


def _end_line_comments(text: str, literals: list[str]) -> str:
    """Restore the line break that terminates each ``--`` comment."""

    def _break(match: re.Match[str]) -> str:
        separator = "\n" if literals[int(match.group(1))].startswith("--") else " "
        return f"\x00{match.group(1)}\x00{separator}"

    return _LINE_END_RE.sub(_break, text)


def _drop_comments(text: str, literals: list[str]) -> str:
    return _PLACEHOLDER_RE.sub(
        lambda m: " " if _is_comment(literals[int(m.group(1))]) else m.group(0), text
    )


def _keyword(match: re.Match[str]) -> str:
    """Uppercase a matched keyword and collapse inner whitespace."""
    return " ".join(match.group(1).upper().split())


def _split_top_level(text: str) -> list[str]:
    """Split on commas that are not nested inside parentheses."""
    parts: list[str] = []
    depth = 0
    current: list[str] = []
    for ch in text:
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth = max(depth - 1, 0)
        if ch == "," and depth == 0:
            parts.append("".join(current))
            current = []
            continue
        current.append(ch)
    parts.append("".join(current))
    return [p.strip() for p in parts if p.strip()]


def _break_commas(text: str) -> str:
    """Put each top-level list item on its own indented line."""
    out: list[str] = []
    depth = 0
    skip_space = False
    for ch in text:
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth = max(depth - 1, 0)
        if ch == ",":
            while out and out[-1] == " ":
                out.pop()
            out.append(",\n  " if depth == 0 else ", ")
            skip_space = True
            continue
        if ch == " " and skip_space:
            continue
        skip_space = False
        out.append(ch)
    return "".join(out)


def _normalize(sql: str) -> str:
    return re.sub(r"\s+", " ", sql).strip()


class SQLValidator:
    """Validates and formats SQL text locally, without a network round trip.

    Example:
        result = SQLValidator().parse("SELECT a, b FROM t LIMIT 3")
        result.ast.from_  # "t"
    """

    def __init__(self, keywords: Iterable[str] | None = None) -> None:
        """Initialize the validator.

        Args:
            keywords: Accepted leading keywords (defaults to STATEMENT_KEYWORDS)
        """
        self._keywords = (
            frozenset(k.upper() for k in keywords) if keywords else STATEMENT_KEYWORDS
        )

    def parse(self, sql: str) -> SQLParseResult:
        """Run the shape checks and, on acceptance, format and extract clauses.

        Args:
            sql: SQL text to check

        Returns:
            SQLParseResult; ``valid=False`` carries ``error`` and ``error_kind``
        """
        trimmed = (sql or "").strip()

        if not trimmed:
            return SQLParseResult(
                valid=False,
                error="Empty SQL query",
                error_kind=SQLErrorKind.EMPTY_INPUT,
            )

        first_word = trimmed.split()[0].upper()
        if first_word not in self._keywords:
            return SQLParseResult(
                valid=False,
                error=f"Invalid SQL statement. Must start with a valid keyword, got: {first_word}",
                error_kind=SQLErrorKind.INVALID_KEYWORD,
            )

        if trimmed.count("(") != trimmed.count(")"):
            return SQLParseResult(
                valid=False,
                error="Mismatched parentheses",
                error_kind=SQLErrorKind.UNBALANCED_PARENTHESES,
            )

        if first_word == "SELECT" and "FROM" not in trimmed.upper():
            return SQLParseResult(
                valid=False,
                error="SELECT statement must include FROM clause",
                error_kind=SQLErrorKind.MISSING_REQUIRED_CLAUSE,
            )

        ast = self.extract(trimmed)
        return SQLParseResult(
            valid=True,
            formatted_sql=self.format(trimmed),
            ast=ast,
            warnings=self._check_warnings(trimmed, ast),
        )

    def format(self, sql: str) -> str:
        """Normalize whitespace and break lines before major clauses.

        Purely cosmetic: quoted literals and comments are left untouched, a
        ``--`` comment still ends its line, and formatting already formatted
        output returns it unchanged.
        """
        masked, literals = _mask_literals(sql)
        text = _end_line_comments(_normalize(masked), literals)
        text = _break_commas(text)
        text = _CLAUSE_RE.sub(lambda m: f"\n{_keyword(m)} ", text)
        text = _JOIN_RE.sub(lambda m: f"\n{_keyword(m)} ", text)
        text = _BOOLEAN_RE.sub(lambda m: f"\n  {_keyword(m)} ", text)
        return _unmask_literals(text.strip(), literals)

    def extract(self, sql: str) -> ShallowAST:
        """Locate clause boundaries; absent clauses are None or empty."""
        masked, literals = _mask_literals(sql)
        text = _normalize(_drop_comments(masked, literals)).rstrip(";").rstrip()

        def clause(pattern: re.Pattern[str]) -> str | None:
            match = pattern.search(text)
            if not match:
                return None
            return _unmask_literals(match.group(1).strip(), literals) or None

        columns_match = _COLUMNS_RE.search(text)
        columns = (
            [_unmask_literals(c, literals) for c in _split_top_level(columns_match.group(1))]
            if columns_match
            else []
        )

        return ShallowAST(
            statement_type=text.split()[0].upper(),
            columns=columns,
            from_=clause(_FROM_RE),
            where=clause(_WHERE_RE),
            group_by=clause(_GROUP_BY_RE),
            order_by=clause(_ORDER_BY_RE),
            limit=clause(_LIMIT_RE),
        )

    def _check_warnings(self, sql: str, ast: ShallowAST) -> list[str]:
        """Non-fatal hints about accepted SELECT statements."""
        if ast.statement_type != "SELECT":
            return []

        warnings = []
        if re.search(r"\bSELECT\s+\*", sql, re.IGNORECASE):
            warnings.append(
                "Using SELECT * may return more data than needed. "
                "Consider selecting specific columns."
            )
        if ast.limit is None:
            warnings.append(
                "No LIMIT clause found. Consider adding one to prevent returning too many rows."
            )
        return warnings


_default_validator = SQLValidator()


def parse_sql(sql: str) -> SQLParseResult:
    """Validate ``sql`` with the default keyword set."""
    return _default_validator.parse(sql)


def format_sql(sql: str) -> str:
    """Format ``sql`` without validating it."""
    return _default_validator.format(sql)


def validate_sql(sql: str) -> tuple[bool, list[str]]:
    """Return ``(valid, errors)`` for callers that only need a verdict."""
    result = _default_validator.parse(sql)
    return result.valid, [result.error] if result.error else []
