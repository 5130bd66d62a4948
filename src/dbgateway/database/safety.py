# src/dbgateway/database/safety.py
"""Statement safety policy.

A statement is accepted when its first keyword, after leading comments,
belongs to the dialect's allow-list and it does not carry a second statement
after a ``;`` separator. This is a lexical guard, not a parser. Quoting is
scanned conservatively: backslash escapes and dollar quoting are not
understood, so ambiguous input is rejected rather than accepted.

The first keyword is the leading run of letters and underscores, so
``select*from t`` reads as ``select`` even without separating whitespace.

``EXPLAIN ANALYZE`` executes the explained statement, so it is accepted only
when that statement is a query, and never in read-only mode.
"""

import re
from typing import Dict, FrozenSet, Iterator, List, Optional, Tuple

from .models import DialectId, ValidationResult
from ..core.exceptions import ReadOnlyViolationError

BASE_KEYWORDS: FrozenSet[str] = frozenset({"select", "with", "explain", "analyze", "show"})

DIALECT_KEYWORDS: Dict[DialectId, FrozenSet[str]] = {
    DialectId.MYSQL: frozenset({"describe", "desc"}),
    DialectId.MARIADB: frozenset({"describe", "desc"}),
    DialectId.SQLITE: frozenset({"pragma"}),
    DialectId.SQLSERVER: frozenset({"showplan"}),
}

# Keywords that can modify state and are dropped in read-only mode
READONLY_EXCLUDED: FrozenSet[str] = frozenset({"analyze"})

# Statements EXPLAIN ANALYZE may run
EXPLAIN_ANALYZE_TARGETS: FrozenSet[str] = frozenset({"select", "with", "show", "table", "values"})

_FIRST_WORD = re.compile(r"[a-z_]+")
_EXPLAIN_ANALYZE = re.compile(r"^explain\s*(\([^)]*\banaly[sz]e\b[^)]*\)|\s+analy[sz]e\b)")
_EXPLAIN_TARGET = re.compile(r"(?:verbose\s+)?([a-z_]+)")
_PRAGMA_ASSIGNMENT = re.compile(r"^pragma\s+[\w.]+\s*=")
_DOLLAR_QUOTE = re.compile(r"\$[A-Za-z_]*\$")


def allowed_keywords(dialect: DialectId, *, readonly: bool = False) -> FrozenSet[str]:
    """Leading keywords accepted for a dialect."""
    keywords = BASE_KEYWORDS | DIALECT_KEYWORDS.get(DialectId(dialect), frozenset())
    if readonly:
        keywords = keywords - READONLY_EXCLUDED
    return keywords


def _scan(sql: str) -> Iterator[Tuple[str, int, int]]:
    """Yield ``(kind, start, end)`` spans of code, comments and quoted text.

    Unterminated comments and literals run to the end of the input.
    """
    i, n = 0, len(sql)
    code_start = 0
    while i < n:
        ch = sql[i]
        if ch == "-" and sql.startswith("--", i):
            end = sql.find("\n", i)
            end = n if end == -1 else end
            kind = "comment"
        elif ch == "/" and sql.startswith("/*", i):
            end = sql.find("*/", i + 2)
            end = n if end == -1 else end + 2
            kind = "comment"
        elif ch in "'\"`":
            j = i + 1
            while j < n:
                if sql[j] == ch:
                    if j + 1 < n and sql[j + 1] == ch:
                        j += 2
                        continue
                    break
                j += 1
            end = min(j + 1, n)
            kind = "literal"
        else:
            i += 1
            continue

        if code_start < i:
            yield "code", code_start, i
        yield kind, i, end
        i = code_start = end

    if code_start < n:
        yield "code", code_start, n


def _has_ambiguous_quoting(sql: str) -> bool:
    """True when the statement uses quoting the scanner does not model."""
    for kind, start, end in _scan(sql):
        if kind == "literal" and "\\" in sql[start:end]:
            return True
        if kind == "code" and _DOLLAR_QUOTE.search(sql, start, end):
            return True
    return False


def strip_comments_and_literals(sql: str) -> str:
    """Return the statement with comments blanked and quoted text emptied."""
    out = []
    for kind, start, end in _scan(sql):
        if kind == "code":
            out.append(sql[start:end])
        elif kind == "comment":
            out.append(" ")
        else:
            out.append(sql[start] * 2)
    return "".join(out)


def split_statements(sql: str) -> List[str]:
    """Split a script on top-level ``;`` separators.

    Used for initialization scripts on drivers that accept one statement
    per call. Empty statements are dropped.
    """
    statements = []
    current = 0
    for kind, start, end in _scan(sql):
        if kind != "code":
            continue
        position = sql.find(";", start, end)
        while position != -1:
            statements.append(sql[current:position])
            current = position + 1
            position = sql.find(";", current, end)
    statements.append(sql[current:])
    return [s.strip() for s in statements if strip_comments_and_literals(s).strip()]


class StatementSafetyPolicy:
    """Per-dialect allow-list of leading keywords.

    Attributes:
        dialect: Dialect the policy applies to
        readonly: Whether the read-only tightening is active

    Example:
        >>> policy = StatementSafetyPolicy(DialectId.POSTGRES)
        >>> policy.validate("  Select 1").is_valid
        True
        >>> policy.validate("DROP TABLE t").is_valid
        False
    """

    def __init__(self, dialect: DialectId, *, readonly: bool = False) -> None:
        self.dialect = DialectId(dialect)
        self.readonly = readonly
        self._keywords = allowed_keywords(self.dialect, readonly=readonly)

    @property
    def allowed_keywords(self) -> FrozenSet[str]:
        return self._keywords

    def with_readonly(self, readonly: bool = True) -> "StatementSafetyPolicy":
        """Return a policy for the same dialect with the given read-only flag."""
        if readonly == self.readonly:
            return self
        return StatementSafetyPolicy(self.dialect, readonly=readonly)

    def first_keyword(self, statement: str) -> Optional[str]:
        code = strip_comments_and_literals(statement).strip().lower()
        match = _FIRST_WORD.match(code)
        return match.group(0) if match else None

    def validate(self, statement: str) -> ValidationResult:
        """Check a statement against the policy.

        Returns:
            ValidationResult with a message describing any rejection
        """
        if not isinstance(statement, str) or not statement.strip():
            return ValidationResult(False, "Empty statement")

        code = strip_comments_and_literals(statement).strip().lower()
        match = _FIRST_WORD.match(code)
        if match is None:
            return ValidationResult(False, "Statement does not start with a keyword")

        keyword = match.group(0)
        if keyword not in self._keywords:
            return ValidationResult(
                False,
                f"Statement type '{keyword.upper()}' is not allowed. "
                f"Allowed: {', '.join(sorted(k.upper() for k in self._keywords))}",
            )

        if _has_ambiguous_quoting(statement):
            return ValidationResult(
                False, "Backslash escapes and dollar quoting are not supported"
            )

        _, separator, rest = code.partition(";")
        if separator and rest.replace(";", "").strip():
            return ValidationResult(False, "Multiple statements are not allowed")

        if keyword == "explain":
            analyze = _EXPLAIN_ANALYZE.match(code)
            if analyze is not None:
                if self.readonly:
                    return ValidationResult(False, "EXPLAIN ANALYZE is not allowed in read-only mode")
                target = _EXPLAIN_TARGET.match(code[analyze.end():].lstrip())
                if target is None or target.group(1) not in EXPLAIN_ANALYZE_TARGETS:
                    return ValidationResult(
                        False, "EXPLAIN ANALYZE executes its statement; only queries may be analyzed"
                    )

        if self.readonly and keyword == "pragma" and _PRAGMA_ASSIGNMENT.match(code):
            return ValidationResult(False, "PRAGMA assignments are not allowed in read-only mode")

        return ValidationResult(True)

    def is_allowed(self, statement: str) -> bool:
        return self.validate(statement).is_valid

    def check(self, statement: str) -> None:
        """Raise if the statement is rejected.

        Raises:
            ReadOnlyViolationError: If the policy rejects the statement
        """
        result = self.validate(statement)
        if not result.is_valid:
            raise ReadOnlyViolationError(
                result.message or "Statement rejected",
                context={
                    "dialect": self.dialect.value,
                    "readonly": self.readonly,
                },
            )

    def __repr__(self) -> str:
        return f"StatementSafetyPolicy(dialect={self.dialect.value!r}, readonly={self.readonly})"
