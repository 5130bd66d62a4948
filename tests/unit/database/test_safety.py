"""Unit tests for the statement safety policy."""

import pytest

from dbgateway.core.exceptions import ErrorCodes, ReadOnlyViolationError
from dbgateway.database.models import DialectId
from dbgateway.database.safety import (
    StatementSafetyPolicy,
    allowed_keywords,
    split_statements,
    strip_comments_and_literals,
)

ALL_DIALECTS = list(DialectId)


class TestAllowedKeywords:
    def test_base_keywords_everywhere(self):
        for dialect in ALL_DIALECTS:
            assert {"select", "with", "explain", "show"} <= allowed_keywords(dialect)

    def test_dialect_extras(self):
        assert "describe" in allowed_keywords(DialectId.MYSQL)
        assert "desc" in allowed_keywords(DialectId.MARIADB)
        assert "pragma" in allowed_keywords(DialectId.SQLITE)
        assert "showplan" in allowed_keywords(DialectId.SQLSERVER)
        assert "pragma" not in allowed_keywords(DialectId.POSTGRES)

    def test_readonly_drops_analyze(self):
        assert "analyze" in allowed_keywords(DialectId.POSTGRES)
        assert "analyze" not in allowed_keywords(DialectId.POSTGRES, readonly=True)

    def test_accepts_plain_string_dialect(self):
        assert allowed_keywords("sqlite") == allowed_keywords(DialectId.SQLITE)


class TestStatementSafetyPolicy:
    """Test statement acceptance and rejection."""

    @pytest.mark.parametrize("dialect", ALL_DIALECTS)
    @pytest.mark.parametrize("readonly", [False, True])
    def test_select_allowed_drop_rejected(self, dialect, readonly):
        policy = StatementSafetyPolicy(dialect, readonly=readonly)

        assert policy.is_allowed("SELECT 1")
        assert policy.is_allowed("  Select 1")
        assert not policy.is_allowed("DROP TABLE t")

    @pytest.mark.parametrize(
        "statement",
        [
            "select 1;",
            "SELECT 1 ;  ",
            "\n\tWITH x AS (SELECT 1) SELECT * FROM x",
            "-- leading comment\nSELECT 1",
            "/* block */ SELECT 1",
            "SELECT ';DROP TABLE t' AS s",
            "SELECT \"a;b\" FROM t",
            "SELECT 1 -- trailing; comment",
            "EXPLAIN SELECT * FROM t",
            "SHOW TABLES",
        ],
    )
    def test_allowed(self, statement):
        assert StatementSafetyPolicy(DialectId.POSTGRES).is_allowed(statement)

    @pytest.mark.parametrize(
        "statement, fragment",
        [
            ("", "Empty"),
            ("   ", "Empty"),
            ("-- only a comment", "keyword"),
            ("(SELECT 1)", "keyword"),
            ("DELETE FROM t", "'DELETE'"),
            ("/* SELECT */ DELETE FROM t", "'DELETE'"),
            ("SELECT 1; DROP TABLE t", "Multiple"),
            ("SELECT 1;/* x */DELETE FROM t", "Multiple"),
        ],
    )
    def test_rejected_with_reason(self, statement, fragment):
        result = StatementSafetyPolicy(DialectId.POSTGRES).validate(statement)

        assert not result.is_valid
        assert fragment in result.message

    def test_rejection_lists_allowed_keywords(self):
        result = StatementSafetyPolicy(DialectId.SQLITE).validate("INSERT INTO t VALUES (1)")
        assert "PRAGMA" in result.message
        assert "SELECT" in result.message

    def test_non_string_rejected(self):
        assert not StatementSafetyPolicy(DialectId.SQLITE).validate(None).is_valid

    def test_backslash_escape_fails_closed(self):
        """A backslash-escaped quote is not understood and the rest is treated as literal."""
        policy = StatementSafetyPolicy(DialectId.MYSQL)
        result = policy.validate("SELECT 'it\\'s'; DROP TABLE t; SELECT '")

        assert not result.is_valid
        assert "Backslash" in result.message
        assert policy.first_keyword("SELECT 'a'") == "select"

    @pytest.mark.parametrize("statement", ["SELECT $$a; DROP TABLE t$$", "SELECT $q$x$q$"])
    def test_dollar_quoting_fails_closed(self, statement):
        assert not StatementSafetyPolicy(DialectId.POSTGRES).is_allowed(statement)

    def test_unterminated_literal_hides_nothing(self):
        policy = StatementSafetyPolicy(DialectId.POSTGRES)
        assert policy.is_allowed("SELECT 'abc")

    @pytest.mark.parametrize(
        "statement",
        [
            "EXPLAIN ANALYZE SELECT 1",
            "explain  analyse select 1",
            "EXPLAIN (ANALYZE, BUFFERS) SELECT 1",
            "ANALYZE t",
        ],
    )
    def test_readonly_rejects_analyze(self, statement):
        assert StatementSafetyPolicy(DialectId.POSTGRES).is_allowed(statement)
        assert not StatementSafetyPolicy(DialectId.POSTGRES, readonly=True).is_allowed(statement)

    @pytest.mark.parametrize("dialect", ALL_DIALECTS)
    @pytest.mark.parametrize(
        "statement",
        [
            "EXPLAIN ANALYZE DELETE FROM t",
            "explain analyse update t set a = 1",
            "EXPLAIN (ANALYZE, BUFFERS) INSERT INTO t VALUES (1)",
            "EXPLAIN ANALYZE VERBOSE DROP TABLE t",
            "EXPLAIN ANALYZE",
        ],
    )
    def test_explain_analyze_rejects_writes(self, dialect, statement):
        result = StatementSafetyPolicy(dialect).validate(statement)

        assert not result.is_valid
        assert "only queries" in result.message

    @pytest.mark.parametrize(
        "statement",
        [
            "EXPLAIN ANALYZE VERBOSE SELECT 1",
            "EXPLAIN ANALYZE WITH x AS (SELECT 1) SELECT * FROM x",
            "EXPLAIN ANALYZE TABLE t",
            "EXPLAIN DELETE FROM t",
        ],
    )
    def test_explain_accepts_queries_and_plain_plans(self, statement):
        assert StatementSafetyPolicy(DialectId.POSTGRES).is_allowed(statement)

    def test_first_keyword_without_whitespace(self):
        policy = StatementSafetyPolicy(DialectId.POSTGRES)

        assert policy.first_keyword("select*from t") == "select"
        assert policy.is_allowed("select*from t")
        assert not policy.is_allowed("delete/**/from t")

    def test_readonly_rejects_pragma_assignment(self):
        policy = StatementSafetyPolicy(DialectId.SQLITE, readonly=True)

        assert policy.is_allowed("PRAGMA table_info(t)")
        assert not policy.is_allowed("PRAGMA journal_mode = WAL")
        assert StatementSafetyPolicy(DialectId.SQLITE).is_allowed("PRAGMA journal_mode = WAL")

    def test_with_readonly(self):
        policy = StatementSafetyPolicy(DialectId.MYSQL)

        assert policy.with_readonly(False) is policy
        strict = policy.with_readonly()
        assert strict.readonly
        assert strict.dialect is DialectId.MYSQL

    def test_check_raises(self):
        policy = StatementSafetyPolicy(DialectId.ORACLE, readonly=True)

        policy.check("SELECT 1 FROM dual")

        with pytest.raises(ReadOnlyViolationError) as exc_info:
            policy.check("TRUNCATE TABLE t")

        assert exc_info.value.code == ErrorCodes.READONLY_VIOLATION
        assert exc_info.value.context == {"dialect": "oracle", "readonly": True}

    def test_repr(self):
        assert "sqlserver" in repr(StatementSafetyPolicy(DialectId.SQLSERVER))


class TestLexicalHelpers:
    def test_strip_comments_and_literals(self):
        stripped = strip_comments_and_literals("SELECT 'x;y', `c` -- note\nFROM t /* z */")

        assert "x;y" not in stripped
        assert "note" not in stripped
        assert "z" not in stripped
        assert "FROM t" in stripped

    def test_doubled_quote_escape(self):
        assert strip_comments_and_literals("SELECT 'it''s'") == "SELECT ''"

    def test_split_statements(self):
        script = """
            -- schema
            CREATE TABLE a(id INT);
            INSERT INTO a VALUES (1); /* seed */
            INSERT INTO a VALUES (';');
            ;
        """

        assert split_statements(script) == [
            "-- schema\n            CREATE TABLE a(id INT)",
            "INSERT INTO a VALUES (1)",
            "/* seed */\n            INSERT INTO a VALUES (';')",
        ]

    def test_split_single_statement_without_separator(self):
        assert split_statements("SELECT 1") == ["SELECT 1"]

    def test_split_empty(self):
        assert split_statements("  -- nothing\n") == []
