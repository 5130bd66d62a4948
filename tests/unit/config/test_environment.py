"""Unit tests for connection string resolution."""

from dbgateway.config.environment import (
    SOURCE_COMMAND_LINE,
    SOURCE_DOTENV,
    SOURCE_ENVIRONMENT,
    ResolvedDSN,
    resolve_dsn,
)


class TestResolveDSN:
    """Resolution order: command line, environment, .env file."""

    def test_command_line_wins(self, temp_dir):
        env_file = temp_dir / ".env"
        env_file.write_text("DSN=sqlite:from_file.db\n")

        resolved = resolve_dsn(
            "sqlite::memory:",
            environ={"DSN": "sqlite:from_env.db"},
            dotenv_path=env_file,
        )

        assert resolved == ResolvedDSN("sqlite::memory:", SOURCE_COMMAND_LINE)

    def test_environment_before_dotenv(self, temp_dir):
        env_file = temp_dir / ".env"
        env_file.write_text("DSN=sqlite:from_file.db\n")

        resolved = resolve_dsn(environ={"DSN": "sqlite:from_env.db"}, dotenv_path=env_file)

        assert resolved.dsn == "sqlite:from_env.db"
        assert resolved.source == SOURCE_ENVIRONMENT

    def test_dotenv_file(self, temp_dir):
        env_file = temp_dir / ".env"
        env_file.write_text('# local settings\nDSN="postgres://u:p@localhost/db"\nOTHER=1\n')

        resolved = resolve_dsn(environ={}, dotenv_path=env_file)

        assert resolved == ResolvedDSN("postgres://u:p@localhost/db", SOURCE_DOTENV)

    def test_dotenv_in_working_directory(self, temp_dir, monkeypatch):
        (temp_dir / ".env").write_text("DSN=sqlite:cwd.db\n")
        monkeypatch.chdir(temp_dir)

        resolved = resolve_dsn(environ={})

        assert resolved.dsn == "sqlite:cwd.db"

    def test_nothing_found(self, temp_dir):
        assert resolve_dsn(environ={}, dotenv_path=temp_dir / ".env") is None

    def test_empty_values_are_skipped(self, temp_dir):
        env_file = temp_dir / ".env"
        env_file.write_text("DSN=\n")

        assert resolve_dsn("", environ={"DSN": ""}, dotenv_path=env_file) is None
