"""Tests for the command line interface."""

import json

import pytest
from typer.testing import CliRunner

from tabular_uploads.cli.common import setup_logging
from tabular_uploads.cli.main import app
from tabular_uploads.core.config import Settings, get_settings
from tabular_uploads.core.logging import configure_logging, get_logger

runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Point the registry at a temporary database and reset cached settings."""
    monkeypatch.setenv("TABULAR_UPLOADS_DATABASE_URL", f"sqlite:///{tmp_path / 'registry.db'}")
    monkeypatch.setenv("TABULAR_UPLOADS_NUMBER_SEPARATORS", ".,")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
    configure_logging()


class TestDetect:
    """Tests for the detect command."""

    def test_json(self, write_csv):
        path = write_csv("name,qty\nAnn,1\nBob,2\n")
        result = runner.invoke(app, ["detect", str(path), "--json"])
        assert result.exit_code == 0, result.output
        detected = json.loads(result.stdout)
        assert detected["extant_columns"] == {"name": "varchar-255", "qty": "int"}
        assert detected["generated_columns"] == {"_mb_row_id": "auto-incrementing-int-pk"}

    def test_table(self, write_csv):
        path = write_csv("qty\n1.5\n")
        result = runner.invoke(app, ["detect", str(path)])
        assert result.exit_code == 0, result.output
        assert "qty" in result.stdout
        assert "float" in result.stdout

    def test_number_separators_option(self, write_csv):
        path = write_csv('amount\n"1,5"\n')
        result = runner.invoke(app, ["detect", str(path), "--json", "--number-separators", ",."])
        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)["extant_columns"] == {"amount": "float"}

    def test_unknown_number_separators(self, write_csv):
        path = write_csv("a\n1\n")
        result = runner.invoke(app, ["detect", str(path), "--number-separators", "xy"])
        assert result.exit_code == 1
        assert "Unknown number separators" in result.stdout

    def test_missing_file(self, tmp_path):
        result = runner.invoke(app, ["detect", str(tmp_path / "missing.csv")])
        assert result.exit_code != 0


class TestCreateAndAppend:
    """Tests for the create and append commands."""

    def test_create_then_append(self, write_csv, tmp_path):
        db = str(tmp_path / "uploads.duckdb")
        orders = write_csv("name,qty\nAnn,1\nBob,2\n", filename="orders.csv")

        result = runner.invoke(app, ["create", str(orders), "--db", db, "--json"])
        assert result.exit_code == 0, result.output
        created = json.loads(result.stdout)
        table_name = created["table_name"]
        assert table_name.startswith("orders_")
        assert created["stats"]["num_rows"] == 2

        more = write_csv("qty,name\n3.5,Cy\n", filename="more.csv")
        result = runner.invoke(app, ["append", str(more), table_name, "--db", db, "--json"])
        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)["num_rows"] == 1

    def test_create_summary(self, write_csv, tmp_path):
        orders = write_csv("name,qty\nAnn,1\n", filename="orders.csv")
        result = runner.invoke(app, ["create", str(orders), "--db", str(tmp_path / "u.duckdb")])
        assert result.exit_code == 0, result.output
        assert "Created" in result.stdout
        assert "_mb_row_id" in result.stdout

    def test_append_error_exits_with_message(self, write_csv, tmp_path):
        db = str(tmp_path / "uploads.duckdb")
        path = write_csv("name\nCy\n")
        result = runner.invoke(app, ["append", str(path), "nope", "--db", db])
        assert result.exit_code == 1
        assert "Table not found: nope" in result.stdout

    def test_log_settings_from_environment(self, write_csv, tmp_path, monkeypatch):
        monkeypatch.setenv("TABULAR_UPLOADS_LOG_LEVEL", "INFO")
        monkeypatch.setenv("TABULAR_UPLOADS_LOG_FORMAT", "json")
        get_settings.cache_clear()
        orders = write_csv("name,qty\nAnn,1\n", filename="orders.csv")
        result = runner.invoke(app, ["create", str(orders), "--db", str(tmp_path / "u.duckdb")])
        assert result.exit_code == 0, result.output
        assert '"event": "upload_created"' in result.output


class TestSetupLogging:
    """Tests for CLI logging setup."""

    def test_configured_level_and_format(self, capsys):
        setup_logging(0, Settings(_env_file=None, log_level="INFO", log_format="json"))
        get_logger("test").info("upload_created")
        assert '"event": "upload_created"' in capsys.readouterr().err

    def test_default_level_hides_info(self, capsys):
        setup_logging(0, Settings(_env_file=None, log_format="json"))
        get_logger("test").info("upload_created")
        assert "upload_created" not in capsys.readouterr().err

    def test_verbosity_overrides_configured_level(self, capsys):
        setup_logging(2, Settings(_env_file=None, log_level="ERROR", log_format="json"))
        get_logger("test").debug("upload_rows_inserted")
        assert '"event": "upload_rows_inserted"' in capsys.readouterr().err
