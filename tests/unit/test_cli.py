"""CLI command tests for govquery."""

import json

import httpx
import pytest
from typer.testing import CliRunner

from govquery import ClientConfig, GovQueryClient, TTLCache
from govquery.cli.context import CLIContext
from govquery.cli.main import app

runner = CliRunner()


@pytest.fixture
def fake_backend(backend, monkeypatch):
    """Route every CLI-created client to the fake backend, without backoff waits."""

    async def no_sleep(delay: float) -> None:
        return None

    def make_client(self: CLIContext) -> GovQueryClient:
        return GovQueryClient(
            ClientConfig(base_url="http://govquery.test", retry_attempts=2),
            cache=TTLCache(),
            http_client=httpx.AsyncClient(transport=httpx.MockTransport(backend.handler)),
            sleep=no_sleep,
        )

    monkeypatch.setattr(CLIContext, "make_client", make_client)
    return backend


class TestVersionCommand:
    """Test the version command."""

    def test_version_output(self) -> None:
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert "govquery v" in result.stdout


class TestGlobalOptions:
    """Global options feed the client configuration."""

    def test_bad_env_number(self, monkeypatch) -> None:
        monkeypatch.setenv("GOVQUERY_RETRY_ATTEMPTS", "many")
        result = runner.invoke(app, ["--json", "sql", "format", "SELECT a FROM t"])
        assert result.exit_code == 1
        assert "GOVQUERY_RETRY_ATTEMPTS" in result.stdout

    def test_out_of_range_retries(self) -> None:
        result = runner.invoke(
            app, ["--json", "--retries", "0", "sql", "format", "SELECT a FROM t"]
        )
        assert result.exit_code == 1
        data = json.loads(result.stdout)
        assert data["error"] == "ConfigurationError"
        assert data["context"]["fields"] == ["retry_attempts"]


class TestHealthCommand:
    """Test the health command."""

    def test_healthy(self, fake_backend, healthy_payload) -> None:
        fake_backend.add("GET", "/", (200, healthy_payload))
        result = runner.invoke(app, ["--json", "health"])
        assert result.exit_code == 0
        assert json.loads(result.stdout)["status"] == "healthy"

    def test_unhealthy_exit_code(self, fake_backend) -> None:
        fake_backend.add("GET", "/", httpx.ConnectError("Connection refused"))
        result = runner.invoke(app, ["health"])
        assert result.exit_code == 1
        assert "unhealthy" in result.stdout


class TestSchemaCommands:
    """Test schema discovery commands."""

    def test_schema_list_json(self, fake_backend, schemas_payload) -> None:
        fake_backend.add("GET", "/schemas", (200, schemas_payload))
        result = runner.invoke(app, ["--json", "schema", "list"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert [s["table_code"] for s in data] == ["B01001", "B19013"]

    def test_schema_list_table(self, fake_backend, schemas_payload) -> None:
        fake_backend.add("GET", "/schemas", (200, schemas_payload))
        result = runner.invoke(app, ["schema", "list"])
        assert result.exit_code == 0
        assert "B01001" in result.stdout

    def test_schema_list_unreachable(self, fake_backend) -> None:
        fake_backend.add("GET", "/schemas", httpx.ConnectError("Connection refused"))
        result = runner.invoke(app, ["schema", "list"])
        assert result.exit_code == 1
        assert "Backend unreachable" in result.stdout
        assert fake_backend.count("GET", "/schemas") == 2

    def test_schema_show(self, fake_backend, schemas_payload) -> None:
        fake_backend.add("GET", "/schema/B01001", (200, schemas_payload[0]))
        result = runner.invoke(app, ["schema", "show", "B01001"])
        assert result.exit_code == 0
        assert "Sex by Age" in result.stdout
        assert "total_population" in result.stdout

    def test_schema_show_not_found(self, fake_backend) -> None:
        result = runner.invoke(app, ["--json", "schema", "show", "NOPE"])
        assert result.exit_code == 1
        data = json.loads(result.stdout)
        assert data["error"] == "HttpStatusError"
        assert data["context"]["status_code"] == 404


class TestQueryCommands:
    """Test conversion and execution commands."""

    def test_convert(self, fake_backend) -> None:
        fake_backend.add("POST", "/", (200, {"sql_query": "SELECT a FROM t", "confidence": 0.9}))
        result = runner.invoke(
            app, ["--json", "query", "convert", "Population of Ohio", "-t", "B01001"]
        )
        assert result.exit_code == 0
        assert json.loads(result.stdout)["sql_query"] == "SELECT a FROM t"
        body = json.loads(fake_backend.calls[0].content)
        assert body == {"query": "Population of Ohio", "table_codes": ["B01001"]}

    def test_convert_simple(self, fake_backend) -> None:
        fake_backend.add("POST", "/simple", (200, {"sql_query": "SELECT a FROM t"}))
        result = runner.invoke(app, ["query", "convert", "q", "--simple"])
        assert result.exit_code == 0
        assert fake_backend.count("POST", "/simple") == 1

    def test_execute_json(self, fake_backend) -> None:
        fake_backend.add(
            "POST",
            "/execute",
            (200, {"success": True, "row_count": 1, "columns": ["n"], "rows": [[3]]}),
        )
        result = runner.invoke(
            app, ["--json", "query", "execute", "SELECT n FROM t LIMIT 1", "--max-rows", "1"]
        )
        assert result.exit_code == 0
        assert json.loads(result.stdout)["rows"] == [[3]]

    def test_execute_table(self, fake_backend) -> None:
        fake_backend.add(
            "POST",
            "/execute",
            (
                200,
                {
                    "success": True,
                    "row_count": 1,
                    "columns": ["state"],
                    "rows": [["Ohio"]],
                    "execution_time_ms": 1.5,
                },
            ),
        )
        result = runner.invoke(app, ["query", "execute", "SELECT state FROM t"])
        assert result.exit_code == 0
        assert "Ohio" in result.stdout
        assert "1.50ms" in result.stdout

    def test_execute_rejected_locally(self, fake_backend) -> None:
        result = runner.invoke(app, ["--json", "query", "execute", "SELECT a"])
        assert result.exit_code == 1
        assert json.loads(result.stdout)["error"] == "SQLValidationError"
        assert fake_backend.calls == []

    def test_execute_backend_failure(self, fake_backend) -> None:
        fake_backend.add("POST", "/execute", (200, {"success": False, "error": "no such table"}))
        result = runner.invoke(app, ["query", "execute", "SELECT a FROM nope"])
        assert result.exit_code == 1
        assert "no such table" in result.stdout

    def test_execute_needs_sql(self) -> None:
        result = runner.invoke(app, ["--json", "query", "execute"])
        assert result.exit_code == 1


class TestSqlCommands:
    """Test local SQL validation and formatting."""

    def test_validate_valid(self) -> None:
        result = runner.invoke(app, ["--json", "sql", "validate", "SELECT a, b FROM t LIMIT 3"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["valid"] is True
        assert data["ast"]["columns"] == ["a", "b"]

    def test_validate_invalid(self) -> None:
        result = runner.invoke(app, ["sql", "validate", "FOO BAR"])
        assert result.exit_code == 1
        assert "FOO" in result.stdout

    def test_validate_from_file(self, tmp_path) -> None:
        sql_file = tmp_path / "query.sql"
        sql_file.write_text("SELECT a FROM t LIMIT 1")
        result = runner.invoke(app, ["sql", "validate", "--file", str(sql_file)])
        assert result.exit_code == 0
        assert "valid" in result.stdout

    def test_validate_remote(self, fake_backend) -> None:
        fake_backend.add("POST", "/parse-sql", (200, {"valid": False, "error": "syntax"}))
        result = runner.invoke(app, ["--json", "sql", "validate", "SELECT a FROM t", "--remote"])
        assert result.exit_code == 1
        assert json.loads(result.stdout)["error"] == "syntax"

    def test_format(self) -> None:
        result = runner.invoke(app, ["--json", "sql", "format", "select a, b from t limit 3"])
        assert result.exit_code == 0
        assert json.loads(result.stdout)["sql"] == "SELECT a,\n  b\nFROM t\nLIMIT 3"


class TestDeployCommand:
    """Test the deploy command."""

    def test_deploy(self, fake_backend) -> None:
        fake_backend.add(
            "POST", "/deploy", (200, {"status": "deployed", "message": "App deployed"})
        )
        result = runner.invoke(app, ["--json", "deploy"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["success"] is True
        assert data["status"] == "deployed"
