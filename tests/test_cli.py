import json
from pathlib import Path
from unittest.mock import patch

from click.testing import CliRunner

from api_mock_engine.cli import main

FIXTURES = Path(__file__).parent / "fixtures"


def _first_response_id(output: str) -> str:
    block = output.split("=== Response Body #1 ===\n")[1].split("\n\n")[0]
    return json.loads(block)["id"]


class TestCliParse:
    def test_parse_summary(self):
        result = CliRunner().invoke(main, ["parse", str(FIXTURES / "petstore.yaml")])
        assert result.exit_code == 0
        assert "Title:   Swagger Petstore" in result.output
        assert "Paths:   3" in result.output
        assert "Endpoints:" not in result.output

    def test_parse_verbose(self):
        result = CliRunner().invoke(main, ["parse", str(FIXTURES / "petstore.yaml"), "-o", "verbose"])
        assert result.exit_code == 0
        assert "  GET /pets" in result.output
        assert "    Summary: List all pets" in result.output
        assert "    Parameters: 1" in result.output

    def test_parse_invalid_schema(self):
        result = CliRunner().invoke(main, ["parse", str(FIXTURES / "schema.graphql")])
        assert result.exit_code != 0
        assert "failed to parse schema" in result.output


class TestCliGenerate:
    def _run(self, *args):
        return CliRunner().invoke(main, ["generate", str(FIXTURES / "petstore.yaml"), *args])

    def test_generate_get_with_seed(self):
        result = self._run("--path", "/pets", "--method", "GET", "--seed", "42", "--count", "3")
        assert result.exit_code == 0
        assert "Generating 3 payload(s) for GET /pets (seed: 42)" in result.output
        for i in (1, 2, 3):
            assert f"=== Response Body #{i} ===" in result.output
        assert "Request Body" not in result.output

    def test_generate_post_includes_request_body(self):
        result = self._run("-p", "/pets", "-m", "post", "-s", "1")
        assert result.exit_code == 0
        assert result.output.index("=== Request Body #1 ===") < result.output.index("=== Response Body #1 ===")

    def test_generate_writes_output_file(self, tmp_path):
        out = tmp_path / "fixtures" / "pets.json"
        result = self._run("-p", "/pets", "-m", "GET", "-s", "42", "-c", "2", "-o", str(out))
        assert result.exit_code == 0
        data = json.loads(out.read_text(encoding="utf-8"))
        assert [f["seed"] for f in data] == [42, 43]
        assert all(f["kind"] == "response" for f in data)

    def test_generate_same_seed_same_ids(self):
        first = self._run("-p", "/pets/{petId}", "-m", "GET", "-s", "9")
        second = self._run("-p", "/pets/{petId}", "-m", "GET", "-s", "9")
        assert _first_response_id(first.output) == _first_response_id(second.output)

    def test_unknown_path(self):
        result = self._run("-p", "/owners", "-m", "GET")
        assert result.exit_code != 0
        assert "path /owners not found" in result.output

    def test_unknown_method(self):
        result = self._run("-p", "/pets", "-m", "DELETE")
        assert result.exit_code != 0
        assert "method DELETE not found for path /pets" in result.output

    def test_invalid_count(self):
        result = self._run("-p", "/pets", "-m", "GET", "-c", "0")
        assert result.exit_code != 0
        assert "invalid configuration" in result.output

    def test_path_is_required(self):
        result = CliRunner().invoke(main, ["generate", str(FIXTURES / "petstore.yaml"), "-m", "GET"])
        assert result.exit_code != 0
        assert "--path" in result.output


class TestCliMock:
    @patch("api_mock_engine.cli.configure_logging")
    @patch("api_mock_engine.cli.run_server")
    def test_mock_starts_server(self, mock_run, mock_logging):
        result = CliRunner().invoke(main, ["mock", str(FIXTURES / "petstore.yaml"), "-p", "9123", "--seed", "5"])
        assert result.exit_code == 0
        schema, config = mock_run.call_args.args
        assert schema.title == "Swagger Petstore"
        assert config.port == 9123
        assert config.seed == 5
        mock_logging.assert_called_once_with("INFO")

    @patch("api_mock_engine.cli.run_server")
    def test_mock_invalid_port(self, mock_run):
        result = CliRunner().invoke(main, ["mock", str(FIXTURES / "petstore.yaml"), "-p", "0"])
        assert result.exit_code != 0
        mock_run.assert_not_called()

    def test_mock_missing_file(self, tmp_path):
        result = CliRunner().invoke(main, ["mock", str(tmp_path / "missing.yaml")])
        assert result.exit_code != 0


class TestVersion:
    def test_version(self):
        result = CliRunner().invoke(main, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output
