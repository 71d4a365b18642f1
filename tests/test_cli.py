import json
from pathlib import Path

from click.testing import CliRunner

from collection_bridge.cli import main

FIXTURES = Path(__file__).parent / "fixtures"


class TestCliDetect:
    def test_detect_postman(self):
        runner = CliRunner()
        result = runner.invoke(main, ["detect", str(FIXTURES / "sample.postman.json")])
        assert result.exit_code == 0
        assert "postman" in result.output

    def test_detect_insomnia_yaml(self):
        runner = CliRunner()
        result = runner.invoke(main, ["detect", str(FIXTURES / "sample.insomnia.yaml")])
        assert result.exit_code == 0
        assert "insomnia" in result.output

    def test_detect_unknown(self, tmp_path):
        doc = tmp_path / "unknown.json"
        doc.write_text('{"foo": 1}')
        runner = CliRunner()
        result = runner.invoke(main, ["detect", str(doc)])
        assert result.exit_code == 1
        assert "Unrecognized collection format" in result.output

    def test_verbose_flag(self):
        runner = CliRunner()
        result = runner.invoke(main, ["-v", "detect", str(FIXTURES / "sample.thunderclient.json")])
        assert result.exit_code == 0
        assert "thunderclient" in result.output


class TestCliConvert:
    def test_postman_to_insomnia_file(self, tmp_path):
        output_file = tmp_path / "out" / "insomnia.json"
        runner = CliRunner()
        result = runner.invoke(main, [
            "convert", str(FIXTURES / "sample.postman.json"),
            "--to", "insomnia",
            "-o", str(output_file),
        ])

        assert result.exit_code == 0
        assert output_file.exists()
        data = json.loads(output_file.read_text(encoding="utf-8"))
        assert data["_type"] == "export"
        assert data["__export_format"] == 4

    def test_yaml_to_postman(self, tmp_path):
        output_file = tmp_path / "postman.json"
        runner = CliRunner()
        result = runner.invoke(main, [
            "convert", str(FIXTURES / "sample.insomnia.yaml"),
            "--to", "postman",
            "-o", str(output_file),
        ])

        assert result.exit_code == 0
        data = json.loads(output_file.read_text(encoding="utf-8"))
        assert data["info"]["name"] == "YAML Workspace"
        assert data["item"][0]["name"] == "Ping"

    def test_env_file_to_json(self, tmp_path):
        output_file = tmp_path / "vars.json"
        runner = CliRunner()
        result = runner.invoke(main, [
            "convert", str(FIXTURES / "sample.env"),
            "--to", "json",
            "-o", str(output_file),
        ])

        assert result.exit_code == 0
        data = json.loads(output_file.read_text(encoding="utf-8"))
        assert data["GREETING"] == "hello world"

    def test_indent_option(self, tmp_path):
        output_file = tmp_path / "tc.json"
        runner = CliRunner()
        result = runner.invoke(main, [
            "convert", str(FIXTURES / "sample.postman.json"),
            "--to", "thunderclient",
            "--indent", "4",
            "-o", str(output_file),
        ])

        assert result.exit_code == 0
        assert '\n    "colName"' in output_file.read_text(encoding="utf-8")

    def test_invalid_json(self, tmp_path):
        doc = tmp_path / "broken.json"
        doc.write_text("{not json")
        runner = CliRunner()
        result = runner.invoke(main, ["convert", str(doc), "--to", "postman"])
        assert result.exit_code == 1
        assert "Cannot decode broken.json" in result.output

    def test_unknown_target_rejected(self):
        runner = CliRunner()
        result = runner.invoke(main, [
            "convert", str(FIXTURES / "sample.postman.json"),
            "--to", "har",
        ])
        assert result.exit_code == 2


class TestCliFind:
    def test_find_prints_paths(self):
        runner = CliRunner()
        result = runner.invoke(main, ["find", str(FIXTURES / "sample.postman.json"), "token"])
        assert result.exit_code == 0
        assert "Variables / token [key]: token" in result.output
        assert "Auth / Me [header.Authorization]: Bearer {{token}}" in result.output

    def test_find_scope(self):
        runner = CliRunner()
        result = runner.invoke(main, [
            "find", str(FIXTURES / "sample.postman.json"), "token",
            "--scope", "variables",
        ])
        assert result.exit_code == 0
        assert "Auth / Me" not in result.output


class TestCliReplace:
    def test_replace_writes_updated_collection(self, tmp_path):
        output_file = tmp_path / "replaced.json"
        runner = CliRunner()
        result = runner.invoke(main, [
            "replace", str(FIXTURES / "sample.postman.json"),
            "--find", "api.example.com",
            "--replace", "staging.example.com",
            "--to", "postman",
            "-o", str(output_file),
        ])

        assert result.exit_code == 0
        text = output_file.read_text(encoding="utf-8")
        assert "api.example.com" not in text
        assert "https://staging.example.com/me" in text

    def test_invalid_regex(self):
        runner = CliRunner()
        result = runner.invoke(main, [
            "replace", str(FIXTURES / "sample.postman.json"),
            "--find", "(unclosed",
            "--replace", "x",
            "--regex",
            "--to", "postman",
        ])
        assert result.exit_code == 1
        assert "Invalid pattern" in result.output


class TestCliVariables:
    def test_vars_export_json(self, tmp_path):
        output_file = tmp_path / "vars.json"
        runner = CliRunner()
        result = runner.invoke(main, [
            "vars-export", str(FIXTURES / "sample.postman.json"),
            "--format", "json",
            "-o", str(output_file),
        ])

        assert result.exit_code == 0
        data = json.loads(output_file.read_text(encoding="utf-8"))
        assert [v["key"] for v in data] == ["baseUrl", "token", "legacy"]
        assert data[2]["enabled"] is False

    def test_vars_export_csv(self, tmp_path):
        output_file = tmp_path / "vars.csv"
        runner = CliRunner()
        result = runner.invoke(main, [
            "vars-export", str(FIXTURES / "sample.postman.json"),
            "-o", str(output_file),
        ])

        assert result.exit_code == 0
        lines = output_file.read_text(encoding="utf-8").splitlines()
        assert lines[0] == "key,value,type,description,enabled"
        assert len(lines) == 4

    def test_vars_import(self, tmp_path):
        output_file = tmp_path / "merged.json"
        runner = CliRunner()
        result = runner.invoke(main, [
            "vars-import",
            str(FIXTURES / "sample.postman.json"),
            str(FIXTURES / "variables.json"),
            "--to", "postman",
            "-o", str(output_file),
        ])

        assert result.exit_code == 0
        data = json.loads(output_file.read_text(encoding="utf-8"))
        assert [v["key"] for v in data["variable"]] == ["baseUrl", "token", "legacy", "region", "password"]

    def test_vars_import_csv(self, tmp_path):
        output_file = tmp_path / "merged.env"
        runner = CliRunner()
        result = runner.invoke(main, [
            "vars-import",
            str(FIXTURES / "sample.postman.json"),
            str(FIXTURES / "sample.csv"),
            "--to", "env",
            "-o", str(output_file),
        ])

        assert result.exit_code == 0
        text = output_file.read_text(encoding="utf-8")
        assert "apiKey=" in text
        assert "old=" not in text
