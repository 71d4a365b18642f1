from pathlib import Path

import pytest

from collection_bridge.converter.variables import to_env
from collection_bridge.errors import FormatDetectionError, MalformedCollectionError
from collection_bridge.parser.base import CollectionVariable, UnifiedCollection
from collection_bridge.parser.loader import load_collection, load_document
from collection_bridge.parser.variables import parse_csv, parse_env, parse_generic_json, read_csv_variables, variables_to_csv

FIXTURES = Path(__file__).parent / "fixtures"


class TestParseEnv:
    def test_parse_env_file(self):
        collection = parse_env((FIXTURES / "sample.env").read_text(encoding="utf-8"))
        assert collection.kind == "environment"
        assert collection.source_format == "raw"
        assert [(v.key, v.value) for v in collection.variables] == [
            ("BASE_URL", "https://api.example.com"),
            ("GREETING", "hello world"),
            ("API_KEY", "k-123"),
        ]

    def test_value_with_equals_sign(self):
        collection = parse_env("QUERY=a=b")
        assert collection.variables[0].value == "a=b"

    def test_escaped_double_quoted_values(self):
        collection = parse_env('CERT="line1\\nline2"\nQUOTED="say \\"hi\\""\nWIN="C:\\\\tmp dir"')
        assert [v.value for v in collection.variables] == ["line1\nline2", 'say "hi"', "C:\\tmp dir"]

    def test_env_export_reads_back(self):
        values = ["line1\nline2", 'say "hi"', "'single'", "  padded  ", "C:\\tmp"]
        source = UnifiedCollection(
            id="c",
            name="Env",
            source_format="raw",
            variables=[CollectionVariable(id=str(i), key=f"K{i}", value=v) for i, v in enumerate(values)],
        )
        parsed = parse_env(to_env(source))
        assert [v.value for v in parsed.variables] == values


class TestParseCsv:
    def test_parse_csv_file(self):
        collection = parse_csv((FIXTURES / "sample.csv").read_text(encoding="utf-8"))
        assert [(v.key, v.value, v.type, v.enabled) for v in collection.variables] == [
            ("baseUrl", "https://api.example.com", "default", True),
            ("apiKey", "s3cr3t", "secret", True),
            ("old", "x, y", "default", False),
        ]
        assert collection.variables[0].description == "Service root"
        assert collection.variables[1].description is None

    def test_without_header(self):
        collection = parse_csv("a,1\nb,2")
        assert [(v.key, v.value) for v in collection.variables] == [("a", "1"), ("b", "2")]

    def test_short_rows_skipped(self):
        assert parse_csv("key,value\nlonely\n").variables == []

    def test_quotes_and_padding_read_back(self):
        values = ['say "hi"', "'x'", "  lead", "trail  ", '"wrapped"', "multi\nline"]
        variables = [CollectionVariable(id=str(i), key=f"k{i}", value=v) for i, v in enumerate(values)]
        parsed = read_csv_variables(variables_to_csv(variables))
        assert [v.value for v in parsed] == values
        assert all(v.enabled for v in parsed)


class TestParseGenericJson:
    def test_flat_object(self):
        collection = parse_generic_json({"host": "x", "port": 8080, "debug": True})
        assert [(v.key, v.value) for v in collection.variables] == [
            ("host", "x"),
            ("port", "8080"),
            ("debug", "true"),
        ]

    def test_non_object(self):
        assert parse_generic_json(["a"]).variables == []


class TestLoader:
    def test_load_postman_json(self):
        assert load_collection(FIXTURES / "sample.postman.json").source_format == "postman"

    def test_load_insomnia_yaml(self):
        collection = load_collection(FIXTURES / "sample.insomnia.yaml")
        assert collection.source_format == "insomnia"
        assert collection.name == "YAML Workspace"
        assert [r.name for r in collection.requests] == ["Ping"]

    def test_load_env_by_extension(self):
        assert load_collection(FIXTURES / "sample.env").variables[0].key == "BASE_URL"

    def test_load_csv_by_extension(self):
        assert len(load_collection(FIXTURES / "sample.csv").variables) == 3

    def test_load_generic_json_when_asked(self, tmp_path):
        path = tmp_path / "vars.json"
        path.write_text('{"a": "1"}', encoding="utf-8")
        assert load_collection(path, "json").variables[0].key == "a"

    def test_unrecognized_json(self, tmp_path):
        path = tmp_path / "vars.json"
        path.write_text('{"a": "1"}', encoding="utf-8")
        with pytest.raises(FormatDetectionError):
            load_collection(path)

    def test_undecodable_file(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(MalformedCollectionError):
            load_document(path)
