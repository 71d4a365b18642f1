import json
from pathlib import Path

import pytest

from collection_bridge.errors import MalformedCollectionError
from collection_bridge.parser.postman import parse_postman

FIXTURES = Path(__file__).parent / "fixtures"


def _sample() -> dict:
    return json.loads((FIXTURES / "sample.postman.json").read_text(encoding="utf-8"))


class TestPostmanParser:
    def test_collection_metadata(self):
        collection = parse_postman(_sample())
        assert collection.name == "Sample API"
        assert collection.description == "Sample collection for parser tests"
        assert collection.id == "8c2f5e1a-3b4d-4c6e-9f10-1a2b3c4d5e6f"
        assert collection.source_format == "postman"
        assert collection.kind == "collection"

    def test_folder_tree(self):
        collection = parse_postman(_sample())
        assert [r.name for r in collection.requests] == ["List users"]
        assert [f.name for f in collection.folders] == ["Auth"]
        auth = collection.folders[0]
        assert auth.description == "Authentication endpoints"
        assert [r.name for r in auth.requests] == ["Me", "Login"]

    def test_request_fields(self):
        collection = parse_postman(_sample())
        req = collection.requests[0]
        assert req.method == "GET"
        assert req.url == "{{baseUrl}}/api/users?page=1"
        assert [(h.key, h.enabled) for h in req.headers] == [("Accept", True), ("X-Debug", False)]
        assert req.body is None

    def test_string_url(self):
        me = parse_postman(_sample()).folders[0].requests[0]
        assert me.url == "https://api.example.com/me"
        assert me.headers[0].value == "Bearer {{token}}"

    def test_scripts_kept_in_postman_dialect(self):
        collection = parse_postman(_sample())
        me = collection.folders[0].requests[0]
        assert me.test_script == 'pm.test("status 200", () => pm.response.to.have.status(200));'
        assert me.pre_request_script is None
        login = collection.folders[0].requests[1]
        assert login.test_script.split("\n") == [
            "const data = pm.response.json();",
            'pm.collectionVariables.set("token", data.token);',
        ]
        assert collection.pre_request_script == 'pm.environment.set("ts", Date.now());'

    def test_blank_folder_script_is_absent(self):
        auth = parse_postman(_sample()).folders[0]
        assert auth.test_script is None

    def test_json_body_content_type_normalized(self):
        login = parse_postman(_sample()).folders[0].requests[1]
        assert login.body == '{"user": "demo", "password": "secret"}'
        assert [(h.key, h.value) for h in login.headers] == [("Content-Type", "application/json")]

    def test_variables(self):
        variables = parse_postman(_sample()).variables
        assert [(v.key, v.type, v.enabled) for v in variables] == [
            ("baseUrl", "default", True),
            ("token", "secret", True),
            ("legacy", "default", False),
        ]
        assert variables[1].description == "Bearer token"
        assert len({v.id for v in variables}) == 3

    def test_url_rebuilt_from_parts(self):
        data = {
            "info": {"name": "x", "schema": "postman"},
            "item": [
                {
                    "name": "Parts",
                    "request": {
                        "method": "GET",
                        "url": {
                            "protocol": "https",
                            "host": ["api", "example", "com"],
                            "path": ["v1", "users"],
                            "query": [{"key": "q", "value": "a"}, {"key": "off", "value": "1", "disabled": True}],
                        },
                    },
                }
            ],
        }
        assert parse_postman(data).requests[0].url == "https://api.example.com/v1/users?q=a"

    def test_header_enabled_false(self):
        data = {
            "info": {"name": "x"},
            "item": [
                {
                    "name": "Flags",
                    "request": {
                        "method": "GET",
                        "url": "u",
                        "header": [
                            {"key": "X-A", "value": "1", "enabled": False},
                            {"key": "X-B", "value": "2", "disabled": True},
                            {"key": "X-C", "value": "3", "enabled": True},
                        ],
                    },
                }
            ],
        }
        headers = parse_postman(data).requests[0].headers
        assert [(h.key, h.enabled) for h in headers] == [("X-A", False), ("X-B", False), ("X-C", True)]

    def test_non_raw_body_dropped(self):
        data = {
            "info": {"name": "x"},
            "item": [{"name": "Form", "request": {"method": "POST", "url": "u", "body": {"mode": "formdata", "formdata": []}}}],
        }
        assert parse_postman(data).requests[0].body is None


class TestPostmanEnvironment:
    def test_parse_environment(self):
        data = json.loads((FIXTURES / "sample.postman_environment.json").read_text(encoding="utf-8"))
        collection = parse_postman(data)
        assert collection.kind == "environment"
        assert collection.name == "Staging"
        assert [(v.key, v.type, v.enabled) for v in collection.variables] == [
            ("baseUrl", "default", True),
            ("apiKey", "secret", True),
            ("unused", "default", False),
        ]


class TestMalformedPostman:
    def test_item_without_request(self):
        data = {"info": {"name": "x", "schema": "postman"}, "item": [{"name": "Broken"}]}
        with pytest.raises(MalformedCollectionError, match="Broken"):
            parse_postman(data)

    def test_nested_item_without_request_reports_path(self):
        data = {"info": {"name": "x"}, "item": [{"name": "Auth", "item": [{"name": "Lost"}]}]}
        with pytest.raises(MalformedCollectionError, match="Auth / Lost"):
            parse_postman(data)

    def test_missing_item_list(self):
        with pytest.raises(MalformedCollectionError):
            parse_postman({"info": {"name": "x"}})

    def test_missing_info(self):
        with pytest.raises(MalformedCollectionError):
            parse_postman({"item": []})

    def test_unknown_vendor_fields_ignored(self):
        data = {
            "info": {"name": "x", "schema": "postman", "exporter": {"v": 1}},
            "auth": {"type": "bearer"},
            "protocolProfileBehavior": {},
            "item": [{"name": "Ping", "request": {"method": "GET", "url": "u", "auth": {}}, "response": []}],
        }
        assert parse_postman(data).requests[0].name == "Ping"
