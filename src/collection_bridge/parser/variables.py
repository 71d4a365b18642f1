"""Raw variable sources: .env files, CSV tables and flat JSON objects.

These carry variables only, so the resulting collections are of kind
"environment" with source format "raw". The CSV writer lives here too so
that variable export and import share one column layout.
"""

import csv
import io
import re

from .base import CollectionVariable, UnifiedCollection, new_id, variable_type
from .common import stringify

ENV_LINE = re.compile(r"^([^=]+)=(.*)$")
ENV_ESCAPE = re.compile(r'\\(["\\nr])')
CSV_COLUMNS = ("key", "value", "type", "description", "enabled")


def _unquote(value: str) -> str:
    return re.sub(r"""^["']|["']$""", "", value)


def _env_value(raw: str) -> str:
    """Decode a .env value; double-quoted values may carry backslash escapes."""
    if len(raw) >= 2 and raw[0] == raw[-1] == '"':
        return ENV_ESCAPE.sub(lambda m: {"n": "\n", "r": "\r"}.get(m.group(1), m.group(1)), raw[1:-1])
    return _unquote(raw)


def _environment(name: str, variables: list[CollectionVariable]) -> UnifiedCollection:
    return UnifiedCollection(
        id=new_id(),
        name=name,
        kind="environment",
        source_format="raw",
        variables=variables,
    )


def parse_env(text: str) -> UnifiedCollection:
    """Parse KEY=VALUE lines; comments and blank lines are skipped."""
    variables = []
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        match = ENV_LINE.match(stripped)
        if match:
            variables.append(
                CollectionVariable(
                    id=new_id(),
                    key=match.group(1).strip(),
                    value=_env_value(match.group(2).strip()),
                )
            )
    return _environment("Environment Variables", variables)


def read_csv_variables(text: str) -> list[CollectionVariable]:
    """Read ``key,value,type,description,enabled`` rows.

    A leading header row is skipped. Fresh ids are always assigned and a
    variable stays enabled unless its enabled column says "false".
    """
    variables = []
    rows = [row for row in csv.reader(io.StringIO(text)) if any(cell.strip() for cell in row)]
    if rows and rows[0] and rows[0][0].strip().lower() == "key":
        rows = rows[1:]
    for row in rows:
        cells = list(row)
        if len(cells) < 2:
            continue
        cells += [""] * (len(CSV_COLUMNS) - len(cells))
        key, value, type_, description, enabled = cells[: len(CSV_COLUMNS)]
        variables.append(
            CollectionVariable(
                id=new_id(),
                key=key,
                value=value,
                type=variable_type(type_.strip()),
                description=description or None,
                enabled=enabled.strip().lower() != "false",
            )
        )
    return variables


def variables_to_csv(variables: list[CollectionVariable]) -> str:
    """Header row plus one fully quoted row per variable, disabled ones included."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    buffer.write(",".join(CSV_COLUMNS) + "\n")
    for v in variables:
        writer.writerow([v.key, v.value, v.type, v.description or "", "true" if v.enabled else "false"])
    return buffer.getvalue().rstrip("\n")


def read_json_variables(items: object) -> list[CollectionVariable]:
    """Read a JSON array of variable objects, assigning fresh ids."""
    if not isinstance(items, list):
        return []
    return [
        CollectionVariable(
            id=new_id(),
            key=stringify(item.get("key")),
            value=stringify(item.get("value")),
            type=variable_type(item.get("type")),
            description=item.get("description") or None if isinstance(item.get("description"), str) else None,
            enabled=item.get("enabled") is not False and str(item.get("enabled")).lower() != "false",
        )
        for item in items
        if isinstance(item, dict)
    ]


def parse_csv(text: str) -> UnifiedCollection:
    """Parse a variable table in the CSV export layout."""
    return _environment("CSV Variables", read_csv_variables(text))


def parse_generic_json(data: object) -> UnifiedCollection:
    """Parse a flat key -> value JSON object."""
    variables = []
    if isinstance(data, dict):
        variables = [
            CollectionVariable(id=new_id(), key=str(key), value=stringify(value))
            for key, value in data.items()
        ]
    return _environment("Generic Collection", variables)
