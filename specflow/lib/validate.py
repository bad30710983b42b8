"""
Schema validation for specflow.

Enforces JSON Schema validation at the state file boundary.
Fails hard with clear errors when data doesn't match schema.
"""

import json
from pathlib import Path

import jsonschema

from specflow.lib.errors import MalformedState


# Cache loaded schemas
_schema_cache: dict[str, dict] = {}


def _get_schemas_dir() -> Path:
    """Get path to schemas directory."""
    return Path(__file__).parent.parent / "schemas"


def _load_schema(schema_name: str) -> dict:
    """Load schema by name, with caching."""
    if schema_name not in _schema_cache:
        schema_path = _get_schemas_dir() / f"{schema_name}.schema.json"
        if not schema_path.exists():
            raise MalformedState(f"[{schema_name}] Schema file not found: {schema_path}")
        _schema_cache[schema_name] = json.loads(schema_path.read_text())
    return _schema_cache[schema_name]


def validate(data: dict, schema_name: str) -> None:
    """
    Validate data against named schema.

    Args:
        data: Dictionary to validate
        schema_name: Schema name (e.g., "state")

    Raises:
        MalformedState: If validation fails, with the failing field path
    """
    schema = _load_schema(schema_name)

    try:
        jsonschema.validate(instance=data, schema=schema)
    except jsonschema.ValidationError as e:
        path = ".".join(str(p) for p in e.absolute_path) if e.absolute_path else "(root)"
        raise MalformedState(f"[{schema_name}] {e.message}", field=path) from None


def validate_before_write(data: dict, schema_name: str, filepath: Path) -> None:
    """
    Validate data before writing to file. Ensures we never write invalid data.

    Raises:
        MalformedState: If data doesn't match schema
    """
    try:
        validate(data, schema_name)
    except MalformedState as e:
        raise MalformedState(
            f"Refusing to write invalid data to {filepath}: {e}"
        ) from None
