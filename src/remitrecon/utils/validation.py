"""Schema validation utilities."""

import json
from pathlib import Path
from typing import Any

import jsonschema

# Schema directory relative to this file
SCHEMAS_DIR = Path(__file__).parent.parent / "schemas"


def _load_schema(schema_name: str) -> dict[str, Any]:
    """Load a JSON schema by name."""
    schema_path = SCHEMAS_DIR / f"{schema_name}.schema.json"
    if not schema_path.exists():
        raise FileNotFoundError(f"Schema not found: {schema_path}")
    return json.loads(schema_path.read_text())


def validate_writeoff_rules(data: Any) -> list[str]:
    """
    Validate a write-off rule table against schema.

    Returns list of validation errors (empty if valid).
    """
    try:
        schema = _load_schema("writeoff_rules")
        jsonschema.validate(instance=data, schema=schema)
        return []
    except jsonschema.ValidationError as e:
        return [str(e.message)]
    except FileNotFoundError as e:
        return [str(e)]


def validate_match_result(data: dict[str, Any]) -> list[str]:
    """
    Validate a serialized match result against schema.

    Expects the JSON form (``MatchResult.model_dump(mode="json")``).
    Returns list of validation errors (empty if valid).
    """
    try:
        schema = _load_schema("match_result")
        jsonschema.validate(instance=data, schema=schema)
        return []
    except jsonschema.ValidationError as e:
        return [str(e.message)]
    except FileNotFoundError as e:
        return [str(e)]
