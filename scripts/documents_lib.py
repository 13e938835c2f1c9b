"""
documents_lib.py

Schema checks for document collections handed to the index builder.
"""

import json
from pathlib import Path

import jsonschema

DEFAULT_SCHEMA = Path(__file__).resolve().parent.parent / "contracts" / "documents.schema.json"


def load_schema(schema_path: Path) -> dict:
    if not schema_path.exists():
        raise FileNotFoundError(f"Schema file not found at {schema_path}")
    try:
        return json.loads(schema_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValueError(f"Failed to parse schema JSON: {e}") from e


def validate_documents(payload, schema_path: Path = DEFAULT_SCHEMA, label: str = "Documents"):
    """
    Validates a decoded document collection against the documents schema.

    Raises ValueError with the first validation message.
    """
    schema = load_schema(schema_path)
    validator = jsonschema.Draft202012Validator(
        schema, format_checker=jsonschema.FormatChecker()
    )
    try:
        validator.validate(payload)
    except jsonschema.ValidationError as e:
        location = "/".join(str(part) for part in e.absolute_path) or "<root>"
        raise ValueError(f"{label} failed schema validation at {location}: {e.message}") from e
