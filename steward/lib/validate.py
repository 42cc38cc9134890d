"""
Schema validation for steward.

Enforces JSON Schema validation at every document boundary (policy index,
sprint file, test summary). Fails hard with clear errors when data doesn't
match schema.
"""

import json
from pathlib import Path
from typing import Any

import jsonschema
import yaml


class ValidationError(Exception):
    """Schema validation failed."""

    def __init__(self, schema_name: str, message: str, path: str = None):
        self.schema_name = schema_name
        self.path = path
        super().__init__(f"[{schema_name}] {message}" + (f" at {path}" if path else ""))


# Cache loaded schemas
_schema_cache: dict[str, dict] = {}


def _get_schemas_dir() -> Path:
    """Get path to schemas directory (shipped inside the package)."""
    return Path(__file__).parent.parent / "schemas"


def _load_schema(schema_name: str) -> dict:
    """Load schema by name, with caching."""
    if schema_name not in _schema_cache:
        schema_path = _get_schemas_dir() / f"{schema_name}.schema.json"
        if not schema_path.exists():
            raise ValidationError(schema_name, f"Schema file not found: {schema_path}")
        _schema_cache[schema_name] = json.loads(schema_path.read_text())
    return _schema_cache[schema_name]


def validate(data: Any, schema_name: str) -> None:
    """
    Validate data against named schema.

    Args:
        data: Parsed document to validate
        schema_name: Schema name (e.g., "policy_index", "sprint", "test_summary")

    Raises:
        ValidationError: If validation fails
    """
    schema = _load_schema(schema_name)

    try:
        jsonschema.validate(instance=data, schema=schema)
    except jsonschema.ValidationError as e:
        path = ".".join(str(p) for p in e.absolute_path) if e.absolute_path else "(root)"
        raise ValidationError(schema_name, e.message, path) from None


def read_document(filepath: Path, schema_name: str) -> Any:
    """
    Parse a YAML or JSON file without validating it.

    JSON is a subset of YAML, so one parser handles both. schema_name is
    only used to label errors.

    Raises:
        ValidationError: If file missing or unparseable
    """
    if not filepath.exists():
        raise ValidationError(schema_name, f"File not found: {filepath}")

    try:
        return yaml.safe_load(filepath.read_text())
    except yaml.YAMLError as e:
        raise ValidationError(schema_name, f"Invalid document in {filepath}: {e}") from None


def validate_before_write(data: Any, schema_name: str, filepath: Path) -> None:
    """
    Validate data before writing to file. Ensures we never write invalid data.

    Raises:
        ValidationError: If data doesn't match schema
    """
    try:
        validate(data, schema_name)
    except ValidationError as e:
        raise ValidationError(
            schema_name,
            f"Refusing to write invalid data to {filepath}: {e}"
        ) from None
