"""
Vendored JSON schema for sink context validation.

The schema ships inside the package so validation works without network
access.
"""

from pathlib import Path

SCHEMA_PATH = Path(__file__).parent / "sink_context.schema.json"


def get_schema_path() -> Path:
    """Return the path to the vendored sink context schema."""
    return SCHEMA_PATH


def load_schema() -> dict:
    """Load and return the sink context schema as a dictionary."""
    import json

    with open(SCHEMA_PATH, encoding="utf-8") as f:
        return json.load(f)
