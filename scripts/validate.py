"""Validate exported record files against JSON Schemas generated from the Pydantic models."""

import argparse
import json
import sys
from pathlib import Path

from jsonschema import Draft202012Validator
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from osrs_data.config import get_settings
from osrs_data.export import family_path
from osrs_data.models import FAMILY_MODELS


def family_schema(model: type[BaseModel]) -> dict:
    return {
        "$schema": "https://json-schema.org/draft/2020-12/schema",
        "type": "array",
        "items": {"$ref": "#/$defs/Record"},
        "$defs": _with_record_def(model.model_json_schema(by_alias=True)),
    }


def _with_record_def(schema: dict) -> dict:
    defs = schema.pop("$defs", {})
    # Nested models are referenced as #/$defs/<Name> from the record schema
    defs["Record"] = schema
    return defs


def validate_file(
    filepath: Path, model: type[BaseModel], validator: Draft202012Validator
) -> list[str]:
    errors: list[str] = []

    try:
        with open(filepath, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        errors.append(f"JSON parse error: {e}")
        return errors

    if not isinstance(data, list):
        errors.append("File must contain a JSON array")
        return errors

    for error in validator.iter_errors(data):
        path = " -> ".join(str(p) for p in error.absolute_path)
        location = f" at {path}" if path else ""
        errors.append(f"Schema: {error.message}{location}")

    for index, entry in enumerate(data):
        try:
            model.model_validate(entry)
        except PydanticValidationError as e:
            for err in e.errors():
                loc = " -> ".join(str(part) for part in (index, *err["loc"]))
                errors.append(f"Model: {err['msg']} at {loc}")

    return errors


def validate_dir(output_dir: Path) -> tuple[int, int]:
    """Returns (files checked, errors found)."""
    checked = 0
    total_errors = 0
    for family, model in FAMILY_MODELS.items():
        filepath = family_path(output_dir, family)
        if not filepath.exists():
            continue
        checked += 1
        validator = Draft202012Validator(family_schema(model))
        errors = validate_file(filepath, model, validator)
        if errors:
            print(f"\n{filepath.name}:")
            for error in errors:
                print(f"  - {error}")
            total_errors += len(errors)
    return checked, total_errors


def main() -> int:
    parser = argparse.ArgumentParser(description="Validate exported record files")
    parser.add_argument("--output-dir", type=Path, default=None, help="Directory to validate")
    args = parser.parse_args()

    output_dir = args.output_dir or get_settings().output_dir
    checked, total_errors = validate_dir(output_dir)

    if not checked:
        print("No exported record files found. Nothing to validate.")
        return 0

    if total_errors:
        print(f"\n{total_errors} error(s) in {checked} file(s)")
        return 1

    print(f"All {checked} file(s) valid.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
