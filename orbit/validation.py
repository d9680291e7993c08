"""
JSON-schema validation that reports instead of raising.

Every call site branches on the returned :class:`ValidationResult`:

    result = validate(schema, payload)
    if not result:
        ...  # result.errors is an ordered list of readable messages

Unknown fields are preserved in ``result.data`` unless ``strict=True``, which
forbids additional properties on the top-level object.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any

import jsonschema
from jsonschema.exceptions import SchemaError
from referencing.exceptions import Unresolvable


@dataclass
class ValidationResult:
    valid: bool
    data: Any = None
    errors: list[str] = field(default_factory=list)

    def __bool__(self) -> bool:
        return self.valid


def _format_error(err: jsonschema.ValidationError) -> str:
    path = ".".join(str(p) for p in err.absolute_path)
    return f"{path}: {err.message}" if path else err.message


def _apply_defaults(schema: dict, value: Any) -> Any:
    if not isinstance(value, dict):
        return value
    for key, prop in (schema.get("properties") or {}).items():
        if key not in value and isinstance(prop, dict) and "default" in prop:
            value[key] = copy.deepcopy(prop["default"])
    return value


def validate(schema: dict, value: Any, *, strict: bool = False) -> ValidationResult:
    s = dict(schema or {})
    if strict and s.get("type", "object") == "object":
        s["additionalProperties"] = False

    validator_cls = jsonschema.validators.validator_for(
        s, default=jsonschema.Draft7Validator
    )
    try:
        validator_cls.check_schema(s)
    except SchemaError as e:
        return ValidationResult(False, errors=[f"invalid schema: {e.message}"])

    # References are resolved lazily, so a dangling $ref only surfaces here.
    try:
        errors = sorted(
            validator_cls(s).iter_errors(value),
            key=lambda e: (".".join(str(p) for p in e.absolute_path), e.message),
        )
    except Unresolvable as e:
        return ValidationResult(False, errors=[f"invalid schema: {e}"])
    if errors:
        return ValidationResult(False, errors=[_format_error(e) for e in errors])

    return ValidationResult(True, data=_apply_defaults(s, copy.deepcopy(value)))
