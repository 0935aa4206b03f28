"""Schema helpers for the application settings file."""

from __future__ import annotations

import os
from copy import deepcopy
from typing import Any

from jsonschema import Draft202012Validator

from .. import config

SETTINGS_SCHEMA: dict[str, Any] = {
    "$id": "riseadmin/settings.schema.json",
    "type": "object",
    "required": ["schema", "storage", "crop", "email"],
    "properties": {
        "schema": {"const": "riseadmin/settings@1"},
        "database_path": {"type": ["string", "null"]},
        "storage": {
            "type": "object",
            "properties": {
                "root": {"type": ["string", "null"]},
                "bucket": {"type": "string", "minLength": 1},
                "public_base_url": {"type": ["string", "null"]},
            },
            "additionalProperties": True,
        },
        "crop": {
            "type": "object",
            "properties": {
                "jpeg_quality": {"type": "integer", "minimum": -1, "maximum": 100},
            },
            "additionalProperties": True,
        },
        "email": {
            "type": "object",
            "properties": {
                "api_base_url": {"type": "string"},
                "sender": {"type": "string", "minLength": 1},
                "admin_recipients": {
                    "type": "array",
                    "items": {"type": "string"},
                    "minItems": 1,
                },
                "contact_phone": {"type": "string"},
            },
            "additionalProperties": True,
        },
    },
    "additionalProperties": True,
}

DEFAULT_SETTINGS: dict[str, Any] = {
    "schema": "riseadmin/settings@1",
    "database_path": None,
    "storage": {
        "root": None,
        "bucket": config.IMAGES_BUCKET,
        "public_base_url": None,
    },
    "crop": {
        "jpeg_quality": config.CROP_JPEG_QUALITY,
    },
    "email": {
        "api_base_url": config.EMAIL_API_BASE_URL,
        "sender": config.EMAIL_SENDER,
        "admin_recipients": list(config.EMAIL_ADMIN_RECIPIENTS),
        "contact_phone": config.EMAIL_CONTACT_PHONE,
    },
}

_validator = Draft202012Validator(SETTINGS_SCHEMA)

_SECTIONS = ("storage", "crop", "email")


def _normalise_path(value: Any) -> str | None:
    if value in {None, ""}:
        return None
    try:
        return str(os.fspath(value))
    except TypeError:
        return None


def merge_with_defaults(data: dict[str, Any] | None) -> dict[str, Any]:
    """Merge *data* with :data:`DEFAULT_SETTINGS` and validate the result."""

    merged = deepcopy(DEFAULT_SETTINGS)
    if data:
        for key, value in data.items():
            if key in _SECTIONS and isinstance(value, dict):
                target = merged.setdefault(key, {})
                for sub_key, sub_value in value.items():
                    target[sub_key] = sub_value
                continue
            if key == "database_path":
                merged[key] = _normalise_path(value)
                continue
            merged[key] = value
    merged["storage"]["root"] = _normalise_path(merged["storage"].get("root"))
    _validator.validate(merged)
    return merged


def validate_settings(data: dict[str, Any]) -> None:
    """Validate *data* against the settings schema."""

    _validator.validate(data)


__all__ = ["DEFAULT_SETTINGS", "SETTINGS_SCHEMA", "merge_with_defaults", "validate_settings"]
