"""Locate and parse the OpenAPI document.

Reads the single *.json file in the input folder and extracts paths and
component schemas.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from .errors import InputError, SpecLoadError

logger = logging.getLogger(__name__)

SCHEMA_REF_PREFIX = "#/components/schemas/"


def find_spec_file(folder: Path) -> Path:
    """Return the OpenAPI JSON file inside folder.

    When several JSON files are present the first one in sorted order wins.
    """
    if not folder.is_dir():
        raise InputError(f"Folder does not exist: {folder}")

    json_files = sorted(
        p for p in folder.iterdir() if p.is_file() and p.suffix.lower() == ".json"
    )
    if not json_files:
        raise InputError(f"No JSON files found in folder: {folder}")

    if len(json_files) > 1:
        logger.warning("Multiple JSON files found, using: %s", json_files[0])
    return json_files[0]


def load_spec(path: Path) -> dict[str, Any]:
    """Load the OpenAPI spec from disk."""
    logger.info("Reading OpenAPI file: %s", path)
    try:
        with open(path, encoding="utf-8") as f:
            spec = json.load(f)
    except json.JSONDecodeError as exc:
        raise SpecLoadError(f"Invalid JSON in {path}: {exc}") from exc

    if not isinstance(spec, dict):
        raise SpecLoadError(f"Expected a JSON object at the top of {path}")
    return spec


def get_paths(spec: dict[str, Any]) -> dict[str, Any]:
    """Extract paths from the spec."""
    return spec.get("paths") or {}


def get_schemas(spec: dict[str, Any]) -> dict[str, Any]:
    """Extract component schemas from the spec."""
    return (spec.get("components") or {}).get("schemas") or {}


def ref_name(ref: Any) -> str | None:
    """Return the component name of a '#/components/schemas/<Name>' pointer."""
    if isinstance(ref, str) and ref.startswith(SCHEMA_REF_PREFIX):
        return ref[len(SCHEMA_REF_PREFIX):]
    return None
