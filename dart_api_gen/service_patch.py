"""Splice generated methods into the hand-written service class.

The service file is never regenerated. Generated methods live between the
marker comment and the closing brace of the service class:

  replace mode: everything between the marker and the closing brace is
                swapped for the new methods
  append mode:  new methods go right before the closing brace, existing
                code (generated or not) is left alone
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from .config import GENERATED_METHODS_MARKER, SERVICE_CLASS_NAME, OutputPaths
from .dart_source import DartSource
from .errors import ServiceFileError

logger = logging.getLogger(__name__)


def ensure_service_file(paths: OutputPaths) -> Path:
    """Return the service file, seeding a custom output from the default one."""
    target = paths.service_file
    if target.exists():
        return target

    if not paths.is_custom:
        raise ServiceFileError(f"app_api_service.dart file does not exist: {target}")
    if not paths.default_service_file.exists():
        raise ServiceFileError(
            f"Source app_api_service.dart file does not exist: {paths.default_service_file}"
        )

    logger.info("Copying %s to %s", paths.default_service_file, target)
    target.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(paths.default_service_file, target)
    return target


def insert_marker(content: str, class_name: str = SERVICE_CLASS_NAME) -> str:
    """Add the marker before the service class's closing brace."""
    body = DartSource(content).find_class(class_name)
    before = content[:body.close_brace]
    after = content[body.close_brace:]
    return f"{before}\n  {GENERATED_METHODS_MARKER}\n{after}"


def patch_service_source(
    content: str,
    methods: list[str],
    replace: bool,
    class_name: str = SERVICE_CLASS_NAME,
) -> str:
    """Return content with methods spliced into the service class."""
    source = DartSource(content)
    body = source.find_class(class_name)
    marker = source.find_comment(GENERATED_METHODS_MARKER, body.open_brace, body.close_brace)

    if marker is None:
        logger.warning("Marker not found, adding it automatically...")
        content = insert_marker(content, class_name)
        source = DartSource(content)
        body = source.find_class(class_name)
        marker = source.find_comment(GENERATED_METHODS_MARKER, body.open_brace, body.close_brace)

    new_methods = "\n\n".join(methods)
    after_class = content[body.close_brace:]
    if replace:
        before = content[:marker.end]
    else:
        before = content[:body.close_brace]
    return f"{before}\n\n{new_methods}\n{after_class}"


def update_service_file(paths: OutputPaths, methods: list[str], replace: bool) -> Path:
    """Patch the service file on disk and return its path."""
    service_file = ensure_service_file(paths)
    content = service_file.read_text(encoding="utf-8")
    service_file.write_text(patch_service_source(content, methods, replace), encoding="utf-8")

    mode = "REPLACED" if replace else "APPENDED"
    logger.info("%s %d API methods in %s", mode, len(methods), service_file)
    return service_file


_DATA_KEY_DECLARATIONS = (
    "@JsonKey(name: '{key}') T? data,",
    "@JsonKey(name: '{key}') List<T>? data,",
)


def sync_data_response_key(data_response_file: Path, envelope_key: str) -> bool:
    """Point the DataResponse/DataListResponse JSON key at envelope_key.

    Returns True when the file changed. A missing or unwritable file only
    produces a warning.
    """
    if not data_response_file.exists():
        logger.warning("DataResponse file not found: %s", data_response_file)
        return False

    other_key = "data" if envelope_key == "result" else "result"
    try:
        content = data_response_file.read_text(encoding="utf-8")
        updated = content
        for declaration in _DATA_KEY_DECLARATIONS:
            updated = updated.replace(
                declaration.format(key=other_key), declaration.format(key=envelope_key)
            )
        if updated == content:
            logger.info("DataResponse key already set to %s", envelope_key)
            return False
        data_response_file.write_text(updated, encoding="utf-8")
    except OSError as exc:
        logger.warning("Could not update DataResponse key: %s", exc)
        return False

    logger.info("Updated DataResponse key to %s", envelope_key)
    return True
