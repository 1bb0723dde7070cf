"""Output locations and run options.

Paths are relative to the Flutter project root, which is the working
directory when the tool runs from the project's makefile.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

APP_API_SERVICE_PATH = Path("lib/data_source/api/app_api_service.dart")
MODEL_API_PATH = Path("lib/model/api/respone")  # sic, matches the app tree
REQUEST_MODEL_PATH = Path("lib/model/api/request")
ENUM_PATH = Path("lib/model/enum")
DATA_RESPONSE_PATH = Path("lib/model/api/base/data_response.dart")

SERVICE_CLASS_NAME = "AppApiService"
GENERATED_METHODS_MARKER = "// GENERATED CODE - DO NOT MODIFY OR DELETE THIS COMMENT"

# Accepted --wrapped_by values and what they normalize to
WRAPPED_BY_ALIASES: dict[str, str] = {
    "data": "data",
    "result": "result",
    "results": "result",
}


def normalize_wrapped_by(value: str | None) -> str:
    """Map a --wrapped_by value to the envelope key, falling back to 'data'."""
    if not value:
        return "data"
    return WRAPPED_BY_ALIASES.get(value.strip().lower(), "data")


@dataclass(frozen=True)
class OutputPaths:
    """Where generated code lands."""

    service_file: Path
    models_dir: Path
    requests_dir: Path
    enums_dir: Path
    default_service_file: Path

    @classmethod
    def default(cls, root: Path) -> OutputPaths:
        return cls(
            service_file=root / APP_API_SERVICE_PATH,
            models_dir=root / MODEL_API_PATH,
            requests_dir=root / REQUEST_MODEL_PATH,
            enums_dir=root / ENUM_PATH,
            default_service_file=root / APP_API_SERVICE_PATH,
        )

    @classmethod
    def custom(cls, root: Path, output_path: Path) -> OutputPaths:
        out = output_path if output_path.is_absolute() else root / output_path
        return cls(
            service_file=out / "app_api_service.dart",
            models_dir=out / "model",
            requests_dir=out / "request",
            enums_dir=out / "enum",
            default_service_file=root / APP_API_SERVICE_PATH,
        )

    @property
    def is_custom(self) -> bool:
        return self.service_file != self.default_service_file


@dataclass(frozen=True)
class GeneratorOptions:
    """Everything one run needs, as parsed from the command line."""

    input_path: Path
    apis: str | None = None
    replace: bool = False
    output_path: Path | None = None
    wrapped_by: str = "data"
    project_root: Path = Path(".")

    def output_paths(self) -> OutputPaths:
        if self.output_path is not None:
            return OutputPaths.custom(self.project_root, self.output_path)
        return OutputPaths.default(self.project_root)

    @property
    def envelope_key(self) -> str:
        return normalize_wrapped_by(self.wrapped_by)
