"""Render templates and write generated output.

Takes the GenerationPlan and produces Dart source: one method per endpoint
for the service class, one file per model class and one file per enum.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Iterable

import jinja2

from .config import OutputPaths
from .models import EnumModel, ModelClass
from .naming import field_name, to_snake_case
from .planner import REQUEST, EndpointPlan, GenerationPlan

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent / "templates"

_PATH_PARAM = re.compile(r"\{([^}]+)\}")


def dart_string(value: str) -> str:
    """Escape a value for a single-quoted Dart string literal."""
    return value.replace("\\", "\\\\").replace("'", "\\'").replace("$", "\\$")


@lru_cache(maxsize=None)
def _environment() -> jinja2.Environment:
    env = jinja2.Environment(
        loader=jinja2.FileSystemLoader(str(TEMPLATE_DIR)),
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
        undefined=jinja2.StrictUndefined,
    )
    env.filters["dart_string"] = dart_string
    return env


@dataclass(frozen=True)
class _MethodParam:
    name: str
    dart_name: str
    required: bool


def model_file_name(class_name: str) -> str:
    return f"{to_snake_case(class_name)}.dart"


def render_model_file(model: ModelClass) -> str:
    """Render a class plus every class embedded in it as one freezed file."""
    template = _environment().get_template("model.dart.j2")
    return template.render(
        file_name=to_snake_case(model.name),
        classes=list(model.all_classes()),
    )


def render_enum_file(enum: EnumModel) -> str:
    return _environment().get_template("enum.dart.j2").render(enum=enum)


def request_path(path: str, path_params: Iterable[str] = ()) -> str:
    """Path literal for the generated call.

    Only placeholders declared as path parameters are interpolated; any other
    {name} stays literal since no Dart variable backs it.
    """
    declared = set(path_params)
    path = path[1:] if path.startswith("/") else path

    def interpolate(match: re.Match[str]) -> str:
        name = match.group(1)
        if name not in declared:
            return match.group(0)
        return "${" + field_name(name) + "}"

    return _PATH_PARAM.sub(interpolate, path)


def render_api_method(plan: EndpointPlan) -> str:
    """Render one service method; no trailing newline."""
    endpoint = plan.endpoint

    params = [f"required {p.type} {field_name(p.name)}" for p in endpoint.path_params]
    # Required query params come first regardless of document order
    params += [
        f"required {p.type} {field_name(p.name)}" for p in endpoint.query_params if p.required
    ]
    params += [
        f"{p.type}? {field_name(p.name)}" for p in endpoint.query_params if not p.required
    ]
    if plan.request is not None:
        params.append(f"required {plan.request.type_name} request")

    template = _environment().get_template("api_method.dart.j2")
    rendered = template.render(
        doc_lines=(endpoint.summary or "").strip().splitlines(),
        return_type=plan.response.return_type,
        name=plan.method_name,
        params=params,
        client=plan.client,
        http_method=endpoint.method.lower(),
        path=request_path(endpoint.path, (p.name for p in endpoint.path_params)),
        query_params=[
            _MethodParam(p.name, field_name(p.name), p.required) for p in endpoint.query_params
        ],
        body_argument=plan.request.body_argument if plan.request else None,
        decoder_type=plan.response.decoder_type,
        decoder=plan.response.decoder,
    )
    return rendered.rstrip("\n")


def render_api_methods(plan: GenerationPlan) -> list[str]:
    return [render_api_method(p) for p in plan.endpoints]


def _write(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def write_model_files(plan: GenerationPlan, paths: OutputPaths) -> list[str]:
    """Write every planned model file; returns the class names written."""
    written: list[str] = []
    for model_file in plan.models:
        folder = paths.requests_dir if model_file.kind == REQUEST else paths.models_dir
        _write(folder / model_file_name(model_file.model.name), render_model_file(model_file.model))
        written.extend(cls.name for cls in model_file.model.all_classes())
    logger.info("Wrote %d model files", len(plan.models))
    return written


def write_enum_files(plan: GenerationPlan, paths: OutputPaths) -> list[str]:
    for enum in plan.enums:
        _write(paths.enums_dir / model_file_name(enum.name), render_enum_file(enum))
    logger.info("Wrote %d enum files", len(plan.enums))
    return [enum.name for enum in plan.enums]
