"""Run the whole generator: load, analyze, plan, emit.

Nothing here is transactional. If a later stage fails, files written by
earlier stages stay on disk.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .codegen import render_api_methods, write_enum_files, write_model_files
from .config import DATA_RESPONSE_PATH, GeneratorOptions
from .endpoints import analyze_endpoints, filter_endpoints, log_missing_wrapped, parse_apis_filter
from .loader import find_spec_file, get_schemas, load_spec
from .planner import Planner
from .service_patch import sync_data_response_key, update_service_file

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GenerationSummary:
    methods: list[str]
    models: list[str]
    enums: list[str]


class ApiGenerator:
    """One generator run over one OpenAPI document."""

    def __init__(self, options: GeneratorOptions) -> None:
        self.options = options
        self.paths = options.output_paths()
        self.allowed_apis = parse_apis_filter(options.apis)

    def _log_configuration(self) -> None:
        logger.info("Checking folder: %s", self.options.input_path)
        if self.allowed_apis:
            logger.info("Filtering APIs: %s", ", ".join(sorted(self.allowed_apis)))
        logger.info("Replace mode: %s", self.options.replace)
        logger.info("Output paths:")
        logger.info("  - API Service: %s", self.paths.service_file)
        logger.info("  - Response Models: %s", self.paths.models_dir)
        logger.info("  - Request Models: %s", self.paths.requests_dir)
        logger.info("  - Enums: %s", self.paths.enums_dir)
        logger.info("  - Wrapped by: %s", self.options.envelope_key)

    def run(self) -> GenerationSummary:
        self._log_configuration()

        input_path = self.options.input_path
        if not input_path.is_absolute():
            input_path = self.options.project_root / input_path
        spec = load_spec(find_spec_file(input_path))

        envelope_key = self.options.envelope_key
        sync_data_response_key(self.options.project_root / DATA_RESPONSE_PATH, envelope_key)

        logger.info("Analyzing endpoints...")
        all_endpoints = analyze_endpoints(spec, envelope_key)
        endpoints = filter_endpoints(all_endpoints, self.allowed_apis)
        log_missing_wrapped(endpoints, envelope_key)

        logger.info("Planning models...")
        plan = Planner(get_schemas(spec)).plan(endpoints, all_endpoints)

        logger.info("Generating API methods...")
        methods = render_api_methods(plan)

        logger.info("Generating model classes...")
        models = write_model_files(plan, self.paths)
        enums = write_enum_files(plan, self.paths)

        logger.info("Updating %s...", self.paths.service_file.name)
        update_service_file(self.paths, methods, self.options.replace)

        return GenerationSummary(
            methods=[p.method_name for p in plan.endpoints],
            models=models,
            enums=enums,
        )
