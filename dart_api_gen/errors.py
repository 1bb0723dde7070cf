"""Exception hierarchy for the generator.

Everything raised on purpose derives from GeneratorError so the CLI can tell
expected input problems apart from bugs. Nothing is rolled back on failure.
"""

from __future__ import annotations


class GeneratorError(Exception):
    """Base class for all generator failures."""


class InputError(GeneratorError):
    """The input folder is missing or holds no OpenAPI JSON document."""


class SpecLoadError(GeneratorError):
    """The OpenAPI document could not be parsed."""


class SchemaCycleError(GeneratorError):
    """A chain of $ref pointers loops back on itself."""

    def __init__(self, chain: list[str]) -> None:
        self.chain = chain
        super().__init__("Circular schema reference: " + " -> ".join(chain))


class ServiceFileError(GeneratorError):
    """The target service file is missing or cannot be patched."""
