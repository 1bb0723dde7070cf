"""Entry point: python -m dart_api_gen --input_path=api_doc

Reads the OpenAPI JSON file in the input folder and updates the Flutter
project in the current directory.
"""

from __future__ import annotations

from .cli import main

if __name__ == "__main__":
    main()
