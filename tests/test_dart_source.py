"""Tests for the Dart source scanner."""

import pytest

from dart_api_gen.config import GENERATED_METHODS_MARKER
from dart_api_gen.dart_source import DartSource
from dart_api_gen.errors import ServiceFileError


def _close(text: str, name: str | None = None) -> int:
    return DartSource(text).find_class(name).close_brace


class TestMasking:
    def test_braces_in_strings_ignored(self, service_source):
        assert _close(service_source, "AppApiService") == service_source.rindex("}")

    def test_masked_keeps_length_and_lines(self, service_source):
        source = DartSource(service_source)
        assert len(source.masked) == len(service_source)
        assert source.masked.count("\n") == service_source.count("\n")
        assert "not a" not in source.masked

    def test_raw_string(self):
        text = "class A {\n  final s = r'\\}';\n}\n"
        assert _close(text) == text.rindex("}")

    def test_triple_quoted_string(self):
        text = 'class A {\n  final s = """\n}\n""";\n}\n'
        assert _close(text) == text.rindex("}")

    def test_interpolation_with_nested_string(self):
        text = "class A {\n  final s = 'x ${m['}']} y';\n}\n"
        assert _close(text) == text.rindex("}")

    def test_escaped_quote(self):
        text = "class A {\n  final s = 'it\\'s }';\n}\n"
        assert _close(text) == text.rindex("}")

    def test_nested_block_comment(self):
        text = "class A {\n  /* a /* } */ } */\n}\n"
        assert _close(text) == text.rindex("}")

    def test_line_comment(self):
        text = "class A {\n  // }\n}\n"
        assert _close(text) == text.rindex("}")


class TestClasses:
    _TEXT = (
        "// class Ghost {}\n"
        "class First {\n  void a() {}\n}\n"
        "\n"
        "class Second extends First {\n}\n"
    )

    def test_top_level_classes(self):
        names = [c.name for c in DartSource(self._TEXT).classes()]
        assert names == ["First", "Second"]

    def test_find_by_name(self):
        body = DartSource(self._TEXT).find_class("First")
        assert self._TEXT[body.open_brace] == "{"
        assert self._TEXT[body.close_brace] == "}"
        assert self._TEXT[body.close_brace + 1:].startswith("\n\nclass Second")

    def test_unknown_name_falls_back_to_last(self):
        assert DartSource(self._TEXT).find_class("Missing").name == "Second"

    def test_no_class(self):
        with pytest.raises(ServiceFileError, match="Could not find class end"):
            DartSource("void main() {}\n").find_class()

    def test_unbalanced(self):
        with pytest.raises(ServiceFileError, match="Unbalanced"):
            DartSource("class A {\n  void a() {\n").find_class()


class TestFindComment:
    def test_marker_found(self, service_source):
        source = DartSource(service_source)
        body = source.find_class("AppApiService")
        marker = source.find_comment(GENERATED_METHODS_MARKER, body.open_brace, body.close_brace)
        assert marker is not None
        assert service_source[marker.start:marker.end] == GENERATED_METHODS_MARKER

    def test_marker_in_string_ignored(self):
        text = f"class A {{\n  final s = '{GENERATED_METHODS_MARKER}';\n}}\n"
        assert DartSource(text).find_comment(GENERATED_METHODS_MARKER) is None

    def test_marker_outside_range_ignored(self):
        text = f"{GENERATED_METHODS_MARKER}\nclass A {{\n}}\n"
        source = DartSource(text)
        body = source.find_class()
        assert source.find_comment(GENERATED_METHODS_MARKER, body.open_brace, body.close_brace) is None
        assert source.find_comment(GENERATED_METHODS_MARKER) is not None
