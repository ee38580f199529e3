"""
Rule Reference Parsing Tests
"""

import pytest

from formguard.validation.arguments import parse_reference, split_arguments, split_pipeline
from formguard.validation.exceptions import ConfigurationError


class TestParseReference:

    def test_plain_name_has_no_arguments(self):
        assert parse_reference("required") == ("required", None)

    def test_bracketed_arguments(self):
        assert parse_reference("length[4,10]") == ("length", ["4", "10"])

    def test_single_argument(self):
        assert parse_reference("length[5]") == ("length", ["5"])

    def test_whitespace_after_comma_is_dropped(self):
        assert parse_reference("matches[password, confirm]") == (
            "matches",
            ["password", "confirm"],
        )

    def test_escaped_comma_stays_in_argument(self):
        assert parse_reference(r"chars[a\,b,c]") == ("chars", ["a,b", "c"])

    def test_other_backslashes_are_kept(self):
        assert parse_reference(r"chars[\d,x]") == ("chars", [r"\d", "x"])

    def test_escaped_backslash(self):
        assert parse_reference("chars[a\\\\,b]") == ("chars", ["a\\", "b"])

    @pytest.mark.parametrize("reference", ["length[4,10", "length]", "[4]", "length[]", ""])
    def test_malformed_reference_raises(self, reference):
        with pytest.raises(ConfigurationError):
            parse_reference(reference)


class TestSplitArguments:

    def test_empty_arguments_are_preserved(self):
        assert split_arguments("a,,b") == ["a", "", "b"]

    def test_trailing_backslash_is_literal(self):
        assert split_arguments("a\\") == ["a\\"]


class TestSplitPipeline:

    def test_splits_on_pipes(self):
        assert split_pipeline("required|email") == ["required", "email"]

    def test_pipes_inside_brackets_are_arguments(self):
        assert split_pipeline("required|chars[a,|]|length[2]") == [
            "required",
            "chars[a,|]",
            "length[2]",
        ]

    def test_blank_parts_are_dropped(self):
        assert split_pipeline(" required || email ") == ["required", "email"]
