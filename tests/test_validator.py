"""
Validator Tests
"""

import pytest

from formguard import Validator, validate, validate_or_fail
from formguard.validation import Shape
from formguard.validation.exceptions import ConfigurationError, MessageLookupError
from formguard.validation.result import ValidationError


def tracked(calls):
    """A passing rule that records every value it sees."""
    def seen(value):
        calls.append(value)
        return True
    return seen


class TestRequired:

    @pytest.mark.parametrize("value", ["", None, False, []])
    def test_empty_values_fail(self, value):
        validator = Validator({"field": value}).add_rules("field", "required")

        assert not validator.validate()
        assert validator.errors() == {"field": "required"}

    @pytest.mark.parametrize("value", [0, "0", "   "])
    def test_present_values_pass(self, value):
        assert Validator({"field": value}).add_rules("field", "required").validate()

    def test_absent_field_fails(self):
        validator = Validator({"other": "x"}).add_rules("field", "required")

        assert not validator.validate()
        assert validator.errors() == {"field": "required"}
        assert validator["field"] is None


class TestRuleOrder:

    def test_first_failure_stops_the_field(self):
        calls = []
        validator = Validator({"name": "abc"}).add_rules("name", "length[5]", tracked(calls))

        assert not validator.validate()
        assert validator.errors() == {"name": "length"}
        assert calls == []

    def test_rules_run_in_registration_order(self):
        validator = Validator({"email": "bad"}).add_rules("email", "required", "email", "length[100]")

        validator.validate()

        assert validator.errors() == {"email": "email"}

    def test_wildcard_failure_does_not_stop_siblings(self):
        calls = []
        validator = (
            Validator({"a": "abc", "b": "much too long", "c": "xyz"})
            .add_rules("*", "length[1,5]", tracked(calls))
        )

        assert not validator.validate()
        assert validator.errors() == {"b": "length"}
        assert sorted(calls) == ["abc", "xyz"]

    @pytest.mark.parametrize("target", ["*", True])
    def test_wildcard_spellings(self, target):
        validator = Validator({"a": "", "b": "x"}).add_rules(target, "required")

        validator.validate()

        assert validator.errors() == {"a": "required"}

    def test_rule_tuple_with_arguments(self):
        validator = Validator({"code": "12-345"}).add_rules("code", ("phone", ["5"]))
        assert validator.validate()


class TestEmptyValues:

    def test_empty_values_skip_ordinary_rules(self):
        assert Validator({"email": ""}).add_rules("email", "email").validate()

    def test_allowed_empty_rules_run(self):
        validator = Validator({"email": ""}).allow_empty_rules("email").add_rules("email", "email")

        assert not validator.validate()
        assert validator.errors() == {"email": "email"}

    def test_empty_rules_from_constructor(self):
        validator = Validator({"n": ""}, empty_rules=["numeric"]).add_rules("n", "numeric")
        assert not validator.validate()

    def test_matches_runs_on_empty_values(self):
        validator = Validator({"password": "secret", "confirm": ""}).add_rules(
            "confirm", "matches[password]"
        )

        assert not validator.validate()
        assert validator.errors() == {"confirm": "matches"}


class TestRelations:

    def test_matches(self):
        record = {"password": "secret", "confirm": "secret"}
        assert Validator(record).add_rules("confirm", "matches[password]").validate()

    def test_matches_sees_pre_filtered_values(self):
        record = {"password": "secret ", "confirm": " secret"}
        validator = Validator(record).pre_filter("trim").add_rules("confirm", "matches[password]")
        assert validator.validate()

    def test_depends_on(self):
        validator = Validator({"state": "CA", "country": ""}).add_rules("state", "depends_on[country]")

        assert not validator.validate()
        assert validator.errors() == {"state": "depends_on"}

    def test_numeric_uses_validator_separator(self):
        assert Validator({"n": "12,5"}, decimal_separator=",").add_rules("n", "numeric").validate()
        assert not Validator({"n": "12,5"}).add_rules("n", "numeric").validate()

    def test_invalid_separator(self):
        with pytest.raises(ConfigurationError):
            Validator({}, decimal_separator="")


class TestFilters:

    def test_pre_filter_applies_to_every_field(self):
        validator = Validator({"a": " x ", "b": "y  "}).pre_filter("trim")

        validator.validate()

        assert validator.as_dict() == {"a": "x", "b": "y"}

    def test_trim_is_idempotent(self):
        first = Validator({"name": "  Ann  "}).pre_filter("trim")
        first.validate()
        second = Validator(first.as_dict()).pre_filter("trim")
        second.validate()

        assert first["name"] == second["name"] == "Ann"

    def test_filters_run_element_wise_on_sequences(self):
        validator = Validator({"tags": [" a ", " b"]}).pre_filter("trim", "tags")

        validator.validate()

        assert validator["tags"] == ["a", "b"]

    def test_filters_run_in_registration_order(self):
        validator = Validator({"name": " ann "}).pre_filter("trim").pre_filter("ucfirst")

        validator.validate()

        assert validator["name"] == "Ann"

    def test_post_filters_run_after_failure(self):
        validator = (
            Validator({"name": "ann", "email": "bad"})
            .add_rules("email", "email")
            .post_filter("upper", "name")
        )

        assert not validator.validate()
        assert validator["name"] == "ANN"

    def test_rules_see_pre_filtered_but_not_post_filtered_values(self):
        calls = []
        validator = (
            Validator({"name": " ann "})
            .pre_filter("trim")
            .post_filter("upper")
            .add_rules("name", tracked(calls))
        )

        validator.validate()

        assert calls == ["ann"]
        assert validator["name"] == "ANN"

    def test_strip_tags_filter_keeps_plain_characters(self):
        validator = Validator({"note": "<em>R&D</em> at <3 pm"}).pre_filter("strip_tags")

        validator.validate()

        assert validator["note"] == "R&D at <3 pm"

    def test_filter_callable(self):
        validator = Validator({"n": "1"}).pre_filter(lambda value: value + "0", "n")

        validator.validate()

        assert validator["n"] == "10"


class TestCallbacks:

    def test_callback_can_flag_errors(self):
        def too_young(validator, field):
            if int(validator.get(field)) < 18:
                validator.add_error(field, "too_young")

        validator = Validator({"age": "12"}).add_callbacks("age", too_young)

        assert not validator.validate()
        assert validator.errors() == {"age": "too_young"}

    def test_callbacks_skip_fields_with_errors(self):
        seen = []
        validator = (
            Validator({"a": "", "b": "x"})
            .add_rules("a", "required")
            .add_callbacks("*", lambda validator, field: seen.append(field))
        )

        validator.validate()

        assert seen == ["b"]

    def test_honeypot(self):
        validator = Validator({"name": "Ann", "honeypot": "filled"}).add_callbacks("honeypot", "honeypot")

        assert not validator.validate()
        assert validator.errors() == {"honeypot": "invalid"}

    def test_empty_honeypot_passes(self):
        validator = Validator({"name": "Ann"}).add_callbacks("honeypot", "honeypot")

        assert validator.validate()
        assert validator["honeypot"] is None


class TestShapes:

    def test_is_array_field_is_populated_as_list(self):
        validator = Validator({"x": "1"}).add_rules("tags", "is_array")

        assert validator.validate()
        assert validator["tags"] == []

    def test_is_array_rejects_scalars(self):
        validator = Validator({"tags": "a"}).add_rules("tags", "is_array")

        assert not validator.validate()
        assert validator.errors() == {"tags": "is_array"}

    def test_declared_sequence_shape(self):
        validator = Validator({"x": "1"}).shape("tags", Shape.SEQUENCE).add_rules("tags", "required")

        assert not validator.validate()
        assert validator.errors() == {"tags": "required"}
        assert validator["tags"] == []

    def test_unknown_shape(self):
        with pytest.raises(ConfigurationError):
            Validator().shape("tags", "matrix")


class TestSubmission:

    def test_empty_record_is_not_submitted(self):
        calls = []
        validator = (
            Validator({})
            .pre_filter("trim")
            .add_rules("name", "required", tracked(calls))
            .post_filter(lambda value: "post", "name")
        )

        assert validator.submitted() is False
        assert validator.validate() is False
        assert validator.errors() == {}
        assert validator["name"] == ""
        assert calls == []

    def test_submitted_flag_can_be_forced(self):
        validator = Validator({}).add_rules("name", "required")
        validator.submitted(True)

        assert not validator.validate()
        assert validator.errors() == {"name": "required"}

    def test_result_of_unsubmitted_record(self):
        validator = Validator({})
        validator.validate()
        assert validator.result().success is False


class TestScenarios:

    def test_contact_form_failure(self):
        validator = (
            Validator({"name": "", "email": "bad", "honeypot": "filled"})
            .pre_filter("trim")
            .add_rules("name", "required")
            .add_rules("email", "required", "email")
            .add_callbacks("honeypot", "honeypot")
        )

        assert not validator.validate()
        assert validator.errors() == {
            "name": "required",
            "email": "email",
            "honeypot": "invalid",
        }

    def test_contact_form_success(self):
        validator = (
            Validator({"name": " Ann ", "email": "ann@example.com", "phone": "(555) 123-4567"})
            .pre_filter("trim")
            .add_rules("name", "required", "length[2,50]")
            .add_rules("email", "required", "email")
            .add_rules("phone", "phone")
        )

        assert validator.validate()
        assert validator.errors() == {}
        assert validator["name"] == "Ann"

    def test_minimal_success_record(self):
        validator = (
            Validator({"name": "Ann", "email": "ann@x.com", "honeypot": ""})
            .add_rules("name", "required")
            .add_rules("email", "required", "email")
            .add_callbacks("honeypot", "honeypot")
        )

        assert validator.validate()
        assert validator.errors() == {}

    def test_validating_a_copy_twice(self):
        template = Validator().pre_filter("trim").add_rules("*", "required", "length[2,5]")
        record = {"a": " abc ", "b": "", "c": "abcdefg"}

        first = template.copy(record)
        second = template.copy(record)

        assert first.validate() == second.validate() is False
        assert first.errors() == second.errors() == {"b": "required", "c": "length"}

    def test_revalidating_keeps_filtered_value(self):
        validator = Validator({"greeting": "  hi  "}).pre_filter("trim")

        validator.validate()
        validator.validate()

        assert validator["greeting"] == "hi"


class TestErrorsAndMessages:

    def test_errors_with_message_table(self, field_messages):
        validator = Validator({"name": "", "email": "bad"}).add_rules("name", "required").add_rules(
            "email", "required", "email"
        )
        validator.validate()

        assert validator.errors(field_messages) == {
            "name": "Name is required",
            "email": "Email is invalid",
        }

    def test_incomplete_message_table(self):
        validator = Validator({"name": ""}).add_rules("name", "required")
        validator.validate()

        with pytest.raises(MessageLookupError) as info:
            validator.errors({"name": {"length": "Too short"}})
        assert isinstance(info.value, KeyError)
        assert info.value.field == "name"
        assert info.value.code == "required"

    def test_add_error_replaces_earlier_code(self):
        validator = Validator({"a": "x"})
        validator.add_error("a", "first").add_error("a", "second")

        assert validator.errors() == {"a": "second"}

    def test_errors_returns_a_copy(self):
        validator = Validator({"a": ""}).add_rules("a", "required")
        validator.validate()
        validator.errors()["a"] = "changed"

        assert validator.errors() == {"a": "required"}

    def test_free_form_messages(self):
        validator = Validator({"a": "x"})
        validator.message("a", "First").message("b", "Second")

        assert validator.message("a") == "First"
        assert validator.message("missing") == ""
        assert validator.message() == "First\nSecond"


class TestCopies:

    def test_copy_shares_configuration(self):
        template = Validator().pre_filter("trim").add_rules("name", "required")

        first = template.copy({"name": " "})
        second = template.copy({"name": " Bob "})

        assert not first.validate()
        assert second.validate()
        assert first.errors() == {"name": "required"}
        assert second.errors() == {}
        assert second["name"] == "Bob"

    def test_copy_starts_without_errors(self):
        validator = Validator({"name": ""}).add_rules("name", "required")
        validator.validate()
        validator.message("name", "Check this")

        duplicate = validator.copy({"name": "Ann"})

        assert duplicate.errors() == {}
        assert duplicate.message() == ""
        assert validator.errors() == {"name": "required"}

    def test_copy_recomputes_submitted(self):
        template = Validator({"name": "Ann"}).add_rules("name", "required")
        assert template.copy({}).submitted() is False

    def test_copy_validates_independently_of_source_record(self):
        source = {"name": "Ann"}
        template = Validator(source).pre_filter("upper")
        duplicate = template.copy({"name": "bob"})

        duplicate.validate()

        assert duplicate["name"] == "BOB"
        assert template["name"] == "Ann"
        assert source == {"name": "Ann"}

    def test_clone_keeps_record(self):
        validator = Validator({"name": ""}).add_rules("name", "required")
        validator.validate()

        clone = validator.clone()

        assert clone.errors() == {}
        assert clone.as_dict() == validator.as_dict()
        assert not clone.validate()
        assert clone.errors() == {"name": "required"}

    def test_copies_see_later_registrations(self):
        template = Validator()
        duplicate = template.copy({"name": ""})
        template.add_rules("name", "required")

        assert not duplicate.validate()


class TestConfigurationErrors:

    def test_oversized_decimal_bound_fails_without_raising(self):
        validator = Validator({"n": "1.5"}).add_rules("n", "decimal[99999999999]")

        assert validator.validate() is False
        assert validator.errors() == {"n": "decimal"}

    @pytest.mark.parametrize("rule", ["no_such_rule", "length[4,10", 42])
    def test_bad_rules_raise_at_registration(self, rule):
        with pytest.raises(ConfigurationError):
            Validator().add_rules("name", rule)

    def test_unknown_filter(self):
        with pytest.raises(ConfigurationError):
            Validator().pre_filter("no_such_filter")

    def test_unknown_callback(self):
        with pytest.raises(ConfigurationError):
            Validator().add_callbacks("name", "no_such_callback")

    def test_bad_field_name(self):
        with pytest.raises(ConfigurationError):
            Validator().add_rules("", "required")


class TestFieldNames:

    def test_configured_fields_in_first_seen_order(self):
        validator = (
            Validator()
            .pre_filter("trim", "b")
            .add_rules("a", "required")
            .add_callbacks("b", "honeypot")
            .post_filter("upper", "c")
            .add_rules("*", "required")
        )

        assert validator.field_names() == ["b", "a", "c"]

    def test_safe_dict_only_has_configured_fields(self):
        validator = Validator({"a": "1", "extra": "2"}).add_rules("a", "required").add_rules(
            "b", "required"
        )

        assert validator.safe_dict() == {"a": "1", "b": None}
        assert validator.safe_dict("a") == {"a": "1"}


class TestConvenienceFunctions:

    def test_from_rules(self):
        validator = Validator.from_rules(
            {"name": "Ann", "email": "bad"},
            {"name": "required|length[2,50]", "email": ["required", "email"]},
        )

        assert not validator.validate()
        assert validator.errors() == {"email": "email"}

    def test_validate(self):
        result = validate({"email": " test@example.com "}, {"email": "required|email"}, pre_filters=["trim"])

        assert result
        assert result.record == {"email": "test@example.com"}

    def test_validate_failure_result(self):
        result = validate({"email": "bad"}, {"email": "required|email"})

        assert result.failed()
        assert result.has_error("email")
        assert result.messages({"email": {"email": "Email is invalid"}}) == {"email": "Email is invalid"}
        with pytest.raises(ValidationError):
            result.raise_if_invalid()

    def test_validate_or_fail(self):
        assert validate_or_fail({"name": "Ann"}, {"name": "required"}) == {"name": "Ann"}

        with pytest.raises(ValidationError) as info:
            validate_or_fail({"name": ""}, {"name": "required"})
        assert info.value.errors == {"name": "required"}
        assert "name: required" in str(info.value)
