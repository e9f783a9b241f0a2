"""Tests for junction.validation.parser: rule-string grammar."""

import pytest

from junction.errors import ConfigurationError, InvalidRuleParameter, UnknownRule
from junction.validation.parser import RuleDescriptor, RuleKind, RuleParser, describe
from junction.validation.rules import (
    Email,
    In,
    Integer,
    MaxLength,
    MaxValue,
    MinLength,
    MinValue,
    Regex,
    Required,
    Uuid,
)


def _kinds(rule_string: str) -> list[RuleKind]:
    return [d.kind for d in describe(rule_string)]


class TestSimpleRules:
    def test_single(self) -> None:
        assert RuleParser().parse("required") == (Required(),)

    def test_order_preserved(self) -> None:
        rules = RuleParser().parse("required|email")
        assert rules == (Required(), Email())

    def test_aliases(self) -> None:
        assert _kinds("int") == [RuleKind.INTEGER]
        assert _kinds("bool") == [RuleKind.BOOLEAN]

    def test_uuid_variants(self) -> None:
        parser = RuleParser()
        assert parser.parse("uuid") == (Uuid("v4"),)
        assert parser.parse("uuidv1") == (Uuid("v1"),)
        assert parser.parse("uuid:4") == (Uuid("v4"),)
        assert parser.parse("uuid:any") == (Uuid("any"),)

    def test_whitespace_and_empty_tokens(self) -> None:
        assert _kinds(" required | | email ") == [RuleKind.REQUIRED, RuleKind.EMAIL]

    def test_empty_string(self) -> None:
        assert RuleParser().parse("") == ()


class TestMinMaxContext:
    def test_numeric_context(self) -> None:
        rules = RuleParser().parse("integer|min:18|max:120")
        assert rules == (Integer(), MinValue(18.0), MaxValue(120.0))

    def test_numeric_marker_after_bounds(self) -> None:
        assert _kinds("min:18|integer") == [RuleKind.MIN_VALUE, RuleKind.INTEGER]

    def test_numeric_alias_markers(self) -> None:
        assert _kinds("numeric|max:5")[1] is RuleKind.MAX_VALUE
        assert _kinds("int|max:5")[1] is RuleKind.MAX_VALUE

    def test_length_context(self) -> None:
        rules = RuleParser().parse("min:3|max:20")
        assert rules == (MinLength(3), MaxLength(20))

    def test_descriptor_records_context(self) -> None:
        numeric = describe("integer|min:1")
        assert all(d.numeric_context for d in numeric)
        assert not any(d.numeric_context for d in describe("min:1"))

    def test_fractional_value_bound(self) -> None:
        assert RuleParser().parse("numeric|min:0.5")[1] == MinValue(0.5)

    def test_fractional_length_rejected(self) -> None:
        with pytest.raises(InvalidRuleParameter):
            RuleParser().parse("min:2.5")

    def test_non_numeric_bound_rejected(self) -> None:
        with pytest.raises(InvalidRuleParameter):
            RuleParser().parse("integer|max:lots")


class TestParameterizedRules:
    def test_in_splits_on_comma(self) -> None:
        assert RuleParser().parse("in:red, green,blue") == (In(("red", "green", "blue")),)

    def test_regex_keeps_colons(self) -> None:
        (rule,) = RuleParser().parse(r"regex:^\d{2}:\d{2}$")
        assert isinstance(rule, Regex)
        assert rule.pattern == r"^\d{2}:\d{2}$"
        assert rule.evaluate("12:30") is True

    def test_date(self) -> None:
        descriptors = describe("date:d/m/Y")
        assert descriptors == (RuleDescriptor(RuleKind.DATE, ("d/m/Y",)),)

    def test_bad_regex(self) -> None:
        with pytest.raises(InvalidRuleParameter):
            RuleParser().parse("regex:[oops")

    def test_empty_in(self) -> None:
        with pytest.raises(InvalidRuleParameter):
            RuleParser().parse("in:")


class TestOnError:
    def test_applies_to_last_rule_only(self) -> None:
        rules = RuleParser().parse("required|email|onError('bad email')")
        assert rules[0].message == "This field is required"
        assert rules[1].message == "bad email"

    def test_double_quotes(self) -> None:
        (rule,) = RuleParser().parse('required|onError("Name please")')
        assert rule.message == "Name please"

    def test_message_may_contain_pipe(self) -> None:
        (rule,) = RuleParser().parse("alpha|onError('letters | spaces')")
        assert rule.message == "letters | spaces"

    def test_only_clause(self) -> None:
        assert RuleParser().parse("onError('x')") == ()

    def test_custom_message_recorded_on_descriptor(self) -> None:
        descriptors = describe("required|max:5|onError('short')")
        assert descriptors[0].custom_message is None
        assert descriptors[1].custom_message == "short"


class TestUnknownRules:
    def test_unknown_simple(self) -> None:
        with pytest.raises(UnknownRule) as exc_info:
            RuleParser().parse("required|frobnicate")
        assert exc_info.value.rule_name == "frobnicate"
        assert str(exc_info.value) == "Unknown validation rule: frobnicate"

    def test_unknown_parameterized(self) -> None:
        with pytest.raises(UnknownRule) as exc_info:
            RuleParser().parse("between:1,5")
        assert str(exc_info.value) == "Unknown parameterized validation rule: between"

    def test_parameterized_name_without_parameter(self) -> None:
        with pytest.raises(UnknownRule, match="min"):
            RuleParser().parse("min")

    def test_simple_name_with_parameter(self) -> None:
        with pytest.raises(UnknownRule):
            RuleParser().parse("email:strict")

    def test_is_configuration_error(self) -> None:
        with pytest.raises(ConfigurationError):
            RuleParser().parse("nope")


class TestMemoize:
    def test_memoized_descriptors_are_shared(self) -> None:
        parser = RuleParser()
        assert parser.describe("required|email") is parser.describe("required|email")

    def test_unmemoized_descriptors_are_fresh(self) -> None:
        parser = RuleParser(memoize=False)
        first = parser.describe("required|email")
        second = parser.describe("required|email")
        assert first == second
        assert first is not second

    def test_bad_parameter_raises_every_time(self) -> None:
        parser = RuleParser()
        for _ in range(2):
            with pytest.raises(InvalidRuleParameter):
                parser.parse("uuid:v7")
