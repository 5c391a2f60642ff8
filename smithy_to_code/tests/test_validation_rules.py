"""
Unit tests for validation rule objects.
"""

import unittest

import pytest

from smithy_to_code.validation_rules import (
    LengthRule,
    PatternRule,
    RangeRule,
    RequiredFieldsRule,
    load_rule_templates,
)


class TestValidationRulesPython(unittest.TestCase):
    """Test validation rules for Python code generation"""

    @classmethod
    def setUpClass(cls):
        cls.templates = load_rule_templates()

    def test_required_fields_rule(self):
        rule = RequiredFieldsRule(["title", "created_at"], ["title", "createdAt"])
        code = rule.generate_code(self.templates)
        self.assertEqual(len(code), 3)
        self.assertEqual(
            code[0],
            "missing = [member for name, member in (('title', 'title'), ('created_at', 'createdAt'))"
            " if getattr(self, name) is None]",
        )
        self.assertEqual(code[1], "if missing:")
        self.assertIn("Missing required field(s)", code[2])

    def test_length_rule_between(self):
        code = LengthRule("title", "title", minimum=1, maximum=200).generate_code(self.templates)
        self.assertEqual(code[0], "if not 1 <= len(self.title) <= 200:")
        self.assertEqual(code[1], "    raise ValueError('title length must be between 1 and 200')")

    def test_length_rule_min_only(self):
        code = LengthRule("title", "title", minimum=3).generate_code(self.templates)
        self.assertEqual(code[0], "if len(self.title) < 3:")
        self.assertIn("at least 3", code[1])

    def test_length_rule_max_only(self):
        code = LengthRule("title", "title", maximum=20).generate_code(self.templates)
        self.assertEqual(code[0], "if len(self.title) > 20:")
        self.assertIn("at most 20", code[1])

    def test_range_rule_optional_field(self):
        code = RangeRule("limit", "limit", minimum=1, maximum=100, is_required=False).generate_code(self.templates)
        self.assertEqual(code[0], "if self.limit is not None and not 1 <= self.limit <= 100:")

    def test_range_rule_uses_member_name_in_message(self):
        code = RangeRule("page_size", "pageSize", minimum=0).generate_code(self.templates)
        self.assertEqual(code[0], "if self.page_size < 0:")
        self.assertEqual(code[1], "    raise ValueError('pageSize must be at least 0')")

    def test_pattern_rule(self):
        code = PatternRule("slug", "slug", "^[a-z0-9-]+$").generate_code(self.templates)
        self.assertEqual(code[0], "if not re.search('^[a-z0-9-]+$', self.slug):")
        self.assertIn("must match pattern", code[1])

    def test_pattern_rule_keeps_backslashes(self):
        code = PatternRule("code", "code", "^\\d{3}$", is_required=False).generate_code(self.templates)
        self.assertEqual(code[0], "if self.code is not None and not re.search('^\\\\d{3}$', self.code):")


@pytest.mark.parametrize(
    "trait, variant",
    [
        ({"min": 1, "max": 2}, "between"),
        ({"min": 1}, "min"),
        ({"max": 2}, "max"),
    ],
)
def test_bounded_rule_variants(trait, variant):
    assert LengthRule.from_trait(trait, "name", "name", True).get_variant() == variant


@pytest.mark.parametrize("trait", [None, {}, "not a mapping"])
def test_bounded_rule_without_bounds(trait):
    assert RangeRule.from_trait(trait, "count", "count", False) is None


def test_bounded_rule_requires_a_bound():
    with pytest.raises(ValueError):
        LengthRule("name", "name")
