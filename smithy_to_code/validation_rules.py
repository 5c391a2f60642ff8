"""
Validation rule objects that generate validation code.

Each rule represents one constraint derived from member traits (required,
length, range, pattern) and knows how to generate the Python lines of the
validate() method of a generated type.

Code and message templates live in validation_rules_python.json. They are
loaded by the caller (once per emitter run) and passed to generate_code.
"""

import json
from abc import ABC, abstractmethod
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Dict, List, Optional

TEMPLATE_FILE = Path(__file__).parent / "validation_rules_python.json"


def load_rule_templates(path: Path = TEMPLATE_FILE) -> Dict[str, Any]:
    """
    Load the string templates for all validation rules.

    Args:
        path: JSON template file

    Returns:
        Dictionary of string templates keyed by rule class name
    """
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


class ValidationRule(ABC):
    """Base class for all validation rules"""

    def __init__(self, field_name: str, member_name: Optional[str] = None, is_required: bool = True):
        """
        Initialize a validation rule.

        Args:
            field_name: Python attribute name of the field being validated
            member_name: Member name used in error messages (defaults to field_name)
            is_required: Whether the field is required (affects None checking)
        """
        self.field_name = field_name
        self.member_name = member_name or field_name
        self.is_required = is_required

    def get_string(self, templates: Mapping[str, Any], key: str, **format_params) -> Any:
        """
        Get a string template for this validation rule and format it.

        Args:
            templates: Loaded rule templates
            key: The string key to retrieve (e.g., 'error_message', 'condition')
            **format_params: Parameters to format into the string template

        Returns:
            Formatted string or list depending on the template structure
        """
        class_name = self.__class__.__name__

        if class_name not in templates:
            raise KeyError(f"No string templates found for {class_name}")

        rule_templates = templates[class_name]

        if key not in rule_templates:
            raise KeyError(f"Key '{key}' not found in templates for {class_name}")

        return self._format_template(rule_templates[key], format_params)

    def _format_template(self, template, format_params: dict):
        """Recursively format a template that can be a string or a list."""
        if isinstance(template, str):
            return template.format(**format_params)
        elif isinstance(template, list):
            return [self._format_template(item, format_params) for item in template]
        return template

    def format_validation_code(self, templates: Mapping[str, Any], condition: str, error_message: str) -> List[str]:
        """
        Format an if/raise pair using the shared templates.

        Returns:
            List of formatted code lines
        """
        template = templates.get("_template", {})
        if_line = template.get("if_line", "if {condition}:").format(condition=condition)
        raise_line = template.get("raise_line", "    raise ValueError({error_message!r})").format(
            error_message=error_message
        )
        return [if_line, raise_line]

    def get_field_params(self) -> Dict[str, Any]:
        return {"field_name": self.field_name, "member": self.member_name}

    @abstractmethod
    def get_template_params(self) -> Dict[str, Any]:
        """
        Get rule-specific parameters for template formatting.
        Should return parameters needed by condition and error_message templates.
        """
        pass

    def get_variant(self) -> Optional[str]:
        """
        Override to select a template variant ("condition_<variant>").
        Default is None (plain "condition" / "error_message" keys).
        """
        return None

    def apply_none_check(self) -> bool:
        """
        Override to indicate if None checking should be applied.
        Default is False (no None check needed).
        """
        return False

    def generate_code(self, templates: Mapping[str, Any]) -> List[str]:
        """
        Generate validation code lines for this rule.
        Uses templates from JSON and parameters from get_template_params().
        """
        params = self.get_field_params()
        params.update(self.get_template_params())

        variant = self.get_variant()
        suffix = f"_{variant}" if variant else ""

        condition = self.get_string(templates, f"condition{suffix}", **params)
        error_message = self.get_string(templates, f"error_message{suffix}", **params)

        if self.apply_none_check():
            condition = self._wrap_with_none_check(condition)

        return self.format_validation_code(templates, condition, error_message)

    def _wrap_with_none_check(self, condition: str) -> str:
        """Convert "condition" to "self.field is not None and condition" for optional fields."""
        if not self.is_required:
            return f"self.{self.field_name} is not None and {condition}"
        return condition


class OptionalFieldValidationRule(ValidationRule):
    """
    Base class for validation rules that need to handle optional fields.
    Automatically applies None checks for optional (non-required) fields.
    """

    def apply_none_check(self) -> bool:
        """Apply None check if field is not required."""
        return not self.is_required


class RequiredFieldsRule(ValidationRule):
    """Validates that every required field is set"""

    def __init__(self, field_names: List[str], member_names: Optional[List[str]] = None):
        super().__init__(", ".join(field_names))
        self.field_names = list(field_names)
        self.member_names = list(member_names or field_names)

    def get_template_params(self) -> Dict[str, Any]:
        # (attribute, member) pairs: checked by attribute, reported by member name
        return {"fields": tuple(zip(self.field_names, self.member_names))}

    def generate_code(self, templates: Mapping[str, Any]) -> List[str]:
        # One loop over all required fields instead of an if/raise per field
        return self.get_string(templates, "lines", **self.get_template_params())


class BoundedRule(OptionalFieldValidationRule):
    """Base class for rules with min+max, min-only and max-only variants"""

    def __init__(
        self,
        field_name: str,
        member_name: Optional[str] = None,
        minimum: Optional[float] = None,
        maximum: Optional[float] = None,
        is_required: bool = True,
    ):
        if minimum is None and maximum is None:
            raise ValueError(f"{self.__class__.__name__} for {field_name} needs a minimum or a maximum")
        super().__init__(field_name, member_name, is_required)
        self.minimum = minimum
        self.maximum = maximum

    @classmethod
    def from_trait(cls, trait: Any, field_name: str, member_name: str, is_required: bool):
        """Build the rule from a trait value, or return None if it sets no bound."""
        if not isinstance(trait, Mapping):
            return None
        minimum, maximum = trait.get("min"), trait.get("max")
        if minimum is None and maximum is None:
            return None
        return cls(field_name, member_name, minimum=minimum, maximum=maximum, is_required=is_required)

    def get_variant(self) -> str:
        if self.minimum is not None and self.maximum is not None:
            return "between"
        return "min" if self.minimum is not None else "max"

    def get_template_params(self) -> Dict[str, Any]:
        return {"min": self.minimum, "max": self.maximum}


class LengthRule(BoundedRule):
    """Validates string, blob, list or map length"""


class RangeRule(BoundedRule):
    """Validates a numeric value range"""


class PatternRule(OptionalFieldValidationRule):
    """Validates that a string matches a regex pattern"""

    def __init__(self, field_name: str, member_name: Optional[str], pattern: str, is_required: bool = True):
        super().__init__(field_name, member_name, is_required)
        self.pattern = pattern

    def get_template_params(self) -> Dict[str, Any]:
        return {"pattern": self.pattern}
