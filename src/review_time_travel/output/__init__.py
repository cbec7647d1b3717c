"""
Output package for Review Time Travel.

This package contains formatters for displaying verification results
and diff context as text, JSON or YAML.
"""

from review_time_travel.output.formatters import (
    BaseFormatter,
    get_formatter,
)
from review_time_travel.output.json_output import JsonFormatter
from review_time_travel.output.text_output import TextFormatter
from review_time_travel.output.yaml_output import YamlFormatter

__all__ = [
    "BaseFormatter",
    "JsonFormatter",
    "TextFormatter",
    "YamlFormatter",
    "get_formatter",
]
