"""
YAML output formatter.
"""

from typing import Any

import yaml

from review_time_travel.output.formatters import register_formatter
from review_time_travel.output.json_output import JsonFormatter


@register_formatter("yaml")
class YamlFormatter(JsonFormatter):
    """
    Format output as YAML.

    Produces the same document structure as the JSON formatter.
    """

    def _dump(self, data: dict[str, Any]) -> str:
        # Tuples (line ranges, rendered lines) become plain YAML lists.
        return yaml.safe_dump(_plain(data), default_flow_style=False, sort_keys=False, allow_unicode=True)


def _plain(value: Any) -> Any:
    if isinstance(value, dict):
        return {str(key): _plain(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(item) for item in value]
    return value
