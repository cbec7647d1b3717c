"""
Base formatter and formatter registry.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from review_time_travel.models.hunk import RenderedDiffHunk
    from review_time_travel.models.report import TravelReport, VerificationReport


class BaseFormatter(ABC):
    """
    Abstract base class for output formatters.

    Subclasses must implement format_verification(), format_travel() and
    format_hunks().
    """

    @abstractmethod
    def format_verification(self, report: "VerificationReport") -> str:
        """
        Format the results of one verification pass.

        Args:
            report: The verification report to format.

        Returns:
            Formatted string representation.
        """
        pass

    @abstractmethod
    def format_travel(self, report: "TravelReport") -> str:
        """
        Format per-commit statuses across a commit range.

        Args:
            report: The travel report to format.

        Returns:
            Formatted string representation.
        """
        pass

    @abstractmethod
    def format_hunks(self, hunks: list["RenderedDiffHunk"]) -> str:
        """
        Format rendered diff hunks.

        Args:
            hunks: Hunks in display order.

        Returns:
            Formatted string representation.
        """
        pass


# Formatter registry
_FORMATTERS: dict[str, type[BaseFormatter]] = {}


def register_formatter(name: str) -> Callable[[type[BaseFormatter]], type[BaseFormatter]]:
    """
    Decorator to register a formatter.

    Args:
        name: The name to register the formatter under.

    Returns:
        Decorator function.
    """
    def decorator(cls: type[BaseFormatter]) -> type[BaseFormatter]:
        _FORMATTERS[name] = cls
        return cls
    return decorator


def get_formatter(name: str) -> BaseFormatter:
    """
    Get a formatter instance by name.

    Args:
        name: The formatter name ("text", "json" or "yaml").

    Returns:
        An instance of the requested formatter.

    Raises:
        ValueError: If the formatter name is not recognized.
    """
    # Import formatters to ensure they're registered
    from review_time_travel.output import (  # noqa: F401
        json_output,
        text_output,
        yaml_output,
    )

    if name not in _FORMATTERS:
        available = ", ".join(_FORMATTERS.keys())
        raise ValueError(f"Unknown formatter: {name}. Available: {available}")

    return _FORMATTERS[name]()
