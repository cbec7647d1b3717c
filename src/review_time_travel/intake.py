"""
Loading review comments from disk.

Accepts the JSON returned by GitHub's pull request review comments API,
either as a bare list or wrapped in an object that may also describe the
pull request. YAML files with the same shape are accepted too.
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import ValidationError

from review_time_travel.models.comment import ReviewComment
from review_time_travel.time_travel.availability import TimeTravelContext

logger = logging.getLogger(__name__)

YAML_SUFFIXES = {".yaml", ".yml"}


@dataclass(frozen=True)
class ReviewDocument:
    """Comments plus whatever pull request metadata the file carried."""

    comments: tuple[ReviewComment, ...]
    base: Optional[str] = None
    head: Optional[str] = None
    context: Optional[TimeTravelContext] = None

    @property
    def commit_range(self) -> Optional[tuple[str, str]]:
        if self.base is None or self.head is None:
            return None
        return self.base, self.head


def load_review_document(path: Path) -> ReviewDocument:
    """
    Load a comments file.

    Args:
        path: JSON or YAML file.

    Returns:
        The parsed document, comments in file order.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ValueError: If the file cannot be parsed.
    """
    if not path.exists():
        raise FileNotFoundError(f"Comments file not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            if path.suffix.lower() in YAML_SUFFIXES:
                data = yaml.safe_load(f)
            else:
                data = json.load(f)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ValueError(f"Invalid comments file {path}: {e}") from e

    return parse_review_document(data)


def parse_review_document(data: Any) -> ReviewDocument:
    """Build a ReviewDocument from decoded JSON or YAML data."""
    pull_request: dict[str, Any] = {}
    if isinstance(data, dict):
        pull_request = data.get("pull_request") or {}
        raw_comments = data.get("comments", [])
    else:
        raw_comments = data

    if not isinstance(raw_comments, list):
        raise ValueError("Expected a list of comments")

    comments = []
    for index, item in enumerate(raw_comments):
        if not isinstance(item, dict):
            raise ValueError(f"Comment {index} is not an object")
        try:
            comments.append(ReviewComment.from_api(item))
        except (KeyError, ValidationError) as e:
            raise ValueError(f"Invalid comment {index}: {e}") from e

    logger.debug("Loaded %d review comments", len(comments))
    return ReviewDocument(
        comments=tuple(comments),
        base=_ref(pull_request, "base"),
        head=_ref(pull_request, "head"),
        context=_context(pull_request),
    )


def load_comments(path: Path) -> list[ReviewComment]:
    """Load only the comments of a comments file."""
    return list(load_review_document(path).comments)


def _ref(pull_request: dict[str, Any], key: str) -> Optional[str]:
    # Either a plain SHA or the API's {"sha": ...} object.
    value = pull_request.get(key)
    if isinstance(value, dict):
        value = value.get("sha")
    return str(value) if value else None


def _context(pull_request: dict[str, Any]) -> Optional[TimeTravelContext]:
    owner = pull_request.get("owner")
    repository = pull_request.get("repository")
    number = pull_request.get("number")
    if not owner or not repository or number is None:
        return None
    return TimeTravelContext(
        owner=str(owner),
        repository=str(repository),
        pr_number=int(number),
        host=str(pull_request.get("host") or "github.com"),
    )
