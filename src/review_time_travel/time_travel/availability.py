"""User-facing notices for when time travel cannot be offered."""

from dataclasses import dataclass
from typing import Optional

from review_time_travel.repository.errors import DiscoveryError

_REQUIREMENT = (
    "Time travel requires a local repository checkout.\n"
    "\n"
    "It needs the repository history to show how files looked\n"
    "at different commits.\n"
)


@dataclass(frozen=True)
class TimeTravelContext:
    """Pull request metadata used to explain how to enable time travel."""

    owner: str
    repository: str
    pr_number: int
    host: str = "github.com"
    discovery_failure: Optional[str] = None

    @classmethod
    def from_error(
        cls,
        owner: str,
        repository: str,
        pr_number: int,
        error: Optional[DiscoveryError] = None,
        host: str = "github.com",
    ) -> "TimeTravelContext":
        return cls(
            owner=owner,
            repository=repository,
            pr_number=pr_number,
            host=host,
            discovery_failure=str(error) if error is not None else None,
        )


def unavailable_message(
    context: Optional[TimeTravelContext] = None,
    discovery_error: Optional[DiscoveryError] = None,
) -> str:
    """
    Build the notice shown when time travel is requested without a repository.

    Args:
        context: Pull request metadata, when known.
        discovery_error: Why discovery failed, used when the context has no
            failure reason of its own.

    Returns:
        A multi-line message with numbered steps to fix the situation.
    """
    reason = None
    if context is not None and context.discovery_failure:
        reason = context.discovery_failure
    elif discovery_error is not None:
        reason = str(discovery_error)

    if context is None:
        msg = _REQUIREMENT
        if reason:
            msg += f"\nDiscovery: {reason}\n"
        return msg + (
            "\nUse --repo to point at your local checkout, or run\n"
            "review-time-travel from within the repository directory."
        )

    owner, repo, number = context.owner, context.repository, context.pr_number
    msg = _REQUIREMENT
    msg += f"\nCurrent situation:\n  PR repository: {owner}/{repo} (PR #{number})\n"
    if reason:
        msg += f"  Discovery: {reason}\n"
    msg += (
        "\n"
        "To use time travel:\n"
        "  1. Clone the repository:\n"
        f"     git clone https://{context.host}/{owner}/{repo}\n"
        "  2. Fetch the PR branch:\n"
        f"     git fetch origin pull/{number}/head:pr-{number} && git checkout pr-{number}\n"
        "  3. Run review-time-travel from within the repository directory\n"
        "\n"
        "Alternatively, use --repo to point at your local checkout."
    )
    return msg
