"""
Error types for repository access and discovery.
"""


class RepositoryCapabilityError(Exception):
    """Error raised by a repository capability operation."""
    pass


class RepositoryUnavailable(RepositoryCapabilityError):
    """The repository could not be read (I/O or git failure)."""
    pass


class CommitNotFound(RepositoryCapabilityError):
    """A reference or SHA could not be resolved to a commit."""

    def __init__(self, ref: str) -> None:
        super().__init__(f"commit not found: {ref}")
        self.ref = ref


class InvalidRange(RepositoryCapabilityError):
    """The head of a commit range does not descend from its base."""

    def __init__(self, base: str, head: str) -> None:
        super().__init__(f"{head} is not a descendant of {base}")
        self.base = base
        self.head = head


class DiscoveryError(Exception):
    """Error during local repository discovery."""
    pass


class NotARepository(DiscoveryError):
    """The starting path is not inside a Git working tree."""

    def __init__(self, path: object) -> None:
        super().__init__(f"not inside a Git repository: {path}")
        self.path = path


class NoGitHubRemote(DiscoveryError):
    """No configured remote points at a recognised GitHub host."""
    pass


class AmbiguousRemote(DiscoveryError):
    """Several remotes point at different GitHub repositories."""

    def __init__(self, identities: list[str]) -> None:
        super().__init__(
            "remotes point at different repositories: " + ", ".join(identities)
        )
        self.identities = identities


class DiscoveryIoFailure(DiscoveryError):
    """Reading the repository or its configuration failed."""
    pass
