class MissingCredentialError(Exception):
    """Raised when no GitHub token is available."""


class UpstreamQueryError(Exception):
    """Raised when the GitHub GraphQL response reports errors."""

    def __init__(self, errors: list[object]) -> None:
        super().__init__("GitHub GraphQL returned errors")
        self.errors = errors


class InvalidGitHubTokenError(Exception):
    """Raised when GitHub rejects the provided token."""


class GitHubAPIError(Exception):
    """Raised when GitHub requests fail for non-auth reasons."""
