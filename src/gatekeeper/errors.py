"""Errors raised by gatekeeper.

Failures of the GitHub API itself are not wrapped: they surface as the
gidgethub exception hierarchy, available here as ``RemoteAPIError``.
"""

from typing import Optional

from gidgethub import GitHubException

RemoteAPIError = GitHubException


class GatekeeperError(Exception):
    """Base class for all gatekeeper errors."""


class MissingInput(GatekeeperError):
    """A required action input or runtime variable is not set."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Input required and not supplied: {name}")


class NoPullRequestContext(GatekeeperError):
    """A pull request scoped operation ran outside of a pull request trigger."""

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"No pull request found, cannot {operation}")


class UnknownApprovalGroup(GatekeeperError):
    def __init__(self, group_name: str):
        self.group_name = group_name
        super().__init__(f"No check run was created for approval group {group_name!r}")


class AlreadyResolved(GatekeeperError):
    def __init__(self, group_name: str, conclusion: Optional[str]):
        self.group_name = group_name
        self.conclusion = conclusion
        super().__init__(
            f"Check run for approval group {group_name!r} "
            f"is already completed with conclusion {conclusion!r}"
        )


class CheckRunAlreadyExists(GatekeeperError):
    def __init__(self, group_name: str):
        self.group_name = group_name
        super().__init__(f"Check run for approval group {group_name!r} already exists")


class ConfigNotFound(GatekeeperError):
    def __init__(self, path: str, ref: str):
        self.path = path
        self.ref = ref
        super().__init__(f"Config file {path} not found at {ref}")


class ConfigParseError(GatekeeperError):
    raw_config: str
    source_url: Optional[str]

    def __init__(self, *args, **kwargs):
        self.raw_config = kwargs.pop("raw_config")
        self.source_url = kwargs.pop("source_url", None)
        super().__init__(*args, **kwargs)
