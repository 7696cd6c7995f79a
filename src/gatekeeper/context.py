from __future__ import annotations

from functools import cached_property
import json
import logging
import os
from typing import Callable, List, Mapping, Optional

import aiohttp
import cachetools
import pydantic
from gidgethub import aiohttp as gh_aiohttp
from gidgethub.abc import GitHubAPI

from gatekeeper import config as app_config
from gatekeeper.errors import MissingInput
from gatekeeper.github.api import API

logger = logging.getLogger("gatekeeper")


class RepositoryContext(pydantic.BaseModel):
    model_config = pydantic.ConfigDict(frozen=True)

    owner: str
    repo: str
    sha: str
    ref: str
    pull_request_number: Optional[int] = None

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"

    def __str__(self) -> str:
        if self.pull_request_number is None:
            return f"{self.full_name}@{self.ref}"
        return f"{self.full_name}#{self.pull_request_number}"


def get_input(
    name: str, environ: Optional[Mapping[str, str]] = None, required: bool = True
) -> str:
    """Read an action input the way the Actions runner exposes it (``INPUT_<NAME>``)."""
    environ = os.environ if environ is None else environ
    key = "INPUT_" + name.replace(" ", "_").upper()
    value = environ.get(key, "").strip()
    if required and not value:
        raise MissingInput(name)
    return value


def _pull_request_number(event_path: Optional[str]) -> Optional[int]:
    if not event_path:
        return None
    try:
        with open(event_path) as fh:
            payload = json.load(fh)
    except (OSError, ValueError):
        logger.warning("Unable to read event payload at %s", event_path, exc_info=True)
        return None

    pull_request = payload.get("pull_request") if isinstance(payload, dict) else None
    if not pull_request:
        return None
    return pull_request.get("number")


def context_from_environment(
    environ: Optional[Mapping[str, str]] = None,
) -> RepositoryContext:
    environ = os.environ if environ is None else environ

    for name in ("GITHUB_REPOSITORY", "GITHUB_SHA", "GITHUB_REF"):
        if not environ.get(name):
            raise MissingInput(name)

    owner, _, repo = environ["GITHUB_REPOSITORY"].partition("/")
    if not owner or not repo:
        raise MissingInput("GITHUB_REPOSITORY")

    return RepositoryContext(
        owner=owner,
        repo=repo,
        sha=environ["GITHUB_SHA"],
        ref=environ["GITHUB_REF"],
        pull_request_number=_pull_request_number(environ.get("GITHUB_EVENT_PATH")),
    )


class ContextCache:
    """Process-wide identifiers, each resolved on first access and kept.

    The sources are plain callables. Each one is invoked at most once per
    instance; afterwards the cached value is returned as is.
    """

    def __init__(
        self,
        *,
        client_factory: Callable[[str], GitHubAPI],
        context_source: Callable[[], RepositoryContext] = context_from_environment,
        credential_source: Callable[[], str] = lambda: get_input("token"),
        config_path_source: Callable[[], str] = lambda: get_input("config"),
    ):
        self._client_factory = client_factory
        self._context_source = context_source
        self._credential_source = credential_source
        self._config_path_source = config_path_source

    @classmethod
    def for_session(cls, session: aiohttp.ClientSession, **sources) -> "ContextCache":
        http_cache = cachetools.LRUCache(maxsize=app_config.HTTP_CACHE_SIZE)

        def client_factory(token: str) -> GitHubAPI:
            return gh_aiohttp.GitHubAPI(
                session,
                "gatekeeper",
                oauth_token=token,
                cache=http_cache,
                base_url=app_config.GITHUB_API_URL,
            )

        return cls(client_factory=client_factory, **sources)

    @cached_property
    def context(self) -> RepositoryContext:
        context = self._context_source()
        logger.debug("Resolved repository context %s at %s", context, context.sha)
        return context

    @cached_property
    def credential(self) -> str:
        return self._credential_source()

    @cached_property
    def config_path(self) -> str:
        path = self._config_path_source()
        logger.debug("Resolved config path %s", path)
        return path

    @cached_property
    def client(self) -> API:
        logger.debug("Creating GitHub client for %s", app_config.GITHUB_API_URL)
        return API(self._client_factory(self.credential))

    def resolved(self) -> List[str]:
        return [
            name
            for name in ("context", "credential", "config_path", "client")
            if name in self.__dict__
        ]

    def __repr__(self) -> str:
        return f"ContextCache(resolved={self.resolved()})"
