from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Awaitable, Callable, List, TypeVar

import gidgethub

from gatekeeper import config as app_config
from gatekeeper.errors import ConfigNotFound, ConfigParseError, NoPullRequestContext
from gatekeeper.github.model import Review
from gatekeeper.model import Config, parse_config

if TYPE_CHECKING:
    from gatekeeper.context import ContextCache

logger = logging.getLogger("gatekeeper")

T = TypeVar("T")


async def paginate(
    list_page: Callable[[int, int], Awaitable[List[T]]],
    per_page: int = app_config.PER_PAGE,
) -> List[T]:
    """Collect every item of a page-based listing, in the order returned.

    Pages are requested one after another starting at 1 until a page comes
    back with fewer than ``per_page`` items. A collection whose size is an
    exact multiple of ``per_page`` therefore costs one extra, empty request.
    """
    items: List[T] = []
    page = 1
    while True:
        batch = await list_page(page, per_page)
        logger.debug("Page %d returned %d items", page, len(batch))
        items.extend(batch)
        if len(batch) < per_page:
            return items
        page += 1


def _require_pull_request(ctx: ContextCache, operation: str) -> int:
    number = ctx.context.pull_request_number
    if number is None:
        raise NoPullRequestContext(operation)
    return number


async def fetch_changed_files(ctx: ContextCache) -> List[str]:
    number = _require_pull_request(ctx, "list changed files")
    context = ctx.context
    api = ctx.client

    files = await paginate(
        lambda page, per_page: api.list_pull_request_files(
            context.owner, context.repo, number, page, per_page
        )
    )
    logger.debug("PR #%d has %d changed files", number, len(files))
    return [f.filename for f in files]


async def get_reviews(ctx: ContextCache) -> List[Review]:
    number = _require_pull_request(ctx, "list reviews")
    context = ctx.context
    api = ctx.client

    reviews = await paginate(
        lambda page, per_page: api.list_pull_request_reviews(
            context.owner, context.repo, number, page, per_page
        )
    )
    logger.debug("PR #%d has %d reviews", number, len(reviews))
    return reviews


async def fetch_config(ctx: ContextCache) -> Config:
    context = ctx.context
    api = ctx.client
    path = ctx.config_path

    try:
        content = await api.get_content(context.owner, context.repo, path, context.ref)
    except gidgethub.BadRequest as e:
        if e.status_code == 404:
            raise ConfigNotFound(path, context.ref) from e
        raise

    if content.type != "file":
        logger.debug("Config path %s is a %s, not a file", path, content.type)
        raise ConfigNotFound(path, context.ref)

    try:
        decoded_content = content.decoded_content()
    except ValueError as e:
        # covers bad base64 and undecodable bytes
        raise ConfigParseError(
            str(e), raw_config=content.content or "", source_url=content.html_url
        ) from e

    config = parse_config(decoded_content, source_url=content.html_url)
    logger.debug("Loaded %d approval groups from %s", len(config), path)
    return config
