from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Awaitable, Dict, List, Protocol

from gatekeeper.checks import CheckRunRegistry, GroupCheckRun
from gatekeeper.github import fetch_changed_files, fetch_config, get_reviews
from gatekeeper.github.model import Review
from gatekeeper.model import ConfigGroup

if TYPE_CHECKING:
    from gatekeeper.context import ContextCache

logger = logging.getLogger("gatekeeper")


class ApprovalEvaluator(Protocol):
    def __call__(
        self,
        group_name: str,
        group: ConfigGroup,
        changed_files: List[str],
        reviews: List[Review],
    ) -> Awaitable[bool]:
        ...


async def run_approvals(
    ctx: ContextCache, evaluator: ApprovalEvaluator
) -> Dict[str, GroupCheckRun]:
    """Open a check run for every approval group, then resolve each one.

    All check runs are created before the first group is evaluated. Any error
    propagates immediately; check runs opened up to that point stay open.
    """
    config = await fetch_config(ctx)
    logger.info("Loaded %d approval groups from %s", len(config), ctx.config_path)

    changed_files = await fetch_changed_files(ctx)
    reviews = await get_reviews(ctx)
    logger.info(
        "Handling %s: %d changed files, %d reviews",
        ctx.context,
        len(changed_files),
        len(reviews),
    )

    registry = CheckRunRegistry(ctx)
    for group_name in config:
        await registry.create(group_name)

    for group_name, group in config.items():
        approved = await evaluator(group_name, group, changed_files, reviews)
        logger.debug("Group %s approved: %s", group_name, approved)
        await registry.resolve(group_name, "success" if approved else "failure")

    logger.info("Finished handling %s, API calls: %d", ctx.context, ctx.client.call_count)
    return registry.snapshot()
