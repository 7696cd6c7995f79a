from __future__ import annotations

from dataclasses import dataclass, replace
import logging
from typing import TYPE_CHECKING, Dict, Literal, Optional

from gatekeeper.errors import (
    AlreadyResolved,
    CheckRunAlreadyExists,
    UnknownApprovalGroup,
)
from gatekeeper.github.model import CheckRunOutput
from gatekeeper.metric import check_run_post

if TYPE_CHECKING:
    from gatekeeper.context import ContextCache

logger = logging.getLogger("gatekeeper")

Conclusion = Literal["success", "failure"]

CONCLUSIONS = ("success", "failure")


@dataclass(frozen=True)
class GroupCheckRun:
    group_name: str
    check_run_id: int
    status: Literal["in_progress", "completed"] = "in_progress"
    conclusion: Optional[Conclusion] = None
    url: Optional[str] = None
    html_url: Optional[str] = None

    @property
    def is_completed(self) -> bool:
        return self.status == "completed"


def approval_message(group_name: str) -> str:
    return f"{group_name} Approvals."


class CheckRunRegistry:
    """One check run per approval group, opened as in_progress and completed once.

    Records are immutable; every transition stores a new ``GroupCheckRun``.
    Local state only changes after the API call it mirrors has succeeded, so
    a failed update leaves the group in_progress.
    """

    def __init__(self, ctx: ContextCache):
        self.ctx = ctx
        self._runs: Dict[str, GroupCheckRun] = {}

    def __contains__(self, group_name: str) -> bool:
        return group_name in self._runs

    def __len__(self) -> int:
        return len(self._runs)

    def get(self, group_name: str) -> GroupCheckRun:
        try:
            return self._runs[group_name]
        except KeyError:
            raise UnknownApprovalGroup(group_name) from None

    def snapshot(self) -> Dict[str, GroupCheckRun]:
        return dict(self._runs)

    async def create(self, group_name: str) -> GroupCheckRun:
        if group_name in self._runs:
            raise CheckRunAlreadyExists(group_name)

        context = self.ctx.context
        logger.info("Creating check run %s", group_name)
        check_run = await self.ctx.client.create_check_run(
            context.owner,
            context.repo,
            head_sha=context.sha,
            name=group_name,
            status="in_progress",
            output=CheckRunOutput(title=group_name, summary=""),
        )
        check_run_post.labels(action="create").inc()

        run = GroupCheckRun(
            group_name=group_name,
            check_run_id=check_run.id,
            url=check_run.url,
            html_url=check_run.html_url,
        )
        self._runs[group_name] = run
        logger.info("Check run %s created with id %d", group_name, check_run.id)
        return run

    async def resolve(self, group_name: str, conclusion: Conclusion) -> GroupCheckRun:
        if conclusion not in CONCLUSIONS:
            raise ValueError(f"Invalid conclusion {conclusion!r}")

        run = self.get(group_name)
        if run.is_completed:
            raise AlreadyResolved(group_name, run.conclusion)

        context = self.ctx.context
        message = approval_message(group_name)
        check_run = await self.ctx.client.update_check_run(
            context.owner,
            context.repo,
            run.check_run_id,
            status="completed",
            conclusion=conclusion,
            output=CheckRunOutput(title=message, summary=message, text=message),
        )
        check_run_post.labels(action="update").inc()

        run = replace(
            run,
            status="completed",
            conclusion=conclusion,
            url=check_run.url or run.url,
            html_url=check_run.html_url or run.html_url,
        )
        self._runs[group_name] = run

        logger.info("Check run %s completed: %s", group_name, conclusion)
        logger.info("Check run URL: %s", run.url)
        logger.info("Check run HTML: %s", run.html_url)
        return run
