from typing import List, Optional

from gidgethub.abc import GitHubAPI
import logging

from gatekeeper.github.model import (
    CheckRun,
    CheckRunOutput,
    Content,
    PrFile,
    Review,
)
from gatekeeper.metric import record_api_call

logger = logging.getLogger("gatekeeper")


class API:
    gh: GitHubAPI

    call_count: int

    def __init__(self, gh: GitHubAPI):
        self.gh = gh
        self.call_count = 0

    def _count(self, url: str) -> None:
        self.call_count += 1
        record_api_call(url)

    async def get_content(self, owner: str, repo: str, path: str, ref: str) -> Content:
        url = f"/repos/{owner}/{repo}/contents/{path}"
        self._count(url)
        logger.debug("Get file content: %s at %s", url, ref)
        data = await self.gh.getitem(url + "{?ref}", url_vars={"ref": ref})

        if isinstance(data, list):
            # directory listing
            return Content(type="dir", path=path)

        return Content.model_validate(data)

    async def list_pull_request_files(
        self, owner: str, repo: str, pull_number: int, page: int, per_page: int
    ) -> List[PrFile]:
        url = f"/repos/{owner}/{repo}/pulls/{pull_number}/files"
        self._count(url)
        logger.debug("Getting files for PR #%d page %d: %s", pull_number, page, url)
        items = await self.gh.getitem(
            url + "{?page,per_page}",
            url_vars={"page": str(page), "per_page": str(per_page)},
        )
        return [PrFile.model_validate(item) for item in items]

    async def list_pull_request_reviews(
        self, owner: str, repo: str, pull_number: int, page: int, per_page: int
    ) -> List[Review]:
        url = f"/repos/{owner}/{repo}/pulls/{pull_number}/reviews"
        self._count(url)
        logger.debug("Getting reviews for PR #%d page %d: %s", pull_number, page, url)
        items = await self.gh.getitem(
            url + "{?page,per_page}",
            url_vars={"page": str(page), "per_page": str(per_page)},
        )
        return [Review.model_validate(item) for item in items]

    async def create_check_run(
        self,
        owner: str,
        repo: str,
        *,
        head_sha: str,
        name: str,
        status: str,
        output: CheckRunOutput,
    ) -> CheckRun:
        url = f"/repos/{owner}/{repo}/check-runs"
        self._count(url)
        logger.debug("Creating check run %s on sha %s", name, head_sha)
        payload = {
            "name": name,
            "head_sha": head_sha,
            "status": status,
            "output": output.model_dump(exclude_none=True),
        }
        return CheckRun.model_validate(await self.gh.post(url, data=payload))

    async def update_check_run(
        self,
        owner: str,
        repo: str,
        check_run_id: int,
        *,
        status: str,
        conclusion: Optional[str],
        output: CheckRunOutput,
    ) -> CheckRun:
        url = f"/repos/{owner}/{repo}/check-runs/{check_run_id}"
        self._count(url)
        logger.debug("Updating check run %d, %s", check_run_id, url)
        payload = {
            "status": status,
            "output": output.model_dump(exclude_none=True),
        }
        if conclusion is not None:
            payload["conclusion"] = conclusion
        return CheckRun.model_validate(await self.gh.patch(url, data=payload))
