from dataclasses import dataclass
import base64
import json
from typing import Any, Callable, Dict, List, Optional, Tuple
from urllib.parse import parse_qsl, urlsplit

import gidgethub.abc
import pytest

from gatekeeper.context import ContextCache, RepositoryContext

SHA = "a" * 40


@dataclass
class RecordedRequest:
    method: str
    path: str
    query: Dict[str, str]
    data: Any


Handler = Callable[[Dict[str, str], Any], Tuple[int, Any]]


class FakeGitHub(gidgethub.abc.GitHubAPI):
    """Serves canned JSON per (method, path) and records every request."""

    def __init__(self):
        super().__init__("gatekeeper-tests", oauth_token="secret-token")
        self.routes: Dict[Tuple[str, str], Handler] = {}
        self.requests: List[RecordedRequest] = []

    def route(self, method: str, path: str, payload: Any, status: int = 200):
        self.routes[(method, path)] = lambda query, data: (status, payload)

    def route_pages(self, path: str, pages: List[List[Any]]):
        def handler(query, data):
            page = int(query["page"])
            if page > len(pages):
                return 200, []
            return 200, pages[page - 1]

        self.routes[("GET", path)] = handler

    def route_handler(self, method: str, path: str, handler: Handler):
        self.routes[(method, path)] = handler

    def requests_for(self, method: str, path: str) -> List[RecordedRequest]:
        return [r for r in self.requests if r.method == method and r.path == path]

    async def _request(self, method, url, headers, body=b""):
        parsed = urlsplit(url)
        query = dict(parse_qsl(parsed.query))
        data = json.loads(body) if body else None
        self.requests.append(RecordedRequest(method, parsed.path, query, data))

        handler = self.routes.get((method, parsed.path))
        if handler is None:
            status, payload = 404, {"message": "Not Found"}
        else:
            status, payload = handler(query, data)

        return (
            status,
            {"content-type": "application/json; charset=utf-8"},
            json.dumps(payload).encode(),
        )

    async def sleep(self, seconds):
        pass


def make_context(pull_request_number: Optional[int] = 7) -> RepositoryContext:
    return RepositoryContext(
        owner="org",
        repo="repo",
        sha=SHA,
        ref="refs/pull/7/merge",
        pull_request_number=pull_request_number,
    )


def make_file(filename: str) -> dict:
    return {"sha": "b" * 40, "filename": filename, "status": "modified"}


def make_review(id: int, login: str = "alice", state: str = "APPROVED") -> dict:
    return {
        "id": id,
        "user": {"login": login, "id": 1000 + id},
        "state": state,
        "body": "",
        "commit_id": SHA,
        "submitted_at": "2026-02-16T10:00:00Z",
    }


def make_content(text: str, path: str = ".github/approvals.yml") -> dict:
    return {
        "type": "file",
        "encoding": "base64",
        "name": path.rsplit("/", 1)[-1],
        "path": path,
        "content": base64.encodebytes(text.encode()).decode(),
        "sha": "c" * 40,
        "html_url": f"https://github.com/org/repo/blob/main/{path}",
    }


def make_check_run(id: int, name: str, **overrides) -> dict:
    data = {
        "id": id,
        "name": name,
        "head_sha": SHA,
        "status": "in_progress",
        "conclusion": None,
        "url": f"https://api.github.com/repos/org/repo/check-runs/{id}",
        "html_url": f"https://github.com/org/repo/runs/{id}",
    }
    data.update(overrides)
    return data


@pytest.fixture
def gh():
    return FakeGitHub()


@pytest.fixture
def make_cache(gh):
    def factory(pull_request_number: Optional[int] = 7, config_path=".github/approvals.yml"):
        return ContextCache(
            client_factory=lambda token: gh,
            context_source=lambda: make_context(pull_request_number),
            credential_source=lambda: "secret-token",
            config_path_source=lambda: config_path,
        )

    return factory
