from datetime import datetime
from typing import Literal, Optional
import base64

import pydantic


class Model(pydantic.BaseModel):
    pass


class Content(Model):
    type: str
    encoding: Optional[str] = None
    name: Optional[str] = None
    path: str
    content: Optional[str] = None
    sha: Optional[str] = None
    html_url: Optional[str] = None

    def decoded_content(self) -> str:
        if self.encoding != "base64":
            raise ValueError(f"Unknown encoding {self.encoding}")
        return base64.b64decode(self.content or "").decode()


class PrFile(Model):
    sha: Optional[str] = None
    filename: str
    status: Literal[
        "added", "removed", "modified", "renamed", "copied", "changed", "unchanged"
    ]


class User(Model):
    login: str
    id: Optional[int] = None


class Review(Model):
    id: int
    user: Optional[User] = None
    state: Literal[
        "APPROVED", "CHANGES_REQUESTED", "COMMENTED", "DISMISSED", "PENDING"
    ]
    body: Optional[str] = None
    commit_id: Optional[str] = None
    submitted_at: Optional[datetime] = None
    html_url: Optional[str] = None

    @property
    def is_approval(self) -> bool:
        return self.state == "APPROVED"


class CheckRunOutput(Model):
    title: Optional[str] = None
    summary: Optional[str] = None
    text: Optional[str] = None


class CheckRun(Model):
    id: int
    name: str
    head_sha: str
    status: Literal["completed", "queued", "in_progress"] = "queued"
    conclusion: Optional[
        Literal[
            "action_required",
            "cancelled",
            "failure",
            "neutral",
            "success",
            "skipped",
            "stale",
            "timed_out",
        ]
    ] = None
    url: Optional[str] = None
    html_url: Optional[str] = None
    output: Optional[CheckRunOutput] = None
