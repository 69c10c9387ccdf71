from __future__ import annotations

import json as jsonlib
from typing import Any, List, Optional

import pytest
import requests

from person_sync.crm_client import PipedriveClient, PipedriveConfig


def make_response(status: int = 200, body: Any = None, text: Optional[str] = None,
                  url: str = "https://acme.pipedrive.com/v1/persons") -> requests.Response:
    resp = requests.Response()
    resp.status_code = status
    resp.url = url
    resp.reason = {200: "OK", 201: "Created"}.get(status, "Error")
    raw = text if text is not None else jsonlib.dumps(body if body is not None else {})
    resp._content = raw.encode("utf-8")
    resp.encoding = "utf-8"
    resp.headers["Content-Type"] = "application/json"
    return resp


class FakeSession(requests.Session):
    """Session that records calls and replays queued responses or exceptions."""

    def __init__(self, *replies: Any):
        super().__init__()
        self.replies: List[Any] = list(replies)
        self.calls: List[dict] = []

    def request(self, method, url, **kwargs):
        self.calls.append({"method": method, "url": url, **kwargs})
        reply = self.replies.pop(0)
        if isinstance(reply, BaseException):
            raise reply
        return reply


@pytest.fixture
def config() -> PipedriveConfig:
    return PipedriveConfig(api_key="secret-token", company_domain="acme")


@pytest.fixture
def make_client(config):
    def _make(*replies: Any) -> PipedriveClient:
        return PipedriveClient(config, session=FakeSession(*replies))
    return _make
