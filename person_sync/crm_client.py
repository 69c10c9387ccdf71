from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import requests

from person_sync.errors import InvalidResponseError, classify_error

logger = logging.getLogger(__name__)

PIPEDRIVE_HOST_SUFFIX = ".pipedrive.com"


@dataclass
class PipedriveConfig:
    api_key: str = field(repr=False)
    company_domain: str
    timeout: float = 30

    @property
    def base_url(self) -> str:
        host = self.company_domain.strip()
        for scheme in ("https://", "http://"):
            if host.lower().startswith(scheme):
                host = host[len(scheme):]
        host = host.rstrip("/")
        if host.lower().endswith(PIPEDRIVE_HOST_SUFFIX):
            return f"https://{host}"
        return f"https://{host}{PIPEDRIVE_HOST_SUFFIX}"


class PipedriveClient:
    """
    Pipedrive persons API (v1): search by name, create, update.
    Every failure comes out as a CrmApiError; nothing is retried.
    """

    def __init__(self, cfg: PipedriveConfig, session: Optional[requests.Session] = None):
        self.cfg = cfg
        self.timeout = cfg.timeout
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "x-api-token": cfg.api_key,
                "Accept": "application/json",
            }
        )

    def _url(self, path: str) -> str:
        return f"{self.cfg.base_url}/v1/{path.lstrip('/')}"

    def _request(self, operation: str, method: str, path: str, **kwargs) -> requests.Response:
        url = self._url(path)
        logger.debug("%s %s (%s)", method, url, operation)
        try:
            resp = self.session.request(method, url, timeout=self.timeout, **kwargs)
            resp.raise_for_status()
        except requests.RequestException as e:
            raise classify_error(e, operation) from e
        return resp

    @staticmethod
    def _person_from(resp: requests.Response, operation: str) -> Dict[str, Any]:
        try:
            body = resp.json()
        except ValueError as e:
            raise InvalidResponseError(
                f"Invalid response structure during {operation}: body is not JSON",
                resp.status_code,
                resp.text,
            ) from e
        if not isinstance(body, dict) or not body.get("data"):
            raise InvalidResponseError(
                f"Invalid response structure during {operation}: missing 'data'",
                resp.status_code,
                body,
            )
        return body["data"]

    def find_by_name(self, name: str) -> Optional[Dict[str, Any]]:
        """First search hit for `name`, or None."""
        resp = self._request("person search", "GET", "persons/search", params={"term": name})
        try:
            data = resp.json()
        except ValueError:
            data = None

        items = data.get("data") if isinstance(data, dict) else None
        items = items.get("items") if isinstance(items, dict) else None
        if not isinstance(items, list):
            logger.warning("Unexpected response structure when searching for person")
            return None
        if not items:
            return None

        first = items[0]
        item = first.get("item") if isinstance(first, dict) else None
        if not isinstance(item, dict):
            logger.warning("Unexpected response structure when searching for person")
            return None
        return item

    def create(self, record: Dict[str, Any]) -> Dict[str, Any]:
        resp = self._request("person creation", "POST", "persons", json=record)
        return self._person_from(resp, "person creation")

    def update(self, person_id: Any, record: Dict[str, Any]) -> Dict[str, Any]:
        resp = self._request("person update", "PUT", f"persons/{person_id}", json=record)
        return self._person_from(resp, "person update")
