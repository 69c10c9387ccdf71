from __future__ import annotations

from typing import Any, Optional

import requests


class SyncError(Exception):
    """Base class for everything the sync raises on purpose."""


class ConfigError(SyncError):
    """Required configuration is missing or invalid."""


class ValidationError(SyncError):
    """Input document or mapping table cannot be used."""


class CrmApiError(SyncError):
    """A Pipedrive call failed (network, timeout or HTTP status)."""

    def __init__(self, message: str, status_code: Optional[int] = None, details: Any = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details


class InvalidResponseError(CrmApiError):
    """Pipedrive answered 2xx but the body is not what we expect."""


_STATUS_HINTS = {
    429: "Rate limit exceeded. Please wait before making more requests.",
    500: "Pipedrive server error. Please try again later.",
    503: "Pipedrive service unavailable. Please try again later.",
}


def status_hint(status_code: Optional[int]) -> Optional[str]:
    return _STATUS_HINTS.get(status_code) if status_code is not None else None


def _response_details(resp: requests.Response) -> Any:
    try:
        return resp.json()
    except ValueError:
        return resp.text


def _classify_status(resp: requests.Response, exc: Exception, operation: str) -> CrmApiError:
    status = resp.status_code
    details = _response_details(resp)

    if status == 401:
        msg = f"Authentication failed during {operation}: Invalid API token"
    elif status == 403:
        msg = f"Access forbidden during {operation}: Insufficient permissions"
    elif status == 400:
        reason = details.get("error") if isinstance(details, dict) and "error" in details else exc
        msg = f"Bad request during {operation}: {reason}"
    elif status == 404:
        msg = f"Resource not found during {operation}: {exc}"
    elif status == 429:
        msg = f"Rate limit exceeded during {operation}: Too many requests"
    elif status == 500:
        msg = f"Internal server error during {operation}: {exc}"
    elif status == 503:
        msg = f"Service unavailable during {operation}: {exc}"
    else:
        msg = f"API request failed during {operation} with status {status}: {exc}"
    return CrmApiError(msg, status, details)


def classify_error(exc: BaseException, operation: str) -> CrmApiError:
    """
    Turn a raw failure from a Pipedrive call into a CrmApiError.

    Order matters: connection problems, then timeouts, then HTTP status codes,
    then anything else. `operation` is a short label like "person search".
    """
    if isinstance(exc, CrmApiError):
        return exc

    # ConnectTimeout is both a ConnectionError and a Timeout; it counts as a timeout.
    if isinstance(exc, requests.ConnectionError) and not isinstance(exc, requests.Timeout):
        return CrmApiError(f"Network connectivity issue during {operation}: {exc}", None, exc)

    if isinstance(exc, requests.Timeout):
        return CrmApiError(f"Request timeout during {operation}: {exc}", None, exc)

    resp = getattr(exc, "response", None)
    if isinstance(exc, requests.RequestException) and resp is not None:
        return _classify_status(resp, exc, operation)

    return CrmApiError(f"Unexpected error during {operation}: {exc}", None, exc)
