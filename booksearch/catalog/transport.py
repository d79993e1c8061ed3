"""
Minimal JSON-over-HTTP helper shared by the catalogue and account clients.

Only the standard library is used. Unlike a best-effort fetch, every
failure is turned into a ``RemoteCallError`` so that callers can decide
how to surface it.
"""

from __future__ import annotations

import http.client
import json
import logging
import urllib.error
import urllib.request
from typing import Any, Dict, Optional

from ..errors import RemoteCallError


logger = logging.getLogger(__name__)

USER_AGENT = "booksearch/1.0"


def http_json(
    url: str,
    payload: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
    timeout: float = 10.0,
) -> Any:
    """Perform a GET (or a POST when ``payload`` is given) and return parsed JSON.

    Raises ``RemoteCallError`` on transport errors (including truncated
    or malformed responses), non-200 responses and bodies that are not
    valid JSON.
    """
    request_headers = {"User-Agent": USER_AGENT, "Accept": "application/json"}
    if headers:
        request_headers.update(headers)
    data = None
    method = "GET"
    if payload is not None:
        data = json.dumps(payload).encode("utf-8")
        request_headers["Content-Type"] = "application/json"
        method = "POST"
    request = urllib.request.Request(url, data=data, headers=request_headers, method=method)
    try:
        with urllib.request.urlopen(request, timeout=timeout) as response:
            status = getattr(response, "status", 200)
            if status != 200:
                logger.warning("Request to %s returned status %s", url, status)
                raise RemoteCallError(f"{method} {url} returned status {status}", status=status)
            body = response.read().decode("utf-8", errors="ignore")
    except urllib.error.HTTPError as exc:
        logger.warning("Request to %s returned status %s", url, exc.code)
        raise RemoteCallError(f"{method} {url} returned status {exc.code}", status=exc.code) from exc
    except (urllib.error.URLError, http.client.HTTPException, OSError) as exc:
        logger.error("Error fetching %s: %s", url, exc)
        raise RemoteCallError(f"{method} {url} failed: {exc}") from exc
    try:
        return json.loads(body)
    except ValueError as exc:
        logger.error("Invalid JSON from %s: %s", url, exc)
        raise RemoteCallError(f"{method} {url} returned invalid JSON") from exc
