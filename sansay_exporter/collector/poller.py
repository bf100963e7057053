# collector/poller.py
from __future__ import annotations

import logging
from typing import Optional
from urllib.parse import urlsplit

import requests
from requests.auth import HTTPBasicAuth

from ..exceptions import FetchError, FetchErrorKind

log = logging.getLogger(__name__)

_SCHEMES = ("http://", "https://")


def normalize_target(target: str) -> str:
    """Bare hosts (`10.0.0.5`, `sbc:8888/path`) are polled over plain HTTP."""
    if not target.startswith(_SCHEMES):
        target = "http://" + target
    return target


def fetch(
    target: str,
    username: str = "",
    password: str = "",
    *,
    timeout: Optional[float] = None,
    session: Optional[requests.Session] = None,
) -> bytes:
    """GET the device status document once and return the raw body.

    The response status is only logged: the body is returned whatever the
    code, and the parser decides whether it is usable.
    """
    url = normalize_target(target)
    try:
        urlsplit(url)
    except ValueError as exc:
        log.error("Could not parse target URL %s: %s", url, exc)
        raise FetchError(FetchErrorKind.URL_MALFORMED, url, str(exc)) from exc

    sess = session or requests.Session()
    try:
        try:
            request = sess.prepare_request(
                requests.Request("GET", url, auth=HTTPBasicAuth(username or "", password or ""))
            )
        except (requests.exceptions.RequestException, ValueError) as exc:
            log.error("Error creating HTTP request for %s: %s", url, exc)
            raise FetchError(FetchErrorKind.REQUEST_BUILD_FAILED, url, str(exc)) from exc

        try:
            resp = sess.send(request, timeout=timeout, stream=True)
        except requests.exceptions.RequestException as exc:
            log.error("Error for HTTP request to %s: %s", url, exc)
            raise FetchError(FetchErrorKind.TRANSPORT_FAILED, url, str(exc)) from exc

        with resp:
            log.info("Received HTTP response from %s status_code=%d", url, resp.status_code)
            try:
                return resp.content
            except requests.exceptions.RequestException as exc:
                log.error("Failed to read HTTP response body from %s: %s", url, exc)
                raise FetchError(FetchErrorKind.BODY_UNREADABLE, url, str(exc)) from exc
    finally:
        if session is None:
            sess.close()
