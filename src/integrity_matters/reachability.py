# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Network confirmation that rewritten remote locations resolve."""

from __future__ import annotations

import importlib
from collections.abc import Callable
from dataclasses import dataclass
from functools import lru_cache
from types import ModuleType
from typing import Final, Protocol, cast

from .diagnostics import DiagnosticLog
from .errors import NetworkResourceUnreachable
from .hashing import digest_bytes
from .models import HashSet


@dataclass(frozen=True, slots=True)
class ProbeResponse:
    """Status and optional body observed for a probed URL."""

    status: int
    body: bytes | None = None


Probe = Callable[[str, bool], ProbeResponse]

_PROTOCOL_RELATIVE: Final[str] = "//"
_DEFAULT_SCHEME: Final[str] = "https:"


def absolute_url(url: str) -> str:
    """Return ``url`` with an ``https:`` scheme when it is protocol-relative."""

    if url.startswith(_PROTOCOL_RELATIVE):
        return f"{_DEFAULT_SCHEME}{url}"
    return url


class _HttpResponse(Protocol):
    """Subset of ``requests.Response`` used by the probe."""

    status_code: int
    content: bytes


class _RequestsRequest(Protocol):
    """Callable compatible with ``requests.request`` for the parameters we use."""

    def __call__(
        self,
        method: str,
        url: str,
        *,
        allow_redirects: bool = True,
        timeout: float | None = None,
    ) -> _HttpResponse:
        """Return the HTTP response for ``method`` against ``url``."""
        ...


@lru_cache(maxsize=1)
def _load_requests() -> ModuleType:
    """Return the imported ``requests`` module.

    Raises:
        RuntimeError: If the ``requests`` package is not available.
    """

    try:
        return importlib.import_module("requests")
    except ModuleNotFoundError as exc:
        raise RuntimeError("requests package is required to check remote URLs") from exc


def http_probe(url: str, full_body: bool, *, timeout: float | None = None) -> ProbeResponse:
    """Probe ``url`` with ``HEAD``, or ``GET`` when the body is needed.

    Args:
        url: Remote location to probe.
        full_body: Retrieve and return the response body.
        timeout: Seconds to wait for the server.

    Returns:
        ProbeResponse: Final status after redirects plus the body when requested.

    Raises:
        NetworkResourceUnreachable: If the request cannot be completed.
    """

    requests = _load_requests()
    request = cast(_RequestsRequest, requests.request)
    try:
        response = request("GET" if full_body else "HEAD", url, allow_redirects=True, timeout=timeout)
    except requests.RequestException as exc:
        raise NetworkResourceUnreachable(f"Unable to fetch {url}: {exc}") from exc
    return ProbeResponse(status=response.status_code, body=response.content if full_body else None)


class ReachabilityVerifier:
    """Check remote locations with an injectable probe.

    Args:
        probe: Callable returning a :class:`ProbeResponse`; defaults to :func:`http_probe`.
        timeout: Seconds passed to the default probe.
    """

    def __init__(self, probe: Probe | None = None, *, timeout: float | None = None) -> None:
        self._probe = probe
        self._timeout = timeout

    def verify(self, url: str, full_check: bool, hashes: HashSet, log: DiagnosticLog) -> None:
        """Confirm ``url`` resolves and, for full checks, serves the hashed bytes.

        Args:
            url: Rewritten remote location.
            full_check: Compare the downloaded body against ``hashes``.
            hashes: Digests computed from the local copy.
            log: Diagnostics owned by the reference.

        Raises:
            NetworkResourceUnreachable: On a non-success status or a content mismatch.
        """

        url = absolute_url(url)
        if self._probe is None:
            response = http_probe(url, full_check, timeout=self._timeout)
        else:
            response = self._probe(url, full_check)
        if not 200 <= response.status < 300:
            raise NetworkResourceUnreachable(f"Received status code {response.status} response for {url}.")
        log.info(f"INFO: Received status code {response.status} response for {url}.")
        if not full_check:
            return
        body = response.body or b""
        for algorithm, expected in hashes.items():
            if digest_bytes(algorithm, body) != expected:
                raise NetworkResourceUnreachable(
                    f'Local hash of algorithm {algorithm} does not match hash for content from URL "{url}".'
                )
            log.info(f"INFO: Hash of algorithm {algorithm} matches content from URL {url}.")


__all__ = ["Probe", "ProbeResponse", "ReachabilityVerifier", "absolute_url", "http_probe"]
