# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Subresource integrity parsing, digesting and reconciliation."""

from __future__ import annotations

import base64
import hashlib
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .constants import PERMITTED_ALGORITHMS
from .diagnostics import DiagnosticLog
from .errors import IntegrityInconsistency
from .models import HashSet

_TOKEN_PATTERN: Final[re.Pattern[str]] = re.compile(r"^(?P<algorithm>[^-]*)-(?P<digest>.*)$")
_CHUNK_SIZE: Final[int] = 1024 * 64


@dataclass(frozen=True, slots=True)
class IntegrityToken:
    """One ``algorithm-digest`` pair parsed from an integrity attribute."""

    index: int
    algorithm: str
    digest: str


def parse_integrity(value: str | None) -> list[IntegrityToken]:
    """Split an integrity attribute into validated tokens.

    Args:
        value: Raw whitespace-separated integrity attribute.

    Returns:
        list[IntegrityToken]: Tokens in attribute order.

    Raises:
        IntegrityInconsistency: If a token lacks the ``-`` separator or names an
            algorithm outside the permitted SRI set.
    """

    tokens: list[IntegrityToken] = []
    for index, raw in enumerate((value or "").split()):
        found = _TOKEN_PATTERN.match(raw)
        if found is None:
            raise IntegrityInconsistency(f'Bad integrity value, "{raw}"')
        algorithm = found.group("algorithm")
        if algorithm not in PERMITTED_ALGORITHMS:
            raise IntegrityInconsistency(
                f'Unrecognized algorithm: "{algorithm}" (obtained from integrity value, "{raw}")'
            )
        tokens.append(IntegrityToken(index, algorithm, found.group("digest")))
    return tokens


def validate_algorithms(algorithms: Iterable[str]) -> tuple[str, ...]:
    """Return ``algorithms`` deduplicated in order, rejecting unknown names."""

    unique: list[str] = []
    for algorithm in algorithms:
        if algorithm not in PERMITTED_ALGORITHMS:
            raise IntegrityInconsistency(
                f'Unrecognized algorithm: "{algorithm}"; expected one of {", ".join(PERMITTED_ALGORITHMS)}.'
            )
        if algorithm not in unique:
            unique.append(algorithm)
    return tuple(unique)


def digest_bytes(algorithm: str, payload: bytes) -> str:
    """Return the base64 digest of ``payload`` for ``algorithm``."""

    return base64.b64encode(hashlib.new(algorithm, payload).digest()).decode("ascii")


def digest_file(path: Path, algorithms: Sequence[str]) -> HashSet:
    """Digest ``path`` once for every algorithm in ``algorithms``.

    The file is streamed a single time with one hasher per algorithm, so the
    returned digests always describe the same bytes.

    Args:
        path: File to hash.
        algorithms: Permitted SRI algorithm names.

    Returns:
        HashSet: Base64 digests keyed by algorithm in request order.
    """

    hashers = {algorithm: hashlib.new(algorithm) for algorithm in algorithms}
    if not hashers:
        return {}
    with path.open("rb") as handle:
        for chunk in iter(lambda: handle.read(_CHUNK_SIZE), b""):
            for hasher in hashers.values():
                hasher.update(chunk)
    return {
        algorithm: base64.b64encode(hasher.digest()).decode("ascii") for algorithm, hasher in hashers.items()
    }


def digest(algorithm: str, path: Path) -> str:
    """Return the base64 ``algorithm`` digest of the file at ``path``."""

    return digest_file(path, (algorithm,))[algorithm]


def format_integrity(hashes: HashSet) -> str | None:
    """Render ``hashes`` as an integrity attribute, ``None`` when empty."""

    if not hashes:
        return None
    return " ".join(f"{algorithm}-{value}" for algorithm, value in hashes.items())


def reconcile_hashes(
    local_file: Path,
    existing: str | None,
    per_reference: Sequence[str],
    operator: Sequence[str],
    log: DiagnosticLog,
) -> HashSet:
    """Recompute the integrity of a reference from its local copy.

    Existing tokens are kept in attribute order unless an active whitelist
    (the union of ``operator`` and ``per_reference``) omits their algorithm,
    in which case they are dropped with a warning. Algorithms requested per
    reference are appended when missing; operator algorithms are only
    appended when the reference had no integrity at all. Every surviving
    digest is recomputed and the fresh value wins over the declared one.

    Args:
        local_file: Local copy backing the reference.
        existing: Raw integrity attribute currently on the reference.
        per_reference: Algorithms requested by the reference itself.
        operator: Algorithms requested by configuration.
        log: Diagnostics owned by the reference.

    Returns:
        HashSet: Reconciled digests in first-seen order; empty means the
        integrity attribute should be omitted.

    Raises:
        IntegrityInconsistency: If the existing value or a requested algorithm is invalid.
    """

    tokens = parse_integrity(existing)
    requested = validate_algorithms(per_reference)
    configured = validate_algorithms(operator)
    whitelist = set(requested) | set(configured)
    kept = [token for token in tokens if not whitelist or token.algorithm in whitelist]

    additions = requested if tokens else requested + tuple(name for name in configured if name not in requested)
    order = list(dict.fromkeys([token.algorithm for token in kept] + list(additions)))
    computed = digest_file(local_file, order)

    # One message per token, in attribute order.
    for token in tokens:
        if whitelist and token.algorithm not in whitelist:
            log.warn(f'WARNING: Algorithm whitelist did not specify detected "{token.algorithm}", so dropping.')
            continue
        fresh = computed[token.algorithm]
        if fresh != token.digest:
            log.warn(
                f"WARNING: Local hash {fresh} does not match corresponding hash (index {token.index}) within "
                f"the integrity attribute ({token.digest}); algorithm: {token.algorithm}; file {local_file}"
            )
        else:
            log.info(
                f"INFO: Local hash matches corresponding hash (index {token.index}) within the integrity "
                f"attribute; algorithm: {token.algorithm}; file {local_file}."
            )
    if tokens and not computed:
        log.warn(
            f"WARNING: Every algorithm in the integrity attribute was dropped; integrity removed for {local_file}. "
            "Request an algorithm on the reference to keep one."
        )
    return computed


__all__ = [
    "IntegrityToken",
    "digest",
    "digest_bytes",
    "digest_file",
    "format_integrity",
    "parse_integrity",
    "reconcile_hashes",
    "validate_algorithms",
]
