# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Helpers shared by the test modules."""

from __future__ import annotations

import base64
import hashlib
import json
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from integrity_matters.reachability import ProbeResponse

JQUERY_BODY = b"/*! jQuery v3.4.1 */ window.jQuery = function () {};\n"
BOOTSTRAP_CSS = b"/*! Bootstrap v4.3.1 */ .btn { display: inline-block; }\n"


def sri(algorithm: str, payload: bytes) -> str:
    """Return the base64 ``algorithm`` digest of ``payload``."""

    return base64.b64encode(hashlib.new(algorithm, payload).digest()).decode("ascii")


@dataclass(slots=True)
class Project:
    """Throwaway npm project on disk."""

    root: Path

    def write(self, relative: str, content: str | bytes) -> Path:
        path = self.root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8")
        return path

    def write_json(self, relative: str, payload: object) -> Path:
        return self.write(relative, json.dumps(payload, indent=2))

    def write_manifest(
        self,
        dependencies: Mapping[str, str] | None = None,
        dev_dependencies: Mapping[str, str] | None = None,
        **extra: object,
    ) -> Path:
        payload: dict[str, object] = {"name": "fixture", "version": "1.0.0"}
        if dependencies is not None:
            payload["dependencies"] = dict(dependencies)
        if dev_dependencies is not None:
            payload["devDependencies"] = dict(dev_dependencies)
        payload.update(extra)
        return self.write_json("package.json", payload)

    def write_npm_lock(self, packages: Mapping[str, tuple[str, bool]]) -> Path:
        entries: dict[str, object] = {"": {"name": "fixture", "version": "1.0.0"}}
        for name, (version, dev) in packages.items():
            entry: dict[str, object] = {"version": version}
            if dev:
                entry["dev"] = True
            entries[f"node_modules/{name}"] = entry
        return self.write_json("package-lock.json", {"lockfileVersion": 3, "packages": entries})

    def install(self, name: str, version: str, files: Mapping[str, bytes] | None = None) -> None:
        self.write_json(f"node_modules/{name}/package.json", {"name": name, "version": version})
        for relative, payload in (files or {}).items():
            self.write(f"node_modules/{name}/{relative}", payload)


class FakeProbe:
    """Record probed URLs and answer with a fixed status and body."""

    def __init__(self, status: int = 200, body: bytes | None = None) -> None:
        self.status = status
        self.body = body
        self.calls: list[tuple[str, bool]] = []

    def __call__(self, url: str, full_body: bool) -> ProbeResponse:
        self.calls.append((url, full_body))
        return ProbeResponse(status=self.status, body=self.body if full_body else None)
