# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest
from support import BOOTSTRAP_CSS, JQUERY_BODY, FakeProbe, Project


@pytest.fixture
def project(tmp_path: Path) -> Project:
    """Return an empty project rooted in a temporary directory."""

    return Project(tmp_path)


@pytest.fixture
def jquery_project(project: Project) -> Project:
    """Return a project declaring, locking and installing jQuery and Bootstrap."""

    project.write_manifest({"jquery": "^3.4.0"}, {"bootstrap": "^4.3.0"})
    project.write_npm_lock({"jquery": ("3.4.1", False), "bootstrap": ("4.3.1", True)})
    project.install("jquery", "3.4.1", {"dist/jquery.min.js": JQUERY_BODY})
    project.install("bootstrap", "4.3.1", {"dist/css/bootstrap.min.css": BOOTSTRAP_CSS})
    return project


@pytest.fixture
def fake_probe() -> FakeProbe:
    """Return a probe answering ``200`` without touching the network."""

    return FakeProbe()
