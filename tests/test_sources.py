# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for manifest, lock file and installed-version readers."""

from __future__ import annotations

from textwrap import dedent

import pytest
from support import Project

from integrity_matters.diagnostics import DiagnosticLog, Severity
from integrity_matters.errors import ConfigurationInconsistency
from integrity_matters.models import DeclaredRange, DependencyClass, PinnedRecord
from integrity_matters.sources import (
    DependencySnapshot,
    InstalledReader,
    ManifestReader,
    NpmLockReader,
    YarnLockReader,
    load_lock_reader,
    read_installed_version,
)


def test_manifest_prefers_primary_dependencies(project: Project) -> None:
    path = project.write_manifest({"jquery": "^3.4.0"}, {"jquery": "^2.0.0", "bootstrap": "^4.3.0"})

    manifest = ManifestReader.load(path)

    assert manifest.declared_range("jquery") == DeclaredRange("^3.4.0", DependencyClass.PRIMARY)
    assert manifest.declared_range("bootstrap") == DeclaredRange("^4.3.0", DependencyClass.SECONDARY)
    assert manifest.declared_range("vue") is None
    assert list(manifest.package_names()) == ["jquery", "bootstrap"]


def test_missing_manifest_is_inconsistent(project: Project) -> None:
    with pytest.raises(ConfigurationInconsistency, match="Unable to retrieve `package.json`"):
        ManifestReader.load(project.root / "package.json")


def test_npm_lock_v2_skips_nested_installs() -> None:
    reader = NpmLockReader.parse(
        {
            "lockfileVersion": 2,
            "packages": {
                "": {"name": "fixture"},
                "node_modules/jquery": {"version": "3.4.1", "integrity": "sha512-AAAA"},
                "node_modules/bootstrap": {"version": "4.3.1", "dev": True},
                "node_modules/bootstrap/node_modules/jquery": {"version": "1.9.1"},
                "node_modules/@popperjs/core": {"version": "2.11.8", "dev": True},
            },
        }
    )

    assert reader.pinned_version("jquery") == PinnedRecord("3.4.1", integrity="sha512-AAAA", dev=False)
    assert reader.pinned_version("bootstrap") == PinnedRecord("4.3.1", dev=True)
    assert reader.pinned_version("@popperjs/core") == PinnedRecord("2.11.8", dev=True)
    assert len(reader) == 3
    assert reader.display_name == "`package-lock.json`"


def test_npm_lock_v1_reads_dependencies() -> None:
    reader = NpmLockReader.parse(
        {
            "lockfileVersion": 1,
            "dependencies": {
                "jquery": {"version": "3.4.1"},
                "bootstrap": {"version": "4.3.1", "dev": True},
            },
        }
    )

    assert reader.pinned_version("jquery") == PinnedRecord("3.4.1", dev=False)
    assert reader.pinned_version("bootstrap") == PinnedRecord("4.3.1", dev=True)


def test_yarn_classic_lock() -> None:
    text = dedent(
        """\
        # THIS IS AN AUTOGENERATED FILE. DO NOT EDIT THIS FILE DIRECTLY.
        # yarn lockfile v1


        "@popperjs/core@^2.11.0":
          version "2.11.8"
          resolved "https://registry.yarnpkg.com/@popperjs/core/-/core-2.11.8.tgz"
          integrity sha512-AAAA

        jquery@^3.4.0, jquery@^3.4.1:
          version "3.4.1"
          resolved "https://registry.yarnpkg.com/jquery/-/jquery-3.4.1.tgz"
          integrity sha512-BBBB
        """
    )

    reader = YarnLockReader.parse(text)

    assert reader.pinned_version("jquery") == PinnedRecord("3.4.1", integrity="sha512-BBBB")
    assert reader.pinned_version("@popperjs/core") == PinnedRecord("2.11.8", integrity="sha512-AAAA")


def test_yarn_berry_lock() -> None:
    text = dedent(
        """\
        __metadata:
          version: 6
          cacheKey: 8

        "jquery@npm:^3.4.0":
          version: 3.4.1
          resolution: "jquery@npm:3.4.1"
          checksum: 0123abcd
          languageName: node
          linkType: hard
        """
    )

    reader = YarnLockReader.parse(text)

    assert reader.pinned_version("jquery") == PinnedRecord("3.4.1", integrity="0123abcd")
    assert reader.display_name == "`yarn.lock`"


def test_npm_lock_takes_precedence_over_yarn(project: Project) -> None:
    project.write_npm_lock({"jquery": ("3.4.1", False)})
    project.write("yarn.lock", 'jquery@^3.4.0:\n  version "3.3.1"\n')
    log = DiagnosticLog()

    reader = load_lock_reader(project.root, log)

    assert reader is not None
    assert reader.pinned_version("jquery") == PinnedRecord("3.4.1", dev=False)
    assert log.messages(Severity.WARNING) == [
        "WARNING: Found `yarn.lock`; ignoring due to detected `package-lock.json`"
    ]


def test_missing_lock_files(project: Project) -> None:
    assert load_lock_reader(project.root, DiagnosticLog()) is None


def test_installed_versions(project: Project) -> None:
    project.install("jquery", "3.4.1")
    project.write("node_modules/broken/package.json", "{not json")
    log = DiagnosticLog()

    reader = InstalledReader.scan(project.root, ["jquery", "broken", "vue"], log)

    assert reader.installed_version("jquery") == "3.4.1"
    assert reader.installed_version("broken") is None
    assert read_installed_version(project.root, "vue") is None
    assert len(log.messages(Severity.INFO)) == 2


def test_snapshot_sources_for(jquery_project: Project) -> None:
    snapshot = DependencySnapshot.load(jquery_project.root)

    sources = snapshot.sources_for("bootstrap")

    assert sources.declared == DeclaredRange("^4.3.0", DependencyClass.SECONDARY)
    assert sources.pinned == PinnedRecord("4.3.1", dev=True)
    assert sources.installed == "4.3.1"
    assert sources.lock_name == "`package-lock.json`"
    assert snapshot.sources_for("vue").declared is None
    assert snapshot.diagnostics[0].message == "INFO: Found `package.json`"
