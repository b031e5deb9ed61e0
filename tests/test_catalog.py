# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for location pattern matching and template selection."""

from __future__ import annotations

import pytest

from integrity_matters.catalog import PatternCatalog, compile_pattern, normalize_pattern, normalize_template
from integrity_matters.constants import DEFAULT_CDN_BASE_PATH_REPLACEMENTS
from integrity_matters.errors import ConfigError, ConfigurationInconsistency


@pytest.fixture
def catalog() -> PatternCatalog:
    return PatternCatalog.default()


def test_unpkg_location_captures_dist_and_path(catalog: PatternCatalog) -> None:
    match = catalog.match("https://unpkg.com/jquery@3.4.1/dist/jquery.min.js")

    assert match is not None
    assert match.pattern_index == 0
    assert match.package_name == "jquery"
    assert match.declared_version == "3.4.1"
    assert match.dist_marker == "/dist"
    assert match.path_remainder == "/jquery.min.js"


def test_local_form_has_no_version(catalog: PatternCatalog) -> None:
    match = catalog.match("../node_modules/vue/dist/vue.min.js")

    assert match is not None
    assert match.pattern_index == 1
    assert match.package_name == "vue"
    assert match.declared_version is None
    assert match.path_remainder == "/vue.min.js"


def test_jquery_cdn_location(catalog: PatternCatalog) -> None:
    match = catalog.match("https://code.jquery.com/jquery-3.4.1.min.js")

    assert match is not None
    assert match.pattern_index == 2
    assert match.package_name == "jquery"
    assert match.declared_version == "3.4.1"
    assert match.dist_marker is None
    assert match.path_remainder == ".min.js"


def test_scoped_package_on_jsdelivr(catalog: PatternCatalog) -> None:
    match = catalog.match("https://cdn.jsdelivr.net/npm/@popperjs/core@2.11.8/dist/umd/popper.min.js")

    assert match is not None
    assert match.pattern_index == 3
    assert match.package_name == "@popperjs/core"
    assert match.declared_version == "2.11.8"
    assert match.path_remainder == "/umd/popper.min.js"


def test_unmatched_location_returns_none(catalog: PatternCatalog) -> None:
    assert catalog.match("https://example.com/assets/site.js") is None


def test_first_matching_pattern_wins() -> None:
    catalog = PatternCatalog(
        [
            r"https://mirror\.test/(?P<name>[^@]*)@(?P<version>\d+\.\d+\.\d+)(?P<path>.*)",
            r"https://(?P<host>[^/]*)/(?P<name>[^@]*)@(?P<version>\d+\.\d+\.\d+)(?P<path>.*)",
        ],
        cdn_names=["mirror", "generic"],
        cdn_templates=["https://mirror.test/$<name>@$<version>$<path>", "https://$<host>/$<name>@$<version>$<path>"],
        local_templates=["node_modules/$<name>$<path>"],
        packages_to_cdns={},
    )

    match = catalog.match("https://mirror.test/vue@2.6.11/dist/vue.js")

    assert match is not None
    assert match.pattern_index == 0
    assert catalog.entry(1).local_template == r"node_modules/\g<name>\g<path>"


def test_javascript_named_groups_are_normalised() -> None:
    source = r"https://example\.com/(?<name>[^@]+)@(?<version>\d+\.\d+\.\d+)(?=/)"

    assert normalize_pattern(source) == r"https://example\.com/(?P<name>[^@]+)@(?P<version>\d+\.\d+\.\d+)(?=/)"
    compiled = compile_pattern(source)
    found = compiled.search("https://example.com/react@18.2.0/umd/react.js")
    assert found is not None
    assert found.group("name") == "react"


def test_template_references_are_normalised() -> None:
    assert normalize_template("https://unpkg.com/$<name>@$<version>") == r"https://unpkg.com/\g<name>@\g<version>"


def test_pattern_without_name_group_is_rejected() -> None:
    with pytest.raises(ConfigError, match="`name` group"):
        compile_pattern(r"https://example\.com/(?P<version>\d+)")


def test_invalid_pattern_is_rejected() -> None:
    with pytest.raises(ConfigError, match="Invalid location pattern"):
        compile_pattern(r"https://example\.com/(?P<name>[")


def test_cdn_template_prefers_hint_then_mapping_then_pattern(catalog: PatternCatalog) -> None:
    jquery = catalog.match("https://unpkg.com/jquery@3.4.1/dist/jquery.min.js")
    vue = catalog.match("https://unpkg.com/vue@2.6.11/dist/vue.min.js")
    assert jquery is not None and vue is not None

    assert catalog.cdn_template(jquery) == DEFAULT_CDN_BASE_PATH_REPLACEMENTS[2]
    assert catalog.cdn_template(jquery, cdn_hint="jsdelivr") == DEFAULT_CDN_BASE_PATH_REPLACEMENTS[3]
    assert catalog.cdn_template(vue) == DEFAULT_CDN_BASE_PATH_REPLACEMENTS[0]


def test_unknown_cdn_hint_is_inconsistent(catalog: PatternCatalog) -> None:
    match = catalog.match("https://unpkg.com/vue@2.6.11/dist/vue.min.js")
    assert match is not None

    with pytest.raises(ConfigurationInconsistency, match='CDN "cdnjs"'):
        catalog.cdn_template(match, cdn_hint="cdnjs")


def test_empty_catalog_is_rejected() -> None:
    with pytest.raises(ConfigError):
        PatternCatalog([])
