# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for the markup and JSON record document strategies."""

from __future__ import annotations

import json
from pathlib import Path
from textwrap import dedent

import pytest

from integrity_matters.documents import (
    DocumentStrategy,
    MarkupStrategy,
    RecordStrategy,
    SerializeOptions,
    strategy_for_path,
)
from integrity_matters.errors import IntegrityMattersError
from integrity_matters.models import Reference, ReferenceKind, ReferenceUpdate

JQUERY_LOCAL = "node_modules/jquery/dist/jquery.min.js"
BOOTSTRAP_URL = "https://stackpath.bootstrapcdn.com/bootstrap/4.3.1/css/bootstrap.min.css"

PAGE = dedent(
    f"""\
    <!DOCTYPE html>
    <html>
    <head>
    <link rel="stylesheet" href="{BOOTSTRAP_URL}" integrity="sha384-AAAA" crossorigin="anonymous"/>
    <script src="https://code.jquery.com/jquery-3.3.1.min.js" data-im-algorithms="sha256 sha384" data-im-cdn="jquery" data-im-global="window.jQuery"></script>
    <script>window.inline = true;</script>
    </head>
    <body></body>
    </html>
    """
)


def _update(location: str, integrity: str | None, **overrides: object) -> ReferenceUpdate:
    values: dict[str, object] = {"new_location": location, "local_path": JQUERY_LOCAL, "new_integrity": integrity}
    values.update(overrides)
    return ReferenceUpdate(**values)  # type: ignore[arg-type]


def test_markup_extracts_scripts_then_stylesheets() -> None:
    references = MarkupStrategy().extract_references(PAGE)

    assert [reference.kind for reference in references] == [ReferenceKind.SCRIPT, ReferenceKind.STYLESHEET]
    script, stylesheet = references
    assert script == Reference(
        index=0,
        kind=ReferenceKind.SCRIPT,
        location="https://code.jquery.com/jquery-3.3.1.min.js",
        algorithms=("sha256", "sha384"),
        cdn="jquery",
        fallback=True,
        global_check="window.jQuery",
    )
    assert stylesheet.location == BOOTSTRAP_URL
    assert stylesheet.integrity == "sha384-AAAA"
    assert stylesheet.crossorigin == "anonymous"


def test_markup_update_rewrites_attributes_and_adds_fallback() -> None:
    strategy = MarkupStrategy()
    script, _ = strategy.extract_references(PAGE)

    strategy.apply_update(
        script,
        _update(
            "https://code.jquery.com/jquery-3.4.1.min.js",
            "sha256-NEW",
            add_crossorigin="anonymous",
            fallback=True,
            global_check="window.jQuery",
        ),
    )
    output = strategy.serialize(SerializeOptions())

    assert "data-im-" not in output
    assert (
        '<script src="https://code.jquery.com/jquery-3.4.1.min.js" integrity="sha256-NEW"></script>' in output
    )
    assert "window.jQuery || document.write(" in output
    assert f'<script src="{JQUERY_LOCAL}">\\u003C/script>' in output


def test_markup_crossorigin_follows_integrity() -> None:
    strategy = MarkupStrategy()
    _, stylesheet = strategy.extract_references(PAGE)

    strategy.apply_update(stylesheet, _update(BOOTSTRAP_URL, "sha384-NEW", add_crossorigin="use-credentials"))

    assert 'integrity="sha384-NEW" crossorigin="use-credentials"' in strategy.serialize(SerializeOptions())


def test_markup_local_mode_drops_crossorigin_and_optional_integrity() -> None:
    strategy = MarkupStrategy()
    _, stylesheet = strategy.extract_references(PAGE)
    local = "node_modules/bootstrap/dist/css/bootstrap.min.css"

    strategy.apply_update(
        stylesheet,
        _update(local, "sha384-NEW", add_crossorigin=False, local=True, omit_local_integrity=True),
    )
    output = strategy.serialize(SerializeOptions())

    assert f'<link rel="stylesheet" href="{local}"/>' in output


def test_markup_serialization_reaches_fixed_point() -> None:
    strategy = MarkupStrategy()
    script, _ = strategy.extract_references(PAGE)
    strategy.apply_update(
        script,
        _update("https://code.jquery.com/jquery-3.4.1.min.js", "sha256-NEW", fallback=True, global_check="window.jQuery"),
    )
    first = strategy.serialize(SerializeOptions())

    again = MarkupStrategy()
    references = again.extract_references(first)

    assert len(references) == 2
    assert again.serialize(SerializeOptions()) == first


def test_markup_disclaimer_precedes_first_element() -> None:
    strategy = MarkupStrategy()
    strategy.extract_references(PAGE)

    output = strategy.serialize(SerializeOptions(disclaimer="Generated -- do not edit"))

    assert output.index("<!--Generated &hyphen;- do not edit-->") < output.index("<html>")
    assert output.startswith("<!DOCTYPE html>")


def test_markup_drop_modules() -> None:
    strategy = MarkupStrategy()
    strategy.extract_references(
        '<body>\n<script type="module" src="app.mjs"></script>\n<script nomodule src="legacy.js"></script>\n</body>'
    )

    output = strategy.serialize(SerializeOptions(drop_modules=True))

    assert 'type="module"' not in output
    assert '<script src="app.mjs" defer="defer"></script>' in output
    assert "legacy.js" not in output


def test_markup_update_requires_extraction() -> None:
    reference = Reference(index=0, kind=ReferenceKind.SCRIPT, location="a.js")

    with pytest.raises(IntegrityMattersError):
        MarkupStrategy().apply_update(reference, _update("b.js", None))


RECORDS = {
    "script": {
        "jquery": {
            "remote": "https://code.jquery.com/jquery-3.3.1.min.js",
            "local": JQUERY_LOCAL,
            "integrity": "sha256-OLD",
            "algorithms": "sha384",
            "cdn": "jquery",
        },
        "empty": {"note": "no location"},
    },
    "link": {"bootstrap": {"local": "node_modules/bootstrap/dist/css/bootstrap.min.css"}},
}


def test_records_extract_remote_or_local_locations() -> None:
    references = RecordStrategy().extract_references(json.dumps(RECORDS))

    assert [(reference.index, reference.kind, reference.location) for reference in references] == [
        (0, ReferenceKind.SCRIPT, "https://code.jquery.com/jquery-3.3.1.min.js"),
        (1, ReferenceKind.STYLESHEET, "node_modules/bootstrap/dist/css/bootstrap.min.css"),
    ]
    assert references[0].algorithms == ("sha384",)
    assert references[0].cdn == "jquery"
    assert references[0].integrity == "sha256-OLD"


def test_records_update_and_serialize() -> None:
    strategy = RecordStrategy()
    script, stylesheet = strategy.extract_references(json.dumps(RECORDS))

    strategy.apply_update(
        script,
        _update(
            "https://code.jquery.com/jquery-3.4.1.min.js",
            "sha384-NEW",
            add_crossorigin="anonymous",
            fallback=True,
            global_check="window.jQuery",
        ),
    )
    strategy.apply_update(
        stylesheet,
        _update(
            "node_modules/bootstrap/dist/css/bootstrap.min.css",
            None,
            local_path="node_modules/bootstrap/dist/css/bootstrap.min.css",
            local=True,
        ),
    )
    text = strategy.serialize(SerializeOptions(json_space=4))
    payload = json.loads(text)

    assert text.endswith("}\n")
    assert text.startswith('{\n    "script"')
    assert payload["script"]["jquery"] == {
        "remote": "https://code.jquery.com/jquery-3.4.1.min.js",
        "local": JQUERY_LOCAL,
        "integrity": "sha384-NEW",
        "algorithms": "sha384",
        "cdn": "jquery",
        "crossorigin": "anonymous",
        "fallback": True,
        "global": "window.jQuery",
    }
    assert payload["link"]["bootstrap"] == {"local": "node_modules/bootstrap/dist/css/bootstrap.min.css"}


def test_records_reject_non_object_documents() -> None:
    with pytest.raises(IntegrityMattersError):
        RecordStrategy().extract_references("[]")
    with pytest.raises(IntegrityMattersError):
        RecordStrategy().extract_references("{broken")


@pytest.mark.parametrize(
    ("name", "expected"),
    [("index.html", MarkupStrategy), ("page.HTM", MarkupStrategy), ("cdn.JSON", RecordStrategy)],
)
def test_strategy_for_path(name: str, expected: type) -> None:
    strategy = strategy_for_path(Path(name))

    assert isinstance(strategy, expected)
    assert isinstance(strategy, DocumentStrategy)
