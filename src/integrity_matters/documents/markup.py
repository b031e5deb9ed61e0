# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""HTML document strategy built on BeautifulSoup."""

from __future__ import annotations

import re
from typing import Final

from bs4 import BeautifulSoup, Comment, NavigableString, Tag

from ..errors import IntegrityMattersError
from ..models import Reference, ReferenceKind, ReferenceUpdate
from .base import SerializeOptions

_PARSER: Final[str] = "html.parser"
_ALGORITHMS_ATTR: Final[str] = "data-im-algorithms"
_CDN_ATTR: Final[str] = "data-im-cdn"
_GLOBAL_ATTR: Final[str] = "data-im-global"
_DIRECTIVE_ATTRS: Final[tuple[str, ...]] = (_CDN_ATTR, _GLOBAL_ATTR, _ALGORITHMS_ATTR)
_LOCATION_ATTR: Final[dict[ReferenceKind, str]] = {
    ReferenceKind.SCRIPT: "src",
    ReferenceKind.STYLESHEET: "href",
}
_WHITESPACE_ONLY: Final[re.Pattern[str]] = re.compile(r"^\s+$")

_FALLBACK_TEMPLATE: Final[str] = """<script>
          'use strict';
          {guard} || document.write(
            '{element}'
          );
        </script>"""


class MarkupStrategy:
    """Read and rewrite ``<script src>`` and ``<link rel=stylesheet>`` elements."""

    def __init__(self) -> None:
        self._soup: BeautifulSoup | None = None
        self._elements: list[Tag] = []

    def extract_references(self, content: str) -> list[Reference]:
        """Parse ``content`` and collect scripts first, then stylesheets."""

        self._soup = BeautifulSoup(content, _PARSER)
        self._elements = [
            *self._soup.select("script[src]"),
            *self._soup.select("link[rel=stylesheet][href]"),
        ]
        return [_reference_from_element(index, element) for index, element in enumerate(self._elements)]

    def apply_update(self, reference: Reference, update: ReferenceUpdate) -> None:
        """Rewrite the element behind ``reference``.

        Directive attributes are consumed, the location and integrity are
        replaced, ``crossorigin`` is managed only on elements carrying an
        integrity attribute, and a ``document.write`` fallback loader is
        inserted after the element when one is requested.
        """

        element = self._element(reference)
        for attribute in _DIRECTIVE_ATTRS:
            del element[attribute]
        element[_LOCATION_ATTR[reference.kind]] = update.new_location

        if update.add_crossorigin is not None and element.has_attr("integrity"):
            if update.add_crossorigin:
                element["crossorigin"] = str(update.add_crossorigin)
            else:
                del element["crossorigin"]

        if update.new_integrity and not (update.local and update.omit_local_integrity):
            element["integrity"] = update.new_integrity
        else:
            del element["integrity"]

        if update.fallback and update.local_path and update.global_check:
            element.insert_after("\n", _fallback_loader(reference.kind, update.local_path, update.global_check))

    def serialize(self, options: SerializeOptions) -> str:
        """Render the document, applying disclaimer and module options."""

        soup = self._require_soup()
        if options.disclaimer:
            comment = Comment(options.disclaimer.replace("--", "&hyphen;-"))
            first = soup.find(True)
            if first is None:
                soup.insert(0, comment)
            else:
                first.insert_before(comment, "\n")
        if options.drop_modules:
            _drop_modules(soup)
        return soup.decode()

    def _element(self, reference: Reference) -> Tag:
        self._require_soup()
        try:
            return self._elements[reference.index]
        except IndexError:
            raise IntegrityMattersError(f"No markup element at reference index {reference.index}") from None

    def _require_soup(self) -> BeautifulSoup:
        if self._soup is None:
            raise IntegrityMattersError("extract_references must run before the document is updated")
        return self._soup


def _reference_from_element(index: int, element: Tag) -> Reference:
    kind = ReferenceKind.SCRIPT if element.name == "script" else ReferenceKind.STYLESHEET
    algorithms = _attribute(element, _ALGORITHMS_ATTR)
    global_check = _attribute(element, _GLOBAL_ATTR)
    return Reference(
        index=index,
        kind=kind,
        location=_attribute(element, _LOCATION_ATTR[kind]) or "",
        integrity=_attribute(element, "integrity"),
        algorithms=tuple(algorithms.split()) if algorithms else (),
        cdn=_attribute(element, _CDN_ATTR) or None,
        fallback=element.has_attr(_GLOBAL_ATTR),
        global_check=global_check or None,
        crossorigin=_attribute(element, "crossorigin"),
    )


def _attribute(element: Tag, name: str) -> str | None:
    value = element.get(name)
    if value is None:
        return None
    if isinstance(value, list):
        return " ".join(value)
    return str(value)


def _fallback_loader(kind: ReferenceKind, local_path: str, guard: str) -> Tag:
    if kind is ReferenceKind.STYLESHEET:
        synchronous = f'<link rel="stylesheet" href="{local_path}" />'
    else:
        # Escaped so the closing tag does not terminate the loader itself.
        synchronous = f'<script src="{local_path}">\\u003C/script>'
    fragment = BeautifulSoup(_FALLBACK_TEMPLATE.format(guard=guard, element=synchronous), _PARSER)
    loader = fragment.find("script")
    if not isinstance(loader, Tag):
        raise IntegrityMattersError("Unable to build the fallback loader")
    return loader.extract()


def _drop_modules(soup: BeautifulSoup) -> None:
    for script in soup.select('script[type="module"]'):
        del script["type"]
        script["defer"] = "defer"
    for script in soup.select("script[nomodule]"):
        previous = script.previous_sibling
        if isinstance(previous, NavigableString) and _WHITESPACE_ONLY.match(previous):
            previous.extract()
        script.decompose()


__all__ = ["MarkupStrategy"]
