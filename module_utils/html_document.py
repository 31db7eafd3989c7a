# module_utils/html_document.py
#
# Lenient full-document HTML parsing with the structural error list kept.
#
# html5lib implements the WHATWG tree construction algorithm, so <script> and
# <style> bodies are tokenized as raw text and come back exactly as written.
# The parser never raises on malformed markup; it recovers a tree and records
# every parse error instead. Callers decide what an error means.

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator, List, Sequence, Tuple
from xml.etree.ElementTree import Element

import html5lib
from html5lib.constants import E as _ERROR_MESSAGES

logger = logging.getLogger(__name__)

INLINE_TAGS: Tuple[str, ...] = ("script", "style")


@dataclass(frozen=True)
class ParseError:
    line: int
    col: int
    code: str
    message: str

    @classmethod
    def from_html5lib(cls, raw) -> "ParseError":
        """
        Build from html5lib's ((line, col), errorcode, datavars) tuple.
        """
        (line, col), code, datavars = raw
        template = _ERROR_MESSAGES.get(code, code)
        try:
            message = template % (datavars or {})
        except (KeyError, TypeError, ValueError):
            message = template
        return cls(line=line, col=col, code=code, message=message)

    def __str__(self) -> str:
        return f"{self.message} (line {self.line}, col {self.col})"


@dataclass(frozen=True)
class HtmlDocument:
    root: Element
    errors: Tuple[ParseError, ...]


def parse_document(html: str) -> HtmlDocument:
    """
    Parse ``html`` as a complete document.

    Always returns a tree. Structural problems (missing doctype, a bare
    fragment, broken tags, misnested elements) end up in ``errors`` in the
    order html5lib reported them.
    """
    if not isinstance(html, str):
        raise TypeError(f"parse_document: html must be a str; got {type(html).__name__}")

    # one parser per call, html5lib parsers keep per-parse state
    parser = html5lib.HTMLParser(
        tree=html5lib.getTreeBuilder("etree"),
        namespaceHTMLElements=False,
    )
    root = parser.parse(html)
    errors = tuple(ParseError.from_html5lib(e) for e in parser.errors)

    logger.debug("parsed document: %d chars, %d parse error(s)", len(html), len(errors))
    return HtmlDocument(root=root, errors=errors)


def _local_name(tag) -> str:
    # foreign content (svg, math) keeps a "{namespace}" prefix
    return tag.rsplit("}", 1)[-1].lower()


def iter_inline_elements(document: HtmlDocument, tag: str) -> Iterator[Element]:
    """Yield every element named ``tag`` in depth-first document order."""
    wanted = tag.lower()
    for el in document.root.iter():
        # comments and processing instructions carry a callable as tag
        if isinstance(el.tag, str) and _local_name(el.tag) == wanted:
            yield el


def element_text(el: Element) -> str:
    return "".join(el.itertext())


def extract_inline_content(
    document: HtmlDocument, tags: Sequence[str] = INLINE_TAGS
) -> List[str]:
    """
    Return the raw inner text of each matching element, grouped by tag in the
    order given. Empty elements contribute "".
    """
    out: List[str] = []
    for tag in tags:
        out.extend(element_text(el) for el in iter_inline_elements(document, tag))
    return out
