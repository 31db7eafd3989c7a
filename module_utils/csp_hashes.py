# module_utils/csp_hashes.py
#
# CSP hash-source expressions for inline <script> and <style> content.
#
#   csp_hash_source("alert(1);")                  -> "sha256-..."
#   csp_hashes_from_html_document(html, "sha384") -> {"sha384-...", ...}
#
# Why:
# - A document is only hashed when it parses cleanly as a complete HTML
#   document. If the parser had to guess element boundaries the hashes could
#   allow-list the wrong bytes, so the first structural parse error is raised
#   instead of returning a partial set.

from __future__ import annotations

import base64
import hashlib
import logging
from enum import Enum
from typing import Iterable, List, Set, Union

from ansible.errors import AnsibleFilterError

from module_utils.html_document import INLINE_TAGS, ParseError, extract_inline_content, parse_document

logger = logging.getLogger(__name__)


class HashAlgorithm(Enum):
    SHA256 = "sha256"
    SHA384 = "sha384"
    SHA512 = "sha512"

    @property
    def token(self) -> str:
        return self.value

    def digest(self, data: bytes) -> bytes:
        return hashlib.new(self.value, data).digest()

    @classmethod
    def coerce(cls, value: Union["HashAlgorithm", str]) -> "HashAlgorithm":
        """
        Accept a member or a token like "sha256", "SHA384" or "sha-512".
        """
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise ValueError(
                f"hash algorithm must be one of {', '.join(a.value for a in cls)}; "
                f"got {type(value).__name__}"
            )
        normalized = value.strip().lower().replace("-", "")
        try:
            return cls(normalized)
        except ValueError:
            raise ValueError(
                f"unsupported hash algorithm '{value}'; "
                f"expected one of {', '.join(a.value for a in cls)}"
            ) from None


DEFAULT_ALGORITHM = HashAlgorithm.SHA256


class DocumentStructureError(AnsibleFilterError):
    """
    The input did not parse as a well-formed, complete HTML document.
    Carries the first offending html5lib parse error.
    """

    def __init__(self, error: ParseError):
        self.code = error.code
        self.line = error.line
        self.col = error.col
        self.reason = error.message
        super().__init__(f"csp_hashes_from_html_document: {error}")


def csp_hash_source(
    content: str, algorithm: Union[HashAlgorithm, str] = DEFAULT_ALGORITHM
) -> str:
    """
    Digest ``content`` (UTF-8, untouched) and render it as a CSP hash-source
    expression "<algorithm>-<standard padded base64>".
    """
    if not isinstance(content, str):
        raise TypeError(f"csp_hash_source: content must be a str; got {type(content).__name__}")
    algo = HashAlgorithm.coerce(algorithm)
    b64 = base64.b64encode(algo.digest(content.encode("utf-8"))).decode("ascii")
    return f"{algo.token}-{b64}"


# invalid-codepoint also covers lone surrogates, which cannot be encoded as
# UTF-8, so no hash of the served bytes exists for them.
ALWAYS_FATAL_ERRORS = frozenset({"invalid-codepoint"})


def validated_inline_content(html: str, tolerated_errors: Iterable[str] = ()) -> List[str]:
    """
    Parse ``html`` and return the raw content of its inline <script> and
    <style> elements (scripts first), or raise DocumentStructureError for the
    first parse error whose code is not in ``tolerated_errors``.

    Codes in ALWAYS_FATAL_ERRORS are never tolerated.
    """
    if isinstance(tolerated_errors, str):
        raise TypeError(
            "tolerated_errors must be a collection of error codes, not a single str"
        )
    tolerated = frozenset(tolerated_errors) - ALWAYS_FATAL_ERRORS

    document = parse_document(html)
    errors = [e for e in document.errors if e.code not in tolerated]
    if errors:
        raise DocumentStructureError(errors[0])
    if document.errors:
        logger.debug("ignoring %d tolerated parse error(s)", len(document.errors))

    return extract_inline_content(document, INLINE_TAGS)


def csp_hashes_from_html_document(
    html: str,
    algorithm: Union[HashAlgorithm, str] = DEFAULT_ALGORITHM,
    tolerated_errors: Iterable[str] = (),
) -> Set[str]:
    """
    Hash every inline <script> and <style> element of ``html``.

    Args:
        html: the full document text.
        algorithm: digest to use for every expression.
        tolerated_errors: html5lib error codes that do not reject the
            document. Empty by default, so any parse error is fatal.

    Returns:
        set of hash-source expressions, one per distinct content string.

    Raises:
        DocumentStructureError: for the first non-tolerated parse error.
    """
    algo = HashAlgorithm.coerce(algorithm)

    hashes: Set[str] = set()
    for content in validated_inline_content(html, tolerated_errors):
        hashes.add(csp_hash_source(content, algo))

    logger.debug("computed %d distinct %s expression(s)", len(hashes), algo.token)
    return hashes
