"""
Jinja filters producing CSP hash-source tokens for inline script/style content.

    {{ lookup('template', 'index.html.j2') | csp_hashes_from_html }}
    {{ page_html | csp_hashes_from_html(algorithms=['sha256', 'sha384'], quoted=True) | join(' ') }}
    {{ "console.log('hi');" | csp_hash_source(quoted=True) }}

Lists are returned sorted so rendered headers stay stable between runs.
A document that does not parse as a complete HTML document fails the task
with DocumentStructureError rather than producing a partial hash list.
"""

import sys
import os

from ansible.errors import AnsibleFilterError

# Ensure module_utils is importable when this filter runs from Ansible
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
from module_utils.csp_hashes import (
    DEFAULT_ALGORITHM,
    HashAlgorithm,
    csp_hash_source as _csp_hash_source,
    validated_inline_content,
)


def _quote(token):
    return f"'{token}'"


def _algorithms_or_error(algorithms, name):
    """Accept a single token or a list of tokens; always returns a list of HashAlgorithm."""
    if algorithms is None:
        return [DEFAULT_ALGORITHM]
    if isinstance(algorithms, (str, HashAlgorithm)):
        algorithms = [algorithms]
    if not isinstance(algorithms, (list, tuple)) or not algorithms:
        raise AnsibleFilterError(
            f"{name}: algorithms must be a string or a non-empty list; got {algorithms!r}"
        )
    try:
        return [HashAlgorithm.coerce(a) for a in algorithms]
    except ValueError as exc:
        raise AnsibleFilterError(f"{name}: {exc}") from exc


def _tolerated_errors_or_error(tolerated_errors, name):
    """Accept None, a single error code or a list of codes; always returns a list."""
    if tolerated_errors is None:
        return []
    if isinstance(tolerated_errors, str):
        return [tolerated_errors]
    if not isinstance(tolerated_errors, (list, tuple)):
        raise AnsibleFilterError(
            f"{name}: tolerated_errors must be a string or a list; "
            f"got {type(tolerated_errors).__name__}"
        )
    return list(tolerated_errors)


def csp_hashes_from_html(html, algorithms="sha256", quoted=False, tolerated_errors=None):
    """
    Hash all inline <script> and <style> elements of a complete HTML document.

    Args:
        html (str): document text.
        algorithms (str|list): one or more of sha256, sha384, sha512.
        quoted (bool): wrap each token in single quotes, as written in a header.
        tolerated_errors (str|list|None): html5lib error code(s) to ignore.

    Returns:
        list: sorted, duplicate-free hash-source tokens.
    """
    if not isinstance(html, str):
        raise AnsibleFilterError(
            f"csp_hashes_from_html: html must be a string; got {type(html).__name__}"
        )
    algos = _algorithms_or_error(algorithms, "csp_hashes_from_html")
    tolerated = _tolerated_errors_or_error(tolerated_errors, "csp_hashes_from_html")

    # parse and validate once, then hash the same contents per algorithm
    contents = validated_inline_content(html, tolerated)
    tokens = {_csp_hash_source(content, algo) for algo in algos for content in contents}

    ordered = sorted(tokens)
    return [_quote(t) for t in ordered] if quoted else ordered


def csp_hash_source(content, algorithm="sha256", quoted=False):
    """Hash a single inline snippet, e.g. one configured under server.csp.hashes."""
    if not isinstance(content, str):
        raise AnsibleFilterError(
            f"csp_hash_source: content must be a string; got {type(content).__name__}"
        )
    try:
        token = _csp_hash_source(content, algorithm)
    except ValueError as exc:
        raise AnsibleFilterError(f"csp_hash_source: {exc}") from exc
    return _quote(token) if quoted else token


class FilterModule(object):
    ''' Inline script/style CSP hash filters '''
    def filters(self):
        return {
            'csp_hashes_from_html': csp_hashes_from_html,
            'csp_hash_source': csp_hash_source,
        }
