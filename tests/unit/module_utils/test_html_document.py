# tests/unit/module_utils/test_html_document.py
#
# Unit tests for module_utils/html_document.py
#
# Focus:
# - lenient parsing that still reports structural errors
# - raw text extraction for script/style (no decoding, no trimming)
# - selection by tag name only, in document order

import unittest

from module_utils.html_document import (
    ParseError,
    extract_inline_content,
    iter_inline_elements,
    parse_document,
)


def _doc(head="", body=""):
    return (
        "<!doctype html><html><head><title>t</title>"
        + head
        + "</head><body>"
        + body
        + "</body></html>"
    )


class TestParseDocument(unittest.TestCase):
    def test_minimal_document_has_no_errors(self):
        doc = parse_document("<!doctype html><title>a</title>")
        self.assertEqual(doc.errors, ())

    def test_full_document_has_no_errors(self):
        doc = parse_document(_doc(head="<script>a()</script>", body="<p>hi</p>"))
        self.assertEqual(doc.errors, ())

    def test_fragment_reports_missing_doctype(self):
        doc = parse_document("<body><script>x()</script></body>")
        self.assertTrue(doc.errors)
        first = doc.errors[0]
        self.assertIsInstance(first, ParseError)
        self.assertEqual(first.code, "expected-doctype-but-got-start-tag")
        self.assertNotEqual(first.message, first.code)
        self.assertIn("line", str(first))

    def test_fragment_still_yields_a_tree(self):
        doc = parse_document("<body><script>x()</script></body>")
        self.assertEqual(extract_inline_content(doc), ["x()"])

    def test_broken_start_tag_is_reported(self):
        doc = parse_document(
            "<!doctype html>\n<html>\n<head\n<script>a()</script>\n</head>\n"
            "<body></body>\n</html>"
        )
        self.assertTrue(doc.errors)

    def test_rejects_non_string_input(self):
        with self.assertRaises(TypeError):
            parse_document(b"<!doctype html>")


class TestExtractInlineContent(unittest.TestCase):
    def test_script_content_is_raw_text(self):
        body = 'if (a < b && c > d) { s = "&amp;</p>"; }'
        doc = parse_document(_doc(body="<script>" + body + "</script>"))
        self.assertEqual(doc.errors, ())
        self.assertEqual(extract_inline_content(doc), [body])

    def test_style_content_keeps_whitespace(self):
        css = "\n  a > b { color: red }\n\t"
        doc = parse_document(_doc(head="<style>" + css + "</style>"))
        self.assertEqual(extract_inline_content(doc), [css])

    def test_empty_elements_yield_empty_string(self):
        doc = parse_document(_doc(head="<style></style>", body="<script></script>"))
        self.assertEqual(extract_inline_content(doc), ["", ""])

    def test_scripts_come_before_styles_in_document_order(self):
        doc = parse_document(
            _doc(
                head="<style>s1</style><script>j1</script>",
                body="<div><script>j2</script></div><style>s2</style>",
            )
        )
        self.assertEqual(extract_inline_content(doc), ["j1", "j2", "s1", "s2"])

    def test_no_attribute_filtering(self):
        doc = parse_document(
            _doc(
                body=(
                    '<script type="module">import x from "./x.js";</script>'
                    '<script type="application/ld+json">{"@type": "Thing"}</script>'
                    '<script src="/app.js"></script>'
                )
            )
        )
        self.assertEqual(
            extract_inline_content(doc),
            ['import x from "./x.js";', '{"@type": "Thing"}', ""],
        )

    def test_uppercase_tags_match(self):
        doc = parse_document(_doc(body="<SCRIPT>go()</SCRIPT><Style>p{}</Style>"))
        self.assertEqual(extract_inline_content(doc), ["go()", "p{}"])

    def test_comments_are_skipped(self):
        doc = parse_document(_doc(body="<!-- <script>no()</script> --><script>yes()</script>"))
        self.assertEqual(extract_inline_content(doc), ["yes()"])

    def test_tags_argument_limits_selection(self):
        doc = parse_document(_doc(head="<style>s</style>", body="<script>j</script>"))
        self.assertEqual(extract_inline_content(doc, ("style",)), ["s"])
        self.assertEqual(len(list(iter_inline_elements(doc, "script"))), 1)

    def test_document_without_inline_elements(self):
        doc = parse_document(_doc(body="<p>nothing here</p>"))
        self.assertEqual(extract_inline_content(doc), [])


if __name__ == "__main__":
    unittest.main()
