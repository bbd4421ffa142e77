import unittest

from chatgpt_session.markdown_text import html_to_text, markdown_to_text


class MarkdownToTextTests(unittest.TestCase):
    def test_empty_input(self) -> None:
        self.assertEqual("", markdown_to_text(""))

    def test_strips_emphasis(self) -> None:
        self.assertEqual("Hello world", markdown_to_text("**Hello** _world_"))

    def test_heading_and_paragraph(self) -> None:
        self.assertEqual("Title\n\nSome code here", markdown_to_text("# Title\n\nSome `code` here"))

    def test_links_keep_text_only(self) -> None:
        self.assertEqual("see the docs", markdown_to_text("see [the docs](https://example.com/docs)"))

    def test_images_are_dropped(self) -> None:
        self.assertEqual("before after", markdown_to_text("before ![alt](https://example.com/a.png)after"))

    def test_list_items_on_own_lines(self) -> None:
        result = markdown_to_text("- one\n- two")
        self.assertEqual(["one", "two"], [line.strip() for line in result.splitlines() if line.strip()])

    def test_fenced_code_keeps_content(self) -> None:
        result = markdown_to_text("```python\nprint('hi')\n```")
        self.assertIn("print('hi')", result)
        self.assertNotIn("```", result)

    def test_plain_text_unchanged(self) -> None:
        self.assertEqual("just words", markdown_to_text("just words"))

    def test_entity_in_code_span_is_kept_literally(self) -> None:
        self.assertEqual("use &lt; in html", markdown_to_text("use `&lt;` in html"))

    def test_escaped_entity_text_is_decoded_once(self) -> None:
        self.assertEqual("write &amp;", markdown_to_text("write &amp;amp;"))


class HtmlToTextTests(unittest.TestCase):
    def test_br_becomes_newline(self) -> None:
        self.assertEqual("a\nb", html_to_text("<p>a<br>b</p>"))

    def test_entities_are_decoded_once(self) -> None:
        self.assertEqual("1 < 2 & 3", html_to_text("<p>1 &lt; 2 &amp; 3</p>"))
        self.assertEqual("&lt;b&gt;", html_to_text("<p>&amp;lt;b&amp;gt;</p>"))


if __name__ == "__main__":
    unittest.main()
