import re

import markdown
from bs4 import BeautifulSoup, NavigableString

_MARKDOWN_EXTENSIONS = ["fenced_code", "tables", "sane_lists"]


def markdown_to_text(markdown_text: str) -> str:
    """Render markdown as plain text: formatting markers, link targets and images are dropped."""
    if not markdown_text:
        return ""
    html = markdown.markdown(markdown_text, extensions=_MARKDOWN_EXTENSIONS)
    return html_to_text(html)


def html_to_text(html: str) -> str:
    """Convert rendered markdown HTML to readable plain text.

    Handles block elements, lists, table cells, and whitespace normalization.
    """
    soup = BeautifulSoup(html, "lxml")

    for tag in soup.find_all(["script", "style", "head", "img"]):
        tag.decompose()

    for br in soup.find_all("br"):
        br.replace_with("\n")

    for tag in soup.find_all(["p", "div", "pre", "tr", "h1", "h2", "h3", "h4", "h5", "h6", "blockquote", "hr"]):
        tag.insert(0, NavigableString("\n"))
        tag.append(NavigableString("\n"))

    # Links keep their text only: [text](url) -> text
    for a in soup.find_all("a"):
        a.replace_with(a.get_text())

    for li in soup.find_all("li"):
        li.insert(0, NavigableString("\n"))

    for td in soup.find_all(["td", "th"]):
        td.append(NavigableString("\t"))

    body = soup.find("body")
    text = (body or soup).get_text()

    text = re.sub(r"\t+", "  ", text)
    text = re.sub(r"[ \t]+\n", "\n", text)
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()
