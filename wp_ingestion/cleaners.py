import re

from bs4 import BeautifulSoup, Comment
from markdownify import markdownify

from common.logger import get_logger

log = get_logger(__name__)

_IGNORED_TAGS = ["script", "style", "meta", "link", "head", "title", "noscript"]


def clean_markdown(s: str) -> str:
    s = s.replace("\u00a0", " ")
    s = re.sub(r"[ \t]+", " ", s)
    s = re.sub(r"\n{3,}", "\n\n", s)
    return s.strip()


def html_to_markdown(html: str) -> str:
    """
    Convert post/event HTML into markdown prose.
    Never raises: on a conversion failure the input is returned unchanged.
    """
    if not html or not isinstance(html, str):
        return html

    try:
        soup = BeautifulSoup(html, "html.parser")
        for tag in soup(_IGNORED_TAGS):
            tag.decompose()
        # block editor markup (<!-- wp:... -->) lives in comments
        for comment in soup.find_all(string=lambda t: isinstance(t, Comment)):
            comment.extract()
        markdown = markdownify(str(soup), heading_style="ATX", bullets="-")
        return clean_markdown(markdown)
    except Exception as e:
        log.warning("Error converting HTML to Markdown: %s", e)
        return html
