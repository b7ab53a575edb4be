"""HTML to Markdown conversion for scraped pages.

Conversion is a fixed sequence of regex passes. Structural tags are
converted before the generic tag strip so heading levels and link targets
survive, and entities are decoded after the strip so decoded ``<`` and
``>`` cannot be mistaken for markup.

Two rule profiles exist. ``FULL_PROFILE`` is used for pages fetched
directly and restricts conversion to the main content when it can find it.
``REDUCED_PROFILE`` is the smaller rule set applied to HTML returned by the
scrape-as-a-service backend.
"""

import re
from dataclasses import dataclass
from typing import Optional

from bs4 import BeautifulSoup


@dataclass(frozen=True)
class MarkdownProfile:
    """Switches between the full and the reduced rule set."""

    extract_main: bool = True
    strip_all_boilerplate: bool = True  # Also drop aside, noscript and comments
    multiline_blocks: bool = True  # Block content may span lines
    divs_as_paragraphs: bool = True
    alt_before_src_images: bool = True
    lazy_images: bool = True
    blockquotes: bool = True
    tables: bool = True
    extended_entities: bool = True
    normalize_whitespace: bool = True


FULL_PROFILE = MarkdownProfile()

REDUCED_PROFILE = MarkdownProfile(
    extract_main=False,
    strip_all_boilerplate=False,
    multiline_blocks=False,
    divs_as_paragraphs=False,
    alt_before_src_images=False,
    lazy_images=False,
    blockquotes=False,
    tables=False,
    extended_entities=False,
    normalize_whitespace=False,
)

_MAIN_CONTENT_PATTERNS = [
    re.compile(r'<main[^>]*>([\s\S]*?)</main>', re.IGNORECASE),
    re.compile(r'<article[^>]*>([\s\S]*?)</article>', re.IGNORECASE),
    re.compile(r'<div[^>]*class="[^"]*content[^"]*"[^>]*>([\s\S]*?)</div>', re.IGNORECASE),
]

_BOILERPLATE_TAGS = ('script', 'style', 'nav', 'footer', 'header')
_EXTRA_BOILERPLATE_TAGS = ('aside', 'noscript')

_COMMENT = re.compile(r'<!--[\s\S]*?-->')

_TABLE = re.compile(r'<table[^>]*>([\s\S]*?)</table>', re.IGNORECASE)
_TABLE_ROW = re.compile(r'<tr[^>]*>([\s\S]*?)</tr>', re.IGNORECASE)
_TABLE_CELL = re.compile(r'<t[dh][^>]*>([\s\S]*?)</t[dh]>', re.IGNORECASE)

_LAZY_IMAGE = re.compile(r'<img\b[^>]*\sdata-src="([^"]*)"[^>]*>', re.IGNORECASE)
_IMAGE_ALT = re.compile(r'\salt="([^"]*)"', re.IGNORECASE)

_REMAINING_TAG = re.compile(r'<[^>]+>')

_BASIC_ENTITIES = [
    ('&nbsp;', ' '),
    ('&lt;', '<'),
    ('&gt;', '>'),
    ('&quot;', '"'),
    ('&#39;', "'"),
]
_EXTENDED_ENTITIES = [
    ('&euro;', '€'),
    ('&copy;', '©'),
    ('&reg;', '®'),
]
_NUMERIC_ENTITY = re.compile(r'&#(\d+);')
_HEX_ENTITY = re.compile(r'&#x([0-9a-fA-F]+);')


def _block(tag: str, multiline: bool) -> re.Pattern:
    body = r'([\s\S]*?)' if multiline else r'(.*?)'
    return re.compile(rf'<{tag}\b[^>]*>{body}</{tag}>', re.IGNORECASE)


def _strip_element(text: str, tag: str) -> str:
    return re.sub(rf'<{tag}\b[^>]*>[\s\S]*?</{tag}>', '', text, flags=re.IGNORECASE)


def _convert_table(match: re.Match) -> str:
    rows = []
    for row in _TABLE_ROW.findall(match.group(1)):
        cells = [cell.strip() for cell in _TABLE_CELL.findall(row)]
        rows.append('| ' + ' | '.join(cells) + ' |')
    return '\n' + '\n'.join(rows) + '\n'


def _convert_lazy_image(match: re.Match) -> str:
    alt = _IMAGE_ALT.search(match.group(0))
    return f"![{alt.group(1) if alt else ''}]({match.group(1)})"


def _decode_codepoint(value: int, original: str) -> str:
    try:
        return chr(value)
    except (ValueError, OverflowError):
        return original


def decode_entities(text: str, extended: bool = True) -> str:
    """Decode the fixed entity set used in scraped markup.

    Args:
        text: Text with HTML entities
        extended: Also decode euro/copy/reg and numeric references

    Returns:
        Decoded text
    """
    for entity, char in _BASIC_ENTITIES:
        text = text.replace(entity, char)

    if extended:
        for entity, char in _EXTENDED_ENTITIES:
            text = text.replace(entity, char)
        text = _NUMERIC_ENTITY.sub(
            lambda m: _decode_codepoint(int(m.group(1)), m.group(0)), text
        )
        text = _HEX_ENTITY.sub(
            lambda m: _decode_codepoint(int(m.group(1), 16), m.group(0)), text
        )

    # Last, so escaped entities such as &amp;lt; decode exactly once
    return text.replace('&amp;', '&')


def _clean_whitespace(text: str) -> str:
    text = re.sub(r'[ \t]+', ' ', text)
    text = '\n'.join(line.strip() for line in text.split('\n'))
    text = re.sub(r'\n{3,}', '\n\n', text)
    return text.strip()


def html_to_markdown(html: Optional[str], profile: MarkdownProfile = FULL_PROFILE) -> str:
    """Convert raw HTML into Markdown-like text.

    Never raises: markup the rules do not recognise is stripped or left as
    plain text.

    Args:
        html: Raw HTML (None and empty input yield an empty string)
        profile: Rule set to apply

    Returns:
        Markdown text
    """
    if not html:
        return ""

    text = html
    multiline = profile.multiline_blocks

    main_match = None
    if profile.extract_main:
        for pattern in _MAIN_CONTENT_PATTERNS:
            main_match = pattern.search(text)
            if main_match:
                break

    if main_match:
        text = main_match.group(1)
    else:
        for tag in _BOILERPLATE_TAGS:
            text = _strip_element(text, tag)
        if profile.strip_all_boilerplate:
            for tag in _EXTRA_BOILERPLATE_TAGS:
                text = _strip_element(text, tag)
            text = _COMMENT.sub('', text)

    # Headings
    for level in range(1, 7):
        text = _block(f'h{level}', multiline).sub(
            lambda m, hashes='#' * level: f"\n{hashes} {m.group(1)}\n", text
        )

    # Links keep their href
    link_body = r'([\s\S]*?)' if multiline else r'(.*?)'
    text = re.sub(
        rf'<a\b[^>]*href="([^"]*)"[^>]*>{link_body}</a>',
        r'[\2](\1)', text, flags=re.IGNORECASE,
    )

    # Images
    if profile.lazy_images:
        text = _LAZY_IMAGE.sub(_convert_lazy_image, text)
    text = re.sub(r'<img\b[^>]*src="([^"]*)"[^>]*alt="([^"]*)"[^>]*/?>', r'![\2](\1)', text, flags=re.IGNORECASE)
    if profile.alt_before_src_images:
        text = re.sub(r'<img\b[^>]*alt="([^"]*)"[^>]*src="([^"]*)"[^>]*/?>', r'![\1](\2)', text, flags=re.IGNORECASE)
    text = re.sub(r'<img\b[^>]*src="([^"]*)"[^>]*/?>', r'![](\1)', text, flags=re.IGNORECASE)

    # Lists
    text = _block('li', multiline).sub(r'- \1\n', text)
    text = re.sub(r'</?[ou]l[^>]*>', '\n', text, flags=re.IGNORECASE)

    # Paragraphs and breaks
    text = _block('p', multiline).sub(r'\n\1\n', text)
    if profile.divs_as_paragraphs:
        text = _block('div', multiline).sub(r'\n\1\n', text)
    text = re.sub(r'<br\s*/?>', '\n', text, flags=re.IGNORECASE)
    text = re.sub(r'<hr\s*/?>', '\n---\n', text, flags=re.IGNORECASE)

    # Inline formatting
    text = _block('strong', multiline).sub(r'**\1**', text)
    text = _block('b', multiline).sub(r'**\1**', text)
    text = _block('em', multiline).sub(r'*\1*', text)
    text = _block('i', multiline).sub(r'*\1*', text)

    # Code
    text = _block('code', multiline).sub(r'`\1`', text)
    text = _block('pre', True).sub(r'\n```\n\1\n```\n', text)

    if profile.blockquotes:
        text = _block('blockquote', multiline).sub(r'\n> \1\n', text)

    if profile.tables:
        text = _TABLE.sub(_convert_table, text)

    text = _REMAINING_TAG.sub('', text)
    text = decode_entities(text, extended=profile.extended_entities)

    if profile.normalize_whitespace:
        return _clean_whitespace(text)

    text = re.sub(r'\n{3,}', '\n\n', text)
    return text.strip()


def extract_title(html: Optional[str]) -> Optional[str]:
    """Return the text of the first ``<title>`` element, if any.

    Args:
        html: Raw HTML

    Returns:
        Stripped title text, or None when the page has no usable title
    """
    if not html:
        return None

    soup = BeautifulSoup(html, "html.parser")
    title = soup.find("title")
    if title is None:
        return None

    text = title.get_text(strip=True)
    return text or None
