"""Reduce page HTML to its main-content title and body text."""

import logging
import re
from typing import Optional, Union

import trafilatura
from lxml import etree
from lxml import html as lxml_html
from readability import Document

from common.errors import ExtractionError, MalformedInputError
from common.utils import collapse_whitespace
from extract_content.models import ExtractedDocument, RawDocument

logger = logging.getLogger(__name__)

PageSource = Union[RawDocument, bytes, str]

SNIFF_BYTES = 4096
META_CHARSET = re.compile(rb"""<meta[^>]+charset\s*=\s*["']?\s*([a-zA-Z0-9_.:-]+)""", re.IGNORECASE)
XML_DECLARATION = re.compile(r"^\s*<\?xml[^>]*\?>", re.IGNORECASE)
CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0e-\x1f]")
MAX_CONTROL_RATIO = 0.1
READABILITY_BLOCKS = ("p", "div", "li", "h1", "h2", "h3", "h4", "h5", "h6", "pre", "blockquote", "tr", "br")


def _as_raw_document(source: PageSource) -> RawDocument:
    if isinstance(source, RawDocument):
        return source
    if isinstance(source, str):
        return RawDocument(content=source.encode("utf-8"), encoding="utf-8")
    return RawDocument(content=bytes(source))


def sniff_charset(content: bytes) -> Optional[str]:
    """Find a charset declared in a <meta> tag near the top of the page."""
    match = META_CHARSET.search(content[:SNIFF_BYTES])
    if not match:
        return None
    return match.group(1).decode("ascii", errors="ignore") or None


def _looks_binary(text: str) -> bool:
    if "\x00" in text:
        return True
    head = text[:SNIFF_BYTES]
    return len(CONTROL_CHARS.findall(head)) > MAX_CONTROL_RATIO * len(head)


def decode_html(raw: RawDocument) -> str:
    """
    Decode page bytes to text.

    Order:
    1. declared encoding (strict)
    2. <meta charset> sniffed from the markup
    3. UTF-8
    4. cp1252, undecodable bytes replaced

    Raises:
        MalformedInputError: empty input, an unknown or violated declared
            encoding, or binary content
    """
    content = raw.content
    if not content or not content.strip():
        raise MalformedInputError("Page source is empty")

    if raw.encoding:
        try:
            text = content.decode(raw.encoding)
        except LookupError as e:
            raise MalformedInputError(f"Unknown encoding: {raw.encoding}") from e
        except UnicodeDecodeError as e:
            raise MalformedInputError(f"Page source is not valid {raw.encoding}: {e}") from e
    else:
        text = None
        for encoding in (sniff_charset(content), "utf-8"):
            if not encoding:
                continue
            try:
                text = content.decode(encoding)
                break
            except (LookupError, UnicodeDecodeError):
                logger.debug("Page source does not decode as %s", encoding)
        if text is None:
            text = content.decode("cp1252", errors="replace")

    if _looks_binary(text):
        raise MalformedInputError("Page source looks like binary data, not HTML")
    return text.lstrip("\ufeff")


def strip_xml_declaration(text: str) -> str:
    # lxml refuses str input that carries an encoding declaration
    return XML_DECLARATION.sub("", text, count=1)


def parse_html(text: str) -> lxml_html.HtmlElement:
    """Parse decoded markup into an lxml tree."""
    try:
        return lxml_html.document_fromstring(strip_xml_declaration(text))
    except (etree.ParserError, etree.XMLSyntaxError, ValueError) as e:
        raise MalformedInputError(f"Could not parse page source as HTML: {e}") from e


def title_element_text(tree: lxml_html.HtmlElement) -> Optional[str]:
    """Text of the first non-empty <title> element."""
    for element in tree.iter("title"):
        title = collapse_whitespace(element.text_content())
        if title:
            return title
    return None


def normalize_blocks(text: Optional[str]) -> str:
    """Collapse whitespace inside each block and join non-empty blocks with one newline."""
    if not text:
        return ""
    blocks = (collapse_whitespace(line) for line in text.splitlines())
    return "\n".join(block for block in blocks if block)


def extract_title(html_text: str, tree: lxml_html.HtmlElement) -> Optional[str]:
    """Page title from trafilatura's metadata, else the <title> element."""
    metadata = trafilatura.extract_metadata(html_text)
    title = collapse_whitespace(metadata.title) if metadata is not None else ""
    return title or title_element_text(tree)


def extract_with_trafilatura(
    html_text: str,
    favor_precision: bool = False,
    include_tables: bool = True,
) -> Optional[str]:
    """Extract main-content text using trafilatura."""
    return trafilatura.extract(
        html_text,
        output_format="txt",
        include_comments=False,
        include_tables=include_tables,
        favor_precision=favor_precision,
    )


def extract_with_readability(html_text: str) -> Optional[str]:
    """Extract main-content text using readability-lxml as fallback."""
    doc = Document(html_text)
    summary_html = doc.summary(html_partial=True)
    # Convert HTML to plain text, one line per block
    tree = lxml_html.fromstring(summary_html)
    for element in tree.iter(*READABILITY_BLOCKS):
        element.tail = "\n" + (element.tail or "")
    return tree.text_content()


def extract_content(
    source: PageSource,
    favor_precision: bool = False,
    include_tables: bool = True,
    fallback: bool = True,
) -> ExtractedDocument:
    """
    Extract the main-content title and body text of a page.

    Order:
    1. trafilatura
    2. readability-lxml, when trafilatura finds nothing and `fallback` is on

    Args:
        source: RawDocument, HTML bytes, or decoded HTML text
        favor_precision: Let trafilatura drop borderline blocks
        include_tables: Keep table text in the body
        fallback: Try readability-lxml when trafilatura finds no content

    Returns:
        ExtractedDocument; body is "" when no main content was found

    Raises:
        MalformedInputError: source cannot be decoded or parsed
        ExtractionError: trafilatura or readability failed internally
    """
    raw = _as_raw_document(source)
    label = raw.url or "inline document"

    html_text = strip_xml_declaration(decode_html(raw))
    tree = parse_html(html_text)

    try:
        title = extract_title(html_text, tree)
        body = normalize_blocks(extract_with_trafilatura(html_text, favor_precision, include_tables))
    except Exception as e:
        raise ExtractionError(f"trafilatura failed for {label}: {e}") from e

    if not body and fallback:
        logger.warning("trafilatura found no content in %s, trying readability", label)
        try:
            body = normalize_blocks(extract_with_readability(html_text))
        except Exception as e:
            raise ExtractionError(f"readability failed for {label}: {e}") from e

    if not body:
        logger.warning("No main content found in %s", label)

    logger.info("Extracted %d characters from %s (title: %s)", len(body), label, title)
    return ExtractedDocument(title=title, body=body)
