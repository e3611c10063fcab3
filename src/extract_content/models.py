"""Data models for extract_content pipeline stage."""

from dataclasses import dataclass
from typing import Optional


@dataclass
class RawDocument:
    """HTML bytes with the declared or fetched character encoding."""
    content: bytes
    encoding: Optional[str] = None
    url: Optional[str] = None


@dataclass(frozen=True)
class ExtractedDocument:
    """Main-content title and body text of a page, boilerplate removed."""
    title: Optional[str]
    body: str
