"""Distill a web page into its title, content and named entities."""

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Optional, Union

from annotate_text.annotate_text import recognize_entities, segment_sentences, tokenize_sentences
from annotate_text.model_registry import ModelRegistry
from annotate_text.models import EntityCategory, EntitySet, TokenizedSentence
from common.errors import MalformedInputError, PipelineTimeoutError
from common.utils import get_value
from distill_page.config import Config
from distill_page.models import ResultRecord
from extract_content.extract_content import extract_content
from extract_content.fetch_page import fetch_page
from extract_content.models import ExtractedDocument, RawDocument

logger = logging.getLogger(__name__)

# A str source is a URL; inline HTML goes in as bytes or a RawDocument
Source = Union[str, bytes, RawDocument, ExtractedDocument, dict, Any]


def _check_deadline(deadline: Optional[float], step: str) -> None:
    if deadline is not None and time.monotonic() > deadline:
        raise PipelineTimeoutError(f"Request deadline passed before {step}")


def obtain_document(source: Source, config: Config) -> ExtractedDocument:
    """Fetch and extract the page, or accept a document that is already extracted."""
    if isinstance(source, ExtractedDocument):
        return source

    if isinstance(source, str):
        raw = fetch_page(
            source,
            timeout=config.fetch.request_timeout,
            user_agent=config.fetch.user_agent,
        )
    elif isinstance(source, (RawDocument, bytes, bytearray)):
        raw = source
    else:
        body = get_value(source, "body")
        if body is None:
            body = get_value(source, "content")
        if not isinstance(body, str):
            raise MalformedInputError("Pre-extracted document has no body text")
        return ExtractedDocument(title=get_value(source, "title") or None, body=body)

    return extract_content(
        raw,
        favor_precision=config.extraction.favor_precision,
        include_tables=config.extraction.include_tables,
        fallback=config.extraction.fallback,
    )


def recognize_categories(
    tokenized_sentences: list[TokenizedSentence],
    categories: tuple[EntityCategory, ...],
    registry: ModelRegistry,
    config: Config,
) -> list[tuple[EntityCategory, EntitySet]]:
    """
    Run the recognizer once per category over the same tokenized sentences.

    Runs are independent, so with pipeline.parallel_categories they go to a
    thread pool. Results come back in category order once every run has
    finished; the first failure is re-raised.
    """
    def recognize(category: EntityCategory) -> EntitySet:
        nlp = registry.get(category.model)
        return recognize_entities(tokenized_sentences, category, nlp, batch_size=config.models.batch_size)

    if config.pipeline.parallel_categories and len(categories) > 1:
        max_workers = min(config.pipeline.max_workers, len(categories))
        with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="recognize") as executor:
            futures = [executor.submit(recognize, category) for category in categories]
            results = [future.result() for future in futures]
    else:
        results = [recognize(category) for category in categories]

    return list(zip(categories, results))


def run(
    source: Source,
    registry: ModelRegistry,
    config: Optional[Config] = None,
    deadline: Optional[float] = None,
) -> ResultRecord:
    """
    Distill one page.

    Steps: extract -> segment sentences -> tokenize -> recognize entities per
    category -> assemble. Any failure aborts the whole request; a category
    whose model fails is never skipped.

    Args:
        source: URL, raw HTML (bytes or RawDocument), or a pre-extracted
            document (ExtractedDocument, or a dict/object with title and body)
        registry: Shared registry of loaded spaCy pipelines
        config: Pipeline config (defaults to Config())
        deadline: time.monotonic() value after which the request is abandoned
            between steps

    Returns:
        ResultRecord with only the non-empty entity categories

    Raises:
        DistillError subclasses, tagged with their kind
    """
    config = config or Config()

    _check_deadline(deadline, "extraction")
    document = obtain_document(source, config)
    if document.title:
        logger.info("Title: %s", document.title)

    if not document.body:
        logger.info("Empty body, no entities to recognize")
        return ResultRecord(title=document.title, content="")

    _check_deadline(deadline, "sentence segmentation")
    sentences = segment_sentences(document.body, registry.get(config.models.sentences))

    _check_deadline(deadline, "tokenization")
    tokenized_sentences = tokenize_sentences(sentences, registry.get(config.models.tokens))
    logger.info(
        "Segmented %d sentences into %d tokens",
        len(sentences),
        sum(len(tokens) for tokens in tokenized_sentences),
    )

    _check_deadline(deadline, "entity recognition")
    recognized = recognize_categories(tokenized_sentences, config.entities, registry, config)

    _check_deadline(deadline, "result assembly")
    entities = {category: names for category, names in recognized if names}
    for category, names in recognized:
        logger.info("Found %d %s", len(names), category.output_key)

    return ResultRecord(title=document.title, content=document.body, entities=entities)
