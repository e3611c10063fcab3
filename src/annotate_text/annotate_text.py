"""Sentence segmentation, tokenization and named-entity recognition with spaCy."""

from __future__ import annotations

import logging

from spacy.language import Language
from spacy.tokens import Doc

from annotate_text.models import EntityCategory, EntitySet, SentenceSequence, TokenizedSentence
from common.errors import ModelUnavailableError

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 32

SENTENCE_COMPONENTS = ("parser", "senter", "sentencizer")
ENTITY_COMPONENTS = ("ner", "entity_ruler")


def _require_component(nlp: Language, names: tuple[str, ...], purpose: str) -> None:
    if not any(nlp.has_pipe(name) for name in names):
        raise ModelUnavailableError(
            f"spaCy pipeline {nlp.meta.get('name', '?')} has no {purpose} component "
            f"(needs one of {', '.join(names)}; has {', '.join(nlp.pipe_names) or 'none'})"
        )


def segment_sentences(text: str, nlp: Language) -> SentenceSequence:
    """Split text into non-empty sentences in document order."""
    if not text or not text.strip():
        return []
    _require_component(nlp, SENTENCE_COMPONENTS, "sentence boundary")

    disabled = [name for name in ENTITY_COMPONENTS if nlp.has_pipe(name)]
    doc = nlp(text, disable=disabled)

    sentences = []
    for sent in doc.sents:
        sentence = sent.text.strip()
        if sentence:
            sentences.append(sentence)
    return sentences


def tokenize(sentence: str, nlp: Language) -> TokenizedSentence:
    """Split a sentence into word and punctuation tokens, left to right."""
    if not sentence:
        return []
    return [token.text for token in nlp.tokenizer(sentence) if not token.is_space]


def tokenize_sentences(sentences: SentenceSequence, nlp: Language) -> list[TokenizedSentence]:
    return [tokenize(sentence, nlp) for sentence in sentences]


def recognize_entities(
    tokenized_sentences: list[TokenizedSentence],
    category: EntityCategory,
    nlp: Language,
    batch_size: int = DEFAULT_BATCH_SIZE,
) -> EntitySet:
    """
    Find the distinct entities of one category across all sentences.

    Each sentence is labelled on its own, so the result does not depend on
    sentence order. Span tokens are joined with single spaces and names are
    de-duplicated by exact string match only ("Acme Corp." and "Acme Corp"
    stay distinct).

    Args:
        tokenized_sentences: Token lists, one per sentence
        category: Category to collect, with the spaCy labels that count for it
        nlp: Pipeline bound to the category
        batch_size: Batch size for nlp.pipe

    Returns:
        Frozen set of surface strings (possibly empty)
    """
    _require_component(nlp, ENTITY_COMPONENTS, "entity recognition")

    docs = [Doc(nlp.vocab, words=tokens) for tokens in tokenized_sentences if tokens]
    names: set[str] = set()
    for doc in nlp.pipe(docs, batch_size=batch_size):
        for ent in doc.ents:
            if ent.label_ in category.labels:
                names.add(" ".join(token.text for token in ent))

    logger.debug("Found %d %s entities in %d sentences", len(names), category.name, len(docs))
    return frozenset(names)
