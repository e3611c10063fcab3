"""Shared pytest fixtures: small blank spaCy pipelines instead of downloaded models."""

import pytest
import spacy

from annotate_text.model_registry import ModelRegistry

ENTITY_PATTERNS = [
    {"label": "PERSON", "pattern": "John Smith"},
    {"label": "PERSON", "pattern": "Jane Doe"},
    {"label": "GPE", "pattern": "Paris"},
    {"label": "LOC", "pattern": "Lake Geneva"},
    {"label": "ORG", "pattern": "Acme Corp."},
    {"label": "ORG", "pattern": "Acme Corp"},
]


def make_pipeline(sentences: bool = True, entities: bool = True):
    """Blank English pipeline with a rule-based sentencizer and entity ruler."""
    nlp = spacy.blank("en")
    if sentences:
        nlp.add_pipe("sentencizer")
    if entities:
        ruler = nlp.add_pipe("entity_ruler")
        ruler.add_patterns(ENTITY_PATTERNS)
    return nlp


@pytest.fixture(scope="session")
def nlp():
    return make_pipeline()


@pytest.fixture
def registry(nlp):
    """Registry whose every model name resolves to the shared test pipeline."""
    return ModelRegistry(loader=lambda name: nlp)


@pytest.fixture
def nlp_without_sentences():
    return make_pipeline(sentences=False)


@pytest.fixture
def nlp_without_entities():
    return make_pipeline(entities=False)
