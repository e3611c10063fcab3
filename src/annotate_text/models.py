"""Data models for annotate_text pipeline stage."""

from dataclasses import dataclass

# Whitelisted short keys for the English spaCy pipelines
SPACY_MODELS = {
    "sm": "en_core_web_sm",
    "md": "en_core_web_md",
    "lg": "en_core_web_lg",
    "trf": "en_core_web_trf",
}
DEFAULT_SPACY_MODEL = "sm"

SentenceSequence = list[str]
TokenizedSentence = list[str]
EntitySet = frozenset[str]


@dataclass(frozen=True)
class EntityCategory:
    """A named-entity category bound to one spaCy pipeline.

    `labels` are the spaCy NER labels counted as this category and
    `output_key` is the key the category's entities are published under.
    """
    name: str
    output_key: str
    model: str
    labels: frozenset[str]

    def __post_init__(self) -> None:
        if not self.name or not self.output_key:
            raise ValueError("Entity category needs a name and an output_key")
        if not self.labels:
            raise ValueError(f"Entity category {self.name!r} has no labels")


DEFAULT_CATEGORIES: tuple[EntityCategory, ...] = (
    EntityCategory("person", "persons", DEFAULT_SPACY_MODEL, frozenset({"PERSON"})),
    EntityCategory("location", "locations", DEFAULT_SPACY_MODEL, frozenset({"GPE", "LOC"})),
    EntityCategory("organization", "organizations", DEFAULT_SPACY_MODEL, frozenset({"ORG"})),
)
