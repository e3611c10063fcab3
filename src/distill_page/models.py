"""Data models for distill_page pipeline stage."""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Optional

from annotate_text.models import EntityCategory, EntitySet


@dataclass(frozen=True)
class ResultRecord:
    """Title, content and per-category entity sets of one distilled page.

    `entities` only holds categories with at least one entity, in category
    order.
    """
    title: Optional[str]
    content: str
    entities: Mapping[EntityCategory, EntitySet] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "entities", MappingProxyType(dict(self.entities)))

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready dict: title omitted when absent, entity lists sorted."""
        data: dict[str, Any] = {}
        if self.title is not None:
            data["title"] = self.title
        data["content"] = self.content
        for category, names in self.entities.items():
            data[category.output_key] = sorted(names)
        return data
