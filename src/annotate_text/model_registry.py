"""Process-wide cache of loaded spaCy pipelines."""

from __future__ import annotations

import logging
import threading
from typing import Callable, Iterable

import spacy
from spacy.language import Language

from annotate_text.models import SPACY_MODELS
from common.errors import ModelUnavailableError

logger = logging.getLogger(__name__)

LOAD_ERRORS = (OSError, ImportError, ValueError, KeyError)


def resolve_model_name(model_key: str) -> str:
    """Map a short key (sm, lg, trf) to its package name; other names pass through."""
    return SPACY_MODELS.get(model_key, model_key)


class ModelRegistry:
    """Loads each spaCy pipeline at most once and shares it read-only.

    Pipelines are loaded lazily on first `get`, or eagerly with `preload`.
    A lock guards loading so concurrent first use does not load twice.
    """

    def __init__(self, loader: Callable[[str], Language] | None = None):
        self._loader = loader or spacy.load
        self._models: dict[str, Language] = {}
        self._lock = threading.Lock()

    def get(self, model_key: str) -> Language:
        """Get a loaded pipeline, loading it if needed.

        Raises:
            ModelUnavailableError: If the pipeline cannot be loaded
        """
        model_name = resolve_model_name(model_key)
        nlp = self._models.get(model_name)
        if nlp is not None:
            return nlp

        with self._lock:
            if model_name not in self._models:
                logger.info("Loading spaCy model: %s", model_name)
                try:
                    self._models[model_name] = self._loader(model_name)
                except LOAD_ERRORS as e:
                    raise ModelUnavailableError(f"Could not load spaCy model {model_name}: {e}") from e
            return self._models[model_name]

    def preload(self, model_keys: Iterable[str]) -> None:
        """Load every listed pipeline now."""
        for model_key in model_keys:
            self.get(model_key)

    def loaded(self) -> list[str]:
        """Names of the pipelines loaded so far."""
        return sorted(self._models)
