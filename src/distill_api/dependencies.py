"""Shared FastAPI dependencies."""

import time
from typing import Optional

from annotate_text.model_registry import ModelRegistry
from common.config import ConfigSingleton
from distill_page.config import Config

# One registry per process, shared read-only by every request
_registry = ConfigSingleton(ModelRegistry)
get_registry = _registry.get
set_registry = _registry.set
reset_registry = _registry.reset


def request_deadline(config: Config) -> Optional[float]:
    """Monotonic deadline for a request starting now, if the server sets a timeout."""
    timeout = config.server.request_timeout
    if not timeout:
        return None
    return time.monotonic() + timeout
