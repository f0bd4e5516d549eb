"""Storage adapters implementing core ports."""

from sketchparity.adapters.storage.in_memory import InMemoryPayloadStorage

__all__ = ["InMemoryPayloadStorage"]
