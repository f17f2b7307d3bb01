"""Protocol shared by the source extractors."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from gouml.model import EntityModel


class Extractor(Protocol):
    """Protocol for source extractors feeding the entity model."""

    def can_handle(self, directory: Path) -> bool:
        """Return True if this extractor has sources to read in *directory*."""
        ...

    def extract(self, directory: Path, model: EntityModel) -> None:
        """Populate *model* with the declarations found in *directory*."""
        ...
