"""
Library Store

Name-indexed table of composite templates. The store is a plain immutable
mapping owned by the caller and passed explicitly into evaluation, so
swapping or editing a library never touches process-wide state.
"""

import json
from collections.abc import Mapping
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional

from .model import CompositeTemplate


class LibraryStore(Mapping):
    """
    Immutable mapping of template name -> CompositeTemplate.

    Example:
        library = LibraryStore()
        library = library.with_template(nand)
        library["NAND"].num_inputs  # 2
    """

    def __init__(self, templates: Optional[Iterable[CompositeTemplate]] = None):
        self._templates: Dict[str, CompositeTemplate] = {}
        for template in templates or ():
            self._templates[template.name] = template

    def __getitem__(self, name: str) -> CompositeTemplate:
        return self._templates[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._templates)

    def __len__(self) -> int:
        return len(self._templates)

    def __eq__(self, other) -> bool:
        if isinstance(other, LibraryStore):
            return self._templates == other._templates
        return NotImplemented

    def __hash__(self):
        return hash(tuple(sorted(self._templates.items(), key=lambda kv: kv[0])))

    def __repr__(self) -> str:
        return f"LibraryStore({self.names()})"

    def names(self) -> List[str]:
        return sorted(self._templates)

    def with_template(self, template: CompositeTemplate) -> "LibraryStore":
        """New store with `template` added, replacing any same-named one"""
        templates = dict(self._templates)
        templates[template.name] = template
        return LibraryStore(templates.values())

    def without(self, name: str) -> "LibraryStore":
        """New store with `name` removed. Unknown names are ignored."""
        return LibraryStore(t for n, t in self._templates.items() if n != name)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization"""
        from .codec import encode_template
        return {name: encode_template(t) for name, t in self._templates.items()}

    @classmethod
    def from_dict(cls, data: dict) -> "LibraryStore":
        """Load from dictionary"""
        from .codec import decode_library
        return decode_library(data)

    def save(self, path: Path):
        """Save library to file"""
        with open(path, "w") as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def load(cls, path: Path) -> "LibraryStore":
        """Load library from file"""
        with open(path) as f:
            return cls.from_dict(json.load(f))
