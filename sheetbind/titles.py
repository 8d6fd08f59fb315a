"""Column title resolution for record schemas."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Tuple

from .schema import FieldSpec, SheetMeta


@dataclass(frozen=True)
class TitleSet:
    """Resolved titles in field declaration order."""

    titles: Tuple[str, ...] = ()
    customized: bool = False

    def __len__(self) -> int:
        return len(self.titles)


def collect_titles(fields: Sequence[FieldSpec]) -> TitleSet:
    """Resolve one title per field, falling back to the field name.

    ``customized`` is set as soon as a single field declares its own title.
    """

    titles = tuple(spec.resolved_title for spec in fields)
    customized = any(spec.title for spec in fields)
    return TitleSet(titles=titles, customized=customized)


def should_write_titles(title_set: TitleSet, meta: SheetMeta) -> bool:
    return title_set.customized or bool(meta.title)
