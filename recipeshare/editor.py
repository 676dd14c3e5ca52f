"""Editing state for the ingredient and instruction lists of a recipe form.

Both lists are edited independently. Reordering follows a drag gesture:
``drag_start`` records the origin, ``drag_over`` the hover target and ``drop``
moves the dragged item. Browser events can arrive late or out of order, so
gesture calls that do not fit the current state are ignored rather than
raised.

The web forms only see the outcome of a gesture: the browser tracks the
hover highlight itself and posts ``move:<kind>:<from>:<to>``, which
``apply_action`` replays through ``drag_start`` and ``drop``. ``drag_over``
and ``hover_index`` serve callers that hold an editor across the whole
gesture; the form template reads ``hover_index`` so such an editor renders
its highlight.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

INGREDIENT = "ingredient"
INSTRUCTION = "instruction"
SEQUENCE_KINDS = (INGREDIENT, INSTRUCTION)


@dataclass
class DragState:
    kind: str
    origin: int
    hover: Optional[int] = None


class OrderedListEditor:
    def __init__(
        self,
        ingredients: Optional[Iterable[str]] = None,
        instructions: Optional[Iterable[str]] = None,
    ) -> None:
        self._sequences: Dict[str, List[str]] = {
            INGREDIENT: list(ingredients or []) or [""],
            INSTRUCTION: list(instructions or []) or [""],
        }
        self.drag: Optional[DragState] = None

    @property
    def ingredients(self) -> List[str]:
        return list(self._sequences[INGREDIENT])

    @property
    def instructions(self) -> List[str]:
        return list(self._sequences[INSTRUCTION])

    def items(self, kind: str) -> List[str]:
        return list(self._sequence(kind))

    def hover_index(self, kind: str) -> Optional[int]:
        if self.drag is None or self.drag.kind != kind:
            return None
        return self.drag.hover

    def can_remove(self, kind: str) -> bool:
        return len(self._sequence(kind)) > 1

    def append(self, kind: str) -> None:
        self._sequence(kind).append("")

    def update(self, kind: str, index: int, value: str) -> None:
        self._sequence(kind)[index] = value

    def remove(self, kind: str, index: int) -> bool:
        """Delete the item at ``index``; the last remaining item is kept."""

        sequence = self._sequence(kind)
        if len(sequence) <= 1 or not 0 <= index < len(sequence):
            return False
        del sequence[index]
        return True

    def drag_start(self, kind: str, index: int) -> None:
        if 0 <= index < len(self._sequence(kind)):
            self.drag = DragState(kind=kind, origin=index)

    def drag_over(self, kind: str, index: int) -> None:
        if self.drag is not None and self.drag.kind == kind:
            self.drag.hover = index

    def drag_end(self) -> None:
        self.drag = None

    def drop(self, kind: str, index: int) -> bool:
        """Move the dragged item to ``index``. Returns ``True`` if anything moved."""

        drag, self.drag = self.drag, None
        if drag is None or drag.kind != kind or drag.origin == index:
            return False

        sequence = self._sequence(kind)
        if not 0 <= drag.origin < len(sequence):
            return False
        item = sequence.pop(drag.origin)
        sequence.insert(max(index, 0), item)
        return True

    def move(self, kind: str, origin: int, target: int) -> bool:
        self.drag_start(kind, origin)
        return self.drop(kind, target)

    def apply_action(self, action: str) -> bool:
        """Apply a form action such as ``add:ingredient``,
        ``remove:instruction:2`` or ``move:ingredient:0:2``.

        Unknown or malformed actions are ignored and return ``False``.
        """

        parts = action.split(":")
        if len(parts) < 2 or parts[1] not in SEQUENCE_KINDS:
            return False
        verb, kind = parts[0], parts[1]

        try:
            indexes = [int(part) for part in parts[2:]]
        except ValueError:
            return False

        if verb == "add" and not indexes:
            self.append(kind)
            return True
        if verb == "remove" and len(indexes) == 1:
            return self.remove(kind, indexes[0])
        if verb == "move" and len(indexes) == 2:
            return self.move(kind, indexes[0], indexes[1])
        return False

    def _sequence(self, kind: str) -> List[str]:
        try:
            return self._sequences[kind]
        except KeyError:
            raise ValueError(f"Unknown sequence kind: {kind!r}") from None


__all__ = ["INGREDIENT", "INSTRUCTION", "SEQUENCE_KINDS", "DragState", "OrderedListEditor"]
