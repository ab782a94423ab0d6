"""
Pure state transitions for cart and basket line collections.

Each function takes the current ordered lines and returns a ``Transition``:
the new lines plus the effects (persist, notify) an adapter must run.
Nothing here touches storage. ``log_notifier`` is the default sink for
``Notify`` effects when no UI notifier is injected.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Sequence, TypeVar, Union

from .models import CartItem, PackageItem

logger = logging.getLogger(__name__)

Line = TypeVar("Line", CartItem, PackageItem)

Notifier = Callable[[str, str], None]


def log_notifier(level: str, message: str) -> None:
    """Default notifier: route user-facing messages to the log."""
    if level in ("warning", "error"):
        logger.warning(message)
    else:
        logger.info(message)


@dataclass(frozen=True)
class Persist:
    """Write the full line collection to durable storage."""

    lines: tuple


@dataclass(frozen=True)
class Notify:
    """Show a transient message to the user."""

    level: str
    message: str


Effect = Union[Persist, Notify]


@dataclass(frozen=True)
class Transition:
    lines: tuple
    effects: tuple = ()

    @property
    def changed(self) -> bool:
        return any(isinstance(effect, Persist) for effect in self.effects)


def _index_of(lines: Sequence[Line], line_id: int) -> int:
    for index, line in enumerate(lines):
        if line.id == line_id:
            return index
    return -1


def add_line(lines: Sequence[Line], line: Line) -> Transition:
    """Append a line, or bump the quantity of the existing line with the same id by one."""
    lines = tuple(lines)
    index = _index_of(lines, line.id)
    if index >= 0:
        existing = lines[index]
        bumped = existing.model_copy(update={"quantity": existing.quantity + 1})
        new_lines = lines[:index] + (bumped,) + lines[index + 1:]
    else:
        new_lines = lines + (line.model_copy(update={"quantity": 1}),)
    return Transition(
        new_lines,
        (Persist(new_lines), Notify("success", f"{line.name} added to cart")),
    )


def remove_line(lines: Sequence[Line], line_id: int) -> Transition:
    lines = tuple(lines)
    new_lines = tuple(line for line in lines if line.id != line_id)
    if len(new_lines) == len(lines):
        return Transition(lines)
    return Transition(new_lines, (Persist(new_lines),))


def set_quantity(lines: Sequence[Line], line_id: int, quantity: int) -> Transition:
    """
    Set a line's quantity.

    A quantity of 0 removes the line. Negative quantities are rejected with a
    warning and leave the lines unchanged. Unknown ids are a no-op.
    """
    lines = tuple(lines)
    if quantity < 0:
        return Transition(lines, (Notify("warning", "Quantity must be at least 1"),))
    if quantity == 0:
        return remove_line(lines, line_id)

    index = _index_of(lines, line_id)
    if index < 0 or lines[index].quantity == quantity:
        return Transition(lines)
    updated = lines[index].model_copy(update={"quantity": quantity})
    new_lines = lines[:index] + (updated,) + lines[index + 1:]
    return Transition(new_lines, (Persist(new_lines),))


def increment(lines: Sequence[Line], line_id: int) -> Transition:
    index = _index_of(lines, line_id)
    if index < 0:
        return Transition(tuple(lines))
    return set_quantity(lines, line_id, lines[index].quantity + 1)


def decrement(lines: Sequence[Line], line_id: int) -> Transition:
    # Decrementing a quantity-1 line removes it
    index = _index_of(lines, line_id)
    if index < 0:
        return Transition(tuple(lines))
    return set_quantity(lines, line_id, lines[index].quantity - 1)


def clear_lines(lines: Sequence[Line]) -> Transition:
    return Transition((), (Persist(()),))
