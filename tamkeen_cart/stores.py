"""Cart and basket stores: in-memory line collections mirrored to durable storage."""

import logging
from abc import ABC, abstractmethod
from typing import Any, Generic, Optional, Union

from pydantic import ValidationError as ModelValidationError

from .exceptions import PersistenceError
from .models import CartItem, Package, PackageItem, Product
from .storage import LocalStorage
from . import transitions
from .transitions import Line, Notifier, Notify, Persist, Transition, log_notifier

logger = logging.getLogger(__name__)


class LineStore(ABC, Generic[Line]):
    """
    Owns an ordered collection of line items.

    Mutations run a pure transition and then execute its effects: every
    mutating call writes the full collection to storage before returning.
    A failed write is logged and the in-memory lines stay authoritative.
    """

    key: str = ""
    legacy_keys: tuple[str, ...] = ()
    line_model: type

    def __init__(self, storage: LocalStorage, notifier: Optional[Notifier] = None) -> None:
        """
        Initialize the store and hydrate it from storage.

        Args:
            storage: Durable key-value storage
            notifier: Callable receiving (level, message) for user-visible messages
        """
        self.storage = storage
        self.notifier = notifier or log_notifier
        self._lines: tuple = self._hydrate()

    def _hydrate(self) -> tuple:
        """Load saved lines, migrating a legacy key if the canonical one is absent."""
        records = self._read(self.key)
        if records is None:
            for legacy_key in self.legacy_keys:
                records = self._read(legacy_key)
                if records is not None:
                    logger.info(f"Migrating {self.key} snapshot from legacy key '{legacy_key}'")
                    lines = self._parse(records)
                    self._persist(lines)
                    try:
                        self.storage.remove(legacy_key)
                    except PersistenceError as e:
                        logger.warning(f"Could not remove legacy key: {e}")
                    return lines
            return ()

        lines = self._parse(records)
        logger.debug(f"Loaded {len(lines)} {self.key} line(s) from storage")
        return lines

    def _read(self, key: str) -> Optional[Any]:
        try:
            return self.storage.get(key)
        except PersistenceError as e:
            logger.error(f"Could not load {self.key}: {e}")
            return None

    def _parse(self, records: Any) -> tuple:
        if not isinstance(records, list):
            logger.warning(f"Ignoring malformed {self.key} snapshot")
            return ()

        lines: tuple = ()
        for record in records:
            try:
                line = self._parse_record(record)
            except (ModelValidationError, TypeError) as e:
                logger.warning(f"Skipping unreadable {self.key} line: {e}")
                continue
            # Older snapshots may hold the same id twice; fold them into one line
            for index, existing in enumerate(lines):
                if existing.id == line.id:
                    merged = existing.model_copy(update={"quantity": existing.quantity + line.quantity})
                    lines = lines[:index] + (merged,) + lines[index + 1:]
                    break
            else:
                lines = lines + (line,)
        return lines

    def _parse_record(self, record: dict) -> Line:
        return self.line_model.model_validate(record)

    @abstractmethod
    def _wrap(self, entry: Any) -> Line:
        """Turn a catalog entry into a quantity-1 line."""

    def _persist(self, lines: tuple) -> None:
        try:
            self.storage.set(self.key, [line.model_dump(mode="json") for line in lines])
        except PersistenceError as e:
            logger.error(f"Could not save {self.key}: {e}")

    def _apply(self, transition: Transition) -> tuple:
        self._lines = transition.lines
        for effect in transition.effects:
            if isinstance(effect, Persist):
                self._persist(effect.lines)
            elif isinstance(effect, Notify):
                self.notifier(effect.level, effect.message)
        return self._lines

    def add(self, entry: Any) -> tuple:
        """
        Add one unit of a catalog entry.

        Returns:
            The updated ordered lines
        """
        line = entry if isinstance(entry, self.line_model) else self._wrap(entry)
        logger.info(f"Adding {self.key} line: id={line.id}")
        return self._apply(transitions.add_line(self._lines, line))

    def set_quantity(self, line_id: int, quantity: int) -> tuple:
        return self._apply(transitions.set_quantity(self._lines, line_id, quantity))

    def increment(self, line_id: int) -> tuple:
        return self._apply(transitions.increment(self._lines, line_id))

    def decrement(self, line_id: int) -> tuple:
        return self._apply(transitions.decrement(self._lines, line_id))

    def remove(self, line_id: int) -> tuple:
        return self._apply(transitions.remove_line(self._lines, line_id))

    def clear(self) -> tuple:
        logger.info(f"Clearing {self.key}")
        return self._apply(transitions.clear_lines(self._lines))

    def snapshot(self) -> tuple:
        """Read-only ordered sequence of the current lines."""
        return self._lines

    def get(self, line_id: int) -> Optional[Line]:
        for line in self._lines:
            if line.id == line_id:
                return line
        return None

    def count(self) -> int:
        return len(self._lines)

    def is_empty(self) -> bool:
        return not self._lines


class CartStore(LineStore[CartItem]):
    """One-off product lines."""

    key = "cart"
    legacy_keys = ("cartItems",)
    line_model = CartItem

    def _wrap(self, entry: Union[Product, dict]) -> CartItem:
        product = entry if isinstance(entry, Product) else Product.model_validate(entry)
        return CartItem(product=product)

    def _parse_record(self, record: dict) -> CartItem:
        if isinstance(record, dict) and "product" not in record:
            # Flat records: product fields with an optional quantity
            return CartItem(product=Product.model_validate(record), quantity=record.get("quantity", 1))
        return super()._parse_record(record)


class BasketStore(LineStore[PackageItem]):
    """Package (subscription) lines."""

    key = "basket"
    legacy_keys = ("basketItems",)
    line_model = PackageItem

    def _wrap(self, entry: Union[Package, dict]) -> PackageItem:
        package = entry if isinstance(entry, Package) else Package.model_validate(entry)
        return PackageItem(package=package)

    def _parse_record(self, record: dict) -> PackageItem:
        if isinstance(record, dict) and "package" not in record:
            return PackageItem(package=Package.model_validate(record), quantity=record.get("quantity", 1))
        return super()._parse_record(record)
