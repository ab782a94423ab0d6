"""Tests for the pure line transitions."""

from tamkeen_cart import transitions
from tamkeen_cart.models import CartItem
from tamkeen_cart.transitions import Notify, Persist


class TestAddLine:
    def test_new_line_starts_at_one(self, shirt):
        result = transitions.add_line((), CartItem(product=shirt, quantity=4))
        assert len(result.lines) == 1
        assert result.lines[0].quantity == 1

    def test_repeat_add_coalesces(self, shirt):
        first = transitions.add_line((), CartItem(product=shirt))
        second = transitions.add_line(first.lines, CartItem(product=shirt))
        assert len(second.lines) == 1
        assert second.lines[0].quantity == 2

    def test_add_keeps_insertion_order(self, shirt, mug):
        lines = transitions.add_line((), CartItem(product=shirt)).lines
        lines = transitions.add_line(lines, CartItem(product=mug)).lines
        lines = transitions.add_line(lines, CartItem(product=shirt)).lines
        assert [line.id for line in lines] == [shirt.id, mug.id]

    def test_add_emits_persist_and_notify(self, shirt):
        result = transitions.add_line((), CartItem(product=shirt))
        assert result.effects[0] == Persist(result.lines)
        assert result.effects[1] == Notify("success", "Blue Shirt added to cart")

    def test_input_lines_not_mutated(self, shirt):
        original = transitions.add_line((), CartItem(product=shirt)).lines
        transitions.add_line(original, CartItem(product=shirt))
        assert original[0].quantity == 1


class TestSetQuantity:
    def test_zero_removes(self, shirt):
        lines = transitions.add_line((), CartItem(product=shirt)).lines
        result = transitions.set_quantity(lines, shirt.id, 0)
        assert result.lines == ()
        assert result.changed

    def test_negative_rejected(self, shirt):
        lines = transitions.add_line((), CartItem(product=shirt)).lines
        result = transitions.set_quantity(lines, shirt.id, -2)
        assert result.lines == lines
        assert not result.changed
        assert result.effects == (Notify("warning", "Quantity must be at least 1"),)

    def test_unknown_id_is_noop(self, shirt):
        lines = transitions.add_line((), CartItem(product=shirt)).lines
        result = transitions.set_quantity(lines, 999, 3)
        assert result.lines == lines
        assert result.effects == ()

    def test_decrement_from_one_removes(self, shirt):
        lines = transitions.add_line((), CartItem(product=shirt)).lines
        assert transitions.decrement(lines, shirt.id).lines == ()

    def test_increment(self, shirt):
        lines = transitions.add_line((), CartItem(product=shirt)).lines
        assert transitions.increment(lines, shirt.id).lines[0].quantity == 2


def test_remove_absent_is_noop(shirt):
    lines = transitions.add_line((), CartItem(product=shirt)).lines
    result = transitions.remove_line(lines, 42)
    assert result.lines == lines
    assert not result.changed


def test_clear_persists_empty():
    result = transitions.clear_lines(())
    assert result.lines == ()
    assert result.effects == (Persist(()),)
