"""
Tests for slot arity rules and input count propagation.
"""

from pyblocks.arity import get_input_count_of_slot, propagate_input_count
from pyblocks.domains.prf import BASE_CASE, CUSTOM_FUNCTION, RECURSIVE_CASE
from pyblocks.tree import create_block
from pyblocks.types import BlockType, Slot, iter_blocks

from conftest import comp, custom, mu, prim_rec, proj, succ, zero


class TestSlotInputCount:
    def test_input_set_wins(self):
        slot = Slot("f", input_set=2, input_mod=5)
        assert get_input_count_of_slot(slot, 7) == 2

    def test_input_mod_is_relative(self):
        assert get_input_count_of_slot(Slot("Base Case", input_mod=-1), 3) == 2
        assert get_input_count_of_slot(Slot("Recursive Case", input_mod=1), 3) == 4

    def test_pass_through(self):
        assert get_input_count_of_slot(Slot("g1"), 3) == 3

    def test_default_parent_count(self):
        assert get_input_count_of_slot(Slot("g1")) == 0

    def test_negative_counts_are_not_clamped(self):
        assert get_input_count_of_slot(Slot("Base Case", input_mod=-1), 0) == -1


class TestPropagation:
    def test_primitive_recursion_slots(self):
        tree = prim_rec(zero(), comp(succ(), proj(3)))
        propagate_input_count(tree, 2)

        assert tree.input_count == 2
        assert tree.child(BASE_CASE).input_count == 1
        recursive = tree.child(RECURSIVE_CASE)
        assert recursive.input_count == 3
        assert recursive.child("f").input_count == 1
        assert recursive.child("g1").input_count == 3

    def test_composition_f_gets_m(self):
        tree = comp(proj(2), zero(), zero())
        propagate_input_count(tree, 5)
        assert tree.child("f").input_count == 2
        assert tree.child("g1").input_count == 5
        assert tree.child("g2").input_count == 5

    def test_minimization_adds_one(self):
        tree = mu(proj(1))
        propagate_input_count(tree, 2)
        assert tree.child("f").input_count == 3

    def test_custom_passes_through(self):
        tree = custom("wrapped", succ())
        propagate_input_count(tree, 1)
        assert tree.child(CUSTOM_FUNCTION).input_count == 1

    def test_only_input_count_changes(self):
        tree = comp(proj(1), None)
        tree.errors = ["kept"]
        propagate_input_count(tree, 4)
        assert tree.errors == ["kept"]
        assert tree.num_value("m") == 1
        assert [s.name for s in tree.children] == ["f", "g1"]

    def test_empty_slots_are_skipped(self):
        tree = create_block(BlockType.PRIMITIVE_RECURSION)
        propagate_input_count(tree, 3)
        assert tree.input_count == 3

    def test_deep_tree(self):
        # Deeper than the interpreter recursion limit
        root = succ()
        for _ in range(5_000):
            root = custom("layer", root)
        propagate_input_count(root, 1)
        assert all(b.input_count == 1 for b in iter_blocks(root))
        assert sum(1 for _ in iter_blocks(root)) == 5_001
