"""
Tests for block tree error annotation and editor document validation.
"""

import pytest

from pyblocks.domains.prf import zero as zero_config
from pyblocks.domains.registry import BlockRegistry
from pyblocks.tree import set_num_value
from pyblocks.validator import (
    CHILD_ERRORS,
    EDITOR_FILE_TYPE,
    check_for_errors,
    validate,
    validate_editor_state,
)

from conftest import addition, comp, custom, mu, multiplication, prim_rec, proj, rooted, succ, zero


# =============================================================================
# Tree Annotation
# =============================================================================

class TestCheckForErrors:
    def test_valid_trees_have_no_errors(self):
        for tree in (addition(), multiplication(), rooted(mu(proj(1)), 0)):
            assert check_for_errors(tree) == []

    def test_missing_slot(self):
        tree = rooted(comp(proj(1), zero(), None), 1)
        errors = check_for_errors(tree)
        assert "Missing g2." in errors
        assert CHILD_ERRORS not in errors

    def test_child_errors_marker(self):
        bad = rooted(comp(proj(1), zero(), None), 1)
        tree = rooted(custom("wrapper", bad), 1)
        assert check_for_errors(tree) == [CHILD_ERRORS]
        assert "Missing g2." in bad.errors

    def test_one_marker_per_errored_child(self):
        tree = rooted(comp(proj(2), succ(), succ()), 2)
        errors = check_for_errors(tree)
        assert errors == [CHILD_ERRORS, CHILD_ERRORS]

    def test_marker_precedes_missing_slots_and_own_checks(self):
        tree = rooted(prim_rec(succ(), None), 3)
        errors = check_for_errors(tree)
        assert errors == [CHILD_ERRORS, "Missing Recursive Case."]

    def test_successor_arity(self):
        tree = rooted(succ(), 2)
        assert check_for_errors(tree) == ["Successor block requires exactly one input, but has 2."]

    def test_projection_range(self):
        tree = rooted(proj(3), 2)
        assert check_for_errors(tree) == [
            "Projection block 'i' value must be between 1 and 2, but is 3."
        ]

    def test_projection_without_inputs(self):
        tree = rooted(proj(1), 0)
        assert check_for_errors(tree) == ["Projection block requires at least one input."]

    def test_primitive_recursion_without_inputs(self):
        tree = rooted(prim_rec(zero(), zero()), 0)
        errors = check_for_errors(tree)
        assert "Primitive Recursion block requires at least one input." in errors

    def test_negative_composition_m(self):
        tree = comp(zero())
        set_num_value(tree, "m", -1)
        errors = check_for_errors(tree)
        assert "Composition block 'm' value must be at least 0, but is -1." in errors

    def test_errors_are_recomputed(self):
        tree = rooted(succ(), 2)
        check_for_errors(tree)
        rooted(tree, 1)
        assert check_for_errors(tree) == []
        assert tree.errors == []

    def test_unknown_type(self):
        registry = BlockRegistry().register(zero_config).freeze()
        errors = check_for_errors(succ(), registry)
        assert errors == ["Unknown block type: Successor"]

    def test_validate_annotates_whole_tree(self):
        inner = rooted(succ(), 3)
        tree = rooted(custom("wrapper", inner), 3)
        validate(tree)
        assert tree.errors == [CHILD_ERRORS]
        assert inner.errors


# =============================================================================
# Document Validation
# =============================================================================

def document(**overrides):
    doc = {
        "fileType": EDITOR_FILE_TYPE,
        "inputs": [1, 2],
        "inputCount": 2,
        "rootBlock": {"type": "Zero", "children": [], "num_values": []},
        "customBlocks": {},
    }
    doc.update(overrides)
    return doc


def error_paths(result):
    return [e.path for e in result.errors]


class TestValidateEditorState:
    def test_valid_document(self):
        result = validate_editor_state(document())
        assert result.valid
        assert result.errors == []

    def test_not_an_object(self):
        result = validate_editor_state([1, 2])
        assert not result.valid
        assert error_paths(result) == ["$"]

    def test_wrong_file_type(self):
        result = validate_editor_state(document(fileType="SOMETHING_ELSE"))
        assert error_paths(result) == ["fileType"]

    def test_inputs_must_be_integers(self):
        assert error_paths(validate_editor_state(document(inputs=[1, "2"]))) == ["inputs"]
        assert error_paths(validate_editor_state(document(inputs=[True]))) == ["inputs"]

    def test_input_count_rejects_bool(self):
        assert error_paths(validate_editor_state(document(inputCount=True))) == ["inputCount"]

    def test_unknown_root_type(self):
        result = validate_editor_state(document(rootBlock={"type": "Lambda"}))
        assert error_paths(result) == ["rootBlock.type"]

    def test_nested_paths(self):
        root = {
            "type": "Custom",
            "children": [{"name": "Custom Function", "block": {"type": 3}}],
        }
        result = validate_editor_state(document(rootBlock=root))
        assert error_paths(result) == ["rootBlock.children[0].block.type"]

    def test_bad_num_value(self):
        root = {"type": "Projection", "num_values": [{"name": "i", "value": "1"}]}
        result = validate_editor_state(document(rootBlock=root))
        assert error_paths(result) == ["rootBlock.num_values[0]"]

    def test_duplicate_slot_names(self):
        root = {
            "type": "Primitive Recursion",
            "children": [{"name": "Base Case"}, {"name": "Base Case"}],
        }
        result = validate_editor_state(document(rootBlock=root))
        assert not result.valid
        assert "Duplicate slot name" in result.errors[0].message

    def test_missing_root_is_allowed(self):
        doc = document()
        del doc["rootBlock"]
        assert validate_editor_state(doc).valid

    def test_custom_blocks_must_be_custom(self):
        custom_blocks = {"double": {"type": "Zero"}}
        result = validate_editor_state(document(customBlocks=custom_blocks))
        assert error_paths(result) == ["customBlocks.double"]

    def test_custom_blocks_must_be_an_object(self):
        result = validate_editor_state(document(customBlocks=[]))
        assert error_paths(result) == ["customBlocks"]

    @pytest.mark.parametrize("key", ["id", "name"])
    def test_string_fields(self, key):
        root = {"type": "Zero", key: 5}
        result = validate_editor_state(document(rootBlock=root))
        assert error_paths(result) == [f"rootBlock.{key}"]
