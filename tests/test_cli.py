"""
Tests for the pyblocks command line interface.
"""

import json

import pytest

from pyblocks.cli import Colors, main, parse_input_string, read_inputs_file
from pyblocks.document import EditorState, dump_editor_state

from conftest import addition, comp, proj, rooted, zero


def write_document(path, root, inputs):
    state = EditorState(root=root, inputs=inputs, input_count=len(inputs))
    path.write_text(json.dumps(dump_editor_state(state)))
    return str(path)


@pytest.fixture
def add_document(tmp_path):
    return write_document(tmp_path / "add.bramflower", addition(), [2, 3])


@pytest.fixture
def broken_document(tmp_path):
    return write_document(tmp_path / "broken.bramflower", rooted(comp(proj(1), zero(), None), 1), [1])


def result_line(value):
    return f"{Colors.CYAN}{value}{Colors.RESET}"


class TestParseInputs:
    def test_comma_separated(self):
        assert parse_input_string("1, 2,3") == [1, 2, 3]

    def test_json_array(self):
        assert parse_input_string("[4, 5]") == [4, 5]

    def test_empty(self):
        assert parse_input_string("") == []
        assert parse_input_string("[]") == []

    def test_rejects_non_integers(self):
        with pytest.raises(ValueError):
            parse_input_string("1,x")
        with pytest.raises(ValueError):
            parse_input_string("[1.5]")

    def test_inputs_file(self, tmp_path):
        path = tmp_path / "inputs.json"
        path.write_text("[7, 8]")
        assert read_inputs_file(str(path)) == [7, 8]
        assert read_inputs_file(str(tmp_path / "missing.json")) is None
        path.write_text('{"x": 1}')
        assert read_inputs_file(str(path)) is None


class TestMain:
    def test_runs_with_document_inputs(self, add_document, capsys):
        assert main([add_document]) == 0
        assert result_line(5) in capsys.readouterr().out

    def test_inputs_override(self, add_document, capsys):
        assert main([add_document, "--inputs", "10,32"]) == 0
        assert result_line(42) in capsys.readouterr().out

    def test_inputs_file(self, add_document, tmp_path, capsys):
        inputs = tmp_path / "inputs.json"
        inputs.write_text("[1, 1]")
        assert main([add_document, "--inputs-file", str(inputs)]) == 0
        assert result_line(2) in capsys.readouterr().out

    def test_bad_inputs(self, add_document):
        assert main([add_document, "--inputs", "one,two"]) == 1

    def test_trace(self, add_document, capsys):
        assert main([add_document, "--trace", "--inputs", "1,1", "-v"]) == 0
        out = capsys.readouterr().out
        assert "PRIMITIVE RECURSION(1, 0)" in out
        assert "steps" in out
        assert result_line(2) in out

    def test_validate_only(self, add_document, capsys):
        assert main([add_document, "--validate"]) == 0
        out = capsys.readouterr().out
        assert "Validation passed" in out
        assert "Result" not in out

    def test_validate_reports_errors(self, broken_document, capsys):
        assert main([broken_document, "--validate"]) == 1
        assert "Missing g2." in capsys.readouterr().out

    def test_broken_tree_fails_at_evaluation(self, broken_document, capsys):
        assert main([broken_document]) == 1
        out = capsys.readouterr().out
        assert "MissingSlot" in out
        assert "g2 block is missing in Composition." in out

    def test_strict_refuses_to_evaluate(self, broken_document, capsys):
        assert main([broken_document, "--strict"]) == 1
        assert "Evaluation error" not in capsys.readouterr().out

    def test_input_length_revalidates(self, add_document, capsys):
        # With three inputs the recursive case sees (x1, x2, y, z), so proj(3)
        # picks y: the tree computes succ(n - 1) = 3 for n = 3
        assert main([add_document, "--inputs", "1,2,3", "--strict"]) == 0
        assert result_line(3) in capsys.readouterr().out

    def test_missing_document(self, tmp_path, capsys):
        assert main([str(tmp_path / "missing.bramflower")]) == 1
        assert "Could not load document" in capsys.readouterr().out

    def test_invalid_speed(self, add_document):
        with pytest.raises(SystemExit):
            main([add_document, "--speed", "ludicrous"])
