"""Tests for the javastride command line."""

import json
import pytest
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from javastride.cli import main


@pytest.fixture
def java_file(tmp_path):
    def write(name, source):
        path = tmp_path / name
        path.write_text(source)
        return str(path)
    return write


class TestConvertCommand:
    def test_class_as_json(self, java_file, capsys):
        path = java_file("Foo.java", "class Foo { int x; }")
        main(["convert", path])
        out = capsys.readouterr()
        elements = json.loads(out.out)
        assert len(elements) == 1
        assert elements[0]["_type"] == "ClassElement"
        assert elements[0]["name"] == "Foo"
        assert elements[0]["fields"][0]["access"] == "protected"
        assert out.err == ""

    def test_statement_context(self, java_file, capsys):
        path = java_file("body.java", "x += 2;")
        main(["convert", "--context", "statement", path])
        elements = json.loads(capsys.readouterr().out)
        assert elements == [{
            "_type": "AssignElement",
            "target": {"_type": "FilledSlot", "stride": "x", "java": "x"},
            "value": {"_type": "FilledSlot", "stride": "x + 2", "java": "x + 2"},
        }]

    def test_warnings_go_to_stderr(self, java_file, capsys):
        path = java_file("body.java", "assert ok;")
        main(["convert", "--context", "statement", "--testing", path])
        out = capsys.readouterr()
        assert json.loads(out.out) == [{"_type": "CommentElement", "text": "WARNING:UnsupportedFeature"}]
        assert out.err.strip() == f"{path}: warning: Unsupported feature: assert"

    def test_missing_file(self, tmp_path, capsys):
        missing = str(tmp_path / "Missing.java")
        with pytest.raises(SystemExit) as info:
            main(["convert", missing])
        assert info.value.code == 1
        assert "Error: File not found" in capsys.readouterr().err

    def test_parse_failure(self, java_file, capsys):
        path = java_file("Bad.java", "class {")
        with pytest.raises(SystemExit) as info:
            main(["convert", path])
        assert info.value.code == 1
        assert capsys.readouterr().err.startswith(f"Error: {path}:")


class TestMain:
    def test_no_command_prints_help(self, capsys):
        with pytest.raises(SystemExit) as info:
            main([])
        assert info.value.code == 1
        assert "usage: javastride" in capsys.readouterr().out

    def test_unknown_context_is_rejected(self, java_file):
        path = java_file("Foo.java", "class Foo {}")
        with pytest.raises(SystemExit) as info:
            main(["convert", "--context", "module", path])
        assert info.value.code == 2
