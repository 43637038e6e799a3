#!/usr/bin/env python3
"""
Tests for directory walking, deduplication and unit building against a fake front end.
"""

import os
import tempfile
from pathlib import Path

import pytest

from abigen.errors import FrontEndInitError, ParseError, WalkError
from abigen.export import ExportAll, VisibilityExportPolicy
from abigen.frontend import Visibility
from abigen.generator import Generator
from abigen.ir import FnSignature, Struct, Variable
from abigen.testing import FakeFrontEnd, function, struct, variable


@pytest.fixture
def temp_project():
    """Create a temporary source tree."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def frontend():
    return FakeFrontEnd()


def touch(path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("")
    return path


class Recorder:
    """User generator that remembers every symbol it was given."""

    def __init__(self, emit=True):
        self.symbols = []
        self.emit = emit

    def __call__(self, symbol):
        self.symbols.append(symbol)
        if not self.emit:
            return None
        if isinstance(symbol, Struct):
            return f"{symbol.name}:{len(symbol.fields)}"
        return symbol.name

    def names(self):
        return [s.name for s in self.symbols]


def test_one_unit_per_source_file(temp_project, frontend):
    touch(temp_project / "a.c")
    touch(temp_project / "sub" / "deeper" / "b.c")
    touch(temp_project / "api.h")
    touch(temp_project / "README.txt")
    frontend.add_file("a.c", function("a_fn"))
    frontend.add_file("b.c", function("b_fn"))

    units = Generator(frontend).generate(temp_project, Recorder())

    assert sorted(u.name for u in units) == ["a.c", "b.c"]
    assert sorted(frontend.parsed_files) == ["a.c", "b.c"]
    by_name = {u.name: u for u in units}
    assert by_name["a.c"].fragments == ["a_fn"]
    assert by_name["b.c"].fragments == ["b_fn"]


def test_empty_unit_for_file_without_symbols(temp_project, frontend):
    touch(temp_project / "empty.c")
    frontend.add_file("empty.c")

    units = Generator(frontend).generate(temp_project, Recorder())

    assert len(units) == 1
    assert units[0].name == "empty.c"
    assert units[0].is_empty
    assert units[0].generated == ""


def test_forward_declaration_then_definition(temp_project, frontend):
    """struct S; struct S { int x; }; surfaces twice, empty first."""
    touch(temp_project / "a.c")
    frontend.add_file("a.c", struct("S"), struct("S", [("x", "int")]))
    recorder = Recorder()

    units = Generator(frontend, ExportAll()).generate(temp_project, recorder)

    assert recorder.names() == ["S", "S"]
    assert recorder.symbols[0].fields == []
    assert [(f.name, f.ctype.spelling) for f in recorder.symbols[1].fields] == [("x", "int")]
    assert units[0].fragments == ["S:0", "S:1"]
    assert units[0].generated == "S:0\nS:1"


def test_definition_then_forward_declaration(temp_project, frontend):
    touch(temp_project / "a.c")
    frontend.add_file(
        "a.c",
        struct("S", [("x", "int"), ("y", "double")]),
        struct("S"),
    )
    recorder = Recorder()

    Generator(frontend).generate(temp_project, recorder)

    assert len(recorder.symbols) == 1
    assert [f.name for f in recorder.symbols[0].fields] == ["x", "y"]


def test_repeated_forward_declarations_both_surface(temp_project, frontend):
    touch(temp_project / "a.c")
    frontend.add_file("a.c", struct("Opaque"), struct("Opaque"))
    recorder = Recorder()

    Generator(frontend).generate(temp_project, recorder)

    assert recorder.names() == ["Opaque", "Opaque"]
    assert not any(s.has_fields for s in recorder.symbols)


def test_struct_definition_in_other_file_suppresses_forward_declaration(temp_project, frontend):
    touch(temp_project / "a.c")
    touch(temp_project / "b.c")
    node = struct("Node", [("next", "struct Node *"), ("value", "int")])
    frontend.add_file("a.c", node, struct("Node"))
    frontend.add_file("b.c", struct("Node"), node)
    recorder = Recorder()

    Generator(frontend).generate(temp_project, recorder)

    # whichever file comes first, the full definition surfaces exactly once
    full = [s for s in recorder.symbols if s.fields]
    assert len(full) == 1
    assert [f.name for f in full[0].fields] == ["next", "value"]


def test_anonymous_struct_is_skipped(temp_project, frontend):
    touch(temp_project / "a.c")
    frontend.add_file("a.c", struct(None, [("x", "int")]))
    recorder = Recorder()

    units = Generator(frontend).generate(temp_project, recorder)

    assert recorder.symbols == []
    assert units[0].is_empty


def test_function_in_two_files_surfaces_once(temp_project, frontend):
    touch(temp_project / "a.c")
    touch(temp_project / "b.c")
    frontend.add_file("a.c", function("foo", parameters=[(None, "int")]))
    frontend.add_file("b.c", function("foo", parameters=[(None, "int")]))
    recorder = Recorder()

    units = Generator(frontend).generate(temp_project, recorder)

    assert recorder.names() == ["foo"]
    assert len(units) == 2
    assert sorted(len(u.fragments) for u in units) == [0, 1]
    assert recorder.symbols[0].parameters[0].name == ""


def test_repeated_include_surfaces_once(temp_project, frontend):
    touch(temp_project / "a.c")
    frontend.add_file(
        "a.c",
        function("api_init"),
        variable("api_version", "int"),
        function("api_init"),
        variable("api_version", "int"),
    )
    recorder = Recorder()

    Generator(frontend).generate(temp_project, recorder)

    assert recorder.names() == ["api_init", "api_version"]
    assert isinstance(recorder.symbols[0], FnSignature)
    assert isinstance(recorder.symbols[1], Variable)


def test_functions_and_variables_share_names(temp_project, frontend):
    touch(temp_project / "a.c")
    frontend.add_file("a.c", variable("shared", "int"), function("shared"))
    recorder = Recorder()

    Generator(frontend).generate(temp_project, recorder)

    assert len(recorder.symbols) == 1
    assert isinstance(recorder.symbols[0], Variable)


def test_unexported_declaration_does_not_block_exported_one(temp_project, frontend):
    touch(temp_project / "a.c")
    frontend.add_file(
        "a.c",
        function("foo", visibility=Visibility.HIDDEN),
        variable("counter", "int", visibility=None),
        function("foo"),
        variable("counter", "int"),
    )
    recorder = Recorder()

    Generator(frontend, VisibilityExportPolicy()).generate(temp_project, recorder)

    assert recorder.names() == ["foo", "counter"]


def test_bookkeeping_independent_of_fragments(temp_project, frontend):
    touch(temp_project / "a.c")
    frontend.add_file(
        "a.c",
        function("foo"),
        function("foo"),
        struct("S", [("x", "int")]),
        struct("S"),
    )
    recorder = Recorder(emit=False)

    units = Generator(frontend).generate(temp_project, recorder)

    assert recorder.names() == ["foo", "S"]
    assert units[0].is_empty


def test_empty_fragment_is_not_recorded(temp_project, frontend):
    touch(temp_project / "a.c")
    frontend.add_file("a.c", function("first"), function("second"))

    units = Generator(frontend).generate(
        temp_project, lambda s: "" if s.name == "first" else "// second"
    )

    assert units[0].fragments == ["// second"]


def test_ledger_is_fresh_for_each_generate_call(temp_project, frontend):
    touch(temp_project / "a.c")
    frontend.add_file("a.c", function("foo"), struct("S", [("x", "int")]))
    generator = Generator(frontend)

    first = generator.generate(temp_project, Recorder())
    second = generator.generate(temp_project, Recorder())

    assert first == second
    assert first[0].fragments == ["foo", "S:1"]


def test_flags_accumulate_until_cleared(temp_project, frontend):
    touch(temp_project / "a.c")
    frontend.add_file("a.c")
    generator = (
        Generator(frontend)
        .c_flag("-std=c99")
        .include_directory(Path("include"))
        .system_include_directory("/opt/sdk/include")
        .define("NDEBUG")
        .define_value("API_LEVEL", "3")
    )
    expected = [
        "-std=c99",
        "-Iinclude",
        "-isystem",
        "/opt/sdk/include",
        "-DNDEBUG",
        "-DAPI_LEVEL=3",
    ]

    generator.generate(temp_project, Recorder())
    generator.define("EXTRA")
    generator.generate(temp_project, Recorder())
    generator.clear_flags().generate(temp_project, Recorder())

    assert [args for _, args in frontend.calls] == [expected, expected + ["-DEXTRA"], []]


def test_custom_source_extensions(temp_project, frontend):
    touch(temp_project / "a.c")
    touch(temp_project / "api.h")
    frontend.add_file("a.c")
    frontend.add_file("api.h", function("api_fn"))

    units = Generator(frontend, source_extensions=(".c", ".h")).generate(
        temp_project, Recorder()
    )

    assert sorted(u.name for u in units) == ["a.c", "api.h"]


def test_missing_root_raises(temp_project, frontend):
    with pytest.raises(WalkError):
        Generator(frontend).generate(temp_project / "missing", Recorder())


def test_file_root_raises(temp_project, frontend):
    source = touch(temp_project / "a.c")
    with pytest.raises(WalkError):
        Generator(frontend).generate(source, Recorder())


def test_parse_failure_aborts_traversal(temp_project, frontend):
    touch(temp_project / "broken.c")

    with pytest.raises(ParseError) as exc_info:
        Generator(frontend).generate(temp_project, Recorder())

    assert exc_info.value.path.name == "broken.c"


@pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unsupported")
def test_symlink_cycle_raises(temp_project, frontend):
    touch(temp_project / "src" / "a.c")
    frontend.add_file("a.c")
    os.symlink(temp_project / "src", temp_project / "src" / "loop")

    with pytest.raises(WalkError, match="cycle"):
        Generator(frontend).generate(temp_project, Recorder())


def test_parse_receives_full_path(temp_project, frontend):
    source = touch(temp_project / "lib" / "impl.c")
    frontend.add_file("impl.c")

    Generator(frontend).generate(temp_project, Recorder())

    assert frontend.calls[0][0] == source


def test_unreadable_directory_raises(temp_project, frontend, monkeypatch):
    touch(temp_project / "locked" / "a.c")
    original_iterdir = Path.iterdir

    def iterdir(self):
        if self.name == "locked":
            raise PermissionError(13, "Permission denied", str(self))
        return original_iterdir(self)

    monkeypatch.setattr(Path, "iterdir", iterdir)

    with pytest.raises(WalkError) as exc_info:
        Generator(frontend).generate(temp_project, Recorder())

    assert exc_info.value.path.name == "locked"
    assert isinstance(exc_info.value.__cause__, PermissionError)


def test_unstattable_entry_raises(temp_project, frontend, monkeypatch):
    touch(temp_project / "secret" / "a.c")
    original_is_dir = Path.is_dir

    def is_dir(self, *args, **kwargs):
        if self.name == "secret":
            raise PermissionError(13, "Permission denied", str(self))
        return original_is_dir(self, *args, **kwargs)

    monkeypatch.setattr(Path, "is_dir", is_dir)

    with pytest.raises(WalkError) as exc_info:
        Generator(frontend).generate(temp_project, Recorder())

    assert exc_info.value.path.name == "secret"
    assert frontend.calls == []


def test_front_end_init_failure_propagates(temp_project, monkeypatch):
    touch(temp_project / "a.c")

    def broken_frontend(library_path=None):
        raise FrontEndInitError("Unable to initialize libclang: not found")

    monkeypatch.setattr("abigen.clang_frontend.ClangFrontEnd", broken_frontend)

    with pytest.raises(FrontEndInitError):
        Generator().generate(temp_project, Recorder())
