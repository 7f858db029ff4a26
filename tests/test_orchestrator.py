"""Tests for the expansion orchestrator."""

from __future__ import annotations

from pathlib import Path

import pytest

from derivekit.config import DeriveKitConfig
from derivekit.errors import ParseError
from derivekit.orchestrator import Orchestrator, build_orchestrator
from tests._fixtures.rust_sources import SourceTree, rust

COMMAND = rust(
    """
    use std::fmt::Debug;

    #[derive(Debug, Builder)]
    pub struct Command {
        executable: String,
        #[builder(each = "arg")]
        args: Vec<String>,
        current_dir: Option<String>,
    }
    """
)


def test_expand_source_appends_builder_and_strips_helpers(orchestrator: Orchestrator) -> None:
    result = orchestrator.expand_source(COMMAND, filename="main.rs")

    assert result.diagnostics == []
    assert result.changed
    assert "#[derive(Debug)]\npub struct Command {\n    executable: String,\n    args: Vec<String>,\n" in result.source
    assert "#[builder" not in result.source
    assert "}\n\nimpl Command {\n    pub fn builder() -> CommandBuilder {" in result.source
    assert "pub struct CommandBuilder {" in result.source
    assert "pub fn arg(&mut self, arg: String) -> &mut Self {" in result.source


def test_expand_source_runs_every_requested_generator(orchestrator: Orchestrator) -> None:
    source = rust(
        """
        #[derive(CustomDebug, Builder)]
        pub struct Field {
            name: String,
            #[debug = "0b{:08b}"]
            bitmask: u8,
        }
        """
    )

    result = orchestrator.expand_source(source)

    assert result.diagnostics == []
    assert "#[derive" not in result.source
    assert "#[debug" not in result.source
    assert "impl ::std::fmt::Debug for Field {" in result.source
    assert "pub struct FieldBuilder {" in result.source
    assert result.source.index("::std::fmt::Debug for Field") < result.source.index("impl Field {")


def test_structural_error_becomes_compile_error(orchestrator: Orchestrator) -> None:
    source = "#[derive(Builder)]\npub struct Pair(u8, String);\n"

    result = orchestrator.expand_source(source, filename="lib.rs")

    (diagnostic,) = result.diagnostics
    assert diagnostic.message == "#[derive(Builder)] does not work for a tuple struct"
    assert diagnostic.render() == "lib.rs:2:12: error: #[derive(Builder)] does not work for a tuple struct"
    assert result.source == (
        "pub struct Pair(u8, String);\n\n"
        'compile_error!("#[derive(Builder)] does not work for a tuple struct");\n'
    )


def test_failed_item_emits_no_generated_code(orchestrator: Orchestrator) -> None:
    source = rust(
        """
        #[derive(CustomDebug, Builder)]
        struct Command {
            #[builder(eac = "arg")]
            args: Vec<String>,
        }
        """
    )

    result = orchestrator.expand_source(source)

    assert [diagnostic.message for diagnostic in result.diagnostics] == ["expected `each`"]
    assert "impl" not in result.source
    assert 'compile_error!("expected `each`");' in result.source


def test_sorted_enum_violation_keeps_enum_and_strips_marker(orchestrator: Orchestrator) -> None:
    source = rust(
        """
        #[sorted]
        pub enum Error {
            ThatFailed,
            ThisFailed,
            SomethingFailed,
            WhoKnowsWhatFailed,
        }
        """
    )

    result = orchestrator.expand_source(source, filename="lib.rs")

    (diagnostic,) = result.diagnostics
    assert diagnostic.message == "SomethingFailed should sort before ThatFailed"
    assert (diagnostic.location.line, diagnostic.location.column) == (5, 5)
    assert result.source.startswith("pub enum Error {\n    ThatFailed,\n")
    assert "#[sorted]" not in result.source
    assert result.source.endswith('compile_error!("SomethingFailed should sort before ThatFailed");\n')


def test_sorted_enum_in_order_only_strips_marker(orchestrator: Orchestrator) -> None:
    result = orchestrator.expand_source("#[sorted]\npub enum Conference { RustBeltRust, RustConf }\n")

    assert result.diagnostics == []
    assert result.source == "pub enum Conference { RustBeltRust, RustConf }\n"


def test_sorted_on_non_enum_is_rejected(orchestrator: Orchestrator) -> None:
    result = orchestrator.expand_source("#[sorted]\npub struct Error { kind: u8 }\n")

    (diagnostic,) = result.diagnostics
    assert diagnostic.message == "expected enum or match expression"
    assert (diagnostic.location.line, diagnostic.location.column) == (1, 1)


def test_sorted_check_on_non_function_is_rejected(orchestrator: Orchestrator) -> None:
    result = orchestrator.expand_source("#[sorted::check]\npub enum Error { A }\n")

    assert [diagnostic.message for diagnostic in result.diagnostics] == ["expected `fn`"]


def test_sorted_check_strips_markers_and_reports_first_violation(orchestrator: Orchestrator) -> None:
    source = rust(
        """
        impl Display for Error {
            #[sorted::check]
            fn fmt(&self, f: &mut fmt::Formatter) -> fmt::Result {
                use self::Error::*;

                #[sorted]
                match self {
                    Io(e) => write!(f, "{}", e),
                    Fmt(e) => write!(f, "{}", e),
                    _ => Ok(()),
                }
            }
        }
        """
    )

    result = orchestrator.expand_source(source)

    (diagnostic,) = result.diagnostics
    assert diagnostic.message == "Fmt should sort before Io"
    assert "#[sorted" not in result.source
    assert "        match self {\n" in result.source


def test_one_diagnostic_per_item_but_items_are_independent(orchestrator: Orchestrator) -> None:
    source = rust(
        """
        #[sorted]
        enum First { C, B, A, _Hidden }

        #[sorted]
        enum Second { Y, X }
        """
    )

    result = orchestrator.expand_source(source)

    assert [diagnostic.message for diagnostic in result.diagnostics] == [
        "B should sort before C",
        "X should sort before Y",
    ]
    assert result.source.count("compile_error!") == 2


def test_expansion_is_idempotent(orchestrator: Orchestrator) -> None:
    first = orchestrator.expand_source(COMMAND)
    second = orchestrator.expand_source(first.source)

    assert second.diagnostics == []
    assert second.source == first.source
    assert not second.changed


def test_parse_errors_propagate(orchestrator: Orchestrator) -> None:
    with pytest.raises(ParseError):
        orchestrator.expand_source("#[derive(Builder)]\nstruct {\n")


def test_custom_marker_names(tmp_path: Path) -> None:
    config = DeriveKitConfig(root=tmp_path)
    config.sorted.marker = "ordered"
    orchestrator = Orchestrator(config=config)

    result = orchestrator.expand_source("#[ordered]\nenum E { B, A }\n#[sorted]\nenum F { B, A }\n")

    assert [diagnostic.message for diagnostic in result.diagnostics] == ["A should sort before B"]
    assert "#[sorted]" in result.source
    assert "#[ordered]" not in result.source


def test_run_expand_writes_in_place(source_tree: SourceTree, orchestrator: Orchestrator) -> None:
    source_tree.write({"src/main.rs": COMMAND, "src/clean.rs": "fn main() {}\n"})

    results = orchestrator.run_expand(source_tree.path())

    assert [result.path.name for result in results if result.path] == ["clean.rs", "main.rs"]
    assert "impl Command {" in source_tree.read("src/main.rs")
    assert source_tree.read("src/clean.rs") == "fn main() {}\n"


def test_run_expand_check_mode_does_not_write(source_tree: SourceTree, orchestrator: Orchestrator) -> None:
    source_tree.write({"lib.rs": "#[sorted]\nenum E { B, A }\n"})

    (result,) = orchestrator.run_expand(source_tree.path() / "lib.rs", check=True)

    assert [diagnostic.render() for diagnostic in result.diagnostics] == [
        "lib.rs:2:13: error: A should sort before B"
    ]
    assert source_tree.read("lib.rs") == "#[sorted]\nenum E { B, A }\n"
    assert "-#[sorted]" in result.diff


def test_run_expand_mirrors_directory_into_output(
    source_tree: SourceTree, orchestrator: Orchestrator, tmp_path: Path
) -> None:
    source_tree.write({"src/cmd/mod.rs": COMMAND})
    output = tmp_path / "expanded"

    orchestrator.run_expand(source_tree.path(), output)

    assert "impl Command {" in (output / "src" / "cmd" / "mod.rs").read_text(encoding="utf-8")
    assert "#[derive(Debug, Builder)]" in source_tree.read("src/cmd/mod.rs")


def test_run_expand_honours_exclude_paths(source_tree: SourceTree, tmp_path: Path) -> None:
    source_tree.write(
        {
            ".derivekit.yml": "exclude_paths:\n  - 'vendor/*'\n",
            "vendor/dep.rs": COMMAND,
            "src/lib.rs": COMMAND,
        }
    )
    orchestrator = build_orchestrator(source_tree.path())

    results = orchestrator.run_expand(source_tree.path(), check=True)

    assert [str(result.path.relative_to(source_tree.path())) for result in results if result.path] == [
        str(Path("src") / "lib.rs")
    ]


def test_run_expand_missing_path(orchestrator: Orchestrator, tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        orchestrator.run_expand(tmp_path / "missing.rs")


def test_run_expand_parse_error_writes_nothing_and_names_the_file(
    source_tree: SourceTree, orchestrator: Orchestrator
) -> None:
    good = "#[derive(Builder)]\npub struct A { x: u8 }\n"
    source_tree.write({"a.rs": good, "b.rs": "struct B { x: u8\n"})

    with pytest.raises(ParseError) as excinfo:
        orchestrator.run_expand(source_tree.path())

    assert source_tree.read("a.rs") == good
    assert excinfo.value.path == "b.rs"
    assert str(excinfo.value).startswith("b.rs:")
