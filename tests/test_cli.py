"""CLI parser and command behaviour tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from derivekit.cli import _build_parser, main
from tests._fixtures.rust_sources import SourceTree

UNSORTED = "#[sorted]\nenum E { B, A }\n"
BUILDER = "#[derive(Builder)]\npub struct Job { name: String }\n"


def test_cli_accepts_verbose_before_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["--verbose", "check", "src"])
    assert args.verbose is True
    assert args.command == "check"
    assert args.path == "src"


def test_cli_accepts_verbose_after_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["expand", "src", "-v"])
    assert args.verbose is True
    assert args.command == "expand"


def test_cli_accepts_quiet_and_log_file_on_subcommand() -> None:
    parser = _build_parser()
    args = parser.parse_args(["check", "src", "-q", "--log-file", "run.log"])
    assert args.quiet is True
    assert args.verbose is False
    assert args.log_file == Path("run.log")


def test_cli_accepts_output_and_config_options() -> None:
    parser = _build_parser()
    args = parser.parse_args(["expand", "lib.rs", "-o", "-", "--config", "ci.yml", "--diff"])
    assert args.output == "-"
    assert args.config == "ci.yml"
    assert args.diff is True


def test_cli_requires_a_command() -> None:
    parser = _build_parser()
    with pytest.raises(SystemExit):
        parser.parse_args([])


def test_check_reports_diagnostics_and_exits_nonzero(
    source_tree: SourceTree, capsys: pytest.CaptureFixture[str]
) -> None:
    source_tree.write({"lib.rs": UNSORTED})

    with pytest.raises(SystemExit) as excinfo:
        main(["check", str(source_tree.path())])

    assert excinfo.value.code == 1
    assert "lib.rs:2:13: error: A should sort before B" in capsys.readouterr().err
    assert source_tree.read("lib.rs") == UNSORTED


def test_check_passes_on_clean_sources(source_tree: SourceTree) -> None:
    source_tree.write({"lib.rs": "#[sorted]\nenum E { A, B }\n"})

    main(["check", str(source_tree.path())])

    assert source_tree.read("lib.rs") == "#[sorted]\nenum E { A, B }\n"


def test_expand_to_stdout(source_tree: SourceTree, capsys: pytest.CaptureFixture[str]) -> None:
    source_tree.write({"lib.rs": BUILDER})

    main(["expand", str(source_tree.path() / "lib.rs"), "-o", "-"])

    out = capsys.readouterr().out
    assert out.startswith("pub struct Job { name: String }\n\nimpl Job {")
    assert source_tree.read("lib.rs") == BUILDER


def test_expand_diff_does_not_write(source_tree: SourceTree, capsys: pytest.CaptureFixture[str]) -> None:
    source_tree.write({"lib.rs": BUILDER})

    main(["expand", str(source_tree.path() / "lib.rs"), "--diff"])

    out = capsys.readouterr().out
    assert "-#[derive(Builder)]" in out
    assert "+pub struct JobBuilder {" in out
    assert source_tree.read("lib.rs") == BUILDER


def test_expand_in_place(source_tree: SourceTree, capsys: pytest.CaptureFixture[str]) -> None:
    source_tree.write({"lib.rs": BUILDER})

    main(["expand", str(source_tree.path())])

    assert "Expanded 1 file(s), 1 changed" in capsys.readouterr().out
    assert "pub struct JobBuilder {" in source_tree.read("lib.rs")


def test_invalid_config_exits_with_message(
    source_tree: SourceTree, capsys: pytest.CaptureFixture[str]
) -> None:
    source_tree.write({"lib.rs": BUILDER, ".derivekit.yml": "- not\n- a mapping\n"})

    with pytest.raises(SystemExit) as excinfo:
        main(["check", str(source_tree.path())])

    assert excinfo.value.code == 1
    assert "must contain a mapping" in capsys.readouterr().err


def test_parse_error_exits_with_message(source_tree: SourceTree, capsys: pytest.CaptureFixture[str]) -> None:
    source_tree.write({"lib.rs": "struct {\n"})

    with pytest.raises(SystemExit) as excinfo:
        main(["check", str(source_tree.path())])

    assert excinfo.value.code == 1
    assert "derivekit check failed" in capsys.readouterr().err


def test_parse_error_names_the_failing_file(source_tree: SourceTree, capsys: pytest.CaptureFixture[str]) -> None:
    source_tree.write({"src/a.rs": BUILDER, "src/b.rs": "struct B { x: u8\n"})

    with pytest.raises(SystemExit) as excinfo:
        main(["expand", str(source_tree.path())])

    assert excinfo.value.code == 1
    assert "derivekit expand failed: src/b.rs:" in capsys.readouterr().err
    assert source_tree.read("src/a.rs") == BUILDER


def test_log_file_captures_the_run(source_tree: SourceTree, tmp_path: Path) -> None:
    source_tree.write({"lib.rs": BUILDER})
    log_file = tmp_path / "derivekit.log"

    main(["--quiet", "--log-file", str(log_file), "check", str(source_tree.path())])

    text = log_file.read_text(encoding="utf-8")
    assert "DEBUG orchestrator: Expanding lib.rs" in text
    assert "Processed 1 file(s), 0 diagnostic(s)" in text
