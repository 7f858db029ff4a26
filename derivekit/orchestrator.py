"""Pipeline orchestration for expand/check flows over Rust source files."""

from __future__ import annotations

import difflib
import fnmatch
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Set

from .analysis.ordering import OrderingVerdict, check_enum, check_function, marked_matches
from .config import DeriveKitConfig, load_config
from .errors import DeriveError, ParseError
from .generators import Generator, discover_generators
from .logging import get_logger
from .models import Diagnostic
from .postproc.diagnostics import DiagnosticLatch, render_compile_error
from .postproc.markers import DERIVE_ATTRIBUTE, MarkerStripper, derive_entries, entry_name
from .syntax.nodes import EnumItem, FnItem, Item, StructItem, UnionItem
from .syntax.parser import parse_source

SOURCE_SUFFIX = ".rs"


@dataclass
class ExpansionResult:
    """Rewritten source for one file plus the diagnostics it produced."""

    source: str
    diagnostics: List[Diagnostic] = field(default_factory=list)
    original: str = ""
    path: Optional[Path] = None

    @property
    def changed(self) -> bool:
        return self.source != self.original

    @property
    def diff(self) -> str:
        name = str(self.path) if self.path is not None else "source"
        return "".join(
            difflib.unified_diff(
                self.original.splitlines(keepends=True),
                self.source.splitlines(keepends=True),
                fromfile=f"a/{name}",
                tofile=f"b/{name}",
            )
        )


class Orchestrator:
    """Runs derive generators and order checks over parsed source files."""

    def __init__(
        self,
        config: DeriveKitConfig | None = None,
        generators: Optional[Mapping[str, Generator]] = None,
    ) -> None:
        self.config = config or DeriveKitConfig(root=Path.cwd())
        self.generators: Dict[str, Generator] = (
            dict(generators) if generators is not None else discover_generators(self.config)
        )
        self.logger = get_logger("orchestrator")

    def expand_source(self, text: str, filename: str | None = None) -> ExpansionResult:
        """Expand every derive and run every order check in one source text."""
        parsed = parse_source(text)
        stripper = MarkerStripper(text)
        diagnostics: List[Diagnostic] = []
        for item in parsed.walk():
            latch = DiagnosticLatch(path=filename)
            generated = self._expand_derives(item, stripper, latch)
            self._check_sorted(item, stripper, latch)
            if latch.first is not None:
                generated = [render_compile_error(latch.first)]
                diagnostics.append(latch.first)
                if latch.discarded:
                    self.logger.debug(
                        "Suppressed %d further diagnostics for %s", len(latch.discarded), item.name or item.kind
                    )
            if generated:
                stripper.insert_after(item.end, "\n\n" + "\n\n".join(code.rstrip("\n") for code in generated))
        return ExpansionResult(source=stripper.apply(), diagnostics=diagnostics, original=text)

    def _expand_derives(self, item: Item, stripper: MarkerStripper, latch: DiagnosticLatch) -> List[str]:
        generated: List[str] = []
        consumed: Set[str] = set()
        for attr in item.attrs:
            if attr.path != DERIVE_ATTRIBUTE:
                continue
            names = [entry_name(entry) for entry in derive_entries(attr)]
            matched = [name for name in names if name in self.generators]
            if not matched:
                continue
            stripper.rewrite_derive(attr, matched)
            for name in matched:
                if name in consumed:
                    continue
                consumed.add(name)
                generator = self.generators[name]
                self._strip_helpers(item, stripper, generator)
                try:
                    generated.append(generator.expand(item))
                except DeriveError as exc:
                    self.logger.debug("%s failed for %s: %s", name, item.name, exc)
                    latch.report_error(exc, item.location)
                else:
                    self.logger.debug("Expanded #[derive(%s)] on %s", name, item.name)
        return generated

    def _strip_helpers(self, item: Item, stripper: MarkerStripper, generator: Generator) -> None:
        helpers = generator.helper_attributes
        stripper.remove_all(item.attrs, helpers)
        if isinstance(item, (StructItem, UnionItem)):
            for field_node in item.fields:
                stripper.remove_all(field_node.attrs, helpers)
        elif isinstance(item, EnumItem):
            for variant in item.variants:
                stripper.remove_all(variant.attrs, helpers)

    def _check_sorted(self, item: Item, stripper: MarkerStripper, latch: DiagnosticLatch) -> None:
        markers = self.config.sorted
        for attr in item.attrs:
            if attr.path == markers.marker:
                stripper.remove(attr)
                if isinstance(item, EnumItem):
                    self._report_verdict(check_enum(item), latch)
                else:
                    latch.report("expected enum or match expression", attr.location)
            elif attr.path == markers.check_marker:
                stripper.remove(attr)
                if isinstance(item, FnItem):
                    for expr in marked_matches(item, markers.marker):
                        stripper.remove_all(expr.attrs, [markers.marker])
                    self._report_verdict(check_function(item, markers.marker), latch)
                else:
                    latch.report("expected `fn`", attr.location)

    def _report_verdict(self, verdict: OrderingVerdict, latch: DiagnosticLatch) -> None:
        for violation in verdict.violations:
            latch.report(violation.message, violation.location)

    def run_expand(
        self,
        path: str | Path,
        output: str | Path | None = None,
        *,
        check: bool = False,
    ) -> List[ExpansionResult]:
        """Expand a file or every `.rs` file below a directory.

        Results are written in place unless `output` names another file or
        directory; nothing is written in check mode. Every file is expanded
        before the first write, so a parse error leaves the tree untouched.
        """
        source_path = Path(path).expanduser().resolve()
        if not source_path.exists():
            raise FileNotFoundError(f"No such file or directory: {source_path}")
        base = source_path if source_path.is_dir() else source_path.parent
        target = Path(output).expanduser().resolve() if output is not None else None

        results: List[ExpansionResult] = []
        for file_path in self._collect_sources(source_path):
            relative = file_path.relative_to(base)
            self.logger.debug("Expanding %s", relative)
            text = file_path.read_text(encoding="utf-8")
            try:
                result = self.expand_source(text, filename=str(relative))
            except ParseError as exc:
                raise exc.in_file(relative.as_posix()) from exc
            result.path = file_path
            results.append(result)

        if not check:
            for result in results:
                assert result.path is not None
                destination = result.path
                if target is not None:
                    destination = target / result.path.relative_to(base) if source_path.is_dir() else target
                if destination == result.path and not result.changed:
                    continue
                destination.parent.mkdir(parents=True, exist_ok=True)
                destination.write_text(result.source, encoding="utf-8")
                self.logger.info("Wrote %s", destination)

        reported = sum(len(result.diagnostics) for result in results)
        self.logger.info("Processed %d file(s), %d diagnostic(s)", len(results), reported)
        return results

    def _collect_sources(self, source_path: Path) -> Iterable[Path]:
        if source_path.is_file():
            return [source_path]
        files: List[Path] = []
        for candidate in sorted(source_path.rglob(f"*{SOURCE_SUFFIX}")):
            relative = candidate.relative_to(source_path).as_posix()
            if self._is_excluded(relative):
                self.logger.debug("Skipping excluded path %s", relative)
                continue
            files.append(candidate)
        return files

    def _is_excluded(self, relative: str) -> bool:
        return any(fnmatch.fnmatch(relative, pattern) for pattern in self.config.exclude_paths)


def build_orchestrator(path: str | Path, config_path: str | Path | None = None) -> Orchestrator:
    """Create an orchestrator configured from `.derivekit.yml` near `path`."""
    location = Path(config_path) if config_path is not None else Path(path)
    config = load_config(location.expanduser())
    return Orchestrator(config=config)


__all__ = ["ExpansionResult", "Orchestrator", "build_orchestrator"]
