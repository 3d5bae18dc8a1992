from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Dict, List, Optional, Set

from tqdm import tqdm

from ..checks.base import CheckPlugin, ValidationContext
from ..parsers.frontmatter import detect_front_matter
from ..parsers.line_tracker import LineTrackingParser
from . import taxonomy
from .collector import ErrorCollector
from .config import CheckFailedError
from .logs import DEFAULT_LOGGER_NAME
from .models import Document, LegacyFrontMatter, NoFrontMatter
from .utils import read_text_safely

INDEX_FILE = "00-index.md"
TENETS_DIR = Path("docs") / "tenets"
BINDINGS_DIR = Path("docs") / "bindings"
SLOW_FILE_THRESHOLD_SECONDS = 2.0

NO_FRONTMATTER_SUGGESTION = (
    "All {kind} files must begin with YAML front-matter between triple dashes. Example:\n"
    "  ---\n"
    "  id: example-id\n"
    "  last_modified: '2025-05-09'\n"
    "  version: '0.1.0'\n"
    "  ---"
)


def document_kind(path: Path) -> Optional[str]:
    parts = set(path.parts)
    if "tenets" in parts:
        return "tenets"
    if "bindings" in parts:
        return "bindings"
    return None


def tenet_ids_under(root: Path) -> Optional[Set[str]]:
    tenets_dir = root / TENETS_DIR
    if not tenets_dir.is_dir():
        return None
    return {p.stem for p in tenets_dir.glob("*.md") if p.name != INDEX_FILE}


class FrontMatterValidator:
    """Runs the parser and every active check over one document at a time.

    The raw text of every file it reads is kept in ``file_contents`` so the
    report can show context snippets later.
    """

    def __init__(
        self,
        checks: Dict[str, CheckPlugin],
        collector: ErrorCollector,
        context: ValidationContext,
        *,
        parser: Optional[LineTrackingParser] = None,
        logger: Optional[logging.Logger] = None,
        verbose: bool = False,
    ) -> None:
        self.checks = checks
        self.collector = collector
        self.context = context
        self.parser = parser or LineTrackingParser()
        base_logger = logger or logging.getLogger(DEFAULT_LOGGER_NAME)
        self.logger = base_logger.getChild(self.__class__.__name__.lower())
        self.verbose = verbose
        self.file_contents: Dict[str, str] = {}

    def begin(self) -> None:
        for plugin in self.checks.values():
            plugin.begin(self.context)

    def end(self) -> None:
        for plugin in self.checks.values():
            plugin.end()

    def validate_file(self, path: Path, kind: str, *, fail_fast: bool = False) -> None:
        start_time = time.perf_counter()
        content = read_text_safely(path)
        display = str(path)
        if content is None:
            self.collector.add_error(
                display,
                type=taxonomy.NO_FRONTMATTER,
                message="File is not readable text; no front-matter found",
                suggestion="Save the document as UTF-8 text.",
            )
            return
        self.file_contents[display] = content
        self.validate_text(display, kind, content, fail_fast=fail_fast)

        duration = time.perf_counter() - start_time
        if duration >= SLOW_FILE_THRESHOLD_SECONDS:
            self.logger.debug("Slow validation for %s took %.2fs", display, duration)

    def validate_text(self, display: str, kind: str, content: str, *, fail_fast: bool = False) -> None:
        errors_before = self.collector.count()
        form = detect_front_matter(content)

        if isinstance(form, NoFrontMatter):
            self.collector.add_error(
                display,
                type=taxonomy.NO_FRONTMATTER,
                message="No front-matter found",
                suggestion=NO_FRONTMATTER_SUGGESTION.format(kind=kind),
            )
            return
        if isinstance(form, LegacyFrontMatter):
            self.collector.add_error(
                display,
                line=form.start_line - 1,
                type=taxonomy.NO_FRONTMATTER,
                message="Legacy horizontal-rule metadata found instead of YAML front-matter",
                suggestion=NO_FRONTMATTER_SUGGESTION.format(kind=kind),
            )
            return

        result = self.parser.parse(form.block, start_line=form.start_line)
        for error in result.errors:
            self.collector.add_error(
                display,
                line=error.line,
                type=error.type,
                message=error.message,
                suggestion=error.suggestion,
            )
        if result.data is None:
            return

        document = Document(path=display, kind=kind, data=result.data, line_map=result.line_map, content=content)
        for name, plugin in self.checks.items():
            if not plugin.applies_to(document):
                continue
            try:
                plugin.check(document, self.collector)
            except Exception as exc:
                self.logger.error("Check %s failed on %s: %s", name, display, exc, exc_info=self.verbose)
                raise CheckFailedError(f"check '{name}' failed on {display}: {exc}") from exc
            if fail_fast and self.collector.count() > errors_before:
                self.logger.info("Stopping checks for %s after first error", display)
                return

        if self.verbose and self.collector.count() == errors_before:
            self.logger.info("[OK] %s", display)


class DirectoryScanner:
    """Validates every tenet and binding under ``root/docs``."""

    def __init__(
        self,
        root: Path,
        validator: FrontMatterValidator,
        *,
        logger: Optional[logging.Logger] = None,
        verbose: bool = False,
        show_progress: bool = True,
        progress_desc: str = "Validating files",
    ) -> None:
        self.root = root
        self.validator = validator
        base_logger = logger or logging.getLogger(DEFAULT_LOGGER_NAME)
        self.logger = base_logger.getChild(self.__class__.__name__.lower())
        self.verbose = verbose
        if verbose:
            self.logger.setLevel(logging.INFO)
        self.show_progress = bool(show_progress)
        self.progress_desc = progress_desc

    def _iter_tenets(self) -> List[Path]:
        return sorted(p for p in (self.root / TENETS_DIR).glob("*.md") if p.name != INDEX_FILE)

    def _iter_bindings(self) -> List[Path]:
        bindings = self.root / BINDINGS_DIR
        files = [p for p in (bindings / "core").glob("*.md") if p.name != INDEX_FILE]
        files.extend(p for p in bindings.glob("categories/*/*.md") if p.name != INDEX_FILE)
        return sorted(files)

    def _warn_misplaced(self) -> None:
        collector = self.validator.collector
        for path in sorted((self.root / BINDINGS_DIR).glob("*.md")):
            if path.name == INDEX_FILE:
                continue
            collector.add_warning(
                str(path),
                type=taxonomy.INVALID_FILE_PATH,
                message="Binding file found directly in docs/bindings/",
                suggestion="Move it to docs/bindings/core/ or docs/bindings/categories/<category>/.",
            )

    def scan(self) -> None:
        work = [(p, "tenets") for p in self._iter_tenets()]
        work.extend((p, "bindings") for p in self._iter_bindings())

        if self.verbose:
            self.logger.info("Discovered %d file(s) to validate", len(work))

        self._warn_misplaced()
        if not work:
            return

        progress_bar = None
        if self.show_progress:
            progress_bar = tqdm(total=len(work), desc=self.progress_desc, unit="file")

        self.validator.begin()
        try:
            for path, kind in work:
                if progress_bar is not None:
                    progress_bar.set_postfix_str(self._format_display_path(path), refresh=False)
                try:
                    self.validator.validate_file(path, kind)
                finally:
                    if progress_bar is not None:
                        progress_bar.update(1)
        finally:
            if progress_bar is not None:
                progress_bar.close()
            self.validator.end()

    def _format_display_path(self, path: Path) -> str:
        try:
            label = str(path.relative_to(self.root))
        except ValueError:
            label = str(path)
        if len(label) > 60:
            label = f"...{label[-57:]}"
        return label


class SingleFileScanner:
    """Validates one file; the document kind comes from its path."""

    def __init__(
        self,
        file_path: Path,
        validator: FrontMatterValidator,
        *,
        fail_fast: bool = False,
        logger: Optional[logging.Logger] = None,
        verbose: bool = False,
    ) -> None:
        self.file_path = file_path
        self.validator = validator
        self.fail_fast = fail_fast
        base_logger = logger or logging.getLogger(DEFAULT_LOGGER_NAME)
        self.logger = base_logger.getChild(self.__class__.__name__.lower())
        self.verbose = verbose
        if verbose:
            self.logger.setLevel(logging.INFO)

    def scan(self) -> None:
        kind = document_kind(self.file_path)
        if kind is None:
            self.validator.collector.add_error(
                str(self.file_path),
                type=taxonomy.INVALID_FILE_PATH,
                message="Unable to determine file type from path",
                suggestion="Path must include /tenets/ or /bindings/ to identify the file type.",
            )
            return

        self.validator.begin()
        try:
            self.validator.validate_file(self.file_path, kind, fail_fast=self.fail_fast)
        finally:
            self.validator.end()
