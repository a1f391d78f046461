"""Lark-backed Python parser and per-file parse invocation."""

from __future__ import annotations

import logging
import time
import traceback
from pathlib import Path
from typing import Optional

from lark import Lark, Tree
from lark.exceptions import UnexpectedCharacters, UnexpectedInput, UnexpectedToken
from lark.indenter import DedentError, PythonIndenter

from .models import ParseRecord, SyntaxDiagnostic

log = logging.getLogger(__name__)

PYTHON_GRAMMAR = "python.lark"
START_RULE = "file_input"
MAX_ERRORS = 100


def create_python_parser(*, start: str = START_RULE) -> Lark:
    """Build a LALR parser from the Python 3 grammar bundled with lark.

    Building the parse tables takes a noticeable moment, so callers should
    create the parser once and reuse it for every file.
    """
    t0 = time.time()
    log.info("create_python_parser: loading %s (start=%s) ...", PYTHON_GRAMMAR, start)
    parser = Lark.open_from_package(
        "lark",
        PYTHON_GRAMMAR,
        ["grammars"],
        parser="lalr",
        postlex=PythonIndenter(),
        start=start,
    )
    log.info("create_python_parser: parser ready in %.2fs", time.time() - t0)
    return parser


def _describe(exc: Exception) -> str:
    if isinstance(exc, UnexpectedToken):
        token = exc.token
        if token.type == "$END":
            message = "unexpected end of input"
        else:
            message = f"unexpected {token.type} {str(token)!r}"
        if exc.expected:
            message += f", expected one of: {', '.join(sorted(exc.expected))}"
        return message
    if isinstance(exc, UnexpectedCharacters):
        return f"no viable token at {exc.char!r}"
    text = str(exc).strip()
    return text.splitlines()[0] if text else type(exc).__name__


class ErrorCollector:
    """Error sink handed to lark's ``on_error`` hook.

    Records every diagnostic and asks the parser to resume, so a single file
    can report more than one syntax error. Gives up at end of input or after
    *max_errors* diagnostics.
    """

    def __init__(self, source: str = "<string>", *, max_errors: int = MAX_ERRORS):
        self.source = source
        self.max_errors = max_errors
        self.diagnostics: list[SyntaxDiagnostic] = []
        self.last_error: Optional[Exception] = None

    @property
    def has_errors(self) -> bool:
        return bool(self.diagnostics)

    def syntax_error(self, exc: Exception) -> SyntaxDiagnostic:
        diagnostic = SyntaxDiagnostic(
            line=_position(getattr(exc, "line", None)),
            column=_position(getattr(exc, "column", None)),
            message=_describe(exc),
            kind=type(exc).__name__,
        )
        self.diagnostics.append(diagnostic)
        self.last_error = exc
        if diagnostic.line:
            log.error(
                "ERROR at line %s:%s in %s - %s",
                diagnostic.line,
                diagnostic.column,
                self.source,
                diagnostic.message,
            )
        else:
            log.error("ERROR (position unknown) in %s - %s", self.source, diagnostic.message)
        return diagnostic

    def __call__(self, exc: UnexpectedInput) -> bool:
        self.syntax_error(exc)
        if isinstance(exc, UnexpectedToken) and exc.token.type == "$END":
            return False
        return len(self.diagnostics) < self.max_errors


def _position(value) -> int:
    return value if isinstance(value, int) and value >= 0 else 0


def read_source(path: Path) -> str:
    """Read a source file, terminated with a newline as the grammar requires."""
    text = path.read_text(encoding="utf-8-sig")
    if not text.endswith("\n"):
        text += "\n"
    return text


def parse_source(parser: Lark, text: str, collector: ErrorCollector) -> Optional[Tree]:
    """Parse *text*, reporting every syntax error to *collector*.

    Returns the tree, or ``None`` when lark could not recover. Never raises
    for syntax errors.
    """
    try:
        return parser.parse(text, on_error=collector)
    except (UnexpectedInput, DedentError) as exc:
        if exc is not collector.last_error:
            collector.syntax_error(exc)
        return None


def parse_single_file(parser: Lark, path: Path) -> tuple[ParseRecord, Optional[Tree]]:
    """Parse one file and return (ParseRecord, Tree | None).

    Never raises; read and parse errors are captured inside the returned record.
    """
    record = ParseRecord(filename=path.name, filepath=str(path))
    collector = ErrorCollector(str(path))
    tree = None
    t0 = time.time()

    try:
        text = read_source(path)
        log.debug("parse_single_file: %s (%s chars)", path, len(text))
        tree = parse_source(parser, text, collector)
        record.diagnostics = collector.diagnostics
        record.status = "failure" if collector.has_errors else "success"
    except Exception as exc:
        record.diagnostics = collector.diagnostics
        record.status = "failure"
        record.error = traceback.format_exc()
        log.error("EXCEPTION: %s: %s", path, exc)
        log.debug("parse_single_file: traceback\n%s", record.error)
        tree = None
    finally:
        record.parse_time_s = round(time.time() - t0, 3)

    return record, tree
