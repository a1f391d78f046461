"""CLI entrypoint for parsing every Python file in a repository.

Usage:
    python -m repo_parser <repo-path>
    python -m repo_parser <repo-path> parse
    python -m repo_parser <repo-path> images
    python -m repo_parser <repo-path> images --output-dir ./trees --scale 2
    python -m repo_parser <repo-path> --report report.json
"""

from __future__ import annotations

import argparse
import logging
from logging.handlers import RotatingFileHandler
import sys
import time
from pathlib import Path
from typing import Optional

from .models import ParseRecord, RunSummary

log = logging.getLogger(__name__)

USAGE_EPILOG = """\
Modes:
  parse   - Just parse files and report SUCCESS/FAILED (default)
  images  - Also save every parse tree as a PNG image

Example:
  repo-parser ~/src/my_python_repo
  repo-parser ~/src/my_python_repo images
"""


def _setup_logging(
    *,
    verbose: bool,
    detailed_logging: bool,
    log_file: Path | None,
) -> None:
    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    root_level = logging.DEBUG if verbose else logging.INFO
    root_logger.setLevel(root_level)

    console_fmt = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
    detailed_fmt = (
        "%(asctime)s | %(levelname)-8s | %(name)s | "
        "%(threadName)s | %(filename)s:%(lineno)d | %(message)s"
    )
    formatter = logging.Formatter(
        detailed_fmt if detailed_logging else console_fmt,
        "%Y-%m-%d %H:%M:%S",
    )

    console_handler = logging.StreamHandler()
    console_handler.setLevel(root_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=20 * 1024 * 1024,
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(detailed_fmt, "%Y-%m-%d %H:%M:%S"))
        root_logger.addHandler(file_handler)

    logging.getLogger("lark").setLevel(logging.WARNING)
    logging.getLogger("graphviz").setLevel(logging.WARNING)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    from .utils import DEFAULT_MODE, DEFAULT_SCALE, DEFAULT_SUFFIX, MODES

    parser = argparse.ArgumentParser(
        prog="repo-parser",
        description="Parse every Python file in a repository and report or draw the parse trees",
        epilog=USAGE_EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("repo_path", type=Path, help="Repository root to walk")
    parser.add_argument(
        "mode",
        nargs="?",
        choices=MODES,
        default=DEFAULT_MODE,
        help=f"What to do with each file (default: {DEFAULT_MODE})",
    )
    parser.add_argument(
        "--suffix",
        default=DEFAULT_SUFFIX,
        help=f"Only process files whose name ends with this (default: {DEFAULT_SUFFIX})",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=None,
        help="Image directory for images mode (default: <repo-path>_parse_trees)",
    )
    parser.add_argument(
        "--scale",
        type=float,
        default=DEFAULT_SCALE,
        help=f"Tree image scale (default: {DEFAULT_SCALE})",
    )
    parser.add_argument(
        "--report",
        type=Path,
        default=None,
        help="Write a JSON report of every file and the totals",
    )
    parser.add_argument(
        "--no-progress",
        action="store_true",
        help="Disable the progress bar",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument(
        "--detailed-logging",
        action="store_true",
        help="Enable detailed logging (thread, file/line)",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Optional rotating log file path",
    )
    args = parser.parse_args(argv)
    if args.scale <= 0:
        parser.error("--scale must be positive")
    return args


def process_repository(
    root: Path,
    *,
    mode: str = "parse",
    suffix: str = ".py",
    output_dir: Optional[Path] = None,
    scale: float = 1.2,
    parser=None,
    show_progress: bool = False,
) -> RunSummary:
    """Parse (and in images mode, render) every matching file under *root*.

    Files are handled one at a time; a failure in one file never stops the
    others. Raises only when *root* itself cannot be enumerated.
    """
    from tqdm import tqdm

    from .parsing import create_python_parser, parse_single_file
    from .rendering import save_tree_image
    from .sources import discover_sources
    from .utils import default_output_dir, ensure_output_dir

    source_files = discover_sources(root, suffix)
    log.info("Found %s %s files under %s", len(source_files), suffix, root)

    render = mode == "images"
    if render:
        output_dir = ensure_output_dir(output_dir or default_output_dir(root))

    summary = RunSummary()
    if not source_files:
        return summary

    if parser is None:
        parser = create_python_parser()

    used_names: dict[str, ParseRecord] = {}
    for index, path in enumerate(
        tqdm(source_files, desc="Parsing", disable=not show_progress), start=1
    ):
        log.info("[%s] Processing: %s", index, path)
        record, tree = parse_single_file(parser, path)

        if render:
            image_path = save_tree_image(record, tree, output_dir, suffix=suffix, scale=scale)
            if image_path is not None:
                previous = used_names.get(image_path.name)
                if previous is not None:
                    log.warning(
                        "Image %s from %s overwrote the one from %s",
                        image_path.name,
                        path,
                        previous.filepath,
                    )
                    previous.image_path = None
                used_names[image_path.name] = record

        summary.add(record)
        if record.succeeded:
            log.info("  SUCCESS (%.2fs)", record.parse_time_s)
        else:
            if record.error:
                log.warning("  FAILED (exception)")
            else:
                log.warning("  FAILED (%s syntax errors)", len(record.diagnostics))

    return summary


def _log_summary(summary: RunSummary, *, mode: str, output_dir: Optional[Path]) -> None:
    log.info("=" * 70)
    log.info("SUMMARY")
    log.info("=" * 70)
    log.info(f"  Total files processed: {summary.total}")
    log.info(f"  Succeeded:             {summary.succeeded}")
    log.info(f"  Failed:                {summary.failed}")
    if mode == "images" and output_dir is not None:
        log.info(f"  Parse trees saved to:  {output_dir}")
    if summary.failures:
        log.warning("Failed files:")
        for record in summary.failures:
            reason = record.error.strip().splitlines()[-1] if record.error else (
                f"{len(record.diagnostics)} syntax errors"
            )
            log.warning(f"  - {record.filepath}: {reason[:200]}")


def main(argv: list[str] | None = None) -> None:
    """Run the repository parser."""
    from .utils import default_output_dir, save_report

    args = parse_args(argv)
    _setup_logging(
        verbose=args.verbose,
        detailed_logging=args.detailed_logging,
        log_file=args.log_file,
    )

    root: Path = args.repo_path
    output_dir = None
    if args.mode == "images":
        output_dir = args.output_dir or default_output_dir(root)

    overall_t0 = time.perf_counter()
    log.info("Parsing Python repository: %s (mode=%s)", root, args.mode)
    if output_dir is not None:
        log.info("Output directory: %s", output_dir)
    log.info("=" * 70)

    try:
        summary = process_repository(
            root,
            mode=args.mode,
            suffix=args.suffix,
            output_dir=output_dir,
            scale=args.scale,
            show_progress=not args.no_progress,
        )
    except OSError as exc:
        log.exception("Error: %s", exc)
        sys.exit(1)

    _log_summary(summary, mode=args.mode, output_dir=output_dir)

    if args.report is not None:
        report_path = save_report(args.report, summary, root=root, mode=args.mode)
        log.info("Report written to %s", report_path)

    log.info("Total runtime: %.1fs", time.perf_counter() - overall_t0)
