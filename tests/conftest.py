"""Shared fixtures for the repo_parser test suite.

Builds small throwaway repositories on disk with a known mix of valid,
malformed and non-matching files.
"""

from __future__ import annotations

import logging
import sys
import time
from pathlib import Path

import pytest

# ---------------------------------------------------------------------------
# Configure verbose logging for test debugging
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=logging.DEBUG,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    stream=sys.stderr,
    force=True,
)
log = logging.getLogger("conftest")

VALID_MODULE = '''\
import os


def greet(name):
    """Say hello."""
    return "hello " + name


class Greeter:
    def __init__(self, name):
        self.name = name

    def run(self):
        for _ in range(3):
            print(greet(self.name))
'''

VALID_SCRIPT = "x = 1\ny = [x, 2, 3]\nif y:\n    x += 1\n"

# Missing closing paren and a stray colon.
MALFORMED_MODULE = "def broken(:\n    pass\n"


def write_file(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


@pytest.fixture(scope="session")
def python_parser():
    """Session-scoped lark parser (table construction is slow -- build once)."""
    log.info(">>> FIXTURE python_parser: building lark Python grammar ...")
    t0 = time.time()

    from repo_parser import create_python_parser

    parser = create_python_parser()
    log.info(f">>> FIXTURE python_parser: ready in {time.time() - t0:.2f}s")
    return parser


@pytest.fixture
def valid_repo(tmp_path: Path) -> Path:
    """Repository with only valid Python files plus some noise."""
    root = tmp_path / "valid_repo"
    write_file(root / "pkg" / "__init__.py", "")
    write_file(root / "pkg" / "greet.py", VALID_MODULE)
    write_file(root / "script.py", VALID_SCRIPT)
    write_file(root / "README.md", "# not python\n")
    write_file(root / "notes.txt", "def broken(:\n")
    return root


@pytest.fixture
def mixed_repo(tmp_path: Path) -> Path:
    """Repository with two valid files and one malformed one in between."""
    root = tmp_path / "mixed_repo"
    write_file(root / "a_valid.py", VALID_SCRIPT)
    write_file(root / "b_broken.py", MALFORMED_MODULE)
    write_file(root / "c_valid.py", VALID_MODULE)
    write_file(root / "data.json", "{}")
    return root


@pytest.fixture
def empty_repo(tmp_path: Path) -> Path:
    root = tmp_path / "empty_repo"
    root.mkdir()
    return root
