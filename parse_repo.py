"""CLI shim -- delegates to repo_parser.cli.main().

Usage:
    python parse_repo.py <repo-path>
    python parse_repo.py <repo-path> images
"""

from repo_parser.cli import main

if __name__ == "__main__":
    main()
