"""Command-line entry point for the minigit version control tool."""

from __future__ import annotations

import sys
from collections.abc import Sequence

from minigit.commit import CommitFormatError
from minigit.repository import Repository, RepositoryError

VERSION = "1.0.0"
_HEX_DIGITS = frozenset("0123456789abcdef")

_USAGE = """\
MiniGit - A minimal version control system

Usage: minigit <command> [arguments]

Basic commands:
  init                     Initialize a new repository
  add <file>               Add file contents to the index
  commit -m "<msg>"        Record changes to the repository
  log                      Show commit logs

Branching commands:
  branch <name>            Create a new branch
  checkout <branch|commit> Switch branches or restore files
  merge <branch>           Merge another branch into current

Other commands:
  diff [commit] [commit]   Show changes between commits
  help                     Show this help message
  version                  Show version information

Examples:
  minigit init
  minigit add README.md
  minigit commit -m "Initial commit"
  minigit branch new-feature
  minigit checkout new-feature
"""


class UsageError(Exception):
    """Raised when the command line is malformed."""

    def __init__(self, message: str, show_usage: bool = True):
        super().__init__(message)
        self.show_usage = show_usage


def trim(text: str) -> str:
    """Strip leading and trailing spaces and tabs."""
    return text.strip(" \t")


def usage_text() -> str:
    """Return the help text printed by ``help`` and on usage errors."""
    return _USAGE


def is_valid_commit_hash(value: str) -> bool:
    """Return True for a 40-character lower-case hexadecimal string."""
    return len(value) == 40 and set(value) <= _HEX_DIGITS


def _require(args: Sequence[str], count: int, message: str) -> None:
    if len(args) < count:
        raise UsageError(message)


def _dispatch(repo: Repository, command: str, args: Sequence[str]) -> None:
    if command in ("help", "--help"):
        sys.stdout.write(usage_text())
    elif command in ("version", "--version"):
        sys.stdout.write(f"MiniGit version {VERSION}\n")
    elif command == "init":
        repo.init()
    elif command == "add":
        _require(args, 1, "Missing filename for 'add' command")
        repo.add(args[0])
    elif command == "commit":
        if len(args) < 2 or args[0] != "-m":
            raise UsageError('Commit requires a message (-m "message")')
        message = trim(args[1])
        if not message:
            raise UsageError("Commit message cannot be empty", show_usage=False)
        repo.commit(message)
    elif command == "log":
        repo.log()
    elif command == "branch":
        _require(args, 1, "Missing branch name")
        repo.branch(args[0])
    elif command == "checkout":
        _require(args, 1, "Missing branch/commit argument")
        repo.checkout(args[0])
    elif command == "merge":
        _require(args, 1, "Missing branch to merge")
        repo.merge(args[0])
    elif command == "diff":
        if len(args) > 2:
            raise UsageError("Too many arguments for diff")
        commit1 = args[0] if len(args) >= 1 else ""
        commit2 = args[1] if len(args) == 2 else ""
        repo.diff(commit1, commit2)
    else:
        raise UsageError(f"Unknown command '{command}'")


def main(argv: Sequence[str] | None = None) -> int:
    """Run one minigit command and return the process exit status."""
    args = list(sys.argv[1:] if argv is None else argv)
    if not args:
        sys.stdout.write(usage_text())
        return 1

    command, rest = args[0], args[1:]
    repo = Repository()
    try:
        _dispatch(repo, command, rest)
    except UsageError as exc:
        sys.stderr.write(f"Error: {exc}\n")
        if exc.show_usage:
            sys.stdout.write(usage_text())
        return 1
    except (RepositoryError, CommitFormatError, OSError) as exc:
        sys.stderr.write(f"Error: {exc}\n")
        return 1
    except Exception as exc:  # noqa: BLE001 - last-resort report for the user
        sys.stderr.write(f"Unexpected error: {exc}\n")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())