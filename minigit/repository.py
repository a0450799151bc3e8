"""A minimal repository: object store, staging index, branches, merge and diff."""

from __future__ import annotations

import os
import sys
from collections import deque
from pathlib import Path
from typing import TextIO

from minigit.commit import Commit, CommitFormatError
from minigit.fileutils import (
    create_directory,
    directory_exists,
    file_exists,
    read_file,
    write_file,
)
from minigit.hashing import calculate_hash

MINIGIT_DIR = ".minigit"
OBJECTS_DIR = f"{MINIGIT_DIR}/objects"
REFS_DIR = f"{MINIGIT_DIR}/refs"
HEAD_FILE = f"{REFS_DIR}/HEAD"
HEADS_DIR = f"{REFS_DIR}/heads"
INDEX_FILE = f"{MINIGIT_DIR}/index"
DEFAULT_BRANCH = "master"
_REF_PREFIX = "ref: "


class RepositoryError(RuntimeError):
    """Raised when a repository command cannot be carried out."""


def _split_lines(content: str) -> list[str]:
    lines = content.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return lines


def render_diff(old_content: str, new_content: str, filename: str = "") -> str:
    """Return a simple line-by-line diff of two texts, as printed by ``diff``."""
    old_lines = _split_lines(old_content)
    new_lines = _split_lines(new_content)
    out: list[str] = []
    if filename:
        out.append(f"--- a/{filename}\n")
        out.append(f"+++ b/{filename}\n")

    old_iter = iter(old_lines)
    new_iter = iter(new_lines)
    old_line = next(old_iter, None)
    new_line = next(new_iter, None)
    while old_line is not None or new_line is not None:
        if old_line is not None and new_line is not None and old_line == new_line:
            out.append(f"  {old_line}\n")
            old_line = next(old_iter, None)
            new_line = next(new_iter, None)
            continue
        if old_line is not None:
            out.append(f"- {old_line}\n")
            old_line = next(old_iter, None)
        if new_line is not None:
            out.append(f"+ {new_line}\n")
            new_line = next(new_iter, None)
    out.append("\n")
    return "".join(out)


class Repository:
    """A repository rooted at a working directory, reporting to a text stream."""

    def __init__(self, root: str | os.PathLike | None = None, out: TextIO | None = None):
        self.root = Path(root) if root is not None else Path.cwd()
        self._out = out
        self.staging_area: dict[str, str] = {}
        if directory_exists(self._path(MINIGIT_DIR)):
            self._load_index()

    # ---------------------------------------------------------------- helpers

    def _path(self, relative: str) -> Path:
        return self.root / relative

    def _emit(self, text: str) -> None:
        stream = self._out if self._out is not None else sys.stdout
        stream.write(text)

    def _write(self, relative: str, content: str, failure: str) -> None:
        try:
            write_file(self._path(relative), content)
        except OSError as exc:
            raise RepositoryError(failure) from exc

    def _read(self, relative: str) -> str | None:
        try:
            return read_file(self._path(relative))
        except OSError:
            return None

    def _update_head(self, commit_hash: str, is_branch: bool = False, branch_name: str = "") -> None:
        if is_branch:
            self._write(f"{HEADS_DIR}/{branch_name}", commit_hash, "Failed to update branch")
            self._write(HEAD_FILE, f"{_REF_PREFIX}refs/heads/{branch_name}", "Failed to update HEAD")
        else:
            self._write(HEAD_FILE, commit_hash, "Failed to update HEAD")

    def _load_index(self) -> None:
        self.staging_area.clear()
        content = self._read(INDEX_FILE)
        if content is None:
            return
        for line in _split_lines(content):
            name, sep, blob = line.partition(" ")
            if sep:
                self.staging_area[name] = blob

    def _save_index(self) -> None:
        content = "".join(f"{name} {blob}\n" for name, blob in self.staging_area.items())
        self._write(INDEX_FILE, content, "Failed to save index")

    def _store_commit(self, commit: Commit, failure: str) -> None:
        self._write(f"{OBJECTS_DIR}/{commit.hash}", commit.serialize(), failure)

    def _working_file_content(self, filename: str) -> str:
        content = self._read(filename)
        return content if content is not None else ""

    def _working_tree_blobs(self) -> dict[str, str]:
        blobs: dict[str, str] = {}
        for dirpath, _dirnames, filenames in os.walk(self.root):
            for name in filenames:
                full = Path(dirpath) / name
                if not full.is_file():
                    continue
                rel = full.relative_to(self.root).as_posix()
                if rel.startswith(MINIGIT_DIR):
                    continue
                blobs[rel] = calculate_hash(self._working_file_content(rel))
        return blobs

    # ---------------------------------------------------------- core commands

    def init(self) -> None:
        """Create the repository structure with an empty master branch."""
        if directory_exists(self._path(MINIGIT_DIR)):
            self._emit("MiniGit repository already initialized\n")
            return
        try:
            for directory in (MINIGIT_DIR, OBJECTS_DIR, REFS_DIR, HEADS_DIR):
                create_directory(self._path(directory))
        except OSError as exc:
            raise RepositoryError("Failed to create repository structure") from exc
        self._write(HEAD_FILE, f"{_REF_PREFIX}refs/heads/{DEFAULT_BRANCH}", "Failed to initialize HEAD")
        self._write(f"{HEADS_DIR}/{DEFAULT_BRANCH}", "", "Failed to initialize HEAD")
        self._emit("Initialized empty MiniGit repository\n")

    def add(self, filename: str) -> None:
        """Store the file's content as a blob and stage it."""
        if not file_exists(self._path(filename)):
            raise RepositoryError(f"File not found: {filename}")
        content = self._read(filename)
        if content is None:
            raise RepositoryError(f"Failed to read file: {filename}")
        blob_hash = calculate_hash(content)
        blob_path = f"{OBJECTS_DIR}/{blob_hash}"
        if not file_exists(self._path(blob_path)):
            self._write(blob_path, content, "Failed to store blob")
        self.staging_area[filename] = blob_hash
        self._save_index()
        self._emit(f"Added {filename} to staging area\n")

    def commit(self, message: str) -> None:
        """Record the staged files as a new commit on master."""
        if not self.staging_area:
            self._emit("Nothing to commit\n")
            return
        parent = self.head_commit_hash()
        parents = [parent] if parent else []
        new_commit = Commit.create(message, parents, self.staging_area)
        self._store_commit(new_commit, "Failed to store commit")
        self._update_head(new_commit.hash, True, DEFAULT_BRANCH)
        self.staging_area.clear()
        self._save_index()
        self._emit(f"Committed {new_commit.hash[:7]}: {message}\n")

    def log(self) -> None:
        """Print the first-parent history starting at HEAD."""
        current = self.head_commit_hash()
        if not current:
            self._emit("No commits yet\n")
            return
        while current:
            entry = self.load_commit(current)
            self._emit(f"commit {entry.hash}\n")
            self._emit(f"Date: {entry.timestamp}\n")
            self._emit(f"\n    {entry.message}\n\n")
            if not entry.parent_hashes:
                break
            current = entry.parent_hashes[0]

    # -------------------------------------------------------------- branching

    def branch(self, branch_name: str) -> None:
        """Create a branch pointing at the HEAD commit."""
        current = self.head_commit_hash()
        if not current:
            raise RepositoryError("No commits exist yet")
        branch_path = f"{HEADS_DIR}/{branch_name}"
        if file_exists(self._path(branch_path)):
            self._emit(f"Branch already exists: {branch_name}\n")
            return
        self._write(branch_path, current, "Failed to create branch")
        self._emit(f"Created branch {branch_name}\n")

    def checkout(self, target: str) -> None:
        """Switch to a branch or commit, restoring its files into the work tree."""
        branch_path = f"{HEADS_DIR}/{target}"
        if file_exists(self._path(branch_path)):
            target_hash = self._read(branch_path)
            if target_hash is None:
                raise RepositoryError("Failed to read branch")
            is_branch = True
        else:
            try:
                self.load_commit(target)
            except (RepositoryError, CommitFormatError) as exc:
                raise RepositoryError(f"Invalid branch or commit: {target}") from exc
            target_hash = target
            is_branch = False

        snapshot = self.load_commit(target_hash)
        for name, blob in snapshot.file_blobs.items():
            write_file(self._path(name), self.blob_content(blob))

        self._update_head(target_hash, is_branch, target if is_branch else "")
        self.staging_area.clear()
        where = f"branch {target}" if is_branch else f"commit {target_hash[:7]}"
        self._emit(f"Switched to {where}\n")

    # ------------------------------------------------------------------ merge

    def merge(self, branch_name: str) -> None:
        """Three-way merge of a branch into HEAD, committing unless conflicts arise."""
        current_hash = self.head_commit_hash()
        if not current_hash:
            raise RepositoryError("No commits to merge from")
        target_hash = self._read(f"{HEADS_DIR}/{branch_name}")
        if target_hash is None:
            raise RepositoryError(f"Branch not found: {branch_name}")
        if current_hash == target_hash:
            self._emit("Already up to date\n")
            return

        lca_hash = self.find_lca(current_hash, target_hash)
        self._emit(
            f"Merging branch '{branch_name}' ({target_hash[:7]}) "
            f"into current branch ({current_hash[:7]})\n"
        )

        current_commit = self.load_commit(current_hash)
        target_commit = self.load_commit(target_hash)
        lca_commit = self.load_commit(lca_hash) if lca_hash else Commit()

        merged = dict(current_commit.file_blobs)
        lca_files = lca_commit.file_blobs
        target_files = target_commit.file_blobs
        conflicts = False

        for name in sorted(set(merged) | set(target_files) | set(lca_files)):
            lca_blob = lca_files.get(name, "")
            current_blob = merged.get(name, "")
            target_blob = target_files.get(name, "")

            if not lca_blob and not current_blob:
                self._emit(f"Taking new file from branch '{branch_name}': {name}\n")
                merged[name] = target_blob
                write_file(self._path(name), self.blob_content(target_blob))
            elif lca_blob and current_blob == lca_blob and target_blob != lca_blob:
                self._emit(f"Taking changes from branch '{branch_name}' for: {name}\n")
                merged[name] = target_blob
                write_file(self._path(name), self.blob_content(target_blob))
            elif (
                lca_blob
                and current_blob != lca_blob
                and target_blob != lca_blob
                and current_blob != target_blob
            ):
                self._emit(f"CONFLICT (content): {name} modified in both branches\n")
                conflict = (
                    "<<<<<<< HEAD\n"
                    + self.blob_content(current_blob)
                    + "=======\n"
                    + self.blob_content(target_blob)
                    + f">>>>>>> {branch_name}\n"
                )
                write_file(self._path(name), conflict)
                conflicts = True
            elif lca_blob and current_blob and not target_blob:
                if lca_blob == current_blob:
                    self._emit(f"Removing file deleted in branch '{branch_name}': {name}\n")
                    del merged[name]
                    self._path(name).unlink(missing_ok=True)
                else:
                    self._emit(
                        f"CONFLICT (delete/modify): {name} was deleted in branch "
                        f"'{branch_name}' but modified in current branch\n"
                    )
                    conflicts = True

        if conflicts:
            self._emit("Merge conflicts detected. Resolve them and commit the result.\n")
            return

        merge_commit = Commit.create(
            f"Merge branch '{branch_name}'", [current_hash, target_hash], merged
        )
        self._store_commit(merge_commit, "Failed to create merge commit")
        self._update_head(merge_commit.hash, True, DEFAULT_BRANCH)
        self._emit(f"Merge successful. New commit: {merge_commit.hash[:7]}\n")

    # ------------------------------------------------------------------- diff

    def diff(self, commit1: str = "", commit2: str = "") -> None:
        """Print changes between two commits, or between a commit and the work tree."""
        compare_worktree = not commit2
        hash1 = commit1 or self.head_commit_hash()
        if not hash1:
            self._emit("No commits to compare\n")
            return

        files1 = self.load_commit(hash1).file_blobs
        if compare_worktree:
            files2 = self._working_tree_blobs()
            self._emit(f"Comparing working directory against commit {hash1[:7]}:\n")
        else:
            files2 = self.load_commit(commit2).file_blobs
            self._emit(f"Comparing commit {hash1[:7]} with {commit2[:7]}:\n")

        def new_content(name: str) -> str:
            if compare_worktree:
                return self._working_file_content(name)
            return self.blob_content(files2[name])

        for name in sorted(set(files1) | set(files2)):
            in1 = name in files1
            in2 = name in files2
            if in2 and not in1:
                self._emit(f"+++ Added: {name}\n")
                self._emit(render_diff("", new_content(name), name))
            elif in1 and not in2:
                self._emit(f"--- Removed: {name}\n")
                self._emit(render_diff(self.blob_content(files1[name]), "", name))
            elif files1[name] != files2[name]:
                self._emit(f"*** Modified: {name}\n")
                self._emit(
                    render_diff(self.blob_content(files1[name]), new_content(name), name)
                )

    # ----------------------------------------------------------------- lookup

    def head_commit_hash(self) -> str:
        """Return the commit hash HEAD resolves to, or an empty string."""
        head = self._read(HEAD_FILE)
        if head is None:
            return ""
        if head.startswith(_REF_PREFIX):
            resolved = self._read(f"{MINIGIT_DIR}/{head[len(_REF_PREFIX):]}")
            return resolved if resolved is not None else ""
        return head

    def load_commit(self, commit_hash: str) -> Commit:
        """Load and parse a commit object from the object store."""
        content = self._read(f"{OBJECTS_DIR}/{commit_hash}")
        if content is None:
            raise RepositoryError(f"Commit not found: {commit_hash}")
        return Commit.deserialize(content)

    def blob_content(self, blob_hash: str) -> str:
        """Return the stored content of a blob."""
        content = self._read(f"{OBJECTS_DIR}/{blob_hash}")
        if content is None:
            raise RepositoryError(f"Blob not found: {blob_hash}")
        return content

    def find_lca(self, commit_hash1: str, commit_hash2: str) -> str:
        """Find a common ancestor by alternating breadth-first walks; '' if none."""
        visited1 = {commit_hash1}
        visited2 = {commit_hash2}
        queue1 = deque([commit_hash1])
        queue2 = deque([commit_hash2])

        def step(queue: deque, own: set, other: set) -> str | None:
            current = queue.popleft()
            if current in other:
                return current
            try:
                parents = self.load_commit(current).parent_hashes
            except (RepositoryError, CommitFormatError):
                return None
            for parent in parents:
                if parent not in own:
                    own.add(parent)
                    queue.append(parent)
            return None

        while queue1 or queue2:
            if queue1:
                found = step(queue1, visited1, visited2)
                if found is not None:
                    return found
            if queue2:
                found = step(queue2, visited2, visited1)
                if found is not None:
                    return found
        return ""