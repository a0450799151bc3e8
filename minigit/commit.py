"""Commit objects: creation, hashing and the on-disk text format."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from minigit.hashing import calculate_hash as _hash_content

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S"


class CommitFormatError(ValueError):
    """Raised when serialized commit content cannot be parsed."""


def _now_timestamp() -> str:
    return datetime.now().strftime(TIMESTAMP_FORMAT)


@dataclass
class Commit:
    """A commit: metadata plus a snapshot mapping file names to blob hashes."""

    hash: str = ""
    parent_hashes: list[str] = field(default_factory=list)
    message: str = ""
    timestamp: str = ""
    file_blobs: dict[str, str] = field(default_factory=dict)

    @classmethod
    def create(cls, message, parent_hashes, file_blobs) -> "Commit":
        """Build a new commit stamped with the current local time and hashed."""
        commit = cls(
            parent_hashes=list(parent_hashes),
            message=message,
            timestamp=_now_timestamp(),
            file_blobs=dict(file_blobs),
        )
        commit.hash = commit.calculate_hash()
        return commit

    def _sorted_blobs(self) -> list[tuple[str, str]]:
        return sorted(self.file_blobs.items())

    def calculate_hash(self) -> str:
        """Hash the message, timestamp, parents and sorted file snapshot."""
        lines = [
            "commit",
            f"message:{self.message}",
            f"timestamp:{self.timestamp}",
            *(f"parent:{parent}" for parent in self.parent_hashes),
            "tree:",
            *(f"  {name} {blob}" for name, blob in self._sorted_blobs()),
        ]
        return _hash_content("".join(f"{line}\n" for line in lines))

    def serialize(self) -> str:
        """Return the line-based text form stored in the object database."""
        lines = [
            "type:commit",
            f"hash:{self.hash}",
            f"message:{self.message}",
            f"timestamp:{self.timestamp}",
            *(f"parent:{parent}" for parent in self.parent_hashes),
            *(f"file:{name} {blob}" for name, blob in self._sorted_blobs()),
        ]
        return "".join(f"{line}\n" for line in lines)

    @classmethod
    def deserialize(cls, content) -> "Commit":
        """Parse text produced by :meth:`serialize`; unknown lines are ignored."""
        commit = cls()
        for line in content.split("\n"):
            if line.startswith("type:"):
                kind = line[5:]
                if kind != "commit":
                    raise CommitFormatError(
                        f"Deserialization error: Expected type:commit, got {kind}"
                    )
            elif line.startswith("hash:"):
                commit.hash = line[5:]
            elif line.startswith("message:"):
                commit.message = line[8:]
            elif line.startswith("timestamp:"):
                commit.timestamp = line[10:]
            elif line.startswith("parent:"):
                commit.parent_hashes.append(line[7:])
            elif line.startswith("file:"):
                name, sep, blob = line[5:].partition(" ")
                if not sep:
                    raise CommitFormatError(
                        "Deserialization error: Invalid file entry format in commit."
                    )
                commit.file_blobs[name] = blob
        return commit