"""A minimal content-addressed version control system with branches, merges and diffs."""

__version__ = "1.0.0"
__all__ = ["cli", "commit", "fileutils", "hashing", "repository"]