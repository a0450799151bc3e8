# minigit

A small version control system that keeps its history in a `.minigit`
directory inside your project. File contents are stored as blobs named by
their hash, commits record a snapshot of the staged files, and branches are
plain files holding a commit hash.

## Installing

```
pip install .
```

## Using the command

Run every command from the top directory of your project; the repository is
always looked for in the current directory.

```
minigit init                      # create the .minigit repository
minigit add README.md             # store the file as a blob and stage it
minigit commit -m "Initial commit"
minigit log                       # first-parent history from HEAD
minigit branch new-feature        # create a branch at the HEAD commit
minigit checkout new-feature      # switch to a branch or a commit hash
minigit merge new-feature         # three-way merge of a branch into HEAD
minigit diff                      # working directory against HEAD
minigit diff <commit>             # working directory against a commit
minigit diff <commit> <commit>    # compare two commits
minigit help
minigit version
```

The commit message given with `-m` has surrounding spaces and tabs removed and
must not be empty.

`merge` finds a common ancestor of the two commits, takes files that were
added or changed only on the merged branch, and removes files that the branch
deleted and HEAD left unchanged. When both sides changed the same file, the
file is written out with conflict markers (`<<<<<<< HEAD`, `=======`,
`>>>>>>> branch`); when a file was deleted on the branch but changed in HEAD,
that is reported as a conflict too. In either case no merge commit is made.

`diff` lists each file as added, removed or modified and prints a simple
line-by-line comparison, with `- ` before removed lines, `+ ` before added
lines and two spaces before unchanged ones.

The command exits with status 1 when it is run without a command, on a usage
error, or when an operation fails, and prints the reason on standard error.

## Using it from Python

```python
import io
from minigit.repository import Repository

out = io.StringIO()
repo = Repository("path/to/project", out)
repo.init()
repo.add("notes.txt")
repo.commit("First notes")
print(repo.head_commit_hash())
repo.log()
print(out.getvalue())
```

`Repository(root, out)` works on the project at `root` (the current directory
when omitted) and writes its messages to the text stream `out` (standard
output when omitted). Failures raise `minigit.repository.RepositoryError`.
Besides the commands above it offers `head_commit_hash()`,
`load_commit(commit_hash)`, `blob_content(blob_hash)` and
`find_lca(commit_hash1, commit_hash2)`.

Lower-level pieces:

- `minigit.hashing.calculate_hash(content)` returns the 8-digit hexadecimal
  32-bit FNV-1a hash used to name blobs and commits.
- `minigit.commit.Commit` builds (`Commit.create`), hashes, serializes and
  parses (`Commit.deserialize`) commit objects; malformed content raises
  `minigit.commit.CommitFormatError`.
- `minigit.repository.render_diff(old_content, new_content, filename)` returns
  the diff text that `diff` prints.
- `minigit.fileutils` holds the small file helpers the repository uses.

## Limits

- New commits and merge commits are always recorded on the `master` branch,
  and HEAD is pointed back at `master`, whichever branch was checked out.
- `checkout` writes the target's files into the working directory but does
  not delete files that the target does not contain.
- There is no status, remove, reset, tag or remote command, and no way to
  stage the deletion of a file.
- Hashes are short and not cryptographic: they name content within a
  repository but give no protection against tampering or collisions.

## Running the tests

```
pip install ".[test]"
pytest
```