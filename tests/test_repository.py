import io

import pytest

from minigit.commit import Commit
from minigit.hashing import calculate_hash
from minigit.repository import Repository, RepositoryError, render_diff


@pytest.fixture
def out():
    return io.StringIO()


@pytest.fixture
def repo(tmp_path, out):
    r = Repository(tmp_path, out)
    r.init()
    return r


def _store_blob(root, text):
    blob = calculate_hash(text)
    (root / ".minigit" / "objects" / blob).write_text(text)
    return blob


def _store_commit(root, message, parents, files):
    c = Commit.create(message, parents, files)
    (root / ".minigit" / "objects" / c.hash).write_text(c.serialize())
    return c.hash


def _set_ref(root, branch, commit_hash):
    (root / ".minigit" / "refs" / "heads" / branch).write_text(commit_hash)


def _commit_file(repo, root, name, text, message):
    (root / name).write_text(text)
    repo.add(name)
    repo.commit(message)
    return repo.head_commit_hash()


def test_init_creates_structure(tmp_path):
    fresh = Repository(tmp_path, io.StringIO())
    fresh.init()
    assert fresh.head_commit_hash() == ""
    assert (tmp_path / ".minigit" / "refs" / "HEAD").read_text() == "ref: refs/heads/master"
    assert (tmp_path / ".minigit" / "refs" / "heads" / "master").read_text() == ""
    assert (tmp_path / ".minigit" / "objects").is_dir()


def test_init_twice_reports_existing(repo, out):
    repo.init()
    assert "MiniGit repository already initialized" in out.getvalue()
    assert repo.head_commit_hash() == ""


def test_add_stores_blob_and_index(tmp_path, repo):
    (tmp_path / "a.txt").write_text("hello\n")
    repo.add("a.txt")
    blob = calculate_hash("hello\n")
    assert (tmp_path / ".minigit" / "objects" / blob).read_text() == "hello\n"
    assert (tmp_path / ".minigit" / "index").read_text() == f"a.txt {blob}\n"
    assert repo.staging_area == {"a.txt": blob}


def test_add_missing_file_raises(repo):
    with pytest.raises(RepositoryError, match="File not found: nope.txt"):
        repo.add("nope.txt")


def test_commit_nothing_staged(repo, out):
    repo.commit("empty")
    assert "Nothing to commit" in out.getvalue()
    assert repo.head_commit_hash() == ""


def test_commit_records_snapshot_and_clears_index(tmp_path, repo):
    head = _commit_file(repo, tmp_path, "a.txt", "one\n", "first")
    c = repo.load_commit(head)
    assert c.hash == head
    assert c.message == "first"
    assert c.parent_hashes == []
    assert c.file_blobs == {"a.txt": calculate_hash("one\n")}
    assert repo.staging_area == {}
    assert (tmp_path / ".minigit" / "index").read_text() == ""


def test_second_commit_has_parent(tmp_path, repo):
    first = _commit_file(repo, tmp_path, "a.txt", "one\n", "first")
    second = _commit_file(repo, tmp_path, "a.txt", "two\n", "second")
    assert repo.load_commit(second).parent_hashes == [first]


def test_index_reloaded_by_new_instance(tmp_path, repo, out):
    (tmp_path / "a.txt").write_text("data")
    repo.add("a.txt")
    other = Repository(tmp_path, out)
    other.commit("from reloaded index")
    assert other.load_commit(other.head_commit_hash()).file_blobs == {
        "a.txt": calculate_hash("data")
    }


def test_log_lists_newest_first(tmp_path, repo, out):
    first = _commit_file(repo, tmp_path, "a.txt", "one\n", "first message")
    second = _commit_file(repo, tmp_path, "a.txt", "two\n", "second message")
    start = len(out.getvalue())
    repo.log()
    text = out.getvalue()[start:]
    newest = repo.load_commit(second)
    oldest = repo.load_commit(first)
    assert newest.parent_hashes == [first]
    expected = (
        f"commit {second}\nDate: {newest.timestamp}\n\n    second message\n\n"
        f"commit {first}\nDate: {oldest.timestamp}\n\n    first message\n\n"
    )
    assert text == expected


def test_log_without_commits(repo, out):
    repo.log()
    assert "No commits yet" in out.getvalue()
    assert repo.head_commit_hash() == ""


def test_branch_requires_commit(repo):
    with pytest.raises(RepositoryError, match="No commits exist yet"):
        repo.branch("feature")


def test_branch_points_at_head(tmp_path, repo, out):
    head = _commit_file(repo, tmp_path, "a.txt", "x", "m")
    repo.branch("feature")
    assert (tmp_path / ".minigit" / "refs" / "heads" / "feature").read_text() == head
    repo.branch("feature")
    assert "Branch already exists: feature" in out.getvalue()


def test_checkout_branch_restores_files(tmp_path, repo):
    _commit_file(repo, tmp_path, "a.txt", "original\n", "m")
    repo.branch("feature")
    (tmp_path / "a.txt").write_text("scribbled\n")
    repo.checkout("feature")
    assert (tmp_path / "a.txt").read_text() == "original\n"
    assert (tmp_path / ".minigit" / "refs" / "HEAD").read_text() == "ref: refs/heads/feature"


def test_checkout_commit_detaches_head(tmp_path, repo):
    first = _commit_file(repo, tmp_path, "a.txt", "one\n", "first")
    _commit_file(repo, tmp_path, "a.txt", "two\n", "second")
    repo.checkout(first)
    assert (tmp_path / "a.txt").read_text() == "one\n"
    assert repo.head_commit_hash() == first


def test_checkout_invalid_target(repo):
    with pytest.raises(RepositoryError, match="Invalid branch or commit: bogus"):
        repo.checkout("bogus")


def test_load_commit_missing(repo):
    with pytest.raises(RepositoryError, match="Commit not found"):
        repo.load_commit("deadbeef")


def test_blob_content_missing(repo):
    with pytest.raises(RepositoryError, match="Blob not found"):
        repo.blob_content("deadbeef")


def test_find_lca_linear_and_unrelated(tmp_path, repo):
    base = _store_commit(tmp_path, "base", [], {})
    mid = _store_commit(tmp_path, "mid", [base], {})
    tip = _store_commit(tmp_path, "tip", [mid], {})
    side = _store_commit(tmp_path, "side", [base], {})
    lonely = _store_commit(tmp_path, "lonely", [], {})
    assert repo.find_lca(tip, side) == base
    assert repo.find_lca(tip, mid) == mid
    assert repo.find_lca(tip, lonely) == ""


def test_merge_missing_branch(tmp_path, repo):
    _commit_file(repo, tmp_path, "a.txt", "x", "m")
    with pytest.raises(RepositoryError, match="Branch not found: ghost"):
        repo.merge("ghost")


def test_merge_without_commits(repo):
    with pytest.raises(RepositoryError, match="No commits to merge from"):
        repo.merge("feature")


def test_merge_up_to_date(tmp_path, repo, out):
    _commit_file(repo, tmp_path, "a.txt", "x", "m")
    repo.branch("feature")
    before = repo.head_commit_hash()
    repo.merge("feature")
    assert "Already up to date" in out.getvalue()
    assert repo.head_commit_hash() == before


def test_merge_takes_target_changes(tmp_path, repo):
    h0 = _store_blob(tmp_path, "one\n")
    h2 = _store_blob(tmp_path, "two\n")
    base = _store_commit(tmp_path, "base", [], {"f.txt": h0})
    current = _store_commit(tmp_path, "cur", [base], {"f.txt": h0})
    target = _store_commit(tmp_path, "tgt", [base], {"f.txt": h2})
    _set_ref(tmp_path, "master", current)
    _set_ref(tmp_path, "feature", target)
    repo.merge("feature")
    merged = repo.load_commit(repo.head_commit_hash())
    assert merged.parent_hashes == [current, target]
    assert merged.message == "Merge branch 'feature'"
    assert merged.file_blobs == {"f.txt": h2}
    assert (tmp_path / "f.txt").read_text() == "two\n"


def test_merge_takes_new_file(tmp_path, repo):
    h0 = _store_blob(tmp_path, "one\n")
    hg = _store_blob(tmp_path, "new\n")
    base = _store_commit(tmp_path, "base", [], {"f.txt": h0})
    current = _store_commit(tmp_path, "cur", [base], {"f.txt": h0})
    target = _store_commit(tmp_path, "tgt", [base], {"f.txt": h0, "g.txt": hg})
    _set_ref(tmp_path, "master", current)
    _set_ref(tmp_path, "feature", target)
    repo.merge("feature")
    assert (tmp_path / "g.txt").read_text() == "new\n"
    assert repo.load_commit(repo.head_commit_hash()).file_blobs == {"f.txt": h0, "g.txt": hg}


def test_merge_conflict_writes_markers(tmp_path, repo, out):
    h0 = _store_blob(tmp_path, "base\n")
    h1 = _store_blob(tmp_path, "one\n")
    h2 = _store_blob(tmp_path, "two\n")
    base = _store_commit(tmp_path, "base", [], {"f.txt": h0})
    current = _store_commit(tmp_path, "cur", [base], {"f.txt": h1})
    target = _store_commit(tmp_path, "tgt", [base], {"f.txt": h2})
    _set_ref(tmp_path, "master", current)
    _set_ref(tmp_path, "feature", target)
    repo.merge("feature")
    assert (tmp_path / "f.txt").read_text() == (
        "<<<<<<< HEAD\n" + "one\n" + "=======\n" + "two\n" + ">>>>>>> feature\n"
    )
    assert "Merge conflicts detected" in out.getvalue()
    assert repo.head_commit_hash() == current


def test_diff_between_commits(tmp_path, repo, out):
    first = _commit_file(repo, tmp_path, "f.txt", "one\n", "first")
    second = _commit_file(repo, tmp_path, "f.txt", "two\n", "second")
    start = len(out.getvalue())
    repo.diff(first, second)
    text = out.getvalue()[start:]
    assert "*** Modified: f.txt" in text
    assert render_diff("one\n", "two\n", "f.txt") in text
    assert "- one\n" in text
    assert "+ two\n" in text


def test_diff_working_directory_added_file(tmp_path, repo, out):
    _commit_file(repo, tmp_path, "f.txt", "one\n", "first")
    (tmp_path / "new.txt").write_text("fresh\n")
    start = len(out.getvalue())
    repo.diff()
    text = out.getvalue()[start:]
    assert "+++ Added: new.txt" in text
    assert render_diff("", "fresh\n", "new.txt") in text
    assert ".minigit" not in text.split(":\n", 1)[1]


def test_diff_without_commits(repo, out):
    repo.diff()
    assert "No commits to compare" in out.getvalue()
    assert repo.head_commit_hash() == ""


def test_render_diff_changed_line():
    assert render_diff("a\nb\n", "a\nc\n", "f") == "--- a/f\n+++ b/f\n  a\n- b\n+ c\n\n"


def test_render_diff_identical_has_only_context():
    result = render_diff("x\ny\n", "x\ny\n")
    assert result == "  x\n  y\n\n"


def test_render_diff_empty_inputs():
    assert render_diff("", "") == "\n"