# tests/test_cli.py

import io
import json
import os

import pytest

from cli import main_cli


@pytest.fixture
def tree(tmp_path, write_file):
    """Two identical files, one same-size different file, one unique file"""
    return {
        'a': write_file("scan/keep/a.txt", b"same bytes"),
        'b': write_file("scan/trash/b.txt", b"same bytes"),
        'c': write_file("scan/keep/c.txt", b"diff bytes"),
        'd': write_file("scan/keep/d.txt", b"tiny"),
        'root': str(tmp_path / "scan"),
    }


def test_lists_duplicate_groups(tree, capsys):
    assert main_cli([tree['root'], "--no-progress", "-w", "2"]) == 0

    out = capsys.readouterr().out
    blocks = [b.split("\n") for b in out.strip().split("\n\n")]
    assert [sorted(b) for b in blocks] == [sorted([tree['a'], tree['b']])]


def test_to_file_then_from_file(tree, tmp_path, capsys):
    snapshot = str(tmp_path / "results.json")

    assert main_cli([tree['root'], "--no-progress", "--to-file", snapshot]) == 0
    first = capsys.readouterr().out

    with open(snapshot) as f:
        saved = json.load(f)
    assert sorted(len(p) for p in saved.values()) == [1, 2]

    assert main_cli(["--from-file", snapshot]) == 0
    second = capsys.readouterr().out

    assert second.startswith(f"Loading file {snapshot}\n")
    assert second[len(f"Loading file {snapshot}\n"):] == first


def test_legacy_snapshot(tree, tmp_path):
    snapshot = tmp_path / "legacy.json"

    assert main_cli([tree['root'], "--no-progress", "--to-file", str(snapshot),
                     "--legacy-snapshot"]) == 0

    data = json.loads(snapshot.read_text())
    assert list(data) == [str(len(b"same bytes"))]


def test_from_file_does_not_overwrite_snapshot(tree, tmp_path):
    snapshot = tmp_path / "results.json"
    snapshot.write_text(json.dumps({"H": [tree['a'], tree['b']]}))
    other = tmp_path / "other.json"

    assert main_cli(["--from-file", str(snapshot), "--to-file", str(other)]) == 0
    assert not other.exists()


def test_bad_snapshot_is_fatal(tmp_path, capsys):
    snapshot = tmp_path / "broken.json"
    snapshot.write_text("{ nope")

    assert main_cli(["--from-file", str(snapshot)]) == 1
    assert "Error" in capsys.readouterr().err


def test_delete_dupes_in_dry_run(tree, capsys):
    trash = os.path.join(tree['root'], "trash")

    assert main_cli([tree['root'], "--no-progress", "--delete-dupes-in", trash]) == 0

    assert capsys.readouterr().out == f"Would delete {tree['b']}\n"
    assert os.path.exists(tree['b'])


def test_delete_dupes_in_with_force(tree):
    trash = os.path.join(tree['root'], "trash")

    assert main_cli([tree['root'], "--no-progress", "--delete-dupes-in", trash, "--force"]) == 0

    assert not os.path.exists(tree['b'])
    assert os.path.exists(tree['a'])


def test_move_files(tree, tmp_path):
    trash = os.path.join(tree['root'], "trash")
    moved = tmp_path / "moved"

    assert main_cli([tree['root'], "--no-progress", "--delete-dupes-in", trash,
                     "--force", "--move-files", str(moved)]) == 0

    assert not os.path.exists(tree['b'])
    assert (moved / "b.txt").read_bytes() == b"same bytes"


def test_delete_prompt(tree, monkeypatch):
    monkeypatch.setattr("sys.stdin", io.StringIO("1\n"))

    assert main_cli([tree['root'], "--no-progress", "--delete-prompt", "--force"]) == 0

    remaining = [p for p in (tree['a'], tree['b']) if os.path.exists(p)]
    assert len(remaining) == 1


def test_min_size_skips_small_files(tree, capsys):
    assert main_cli([tree['root'], "--no-progress", "--min-size", "100"]) == 0

    assert capsys.readouterr().out == ""


def test_verbose_prints_configuration(tree, capsys):
    assert main_cli([tree['root'], "--no-progress", "--verbose"]) == 0

    out = capsys.readouterr().out
    assert "Searching paths:" in out
    assert f"-  {tree['root']}" in out


def test_config_file(tree, tmp_path, capsys):
    config = tmp_path / "config.yaml"
    config.write_text("min_size: 100\nshow_progress: false\n")

    assert main_cli([tree['root'], "--config", str(config)]) == 0
    assert capsys.readouterr().out == ""


def test_invalid_config(tree, capsys):
    assert main_cli([tree['root'], "--algorithm", "nope"]) == 2
    assert "Unknown hash algorithm" in capsys.readouterr().err


def test_no_paths_prints_help(capsys):
    assert main_cli([]) == 2
    assert "usage" in capsys.readouterr().out


def test_image_clusters_are_listed(duplicate_images, capsys):
    assert main_cli(duplicate_images + ["--no-progress"]) == 0

    out = capsys.readouterr().out
    assert "(distance 0)" in out
    assert duplicate_images[3] not in out


def test_overlapping_roots_keep_the_only_copy(tmp_path, write_file):
    only = write_file("scan/sub/only.txt", b"content")
    root = str(tmp_path / "scan")

    assert main_cli([root, os.path.join(root, "sub"), "--no-progress",
                     "--delete-dupes-in", root, "--force"]) == 0

    assert os.path.exists(only)


def test_symlink_does_not_count_as_copy(tmp_path, write_file):
    real = write_file("keep/real.txt", b"content")
    links = tmp_path / "links"
    links.mkdir()
    os.symlink(real, links / "alias.txt")

    assert main_cli([str(links), str(tmp_path / "keep"), "--no-progress",
                     "--delete-dupes-in", str(tmp_path / "keep"), "--force"]) == 0

    assert os.path.exists(real)
