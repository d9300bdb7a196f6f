# tests/lovelypack/deploy/test_packager.py
from __future__ import annotations

import os
from pathlib import Path

import pytest

from lovelypack.config.project import ProjectConfig
from lovelypack.deploy.metadata import buildModMetadata
from lovelypack.deploy.packager import (
    clearDirectory,
    copyTree,
    createSkeleton,
    writeMetadata,
    writePatchManifest,
)
from lovelypack.pipeline.report import StepStatus


def test_clear_removes_files_and_directories(tmp_path):
    root = tmp_path / "deploy"
    (root / "nested" / "deeper").mkdir(parents=True)
    (root / "nested" / "deeper" / "x.lua").write_text("x", encoding="utf-8")
    (root / "stale.json").write_text("{}", encoding="utf-8")

    result = clearDirectory(root)
    assert result.status is StepStatus.OK
    assert root.is_dir()
    assert list(root.iterdir()) == []


def test_clear_missing_directory_is_skipped(tmp_path):
    result = clearDirectory(tmp_path / "absent")
    assert result.status is StepStatus.SKIPPED


def test_clear_reports_entries_it_could_not_remove(tmp_path, monkeypatch):
    root = tmp_path / "deploy"
    root.mkdir()
    (root / "locked.lua").write_text("x", encoding="utf-8")
    (root / "free.lua").write_text("x", encoding="utf-8")

    realUnlink = Path.unlink

    def fakeUnlink(self, *args, **kwargs):
        if self.name == "locked.lua":
            raise PermissionError("in use")
        return realUnlink(self, *args, **kwargs)

    monkeypatch.setattr(Path, "unlink", fakeUnlink)
    result = clearDirectory(root)
    assert result.status is StepStatus.FAILED
    assert result.errorType == "PermissionError"
    assert result.detail["leftovers"] == ["locked.lua"]
    assert not (root / "free.lua").exists()


def test_skeleton_creates_lovely_and_src(tmp_path):
    root = tmp_path / "a" / "b"
    assert createSkeleton(root).isOk
    assert (root / "lovely").is_dir()
    assert (root / "src").is_dir()
    # Idempotent
    assert createSkeleton(root).isOk


def test_skeleton_failure_is_reported_not_raised(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("", encoding="utf-8")
    result = createSkeleton(blocker)
    assert result.isFailed
    assert result.detail["missing"] == ["lovely", "src"]


def test_write_manifest_and_metadata(tmp_path):
    root = tmp_path / "deploy"
    createSkeleton(root)
    assert writePatchManifest(root, "[manifest]\n").isOk
    assert (root / "lovely" / "patches.toml").read_bytes() == b"[manifest]\n"

    metadata = buildModMetadata(ProjectConfig.model_validate({"name": "my-mod", "author": "Jo"}))
    assert writeMetadata(root, metadata).isOk
    assert (root / "my-mod.json").read_text(encoding="utf-8").startswith('{\n  "id": "my-mod"')


def test_write_into_missing_directory_fails(tmp_path):
    result = writePatchManifest(tmp_path / "nowhere", "x")
    assert result.isFailed
    assert result.errorType == "FileNotFoundError"


def test_copy_tree_copies_everything(tmp_path):
    src = tmp_path / "build"
    (src / "lib" / "deep").mkdir(parents=True)
    (src / "main.lua").write_text("main", encoding="utf-8")
    (src / "lib" / "deep" / "x.lua").write_text("x", encoding="utf-8")
    (src / ".hidden").write_text("h", encoding="utf-8")
    dest = tmp_path / "deploy"
    dest.mkdir()
    (dest / "main.lua").write_text("old", encoding="utf-8")

    result = copyTree(src, dest)
    assert result.isOk
    assert result.detail["copied"] == 3
    assert (dest / "main.lua").read_text(encoding="utf-8") == "main"
    assert (dest / "lib" / "deep" / "x.lua").read_text(encoding="utf-8") == "x"
    assert (dest / ".hidden").exists()


def test_copy_tree_missing_source_fails(tmp_path):
    result = copyTree(tmp_path / "build", tmp_path / "deploy")
    assert result.isFailed
    assert "not found" in result.reason


@pytest.mark.skipif(not hasattr(os, "symlink") or os.name == "nt", reason="symlinks need POSIX")
def test_copy_tree_symlink_policy(tmp_path):
    src = tmp_path / "build"
    src.mkdir()
    outside = tmp_path / "outside"
    outside.mkdir()
    (outside / "real.lua").write_text("real", encoding="utf-8")
    (src / "linked.lua").symlink_to(outside / "real.lua")
    (src / "loop").symlink_to(src, target_is_directory=True)

    dest = tmp_path / "deploy"
    result = copyTree(src, dest)
    assert result.isOk
    assert (dest / "linked.lua").read_text(encoding="utf-8") == "real"
    assert not (dest / "linked.lua").is_symlink()
    assert not (dest / "loop").exists()
    assert result.detail["skipped"] == [str(src / "loop")]
