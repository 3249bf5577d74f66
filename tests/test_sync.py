"""Tests for cs2cdn.sync module."""

import pytest
from conftest import completed

from cs2cdn import sync as sync_module
from cs2cdn.exceptions import SyncFailed
from cs2cdn.sync import build_sync_command, sync_tree


class TestSyncTree:
    def test_command(self, ctx):
        command = build_sync_command(ctx, "s3://cs2cdn/econ/", "https://r2.example")

        assert command[:3] == ["s5cmd", "--endpoint-url", "https://r2.example"]
        assert command[3:5] == ["sync", "--delete"]
        assert command[5].endswith("panorama/images/econ/*")
        assert command[6] == "s3://cs2cdn/econ/"

    def test_missing_tool(self, ctx, monkeypatch):
        monkeypatch.setattr(sync_module.shutil, "which", lambda name: None)
        with pytest.raises(SyncFailed, match="not found"):
            sync_tree(ctx, "s3://cs2cdn/econ/")

    def test_non_zero_exit(self, ctx, runner, monkeypatch):
        monkeypatch.setattr(sync_module.shutil, "which", lambda name: "/usr/bin/s5cmd")
        monkeypatch.delenv("S3_ENDPOINT_URL", raising=False)
        runner.on("s5cmd", lambda args: completed(args, 1, stderr="AccessDenied"))

        with pytest.raises(SyncFailed, match="AccessDenied"):
            sync_tree(ctx, "s3://cs2cdn/econ/")
