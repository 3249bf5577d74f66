"""Tests for tool acquisition and platform naming."""

import io
import os
import zipfile

import httpx
import pytest

from cs2cdn.exceptions import ToolDownloadFailed, ToolResolutionFailed
from cs2cdn.fetcher import (
    DEPOT_DOWNLOADER,
    SOURCE2_VIEWER,
    UNKNOWN_PLATFORM,
    ensure_tool,
    ensure_tools,
    latest_release_tag,
    platform_tag,
)
from cs2cdn.fetcher import tools as tools_module


def zipped(name: str, content: bytes = b"#!/bin/sh\n") -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        archive.writestr(name, content)
    return buffer.getvalue()


class TestPlatformTag:
    """Tests for platform_tag."""

    @pytest.mark.parametrize(
        "sys_platform, machine, expected",
        [
            ("win32", "AMD64", "windows-x64"),
            ("darwin", "arm64", "macos-arm64"),
            ("linux", "x86_64", "linux-x64"),
            ("linux", "aarch64", "linux-arm64"),
            ("linux", "armv7l", "linux-arm"),
        ],
    )
    def test_known_platforms(self, sys_platform, machine, expected):
        assert platform_tag(sys_platform, machine) == expected

    @pytest.mark.parametrize(
        "sys_platform, machine",
        [("freebsd13", "x86_64"), ("linux", "riscv64"), ("sunos5", "sparc")],
    )
    def test_unknown_platforms(self, sys_platform, machine):
        """Any unknown half resolves the whole tag to unknown-unknown."""
        assert platform_tag(sys_platform, machine) == UNKNOWN_PLATFORM


class TestLatestReleaseTag:
    """Tests for latest_release_tag."""

    def test_returns_tag(self, ctx, http_handler):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/repos/SteamRE/DepotDownloader/releases/latest"
            return httpx.Response(200, json={"tag_name": "DepotDownloader_3.0.0"})

        http_handler["handler"] = handler
        assert latest_release_tag(ctx, "SteamRE/DepotDownloader") == "DepotDownloader_3.0.0"

    def test_non_success_status(self, ctx, http_handler):
        http_handler["handler"] = lambda request: httpx.Response(403)
        with pytest.raises(ToolResolutionFailed, match="HTTP 403"):
            latest_release_tag(ctx, "SteamRE/DepotDownloader")

    def test_missing_tag_name(self, ctx, http_handler):
        http_handler["handler"] = lambda request: httpx.Response(200, json={})
        with pytest.raises(ToolResolutionFailed, match="tag_name"):
            latest_release_tag(ctx, "SteamRE/DepotDownloader")

    def test_listing_not_an_object(self, ctx, http_handler):
        http_handler["handler"] = lambda request: httpx.Response(200, json=[{"tag_name": "v1"}])
        with pytest.raises(ToolResolutionFailed, match="expected an object"):
            latest_release_tag(ctx, "SteamRE/DepotDownloader")

    def test_network_error(self, ctx, http_handler):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        http_handler["handler"] = handler
        with pytest.raises(ToolResolutionFailed, match="Network error"):
            latest_release_tag(ctx, "SteamRE/DepotDownloader")


class TestEnsureTool:
    """Tests for ensure_tool."""

    @pytest.fixture(autouse=True)
    def linux_x64(self, monkeypatch):
        monkeypatch.setattr(tools_module, "platform_tag", lambda: "linux-x64")
        monkeypatch.setattr(tools_module, "is_windows", lambda: False)

    def test_present_tool_not_downloaded(self, installed_tools, http_handler):
        def handler(request):
            raise AssertionError("no request expected")

        http_handler["handler"] = handler
        path = ensure_tool(installed_tools, DEPOT_DOWNLOADER)
        assert path == installed_tools.directory / "DepotDownloader"

    def test_downloads_unpacks_and_marks_executable(self, ctx, http_handler):
        requested = []

        def handler(request: httpx.Request) -> httpx.Response:
            requested.append(str(request.url))
            if request.url.host == "api.github.com":
                return httpx.Response(200, json={"tag_name": "v12.0"})
            return httpx.Response(200, content=zipped("Source2Viewer-CLI"))

        http_handler["handler"] = handler

        path = ensure_tool(ctx, SOURCE2_VIEWER)

        assert path.exists()
        assert os.access(path, os.X_OK)
        assert requested[-1] == (
            "https://github.com/ValveResourceFormat/ValveResourceFormat"
            "/releases/download/v12.0/cli-linux-x64.zip"
        )

    def test_asset_not_found(self, ctx, http_handler):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.host == "api.github.com":
                return httpx.Response(200, json={"tag_name": "v1"})
            return httpx.Response(404)

        http_handler["handler"] = handler
        with pytest.raises(ToolDownloadFailed, match="HTTP 404"):
            ensure_tool(ctx, DEPOT_DOWNLOADER)

    def test_asset_without_executable(self, ctx, http_handler):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.host == "api.github.com":
                return httpx.Response(200, json={"tag_name": "v1"})
            return httpx.Response(200, content=zipped("README.txt"))

        http_handler["handler"] = handler
        with pytest.raises(ToolDownloadFailed, match="did not contain"):
            ensure_tool(ctx, DEPOT_DOWNLOADER)

    def test_corrupt_asset(self, ctx, http_handler):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.host == "api.github.com":
                return httpx.Response(200, json={"tag_name": "v1"})
            return httpx.Response(200, content=b"not a zip")

        http_handler["handler"] = handler
        with pytest.raises(ToolDownloadFailed, match="not a zip"):
            ensure_tool(ctx, DEPOT_DOWNLOADER)

    def test_resolution_failure_propagates(self, ctx, http_handler):
        http_handler["handler"] = lambda request: httpx.Response(500)
        with pytest.raises(ToolResolutionFailed):
            ensure_tools(ctx)

    def test_unwritable_tool_directory(self, ctx, http_handler, monkeypatch):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.host == "api.github.com":
                return httpx.Response(200, json={"tag_name": "v1"})
            return httpx.Response(200, content=zipped("DepotDownloader"))

        def extractall(self, path=None, members=None, pwd=None):
            raise PermissionError(13, "Permission denied", str(path))

        http_handler["handler"] = handler
        monkeypatch.setattr(zipfile.ZipFile, "extractall", extractall)
        with pytest.raises(ToolDownloadFailed, match="Failed to unpack DepotDownloader"):
            ensure_tool(ctx, DEPOT_DOWNLOADER)

    def test_chmod_failure(self, ctx, http_handler, monkeypatch):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.host == "api.github.com":
                return httpx.Response(200, json={"tag_name": "v1"})
            return httpx.Response(200, content=zipped("DepotDownloader"))

        def chmod(path, mode):
            raise PermissionError(1, "Operation not permitted", str(path))

        http_handler["handler"] = handler
        monkeypatch.setattr(tools_module.os, "chmod", chmod)
        with pytest.raises(ToolDownloadFailed, match="executable"):
            ensure_tool(ctx, DEPOT_DOWNLOADER)
