"""Acquisition of the external download and extraction tools."""

import os
import tempfile
import zipfile
from dataclasses import dataclass
from pathlib import Path

import httpx

from cs2cdn.context import PipelineContext
from cs2cdn.exceptions import ToolDownloadFailed, ToolResolutionFailed
from cs2cdn.fetcher.platform import UNKNOWN_PLATFORM, is_windows, platform_tag

GITHUB_API = "https://api.github.com"
GITHUB = "https://github.com"


@dataclass(frozen=True)
class ToolSpec:
    """An external tool published as zipped GitHub release assets."""

    name: str
    repository: str  # e.g., "SteamRE/DepotDownloader"
    asset_stem: str  # asset is <stem>-<platform>.zip
    config_key: str  # config attribute holding the executable name

    def executable(self, ctx: PipelineContext) -> str:
        return getattr(ctx.config, self.config_key)


DEPOT_DOWNLOADER = ToolSpec(
    name="DepotDownloader",
    repository="SteamRE/DepotDownloader",
    asset_stem="DepotDownloader",
    config_key="depot_downloader",
)

SOURCE2_VIEWER = ToolSpec(
    name="Source2Viewer",
    repository="ValveResourceFormat/ValveResourceFormat",
    asset_stem="cli",
    config_key="source2_viewer",
)

TOOL_SPECS: tuple[ToolSpec, ...] = (SOURCE2_VIEWER, DEPOT_DOWNLOADER)


def executable_path(ctx: PipelineContext, spec: ToolSpec) -> Path:
    """Local path of a tool's executable inside the data directory."""
    name = spec.executable(ctx)
    if is_windows() and not name.lower().endswith(".exe"):
        name = f"{name}.exe"
    return ctx.tool_path(name)


def latest_release_tag(ctx: PipelineContext, repository: str) -> str:
    """Resolve the tag of a repository's latest published release."""
    url = f"{GITHUB_API}/repos/{repository}/releases/latest"
    try:
        response = ctx.http.get(url)
    except httpx.RequestError as e:
        raise ToolResolutionFailed(f"Network error resolving {repository}: {e}")

    if response.status_code != 200:
        raise ToolResolutionFailed(
            f"Failed to get latest release of {repository}: HTTP {response.status_code}"
        )

    try:
        data = response.json()
    except ValueError as e:
        raise ToolResolutionFailed(f"Malformed release listing for {repository}: {e}")
    if not isinstance(data, dict):
        raise ToolResolutionFailed(
            f"Malformed release listing for {repository}: expected an object, "
            f"got {type(data).__name__}"
        )
    tag = data.get("tag_name")
    if not tag or not isinstance(tag, str):
        raise ToolResolutionFailed(f"Release listing for {repository} has no tag_name")
    return tag


def asset_url(repository: str, tag: str, asset_stem: str, platform: str) -> str:
    return f"{GITHUB}/{repository}/releases/download/{tag}/{asset_stem}-{platform}.zip"


def _download_and_unpack(ctx: PipelineContext, url: str, spec: ToolSpec, dest: Path) -> None:
    """Download a zipped release asset and unpack it into dest."""
    try:
        response = ctx.http.get(url, follow_redirects=True)
    except httpx.RequestError as e:
        raise ToolDownloadFailed(f"Network error downloading {spec.name}: {e}")

    if response.status_code not in (200, 302):
        raise ToolDownloadFailed(
            f"Failed to download {spec.name} from {url}: HTTP {response.status_code}"
        )

    try:
        dest.mkdir(parents=True, exist_ok=True)
        with tempfile.TemporaryDirectory() as tmp_dir:
            archive_path = Path(tmp_dir) / f"{spec.asset_stem}.zip"
            archive_path.write_bytes(response.content)
            with zipfile.ZipFile(archive_path) as archive:
                archive.extractall(dest)
    except zipfile.BadZipFile as e:
        raise ToolDownloadFailed(f"Downloaded {spec.name} asset is not a zip: {e}")
    except OSError as e:
        raise ToolDownloadFailed(f"Failed to unpack {spec.name} into {dest}: {e}")


def ensure_tool(ctx: PipelineContext, spec: ToolSpec) -> Path:
    """Make sure a tool's executable exists locally, downloading it if absent.

    Args:
        ctx: Pipeline context
        spec: The tool to check

    Returns:
        Path to the executable

    Raises:
        ToolResolutionFailed: If the release feed cannot be read
        ToolDownloadFailed: If the asset cannot be downloaded or unpacked
    """
    path = executable_path(ctx, spec)
    if path.exists():
        ctx.log.debug("%s present at %s", spec.name, path)
        return path

    ctx.log.warning("%s not found at %s, downloading...", spec.name, path)

    tag = latest_release_tag(ctx, spec.repository)
    platform = platform_tag()
    if platform == UNKNOWN_PLATFORM:
        ctx.log.error("Unsupported platform for %s, asset lookup will fail", spec.name)

    url = asset_url(spec.repository, tag, spec.asset_stem, platform)
    ctx.log.debug("Downloading %s %s from %s", spec.name, tag, url)

    _download_and_unpack(ctx, url, spec, path.parent)

    if not path.exists():
        raise ToolDownloadFailed(
            f"{spec.name} asset {url} did not contain {path.name}"
        )

    if not is_windows():
        try:
            os.chmod(path, 0o755)
        except OSError as e:
            raise ToolDownloadFailed(f"Failed to mark {path} executable: {e}")

    ctx.log.info("Installed %s %s", spec.name, tag)
    return path


def ensure_tools(ctx: PipelineContext) -> dict[str, Path]:
    """Ensure every external tool is present. Returns name -> executable path."""
    return {spec.name: ensure_tool(ctx, spec) for spec in TOOL_SPECS}
