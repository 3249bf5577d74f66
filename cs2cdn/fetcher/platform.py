"""Platform and architecture naming used by release assets."""

import platform as _platform
import sys

UNKNOWN_PLATFORM = "unknown-unknown"

OS_NAMES: dict[str, str] = {
    "win32": "windows",
    "darwin": "macos",
    "linux": "linux",
}

ARCH_NAMES: dict[str, str] = {
    "x86_64": "x64",
    "amd64": "x64",
    "x64": "x64",
    "arm64": "arm64",
    "aarch64": "arm64",
    "arm": "arm",
    "armv7l": "arm",
    "armv6l": "arm",
}


def platform_tag(sys_platform: str | None = None, machine: str | None = None) -> str:
    """Return the ``<os>-<arch>`` tag release assets are published under.

    Anything outside the known table resolves to ``unknown-unknown`` so the
    asset download fails loudly instead of fetching the wrong binary.
    """
    if sys_platform is None:
        sys_platform = sys.platform
    if machine is None:
        machine = _platform.machine()

    os_name = OS_NAMES.get(sys_platform)
    if os_name is None and sys_platform.startswith("linux"):
        os_name = "linux"
    arch_name = ARCH_NAMES.get(machine.lower())

    if os_name is None or arch_name is None:
        return UNKNOWN_PLATFORM
    return f"{os_name}-{arch_name}"


def is_windows(sys_platform: str | None = None) -> bool:
    return (sys_platform or sys.platform) == "win32"
