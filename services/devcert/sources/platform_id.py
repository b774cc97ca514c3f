"""
Platform identification for mkcert release assets.

mkcert publishes one binary per platform, named e.g.
``mkcert-v1.4.4-linux-amd64`` or ``mkcert-v1.4.4-windows-amd64.exe``.
"""

import platform

SUPPORTED_SYSTEMS = {"linux", "darwin", "windows", "freebsd"}

ARCH_ALIASES = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "armv6l": "arm",
    "armv7l": "arm",
    "arm": "arm",
}


def current_system() -> str:
    return platform.system().lower()


def current_arch() -> str:
    return platform.machine().lower()


def get_platform_identifier(system: str | None = None, machine: str | None = None) -> str | None:
    """Map an OS/CPU pair onto the asset-name suffix mkcert uses.

    Returns None if mkcert does not ship a binary for the pair.
    """
    system = (system or current_system()).lower()
    arch = ARCH_ALIASES.get((machine or current_arch()).lower())

    if system not in SUPPORTED_SYSTEMS or arch is None:
        return None

    identifier = f"{system}-{arch}"
    if system == "windows":
        identifier += ".exe"
    return identifier
