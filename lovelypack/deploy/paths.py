# lovelypack/deploy/paths.py
from __future__ import annotations
import os
import sys
from collections.abc import Mapping
from pathlib import Path

from lovelypack.core.errors import DeploymentRootError

__all__ = ["STEAM_APP_ID", "resolveDeploymentRoot"]



# Steam app id of the host game, used to locate its Proton prefix on Linux
STEAM_APP_ID = "2379780"



def _requireEnv(environ: Mapping[str, str], name: str, platformName: str) -> str:
    value = (environ.get(name) or "").strip()
    if not value:
        raise DeploymentRootError(
            f"Cannot resolve the mods directory on '{platformName}': environment variable {name} is not set"
        )
    return value



def resolveDeploymentRoot(
    modId: str,
    *,
    override: str | Path | None = None,
    hostFolder: str = "Balatro",
    platformName: str | None = None,
    environ: Mapping[str, str] | None = None,
) -> Path:
    """
    Resolve the directory the mod is deployed into.

    Resolution order:
      1) explicit override (settings or CLI)
      2) per-platform user data location:
         - win32:  %APPDATA%/<hostFolder>/Mods/<modId>
         - darwin: $HOME/Library/Application Support/<hostFolder>/Mods/<modId>
         - linux:  Steam Proton prefix of the game, same layout as on Windows

    Called once at startup; the result is passed down explicitly.

    Raises:
        DeploymentRootError: unsupported platform or missing environment variable
    """
    if override:
        return Path(override).expanduser().resolve()

    platformName = platformName or sys.platform
    environ = os.environ if environ is None else environ

    if platformName == "win32":
        base = Path(_requireEnv(environ, "APPDATA", platformName))
    elif platformName == "darwin":
        base = Path(_requireEnv(environ, "HOME", platformName)) / "Library" / "Application Support"
    elif platformName.startswith("linux"):
        home = Path(_requireEnv(environ, "HOME", platformName))
        base = (
            home / ".local" / "share" / "Steam" / "steamapps" / "compatdata" / STEAM_APP_ID
            / "pfx" / "drive_c" / "users" / "steamuser" / "AppData" / "Roaming"
        )
    else:
        raise DeploymentRootError(
            f"Unsupported platform '{platformName}'; set deployment.root or pass --deploy-dir"
        )

    return base / hostFolder / "Mods" / modId
