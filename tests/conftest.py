import json
import sys
from pathlib import Path

import pytest



def pytest_configure(config: pytest.Config) -> None:
    if sys.flags.optimize:
        raise RuntimeError("Assertions are disabled (optimize > 0)")



PACKAGE_JSON = {
    "name": "my-mod",
    "displayName": "My Mod",
    "author": "Jo",
    "description": "Does things",
    "version": "1.2.3",
    "main": "main.ts",
    "smod_deps": ["Steamodded (>=1.0.0~ALPHA)"],
    "scripts": {"build": "tstl"},
}

GAME_PATCH_TS = '''\
import { helper } from "./helper";

/**
 * Runs after the game loads.
 * @lovelyTarget game.lua
 * @lovelyPattern function love.load
 * @lovelyPosition after
 * @lovelyType pattern
 * @lovelyCaptureLocal self
 */
export function onLoad(self: unknown) {
    helper();
}
'''



def writeProject(root: Path, *, packageJson: dict | None = None, sources: dict[str, str] | None = None) -> Path:
    """Lay out a minimal mod project under root."""
    root.mkdir(parents=True, exist_ok=True)
    (root / "package.json").write_text(json.dumps(packageJson or PACKAGE_JSON), encoding="utf-8")
    for relPath, text in (sources or {"src/game.ts": GAME_PATCH_TS}).items():
        path = root / relPath
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    build = root / "build"
    (build / "lib").mkdir(parents=True, exist_ok=True)
    (build / "main.lua").write_text("-- main\n", encoding="utf-8")
    (build / "lib" / "util.lua").write_text("return {}\n", encoding="utf-8")
    return root



@pytest.fixture()
def modProject(tmp_path: Path) -> Path:
    return writeProject(tmp_path / "project")



@pytest.fixture()
def deployRoot(tmp_path: Path) -> Path:
    return tmp_path / "Mods" / "my-mod"



@pytest.fixture()
def projectFactory(tmp_path: Path):
    def make(name: str = "project", **kwargs) -> Path:
        return writeProject(tmp_path / name, **kwargs)
    return make
