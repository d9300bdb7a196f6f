# lovelypack/cli.py
from __future__ import annotations
import argparse
import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from lovelypack.config.project import loadProjectConfig
from lovelypack.config.settings import loadBuildSettings
from lovelypack.core.errors import LovelyPackError
from lovelypack.core.logging import configureLogging
from lovelypack.deploy.paths import resolveDeploymentRoot
from lovelypack.pipeline.runner import runPipeline

logger = logging.getLogger(__name__)

__all__ = ["buildParser", "main"]



def buildParser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lovelypack",
        description="Package a TypeScript-to-Lua mod into its deployment directory",
    )
    parser.add_argument(
        "--project-root",
        default=".",
        help="directory holding package.json, src/ and build/ (default: current directory)",
    )
    parser.add_argument("--config", default=None, help="build settings file (default: <project-root>/lovelypack.json5)")
    parser.add_argument("--deploy-dir", default=None, help="deploy here instead of the platform mods directory")
    parser.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING or ERROR")
    parser.add_argument("--log-file", default=None, help="also write JSON log lines to this file")
    return parser



def _overridesFromArgs(args: argparse.Namespace) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    if args.deploy_dir:
        overrides.setdefault("deployment", {})["root"] = args.deploy_dir
    if args.log_level:
        overrides.setdefault("logging", {})["level"] = args.log_level
    if args.log_file:
        overrides.setdefault("logging", {})["file"] = args.log_file
    return overrides



def main(argv: Sequence[str] | None = None) -> int:
    """
    Run the pipeline once. Exit code 0 means the pipeline ran, even with
    failed best-effort steps; 1 means it could not start.
    """
    args = buildParser().parse_args(argv)
    projectRoot = Path(args.project_root).resolve()

    try:
        settings = loadBuildSettings(projectRoot, configPath=args.config, overrides=_overridesFromArgs(args))
    except LovelyPackError as err:
        configureLogging()
        logger.error("%s", err)
        return 1

    try:
        configureLogging(settings.logging.level, settings.logging.file)
    except OSError as err:
        configureLogging(settings.logging.level)
        logger.error("Cannot open log file '%s': %s", settings.logging.file, err)
        return 1

    try:
        project = loadProjectConfig(projectRoot / settings.projectFile)
        deployRoot = resolveDeploymentRoot(
            project.modId,
            override=settings.deployment.root,
            hostFolder=settings.deployment.hostFolder,
        )
    except LovelyPackError as err:
        logger.error("%s", err)
        return 1

    runPipeline(projectRoot, project=project, settings=settings, deployRoot=deployRoot)
    return 0
