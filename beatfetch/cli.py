"""
CLI 模块

命令行接口实现。所有参数同样可以通过流水线的 INPUT_* 环境变量传入。
"""

import asyncio
import json
from pathlib import Path
from typing import Any, Dict, Optional

import click
import toml
import yaml
from loguru import logger

from beatfetch import __version__
from beatfetch.models import RunConfig
from beatfetch.orchestrator import BeatFetchOrchestrator
from beatfetch.exceptions import BeatFetchError, ConfigParseError
from beatfetch.logger import setup_logger


def load_config(config_path: str) -> dict:
    """加载配置文件"""
    path = Path(config_path)

    if not path.exists():
        raise click.ClickException(f"Config file does not exist: {config_path}")

    suffix = path.suffix.lower()

    try:
        if suffix == ".toml":
            data = toml.load(config_path)
        elif suffix == ".json":
            data = json.loads(path.read_text(encoding="utf-8"))
        elif suffix in (".yaml", ".yml"):
            data = yaml.safe_load(path.read_text(encoding="utf-8"))
        else:
            raise click.ClickException(f"Unsupported config file format: {suffix}")
    except (toml.TomlDecodeError, json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigParseError(f"Failed to parse '{config_path}': {e}")

    if not isinstance(data, dict):
        raise ConfigParseError(f"Config file '{config_path}' must contain a mapping")
    return data


def parse_json_map(name: str, raw: Optional[str]) -> Optional[Dict[str, Any]]:
    """解析 JSON 对象形式的参数，空字符串视为未提供"""
    if raw is None or not raw.strip():
        return None
    try:
        value = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ConfigParseError(f"'{name}' is not valid JSON: {e}")
    if value is None:
        return None
    if not isinstance(value, dict):
        raise ConfigParseError(f"'{name}' must be a JSON object")
    return value


def build_config(file_values: Dict[str, Any], options: Dict[str, Any]) -> RunConfig:
    """合并配置文件与命令行参数（命令行优先）"""
    merged = dict(file_values)
    for key, value in options.items():
        if value is not None and value != "":
            merged[key] = value
    return RunConfig.from_dict(merged)


async def run_async(config: RunConfig):
    """异步运行"""
    orchestrator = BeatFetchOrchestrator(config)
    report = await orchestrator.run()
    if report.missing:
        logger.warning(
            f"{len(report.missing)} mods could not be installed: "
            + ", ".join(o.name for o in report.missing)
        )


@click.command()
@click.option("--path", envvar="INPUT_PATH", help="Destination directory")
@click.option("--manifest", envvar="INPUT_MANIFEST", help="Path to manifest.json")
@click.option("--project-path", envvar="INPUT_PROJECT-PATH", help="Path to the host project")
@click.option(
    "--project-configuration",
    envvar="INPUT_PROJECT-CONFIGURATION",
    help="Build configuration used to read the host project",
)
@click.option("--game-version", envvar="INPUT_GAME-VERSION", help="Override game version")
@click.option("--aliases", envvar="INPUT_ALIASES", help="JSON object of name aliases")
@click.option(
    "--additional-dependencies",
    envvar="INPUT_ADDITIONAL-DEPENDENCIES",
    help="JSON object of extra dependencies",
)
@click.option(
    "--game-version-mode",
    envvar="INPUT_GAME-VERSION-MODE",
    type=click.Choice(["strict", "lenient"]),
    help="Fail or fall back to the latest version when the game version is unknown",
)
@click.option(
    "--missing-level",
    envvar="INPUT_MISSING-LEVEL",
    type=click.Choice(["warning", "error"]),
    help="Log level for dependencies that are not found",
)
@click.option(
    "--relocate-data-overwrite",
    envvar="INPUT_RELOCATE-DATA-OVERWRITE",
    type=click.BOOL,
    default=None,
    help="Overwrite existing files when copying IPA/Data",
)
@click.option(
    "--trust-catalog-order",
    envvar="INPUT_TRUST-CATALOG-ORDER",
    type=click.BOOL,
    default=None,
    help="Rely on the catalog being sorted by version",
)
@click.option(
    "--max-concurrent",
    envvar="INPUT_MAX-CONCURRENT",
    type=click.IntRange(min=1),
    help="Number of mods downloaded at once",
)
@click.option("--access-token", envvar="INPUT_ACCESS-TOKEN", help="GitHub access token")
@click.option("--game-name", envvar="INPUT_GAME-NAME", help="Game name")
@click.option("--tag-format", envvar="INPUT_TAG-FORMAT", help="Git tag format")
@click.option("--github-env", envvar="GITHUB_ENV", help="Pipeline environment file")
@click.option("--ref-type", envvar="GITHUB_REF_TYPE", hidden=True)
@click.option("--ref-name", envvar="GITHUB_REF_NAME", hidden=True)
@click.option("--sha", envvar="GITHUB_SHA", hidden=True)
@click.option("-c", "--config", "config_path", type=click.Path(exists=True), help="Config file")
@click.option("--debug", is_flag=True, envvar="BEATFETCH_DEBUG", help="Enable debug logging")
@click.version_option(version=__version__)
def main(config_path: Optional[str], debug: bool, **options):
    """BeatFetch - resolve and install Beat Saber mod dependencies"""
    setup_logger(debug=debug)

    try:
        file_values = load_config(config_path) if config_path else {}
        for name in ("aliases", "additional_dependencies"):
            options[name] = parse_json_map(name, options[name])
        config = build_config(file_values, options)
        asyncio.run(run_async(config))
    except BeatFetchError as e:
        logger.error(str(e))
        logger.debug(f"Error details: {json.dumps(e.to_dict(), default=str)}")
        raise click.ClickException(e.message)


if __name__ == "__main__":
    main()
