"""
宿主项目信息

通过 dotnet build 读取项目的 GameVersion 属性和 DependsOn 项。
"""

import asyncio
import json
from typing import List

from loguru import logger

from beatfetch.exceptions import ProjectInfoError
from beatfetch.models import ProjectInfo


def build_command(project_path: str, configuration: str) -> List[str]:
    return [
        "dotnet",
        "build",
        project_path,
        "-c",
        configuration,
        "-getProperty:GameVersion",
        "-getItem:DependsOn",
    ]


def parse_project_output(stdout: str) -> ProjectInfo:
    """
    解析 dotnet build 的 JSON 输出

    Raises:
        ProjectInfoError: 输出不是 JSON 或缺少所需字段
    """
    try:
        data = json.loads(stdout.strip())
        game_version = data["Properties"]["GameVersion"]
        items = data.get("Items", {}).get("DependsOn", [])
        dependencies = {item["Identity"]: item["Version"] for item in items}
    except (ValueError, KeyError, TypeError, AttributeError) as e:
        raise ProjectInfoError(f"Failed to parse project info: {e}")

    if not isinstance(game_version, str) or not game_version:
        raise ProjectInfoError("Project does not define a 'GameVersion' property")

    return ProjectInfo(game_version=game_version, dependencies=dependencies)


async def get_project_info(project_path: str, configuration: str) -> ProjectInfo:
    """构建项目并读取依赖信息"""
    command = build_command(project_path, configuration)
    logger.info(f"Reading project info from '{project_path}' ({configuration})")
    try:
        proc = await asyncio.create_subprocess_exec(
            *command,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as e:
        raise ProjectInfoError(f"Failed to start '{command[0]}': {e}")

    stdout, stderr = await proc.communicate()
    if proc.returncode != 0:
        raise ProjectInfoError(
            stderr.decode(errors="replace").strip()
            or f"'{command[0]}' exited with code {proc.returncode}",
            context={"returncode": proc.returncode},
        )

    return parse_project_output(stdout.decode(errors="replace"))
