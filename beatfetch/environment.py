"""
流水线环境变量导出
"""

from typing import Dict

import aiofiles


def game_directory_variables(path: str) -> Dict[str, str]:
    return {"BeatSaberDir": path, "GameDirectory": path}


async def export_variables(env_file: str, variables: Dict[str, str]) -> None:
    """以 KEY=VALUE 行的形式追加到流水线的环境文件"""
    lines = "".join(f"{key}={value}\n" for key, value in variables.items())
    async with aiofiles.open(env_file, "a", encoding="utf-8") as f:
        await f.write(lines)
