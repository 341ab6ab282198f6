"""
游戏版本解析服务

将请求的游戏版本（可能是别名）解析为目录中的标准版本。
"""

from typing import Dict, List, Optional

from loguru import logger

from beatfetch.exceptions import GameVersionNotFoundError


class GameVersionResolver:
    """游戏版本解析器"""

    def __init__(self, strict: bool = True):
        self.strict = strict

    @staticmethod
    def find(
        requested: str,
        versions: List[str],
        aliases: Dict[str, List[str]],
    ) -> Optional[str]:
        """
        查找请求版本对应的标准版本

        按目录顺序返回第一个匹配项；不存在时返回 None。
        """
        for version in versions:
            if version == requested or requested in aliases.get(version, []):
                return version
        return None

    def resolve(
        self,
        requested: str,
        versions: List[str],
        aliases: Dict[str, List[str]],
    ) -> str:
        """
        解析游戏版本

        Args:
            requested: 请求的游戏版本或别名
            versions: 标准版本列表（第一个为最新版本）
            aliases: 标准版本 -> 别名列表

        Returns:
            标准版本

        Raises:
            GameVersionNotFoundError: 严格模式下版本不存在，或目录为空
        """
        version = self.find(requested, versions, aliases)
        if version is not None:
            return version

        if self.strict or not versions:
            raise GameVersionNotFoundError(
                f"Game version '{requested}' doesn't exist.",
                context={"requested": requested},
            )

        latest = versions[0]
        logger.warning(
            f"Game version '{requested}' doesn't exist; "
            f"using mods from latest version '{latest}'"
        )
        return latest
