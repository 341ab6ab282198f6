"""
BeatMods API 客户端

读取游戏版本列表、版本别名和某个游戏版本下的模组发布列表。
"""

import asyncio
from typing import Any, Dict, List, Optional

import aiohttp
from loguru import logger

from beatfetch.models import ModRelease
from beatfetch.exceptions import APIError, CatalogFormatError


VERSIONS_URL = "https://versions.beatmods.com/versions.json"
ALIASES_URL = "https://alias.beatmods.com/aliases.json"
BEATMODS_BASE_URL = "https://beatmods.com"


class BeatModsClient:
    """BeatMods API 客户端"""

    def __init__(
        self,
        session: Optional[aiohttp.ClientSession] = None,
        base_url: str = BEATMODS_BASE_URL,
        versions_url: str = VERSIONS_URL,
        aliases_url: str = ALIASES_URL,
    ):
        self._session = session
        self._owned_session = session is None
        self.base_url = base_url.rstrip("/")
        self.versions_url = versions_url
        self.aliases_url = aliases_url

    @property
    def session(self) -> aiohttp.ClientSession:
        """获取或创建 aiohttp session"""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
        return self._session

    async def _request(self, url: str, params: Optional[dict] = None) -> Any:
        """
        发送 API 请求并解析 JSON

        Raises:
            APIError: 响应状态码不是 200 或网络错误
            CatalogFormatError: 响应不是有效的 JSON
        """
        logger.debug(f"GET {url} {params or ''}")
        try:
            async with self.session.get(url, params=params) as response:
                if response.status != 200:
                    raise APIError(
                        f"Request to '{url}' failed with status {response.status}",
                        response=response,
                    )
                try:
                    return await response.json(content_type=None)
                except ValueError as e:
                    raise CatalogFormatError(
                        f"Response from '{url}' is not valid JSON: {e}",
                        response=response,
                    )
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise APIError(
                f"Request to '{url}' failed: {str(e) or type(e).__name__}",
                context={"url": url},
            )

    async def get_game_versions(self) -> List[str]:
        """获取游戏版本列表（第一个为最新版本）"""
        data = await self._request(self.versions_url)
        if not isinstance(data, list) or not all(isinstance(v, str) for v in data):
            raise CatalogFormatError(
                "Game version list must be an array of strings",
                context={"url": self.versions_url},
            )
        return data

    async def get_version_aliases(self) -> Dict[str, List[str]]:
        """获取游戏版本别名表"""
        data = await self._request(self.aliases_url)
        if not isinstance(data, dict) or not all(
            isinstance(v, list) and all(isinstance(a, str) for a in v)
            for v in data.values()
        ):
            raise CatalogFormatError(
                "Version alias map must map versions to arrays of strings",
                context={"url": self.aliases_url},
            )
        return data

    async def get_mods(self, game_version: str) -> List[ModRelease]:
        """
        获取某个游戏版本下的全部模组发布

        结果按版本号降序排列（由服务端排序）。
        """
        data = await self._request(
            f"{self.base_url}/api/v1/mod",
            params={
                "sort": "version",
                "sortDirection": "-1",
                "gameVersion": game_version,
            },
        )
        if not isinstance(data, list):
            raise CatalogFormatError(
                "Mod list must be an array",
                context={"game_version": game_version},
            )
        return [ModRelease.from_beatmods(entry) for entry in data]

    def download_url(self, url: str) -> str:
        """将目录中的相对地址转换为完整地址"""
        if url.startswith(("http://", "https://")):
            return url
        return f"{self.base_url}{url}"

    async def close(self):
        """关闭客户端"""
        if self._owned_session and self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self):
        """异步上下文管理器入口"""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """异步上下文管理器出口"""
        await self.close()
