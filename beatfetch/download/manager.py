"""
下载管理器

下载归档并解压到共享的目标目录，解压和复制规则在同一把锁内执行。
"""

import asyncio
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

import aiohttp
from loguru import logger

from beatfetch.download.extractor import ArchiveExtractor
from beatfetch.download.relocation import RelocationRule
from beatfetch.exceptions import DownloadError, DownloadStatusError


@dataclass
class DownloadStats:
    """下载统计"""

    completed: int = 0
    files_written: int = 0
    bytes_downloaded: int = 0


class DownloadManager:
    """下载管理器"""

    def __init__(
        self,
        session: Optional[aiohttp.ClientSession] = None,
        extractor: Optional[ArchiveExtractor] = None,
    ):
        self.extractor = extractor or ArchiveExtractor()
        self.stats = DownloadStats()
        self._session = session
        self._owned_session = session is None
        # 目标目录是唯一的共享可变资源
        self._write_lock = asyncio.Lock()

    @property
    def session(self) -> aiohttp.ClientSession:
        """获取或创建 aiohttp session"""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
        return self._session

    async def fetch(self, url: str, headers: Optional[Dict[str, str]] = None) -> bytes:
        """
        下载二进制内容

        Raises:
            DownloadStatusError: 响应状态码不是 200
            DownloadError: 网络错误
        """
        logger.debug(f"GET {url}")
        try:
            async with self.session.get(url, headers=headers) as response:
                if response.status != 200:
                    raise DownloadStatusError(response.status, response.reason, url)
                data = await response.read()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise DownloadError(
                f"Failed to download '{url}': {str(e) or type(e).__name__}",
                context={"url": url},
            )

        self.stats.bytes_downloaded += len(data)
        return data

    async def install(
        self,
        url: str,
        destination: str,
        rules: Sequence[RelocationRule] = (),
        headers: Optional[Dict[str, str]] = None,
        strip_components: int = 0,
    ) -> List[str]:
        """
        下载并解压到目标目录，然后按顺序执行复制规则

        Returns:
            解压写入的文件路径列表
        """
        data = await self.fetch(url, headers=headers)

        # 文件写入在线程中执行，不阻塞其他下载
        async with self._write_lock:
            written = await asyncio.to_thread(
                self._write, data, destination, rules, strip_components
            )

        self.stats.completed += 1
        self.stats.files_written += len(written)
        return written

    def _write(
        self,
        data: bytes,
        destination: str,
        rules: Sequence[RelocationRule],
        strip_components: int,
    ) -> List[str]:
        written = self.extractor.extract(data, destination, strip_components)
        for rule in rules:
            copied = rule.apply(destination)
            logger.debug(
                f"Copied {len(copied)} files from '{rule.source}' to '{rule.target}'"
            )
        return written

    def get_stats(self) -> DownloadStats:
        """获取下载统计"""
        return self.stats

    async def close(self):
        """关闭 session"""
        if self._owned_session and self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self):
        """异步上下文管理器入口"""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """异步上下文管理器出口"""
        await self.close()
