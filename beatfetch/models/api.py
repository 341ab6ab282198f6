"""
API 数据模型

定义 BeatMods 目录相关的数据类，包括模组发布、下载文件和解析结果。
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from loguru import logger

from beatfetch.exceptions import CatalogFormatError


class Platform(Enum):
    """下载文件的平台标签"""

    UNIVERSAL = "universal"
    STEAM = "steam"
    OCULUS = "oculus"


@dataclass(frozen=True)
class DownloadArtifact:
    """下载文件信息"""

    platform: Platform
    url: str


@dataclass(frozen=True)
class ModRelease:
    """
    模组在某个游戏版本下的一次发布。
    """

    name: str
    version: str
    downloads: List[DownloadArtifact]

    @classmethod
    def from_beatmods(cls, data: dict) -> "ModRelease":
        """
        将 BeatMods API 返回的发布信息转换为 ModRelease 对象。
        """
        if not isinstance(data, dict):
            raise CatalogFormatError(
                "Mod entry is not an object", context={"entry": data}
            )

        name = data.get("name")
        version = data.get("version")
        downloads = data.get("downloads", [])
        if not isinstance(name, str) or not isinstance(version, str):
            raise CatalogFormatError(
                "Mod entry is missing 'name' or 'version'", context={"entry": data}
            )
        if not isinstance(downloads, list):
            raise CatalogFormatError(
                f"Mod '{name}' has malformed 'downloads'", context={"entry": data}
            )

        artifacts = []
        for download in downloads:
            if not isinstance(download, dict) or not isinstance(
                download.get("url"), str
            ):
                raise CatalogFormatError(
                    f"Mod '{name}' has a malformed download entry",
                    context={"download": download},
                )
            try:
                platform = Platform(download.get("type"))
            except ValueError:
                logger.debug(
                    f"Ignoring '{download.get('type')}' download of mod '{name}'"
                )
                continue
            artifacts.append(DownloadArtifact(platform=platform, url=download["url"]))

        return cls(name=name, version=version, downloads=artifacts)

    def universal_download(self) -> Optional[DownloadArtifact]:
        """返回第一个 universal 下载文件"""
        for artifact in self.downloads:
            if artifact.platform == Platform.UNIVERSAL:
                return artifact
        return None


class OutcomeStatus(Enum):
    """依赖解析结果类型"""

    RESOLVED = "resolved"
    NOT_FOUND = "not_found"
    NO_UNIVERSAL_ARTIFACT = "no_universal_artifact"


@dataclass(frozen=True)
class ResolutionOutcome:
    """单个依赖的解析结果"""

    name: str
    version_range: str
    status: OutcomeStatus
    release: Optional[ModRelease] = None
    artifact: Optional[DownloadArtifact] = None

    @property
    def resolved(self) -> bool:
        return self.status == OutcomeStatus.RESOLVED
