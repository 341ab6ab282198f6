"""
依赖匹配服务

按名称（含别名）和语义化版本范围，在模组发布列表中为每个依赖选出一个发布。
"""

import re
from typing import Dict, List, Mapping, Optional, Union

import semantic_version
from loguru import logger

from beatfetch.models import ModRelease, OutcomeStatus, ResolutionOutcome


def normalize_range(version_range: str) -> str:
    """
    规范化 npm 风格的版本范围

    去掉比较符后的空白（">= 1.0.0" -> ">=1.0.0"）以及版本号前的 "v"。
    """
    normalized = re.sub(r"(<=|>=|<|>|=|~|\^)\s+", r"\1", version_range.strip())
    normalized = re.sub(r"(^|[\s<>=~^])v(?=\d)", r"\1", normalized)
    return re.sub(r"\s+", " ", normalized)


def parse_range(
    version_range: str,
) -> Optional[Union[semantic_version.NpmSpec, semantic_version.SimpleSpec]]:
    """解析 npm 风格的版本范围，无法解析时返回 None"""
    normalized = normalize_range(version_range)
    try:
        return semantic_version.NpmSpec(normalized)
    except ValueError:
        pass
    # NpmSpec 无法解析时退回 SimpleSpec
    try:
        return semantic_version.SimpleSpec(normalized)
    except ValueError:
        return None


def parse_version(version: str) -> Optional[semantic_version.Version]:
    """安全地解析语义化版本，允许 "v" 或 "=" 前缀"""
    try:
        return semantic_version.Version(re.sub(r"^\s*[=v]+", "", version).strip())
    except ValueError:
        return None


class DependencyMatcher:
    """依赖匹配器"""

    def __init__(
        self,
        aliases: Optional[Mapping[str, str]] = None,
        trust_catalog_order: bool = True,
    ):
        self.aliases: Dict[str, str] = dict(aliases or {})
        self.trust_catalog_order = trust_catalog_order

    def _candidates(self, releases: List[ModRelease]) -> List[ModRelease]:
        if self.trust_catalog_order:
            return releases

        # 无法解析的版本不会通过范围匹配，排在最后
        parsed = [(parse_version(r.version), r) for r in releases]
        valid = [(v, r) for v, r in parsed if v is not None]
        valid.sort(key=lambda item: item[0], reverse=True)
        return [r for _, r in valid] + [r for v, r in parsed if v is None]

    def _name_matches(self, release: ModRelease, name: str) -> bool:
        return release.name == name or release.name == self.aliases.get(name)

    def find(
        self, name: str, version_range: str, releases: List[ModRelease]
    ) -> Optional[ModRelease]:
        """
        查找满足条件的最高版本发布

        Args:
            name: 依赖名称
            version_range: 语义化版本范围
            releases: 按版本降序排列的发布列表

        Returns:
            匹配的发布或 None
        """
        spec = parse_range(version_range)
        if spec is None:
            logger.warning(f"Invalid version range '{version_range}' for mod '{name}'")
            return None

        for release in self._candidates(releases):
            if not self._name_matches(release, name):
                continue
            version = parse_version(release.version)
            if version is not None and spec.match(version):
                return release
        return None

    def match_one(
        self, name: str, version_range: str, releases: List[ModRelease]
    ) -> ResolutionOutcome:
        """为单个依赖生成解析结果"""
        release = self.find(name, version_range, releases)
        if release is None:
            return ResolutionOutcome(name, version_range, OutcomeStatus.NOT_FOUND)

        artifact = release.universal_download()
        if artifact is None:
            return ResolutionOutcome(
                name,
                version_range,
                OutcomeStatus.NO_UNIVERSAL_ARTIFACT,
                release=release,
            )

        return ResolutionOutcome(
            name,
            version_range,
            OutcomeStatus.RESOLVED,
            release=release,
            artifact=artifact,
        )

    def match(
        self, requirements: Mapping[str, str], releases: List[ModRelease]
    ) -> List[ResolutionOutcome]:
        """为每个依赖生成解析结果，顺序与 requirements 一致"""
        return [
            self.match_one(name, version_range, releases)
            for name, version_range in requirements.items()
        ]
