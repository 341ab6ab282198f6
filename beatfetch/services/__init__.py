"""
BeatFetch 服务层

包含业务逻辑服务：API 客户端、游戏版本解析、依赖匹配、参考程序集下载。
"""

from beatfetch.services.api_client import BeatModsClient
from beatfetch.services.version_resolver import GameVersionResolver
from beatfetch.services.dependency_matcher import DependencyMatcher
from beatfetch.services.reference_assemblies import ReferenceAssembliesClient

__all__ = [
    "BeatModsClient",
    "GameVersionResolver",
    "DependencyMatcher",
    "ReferenceAssembliesClient",
]
