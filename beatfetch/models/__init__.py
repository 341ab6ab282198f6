"""
BeatFetch 数据模型包

包含配置模型、API 模型和依赖来源模型定义。
"""

from beatfetch.models.config import (
    DEFAULT_GAME_NAME,
    GameVersionMode,
    MissingLevel,
    RunConfig,
)
from beatfetch.models.api import (
    Platform,
    DownloadArtifact,
    ModRelease,
    OutcomeStatus,
    ResolutionOutcome,
)
from beatfetch.models.manifest import (
    Manifest,
    ProjectInfo,
    merge_requirements,
)

__all__ = [
    # 配置模型
    "DEFAULT_GAME_NAME",
    "GameVersionMode",
    "MissingLevel",
    "RunConfig",
    # API 模型
    "Platform",
    "DownloadArtifact",
    "ModRelease",
    "OutcomeStatus",
    "ResolutionOutcome",
    # 依赖来源
    "Manifest",
    "ProjectInfo",
    "merge_requirements",
]
