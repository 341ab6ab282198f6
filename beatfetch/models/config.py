"""
配置模型

一次运行所需的全部输入，在启动时构造一次并传递给各组件。
"""

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Dict, Optional

from beatfetch.exceptions import ConfigValidationError


DEFAULT_GAME_NAME = "Beat Saber"


class GameVersionMode(Enum):
    """游戏版本不存在时的处理方式"""

    STRICT = "strict"
    LENIENT = "lenient"


class MissingLevel(Enum):
    """依赖未找到时的日志级别"""

    WARNING = "warning"
    ERROR = "error"


@dataclass
class RunConfig:
    """运行配置"""

    path: str
    game_version: Optional[str] = None
    manifest: Optional[str] = None
    project_path: Optional[str] = None
    project_configuration: str = "Release"
    aliases: Dict[str, str] = field(default_factory=dict)
    additional_dependencies: Dict[str, str] = field(default_factory=dict)
    game_version_mode: GameVersionMode = GameVersionMode.STRICT
    missing_level: MissingLevel = MissingLevel.WARNING
    relocate_data_overwrite: bool = False
    trust_catalog_order: bool = True
    max_concurrent: int = 1
    access_token: Optional[str] = None
    game_name: str = DEFAULT_GAME_NAME
    github_env: Optional[str] = None
    ref_type: Optional[str] = None
    ref_name: Optional[str] = None
    sha: Optional[str] = None
    tag_format: str = "v{0}"

    def __post_init__(self):
        if not self.path:
            raise ConfigValidationError("Destination 'path' is required")

        if self.manifest and self.project_path:
            raise ConfigValidationError(
                "Only one of 'manifest' and 'project_path' may be given"
            )

        for name in ("aliases", "additional_dependencies"):
            value = getattr(self, name)
            if not isinstance(value, dict) or not all(
                isinstance(k, str) and isinstance(v, str) for k, v in value.items()
            ):
                raise ConfigValidationError(
                    f"'{name}' must be a flat object of strings",
                    context={"field": name},
                )

        try:
            self.game_version_mode = GameVersionMode(self.game_version_mode)
            self.missing_level = MissingLevel(self.missing_level)
        except ValueError as e:
            raise ConfigValidationError(str(e))

        if not isinstance(self.max_concurrent, int) or self.max_concurrent <= 0:
            raise ConfigValidationError(
                "'max_concurrent' must be a positive integer",
                context={"max_concurrent": self.max_concurrent},
            )

        if "{0}" not in self.tag_format:
            raise ConfigValidationError(
                "'tag_format' must contain the '{0}' placeholder",
                context={"tag_format": self.tag_format},
            )

    @property
    def strict(self) -> bool:
        return self.game_version_mode == GameVersionMode.STRICT

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RunConfig":
        """
        从字典创建配置

        键名中的 "-" 视为 "_"，值为 None 的键被忽略，未知键报错。
        """
        known = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in data.items():
            name = key.replace("-", "_")
            if name not in known:
                raise ConfigValidationError(
                    f"Unknown configuration key '{key}'", context={"key": key}
                )
            if value is not None:
                kwargs[name] = value

        if "path" not in kwargs:
            raise ConfigValidationError("Destination 'path' is required")

        return cls(**kwargs)
