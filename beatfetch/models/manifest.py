"""
依赖来源模型

清单文件与宿主项目两种依赖来源，以及依赖集合的合并规则。
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from beatfetch.exceptions import ManifestError


@dataclass
class Manifest:
    """
    模组清单 (manifest.json)。

    raw 保存原始 JSON 对象，写回时保持字段和顺序不变。
    """

    id: str
    version: str
    game_version: str
    depends_on: Dict[str, str]
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, data: Any) -> "Manifest":
        if not isinstance(data, dict):
            raise ManifestError("Manifest must be a JSON object")

        for key in ("id", "version", "gameVersion"):
            if not isinstance(data.get(key), str):
                raise ManifestError(
                    f"Manifest field '{key}' must be a string",
                    context={"field": key},
                )

        depends_on = data.get("dependsOn", {})
        if not isinstance(depends_on, dict) or not all(
            isinstance(k, str) and isinstance(v, str) for k, v in depends_on.items()
        ):
            raise ManifestError(
                "Manifest field 'dependsOn' must map names to version ranges",
                context={"field": "dependsOn"},
            )

        return cls(
            id=data["id"],
            version=data["version"],
            game_version=data["gameVersion"],
            depends_on=dict(depends_on),
            raw=data,
        )

    def to_dict(self) -> Dict[str, Any]:
        data = dict(self.raw)
        data["version"] = self.version
        return data


@dataclass
class ProjectInfo:
    """从宿主项目构建输出中提取的信息"""

    game_version: str
    dependencies: Dict[str, str]


def merge_requirements(
    base: Mapping[str, str], supplemental: Optional[Mapping[str, str]] = None
) -> Dict[str, str]:
    """
    合并依赖集合

    supplemental 中的同名依赖覆盖 base 中的版本范围，其余依赖追加在末尾。
    """
    merged = dict(base)
    if supplemental:
        merged.update(supplemental)
    return merged
