"""
解压后的目录复制规则

BSIPA 安装时会把 IPA 目录下的文件移动到游戏目录，这里在解压后复制一份。
"""

import os
import shutil
from dataclasses import dataclass
from typing import List

from loguru import logger

from beatfetch.exceptions import ExtractError


BSIPA = "BSIPA"


@dataclass(frozen=True)
class RelocationRule:
    """目录复制规则（路径相对于目标目录）"""

    source: str
    target: str
    overwrite: bool = True

    def apply(self, destination: str) -> List[str]:
        return copy_tree(
            os.path.join(destination, self.source),
            os.path.join(destination, self.target),
            self.overwrite,
        )


def copy_tree(source: str, target: str, overwrite: bool = True) -> List[str]:
    """
    逐文件复制目录

    Args:
        source: 源目录
        target: 目标目录
        overwrite: 是否覆盖已存在的文件，为 False 时保留已有文件

    Returns:
        实际复制的文件路径列表
    """
    if not os.path.isdir(source):
        raise ExtractError(
            f"Directory '{source}' does not exist", context={"source": source}
        )

    copied = []
    for dirpath, _, filenames in os.walk(source):
        relative = os.path.relpath(dirpath, source)
        target_dir = os.path.normpath(os.path.join(target, relative))
        os.makedirs(target_dir, exist_ok=True)

        for filename in filenames:
            dst = os.path.join(target_dir, filename)
            if not overwrite and os.path.exists(dst):
                logger.debug(f"Keeping existing file '{dst}'")
                continue
            shutil.copy2(os.path.join(dirpath, filename), dst)
            copied.append(dst)

    return copied


def relocation_rules_for(
    name: str, game_name: str, data_overwrite: bool = False
) -> List[RelocationRule]:
    """
    获取某个依赖在解压后需要执行的复制规则

    Args:
        name: 依赖名称（清单中声明的名称）
        game_name: 游戏名称，用于 "<游戏>_Data" 目录
        data_overwrite: IPA/Data 复制时是否覆盖已有文件

    Returns:
        按顺序执行的规则列表
    """
    if name != BSIPA:
        return []

    return [
        RelocationRule(os.path.join("IPA", "Libs"), "Libs", overwrite=True),
        RelocationRule(
            os.path.join("IPA", "Data"), f"{game_name}_Data", overwrite=data_overwrite
        ),
    ]
