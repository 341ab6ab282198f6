"""
归档解压器

将 zip 归档中的文件条目解压到目标目录，保留归档内的相对路径。
"""

import io
import os
import shutil
import zipfile
from typing import List

from loguru import logger

from beatfetch.exceptions import ExtractError


class ArchiveExtractor:
    """归档解压器"""

    @staticmethod
    def member_path(name: str, strip_components: int = 0) -> str:
        """
        计算归档条目的相对输出路径

        Args:
            name: 归档内的条目名称（使用 "/" 分隔）
            strip_components: 去掉的前导路径层数

        Returns:
            相对路径；路径被完全去掉时返回空字符串
        """
        parts = [p for p in name.replace("\\", "/").split("/") if p not in ("", ".")]
        return os.path.join(*parts[strip_components:]) if len(parts) > strip_components else ""

    def extract(
        self,
        data: bytes,
        destination: str,
        strip_components: int = 0,
    ) -> List[str]:
        """
        解压归档

        目录条目被跳过，只写入文件条目；已存在的文件会被覆盖。

        Args:
            data: 归档内容
            destination: 目标目录
            strip_components: 去掉的前导路径层数

        Returns:
            写入的文件路径列表
        """
        try:
            archive = zipfile.ZipFile(io.BytesIO(data))
        except zipfile.BadZipFile as e:
            raise ExtractError(f"Invalid archive: {e}")

        root = os.path.realpath(destination)
        written = []
        with archive:
            for info in archive.infolist():
                if info.is_dir():
                    continue

                relative = self.member_path(info.filename, strip_components)
                if not relative:
                    continue

                target = os.path.realpath(os.path.join(root, relative))
                if os.path.commonpath([root, target]) != root:
                    raise ExtractError(
                        f"Archive entry '{info.filename}' escapes the destination",
                        context={"entry": info.filename, "destination": destination},
                    )

                os.makedirs(os.path.dirname(target), exist_ok=True)
                try:
                    with archive.open(info) as src, open(target, "wb") as dst:
                        shutil.copyfileobj(src, dst)
                except (zipfile.BadZipFile, OSError) as e:
                    raise ExtractError(
                        f"Failed to extract '{info.filename}': {e}",
                        context={"entry": info.filename},
                    )
                written.append(target)

        logger.debug(f"Extracted {len(written)} files into '{destination}'")
        return written
