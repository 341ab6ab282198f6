"""
清单文件读写

读取 manifest.json（处理 BOM），校验结构，按 Git 信息改写版本号并写回。
"""

import json
from typing import Optional

import aiofiles
import semantic_version
from loguru import logger

from beatfetch.exceptions import ManifestError
from beatfetch.models import Manifest


BOM = "\ufeff"


def parse_manifest(text: str) -> Manifest:
    """
    解析清单文本

    Raises:
        ManifestError: JSON 无效、结构不符或版本号不是语义化版本
    """
    if text.startswith(BOM):
        logger.warning(
            "BOM character detected at the beginning of the manifest JSON file. "
            "Please remove the BOM from the file as it does not conform to the JSON spec "
            "(https://datatracker.ietf.org/doc/html/rfc7159#section-8.1) "
            "and may cause issues regarding interoperability."
        )
        text = text[len(BOM):]

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ManifestError(f"Manifest is not valid JSON: {e}")

    manifest = Manifest.from_dict(data)
    parse_manifest_version(manifest.version)
    return manifest


def parse_manifest_version(version: str) -> semantic_version.Version:
    try:
        return semantic_version.Version(version)
    except ValueError:
        raise ManifestError(
            f"Manifest version '{version}' is not a valid semantic version",
            context={"version": version},
        )


async def load_manifest(path: str) -> Manifest:
    """读取清单文件"""
    try:
        async with aiofiles.open(path, "r", encoding="utf-8") as f:
            text = await f.read()
    except OSError as e:
        raise ManifestError(f"Failed to read manifest '{path}': {e}")

    manifest = parse_manifest(text)
    logger.info(
        f"Retrieved manifest of '{manifest.id}' version '{manifest.version}'"
    )
    return manifest


def dump_manifest(manifest: Manifest) -> str:
    """序列化清单（4 空格缩进，保持字段顺序）"""
    return json.dumps(manifest.to_dict(), indent=4, ensure_ascii=False)


async def save_manifest(path: str, manifest: Manifest) -> None:
    """写回清单文件"""
    async with aiofiles.open(path, "w", encoding="utf-8") as f:
        await f.write(dump_manifest(manifest))


def stamp_version(
    manifest: Manifest,
    ref_type: Optional[str],
    ref_name: Optional[str],
    sha: Optional[str],
    tag_format: str = "v{0}",
) -> str:
    """
    根据 Git 信息改写清单版本号

    标签构建时去掉构建元数据，并要求标签与 tag_format 生成的名称一致；
    其他构建在版本号后追加 "+git.<sha>"。

    Returns:
        新的版本号
    """
    version = parse_manifest_version(manifest.version)
    base_version = str(version.truncate("prerelease"))

    if ref_type == "tag":
        expected_tag = tag_format.replace("{0}", base_version)
        if ref_name != expected_tag:
            raise ManifestError(
                f"Git tag '{ref_name}' does not match manifest version '{expected_tag}'",
                context={"tag": ref_name, "expected": expected_tag},
            )
        logger.info(f"Using Git tag '{ref_name}'")
        manifest.version = base_version
    else:
        logger.info(f"Using Git hash '{sha}'")
        manifest.version = f"{base_version}+git.{sha}"

    return manifest.version
