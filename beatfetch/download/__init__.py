"""
BeatFetch 下载层

包含下载管理、归档解压和解压后的目录复制规则。
"""

from beatfetch.download.manager import DownloadManager
from beatfetch.download.extractor import ArchiveExtractor
from beatfetch.download.relocation import RelocationRule, copy_tree, relocation_rules_for

__all__ = [
    "DownloadManager",
    "ArchiveExtractor",
    "RelocationRule",
    "copy_tree",
    "relocation_rules_for",
]
