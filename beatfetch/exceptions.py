"""
BeatFetch 统一异常体系

提供分层的异常结构，支持错误代码、上下文信息和 JSON 序列化。
"""

from typing import Any, Dict, Optional

import aiohttp


class BeatFetchError(Exception):
    """BeatFetch 基础异常类"""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self._get_default_code()
        self.context = context or {}

    def _get_default_code(self) -> str:
        """获取默认错误代码"""
        return "E000"

    def to_dict(self) -> Dict[str, Any]:
        """将异常转换为字典格式"""
        return {
            "error": True,
            "code": self.code,
            "message": self.message,
            "context": self.context,
            "type": self.__class__.__name__,
        }

    def __str__(self) -> str:
        if self.code:
            return f"[{self.code}] {self.message}"
        return self.message


class ConfigError(BeatFetchError):
    """配置相关错误"""

    def _get_default_code(self) -> str:
        return "E100"


class ConfigParseError(ConfigError):
    """配置解析错误"""

    def _get_default_code(self) -> str:
        return "E101"


class ConfigValidationError(ConfigError):
    """配置验证错误"""

    def _get_default_code(self) -> str:
        return "E102"


class ManifestError(BeatFetchError):
    """清单文件格式或内容错误"""

    def _get_default_code(self) -> str:
        return "E110"


class ProjectInfoError(BeatFetchError):
    """项目信息获取失败"""

    def _get_default_code(self) -> str:
        return "E120"


class APIError(BeatFetchError):
    """API 相关错误"""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        response: Optional[aiohttp.ClientResponse] = None,
    ):
        super().__init__(message, code, context)
        self.response = response
        if response is not None:
            self.context["status_code"] = response.status
            self.context["url"] = str(response.url)

    def _get_default_code(self) -> str:
        return "E200"


class CatalogFormatError(APIError):
    """目录数据结构不符合预期"""

    def _get_default_code(self) -> str:
        return "E210"


class GameVersionNotFoundError(BeatFetchError):
    """游戏版本不存在"""

    def _get_default_code(self) -> str:
        return "E220"


class DownloadError(BeatFetchError):
    """下载相关错误"""

    def _get_default_code(self) -> str:
        return "E300"


class DownloadStatusError(DownloadError):
    """下载响应状态码非 200"""

    def __init__(
        self,
        status: int,
        reason: Optional[str],
        url: str,
    ):
        super().__init__(
            f"Unexpected response status {status} {reason or ''}".rstrip(),
            context={"url": url, "status": status},
        )
        self.status = status
        self.reason = reason

    def _get_default_code(self) -> str:
        return "E301"


class ExtractError(DownloadError):
    """归档解压或文件复制错误"""

    def _get_default_code(self) -> str:
        return "E302"


__all__ = [
    # 基础异常
    "BeatFetchError",
    # 配置异常
    "ConfigError",
    "ConfigParseError",
    "ConfigValidationError",
    # 输入异常
    "ManifestError",
    "ProjectInfoError",
    # API 异常
    "APIError",
    "CatalogFormatError",
    "GameVersionNotFoundError",
    # 下载异常
    "DownloadError",
    "DownloadStatusError",
    "ExtractError",
]
