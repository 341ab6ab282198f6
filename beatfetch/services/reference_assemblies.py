"""
参考程序集下载

从 GitHub 下载与游戏版本对应的参考程序集归档并解压到目标目录。
"""

from typing import Dict, List

from loguru import logger

from beatfetch.download import DownloadManager


GITHUB_API_URL = "https://api.github.com"
REFERENCE_ASSEMBLIES_REPO = "nicoco007/BeatSaberReferenceAssemblies"
GITHUB_API_VERSION = "2022-11-28"
USER_AGENT = "setup-beat-saber"


class ReferenceAssembliesClient:
    """参考程序集下载器"""

    def __init__(
        self,
        download_manager: DownloadManager,
        access_token: str,
        repository: str = REFERENCE_ASSEMBLIES_REPO,
        api_url: str = GITHUB_API_URL,
    ):
        self.download_manager = download_manager
        self.access_token = access_token
        self.repository = repository
        self.api_url = api_url.rstrip("/")

    def url_for(self, game_version: str) -> str:
        return f"{self.api_url}/repos/{self.repository}/zipball/refs/tags/v{game_version}"

    @property
    def headers(self) -> Dict[str, str]:
        return {
            "Accept": "application/vnd.github+json",
            "Authorization": f"Bearer {self.access_token}",
            "User-Agent": USER_AGENT,
            "X-GitHub-Api-Version": GITHUB_API_VERSION,
        }

    async def download(self, game_version: str, destination: str) -> List[str]:
        """
        下载并解压参考程序集

        zipball 内第一层为仓库目录、第二层为版本目录，两层都会被去掉。
        """
        logger.info(f"Downloading reference assemblies for version '{game_version}'")
        return await self.download_manager.install(
            self.url_for(game_version),
            destination,
            headers=self.headers,
            strip_components=2,
        )
