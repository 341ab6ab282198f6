"""
主协调器

整合所有服务层组件，实现依赖解析与下载流程编排。
"""

import asyncio
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Tuple

from loguru import logger

from beatfetch.models import (
    OutcomeStatus,
    ResolutionOutcome,
    RunConfig,
    merge_requirements,
)
from beatfetch.services import (
    BeatModsClient,
    DependencyMatcher,
    GameVersionResolver,
    ReferenceAssembliesClient,
)
from beatfetch.download import DownloadManager, relocation_rules_for
from beatfetch.exceptions import ConfigError
from beatfetch.manifest import load_manifest, save_manifest, stamp_version
from beatfetch.project import get_project_info
from beatfetch.environment import export_variables, game_directory_variables


@dataclass
class RunReport:
    """一次运行的结果"""

    game_version: str
    outcomes: List[ResolutionOutcome] = field(default_factory=list)

    def by_status(self, status: OutcomeStatus) -> List[ResolutionOutcome]:
        return [o for o in self.outcomes if o.status == status]

    @property
    def resolved(self) -> List[ResolutionOutcome]:
        return self.by_status(OutcomeStatus.RESOLVED)

    @property
    def missing(self) -> List[ResolutionOutcome]:
        return [o for o in self.outcomes if o.status != OutcomeStatus.RESOLVED]


class BeatFetchOrchestrator:
    """BeatFetch 主协调器"""

    def __init__(
        self,
        config: RunConfig,
        client: Optional[BeatModsClient] = None,
        download_manager: Optional[DownloadManager] = None,
    ):
        self.config = config
        self.client = client or BeatModsClient()
        self.download_manager = download_manager or DownloadManager()
        self.version_resolver = GameVersionResolver(strict=config.strict)
        self.matcher = DependencyMatcher(
            config.aliases, trust_catalog_order=config.trust_catalog_order
        )

    async def run(self) -> RunReport:
        """运行完整流程：读取依赖来源、解析、下载、导出环境变量"""
        try:
            self._log_inputs()
            game_version, dependencies = await self._load_source()
            report = await self.resolve(
                self.config.game_version or game_version, dependencies
            )

            if self.config.github_env:
                await export_variables(
                    self.config.github_env, game_directory_variables(self.config.path)
                )

            logger.success(
                f"Complete! {len(report.resolved)} of {len(report.outcomes)} mods installed"
            )
            return report
        finally:
            await self.close()

    def _log_inputs(self):
        for name, alias in self.config.aliases.items():
            logger.info(f"Given alias '{name}': '{alias}'")
        for name, version_range in self.config.additional_dependencies.items():
            logger.info(f"Given additional dependency '{name}' @ '{version_range}'")

    async def _load_source(self) -> Tuple[str, Dict[str, str]]:
        """读取依赖来源，返回 (游戏版本, 依赖集合)"""
        if self.config.manifest:
            manifest = await load_manifest(self.config.manifest)
            if self.config.ref_type or self.config.sha:
                stamp_version(
                    manifest,
                    self.config.ref_type,
                    self.config.ref_name,
                    self.config.sha,
                    self.config.tag_format,
                )
                await save_manifest(self.config.manifest, manifest)
            return manifest.game_version, manifest.depends_on

        if self.config.project_path:
            project = await get_project_info(
                self.config.project_path, self.config.project_configuration
            )
            return project.game_version, project.dependencies

        raise ConfigError("Either 'manifest' or 'project_path' must be given")

    async def resolve(
        self, requested_game_version: str, dependencies: Mapping[str, str]
    ) -> RunReport:
        """
        解析并安装依赖

        Args:
            requested_game_version: 请求的游戏版本（可为别名）
            dependencies: 依赖来源中声明的依赖

        Returns:
            RunReport
        """
        destination = self.config.path

        if self.config.access_token:
            assemblies = ReferenceAssembliesClient(
                self.download_manager, self.config.access_token
            )
            await assemblies.download(requested_game_version, destination)

        versions = await self.client.get_game_versions()
        aliases = await self.client.get_version_aliases()
        game_version = self.version_resolver.resolve(
            requested_game_version, versions, aliases
        )

        logger.info(f"Fetching mods for game version '{game_version}'")
        releases = await self.client.get_mods(game_version)

        requirements = merge_requirements(
            dependencies, self.config.additional_dependencies
        )
        outcomes = self.matcher.match(requirements, releases)

        for outcome in outcomes:
            self._report(outcome)

        await self._install_all(
            [o for o in outcomes if o.status == OutcomeStatus.RESOLVED], destination
        )

        return RunReport(game_version=game_version, outcomes=outcomes)

    def _report(self, outcome: ResolutionOutcome):
        if outcome.status == OutcomeStatus.NOT_FOUND:
            logger.log(
                self.config.missing_level.value.upper(),
                f"Mod '{outcome.name}' version '{outcome.version_range}' not found.",
            )
        elif outcome.status == OutcomeStatus.NO_UNIVERSAL_ARTIFACT:
            logger.warning(f"No universal download found for mod '{outcome.name}'")

    async def _install(
        self,
        outcome: ResolutionOutcome,
        destination: str,
        semaphore: asyncio.Semaphore,
    ):
        async with semaphore:
            logger.info(
                f"Downloading mod '{outcome.name}' version '{outcome.release.version}'"
            )
            rules = relocation_rules_for(
                outcome.name,
                self.config.game_name,
                data_overwrite=self.config.relocate_data_overwrite,
            )
            await self.download_manager.install(
                self.client.download_url(outcome.artifact.url), destination, rules
            )

    async def _install_all(self, outcomes: List[ResolutionOutcome], destination: str):
        """每个依赖一个任务，并发数受 max_concurrent 限制；任一失败则取消其余任务"""
        semaphore = asyncio.Semaphore(self.config.max_concurrent)
        tasks = [
            asyncio.create_task(
                self._install(outcome, destination, semaphore),
                name=f"install-{outcome.name}",
            )
            for outcome in outcomes
        ]
        if not tasks:
            return

        try:
            await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        stats = self.download_manager.get_stats()
        logger.debug(
            f"Installed {stats.completed} archives, {stats.files_written} files, "
            f"{stats.bytes_downloaded} bytes"
        )

    async def close(self):
        await self.client.close()
        await self.download_manager.close()
