"""
Top-level build run: discovery, external table, per-target pipelines and
mode dispatch.
"""
import asyncio
import logging
from typing import List, Optional, Tuple

import click

from .dispatcher import ModeDispatcher
from .reporter import BuildReporter
from ..config.build_config import BuildConfig
from ..core.exceptions import FatalWarningError
from ..core.models import BuildTarget, ExternalTable, ModeFlags
from ..discovery.externals import ExternalTableBuilder
from ..discovery.scanner import TargetScanner
from ..pipeline.base import PipelineSpec
from ..pipeline.pipeline_builder import PipelineBuilder
from ..pipeline.tools import ToolRunner
from ..utils.fs import remove_tree


class BuildOrchestrator:
    """Builds every discovered target, once or in watch mode"""

    def __init__(self, config: BuildConfig, flags: ModeFlags,
                 dispatcher: Optional[ModeDispatcher] = None,
                 runner: Optional[ToolRunner] = None,
                 logger: Optional[logging.Logger] = None):
        self.config = config
        self.flags = flags
        self.dispatcher = dispatcher or ModeDispatcher(debounce_seconds=config.watch.debounce_seconds)
        self.runner = runner or ToolRunner()
        self.logger = logger or logging.getLogger(__name__)
        self.scanner = TargetScanner(config)
        self.external_builder = ExternalTableBuilder(config)

    def prepare(self) -> Tuple[List[BuildTarget], ExternalTable]:
        """
        Discover targets and compute the external table.

        Raises:
            PreconditionError: If any source root is missing or unreadable
        """
        discovery = self.scanner.discover()
        table = self.external_builder.build(discovery.modules_by_namespace)
        return discovery.targets, table

    def clean(self) -> bool:
        return remove_tree(self.config.resolve_path(self.config.clean_dir))

    def build_specs(self, targets: List[BuildTarget], table: ExternalTable) -> List[PipelineSpec]:
        builder = PipelineBuilder(table, self.flags, tools=self.config.tools, runner=self.runner)
        return [builder.build(target) for target in targets]

    async def run(self) -> int:
        """Run the build; returns the process exit status"""
        targets, table = self.prepare()
        if self.flags.clean_first:
            self.clean()
        specs = self.build_specs(targets, table)

        if self.flags.watch:
            await self.watch_all(specs)
            return 0
        return await self.build_all(specs)

    async def _build_target(self, spec: PipelineSpec) -> bool:
        try:
            await self.dispatcher.build_once(spec)
            return True
        except FatalWarningError:
            raise
        except Exception as e:
            self.logger.error(f"Build failed for {spec.target.name}: {e}")
            click.echo(f"Build failed for {spec.target.name}:\n\n{e}", err=True)
            return False

    async def build_all(self, specs: List[PipelineSpec]) -> int:
        """
        Submit every target at once and wait for all of them.

        A failed target does not affect its siblings; a fatal warning
        aborts the whole run. Builds still in flight at that point are left
        running; the process exit ends them.
        """
        tasks = [asyncio.create_task(self._build_target(spec)) for spec in specs]
        if not tasks:
            return 0
        done, _ = await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
        for task in done:
            if task.exception() is not None:
                raise task.exception()

        failed = sum(1 for task in tasks if not task.result())
        if failed:
            self.logger.error(f"{failed} of {len(tasks)} targets failed")
            return 1
        self.logger.info(f"Built {len(tasks)} targets")
        return 0

    async def watch_all(self, specs: List[PipelineSpec]) -> None:
        """Watch every target independently until cancelled or a fatal warning"""
        events: asyncio.Queue = asyncio.Queue()
        reporter = BuildReporter(events)
        reporter_task = asyncio.create_task(reporter.run())
        watchers = []
        try:
            watchers = [self.dispatcher.watch(spec, events) for spec in specs]
            await asyncio.gather(*(watcher.wait() for watcher in watchers))
        finally:
            for watcher in watchers:
                await watcher.stop()
            reporter_task.cancel()
            reporter.flush()
