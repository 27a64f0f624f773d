import asyncio
import logging
from typing import Callable, Optional

from watchdog.observers import Observer

from .escalation import EscalationPolicy
from .watcher import TargetWatcher
from ..bundler.bundler import Bundler, BundleResult
from ..core.models import BuildWarning
from ..pipeline.base import PipelineSpec


BundlerFactory = Callable[[PipelineSpec, Callable[[BuildWarning], None]], Bundler]


class ModeDispatcher:
    """Runs a target's pipeline either once or under a persistent watcher"""

    def __init__(self, debounce_seconds: float = 0.1,
                 bundler_factory: BundlerFactory = Bundler.from_spec,
                 observer_factory=Observer,
                 logger: Optional[logging.Logger] = None):
        self.debounce_seconds = debounce_seconds
        self.bundler_factory = bundler_factory
        self.observer_factory = observer_factory
        self.logger = logger or logging.getLogger(__name__)

    async def run_pipeline(self, spec: PipelineSpec) -> BundleResult:
        """Compile and write one target; a fresh policy inspects every warning"""
        policy = EscalationPolicy(spec.target)
        bundler = self.bundler_factory(spec, policy.handle)
        result = await bundler.generate()
        await bundler.write(result)
        return result

    async def build_once(self, spec: PipelineSpec) -> BundleResult:
        self.logger.info(f"Building {spec.target.name}")
        result = await self.run_pipeline(spec)
        self.logger.info(f"Built {spec.target.name} -> {spec.output.file}")
        return result

    def watch(self, spec: PipelineSpec, events: asyncio.Queue) -> TargetWatcher:
        watcher = TargetWatcher(
            spec.target,
            build=lambda: self.run_pipeline(spec),
            events=events,
            debounce_seconds=self.debounce_seconds,
            observer_factory=self.observer_factory,
        )
        watcher.start()
        self.logger.info(f"Watching {spec.target.name}")
        return watcher
