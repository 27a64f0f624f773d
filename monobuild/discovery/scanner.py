"""
Scans package source directories for build targets.
"""
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List
import logging

from ..config.build_config import BuildConfig, PluginPackageConfig
from ..core.exceptions import PreconditionError
from ..core.models import BuildTarget


@dataclass
class DiscoveryResult:
    """Targets plus the module base names found per plugin package"""
    targets: List[BuildTarget] = field(default_factory=list)
    modules_by_namespace: Dict[str, List[str]] = field(default_factory=dict)


class TargetScanner:
    """Discovers one target per plugin source file, plus the main library target"""

    def __init__(self, config: BuildConfig):
        self.config = config
        self.logger = logging.getLogger(__name__)

    def list_modules(self, plugin: PluginPackageConfig) -> List[str]:
        """
        List the base names of the immediate source files of a plugin package.

        Raises:
            PreconditionError: If the source directory is missing or unreadable
        """
        src_dir = self.config.resolve_path(plugin.src_dir)
        try:
            entries = sorted(src_dir.iterdir())
        except FileNotFoundError as e:
            raise PreconditionError(f"Source directory does not exist: {src_dir}") from e
        except (NotADirectoryError, PermissionError) as e:
            raise PreconditionError(f"Cannot read source directory {src_dir}: {e}") from e

        # Foo.js and Foo.jsx share one module name
        modules = list(dict.fromkeys(
            entry.stem for entry in entries
            if entry.is_file() and entry.suffix in self.config.source_suffixes
        ))
        self.logger.debug(f"Found {len(modules)} modules in {src_dir}")
        return modules

    def plugin_targets(self, plugin: PluginPackageConfig, modules: List[str]) -> List[BuildTarget]:
        src_dir = self.config.resolve_path(plugin.src_dir)
        dist_dir = self.config.resolve_path(plugin.dist_dir)
        targets = []
        for module in modules:
            source = next(
                src_dir / f"{module}{suffix}" for suffix in self.config.source_suffixes
                if (src_dir / f"{module}{suffix}").is_file()
            )
            targets.append(BuildTarget(
                name=f"{plugin.label} - {module}",
                input_path=source,
                output_path=dist_dir / source.name,
            ))
        return targets

    def main_target(self) -> BuildTarget:
        main = self.config.main
        return BuildTarget(
            name=main.name,
            input_path=self.config.resolve_path(main.entry),
            output_path=self.config.resolve_path(main.output),
        )

    def discover(self) -> DiscoveryResult:
        """
        Discover all build targets.

        Every source root is listed before any target is produced, so a
        missing root fails the whole discovery.
        """
        result = DiscoveryResult()
        per_package = []
        for plugin in self.config.plugins:
            modules = self.list_modules(plugin)
            result.modules_by_namespace[plugin.namespace] = modules
            per_package.append(self.plugin_targets(plugin, modules))

        main_target = self.main_target()
        if not main_target.input_path.is_file():
            raise PreconditionError(f"Main entry does not exist: {main_target.input_path}")

        # first plugin package, then the main library, then the rest
        if per_package:
            result.targets.extend(per_package[0])
        result.targets.append(main_target)
        for targets in per_package[1:]:
            result.targets.extend(targets)

        self.logger.info(f"Discovered {len(result.targets)} build targets")
        return result
