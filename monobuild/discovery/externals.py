"""
Computes the external module identifiers and the global-name mapping.
"""
import logging
from typing import Dict, List

from ..config.build_config import BuildConfig, PluginPackageConfig
from ..core.models import ExternalTable


def external_name(plugin: PluginPackageConfig, module: str) -> str:
    """External identifier of a plugin module: namespace prefix plus the stripped base name"""
    name = module.replace(plugin.strip, '') if plugin.strip else module
    if plugin.lowercase:
        name = name.lower()
    return f"{plugin.namespace}/{name}"


class ExternalTableBuilder:
    """Builds the process-wide ExternalTable from discovered plugin modules"""

    def __init__(self, config: BuildConfig):
        self.config = config
        self.logger = logging.getLogger(__name__)

    def base_externals(self) -> List[str]:
        main = self.config.main
        return [
            main.package,
            main.global_name,
            *[plugin.namespace for plugin in self.config.plugins],
            *self.config.framework_externals,
        ]

    def build(self, modules_by_namespace: Dict[str, List[str]]) -> ExternalTable:
        main = self.config.main
        name_mapping = {main.package: main.global_name}
        plugin_externals = []

        for plugin in self.config.plugins:
            for module in modules_by_namespace.get(plugin.namespace, []):
                external = external_name(plugin, module)
                name_mapping[external] = module
                plugin_externals.append(external)

        # mapped global names stay external once references are rewritten to them
        externals = self.base_externals() + plugin_externals + list(name_mapping.values())
        table = ExternalTable.create(externals, name_mapping)
        self.logger.debug(
            f"External table: {len(table.externals)} externals, {len(table.name_mapping)} mappings"
        )
        return table
