from .build_config import (
    BuildConfig,
    MainConfig,
    PluginPackageConfig,
    ToolsConfig,
    WatchConfig,
    load_build_config,
)

__all__ = [
    'BuildConfig',
    'MainConfig',
    'PluginPackageConfig',
    'ToolsConfig',
    'WatchConfig',
    'load_build_config',
]
