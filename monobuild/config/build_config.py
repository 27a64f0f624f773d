import yaml
from pathlib import Path
from typing import Optional, Dict, Any, List
from dataclasses import dataclass, field


DEFAULT_DOWNGRADE_COMMAND = [
    "npx", "babel",
    "--no-babelrc",
    "--presets", "@babel/preset-react",
    "--plugins", "@babel/plugin-transform-flow-strip-types",
]

DEFAULT_OPTIMIZE_COMMAND = ["npx", "google-closure-compiler"]


@dataclass
class MainConfig:
    """The main library target"""
    name: str = "Outline"
    package: str = "outline"  # core library name
    global_name: str = "Outline"  # public-facing alias
    entry: str = "packages/outline/src/index.js"
    output: str = "packages/outline/dist/Outline.js"


@dataclass
class PluginPackageConfig:
    """A package whose every top-level source file is built on its own"""
    label: str
    src_dir: str
    dist_dir: str
    namespace: str
    strip: str = ""
    lowercase: bool = False


@dataclass
class ToolsConfig:
    """External command lines for the tool-backed stages"""
    downgrade_command: List[str] = field(default_factory=lambda: list(DEFAULT_DOWNGRADE_COMMAND))
    optimize_command: List[str] = field(default_factory=lambda: list(DEFAULT_OPTIMIZE_COMMAND))


@dataclass
class WatchConfig:
    """Watch mode settings"""
    debounce_seconds: float = 0.1


def _default_plugins() -> List[PluginPackageConfig]:
    return [
        PluginPackageConfig(
            label="Outline Extensions",
            src_dir="packages/outline-extensions/src",
            dist_dir="packages/outline-extensions/dist",
            namespace="outline-extensions",
            strip="Outline",
        ),
        PluginPackageConfig(
            label="Outline React",
            src_dir="packages/outline-react/src",
            dist_dir="packages/outline-react/dist",
            namespace="outline-react",
        ),
    ]


@dataclass
class BuildConfig:
    """Project layout and tool configuration"""
    root: str = "."
    main: MainConfig = field(default_factory=MainConfig)
    plugins: List[PluginPackageConfig] = field(default_factory=_default_plugins)
    framework_externals: List[str] = field(default_factory=lambda: ["react-dom", "react"])
    clean_dir: str = "packages/outline/dist"
    source_suffixes: List[str] = field(default_factory=lambda: [".js"])
    tools: ToolsConfig = field(default_factory=ToolsConfig)
    watch: WatchConfig = field(default_factory=WatchConfig)

    @property
    def root_path(self) -> Path:
        return Path(self.root).resolve()

    def resolve_path(self, relative: str) -> Path:
        """Resolve a configured path against the project root"""
        return (self.root_path / relative).resolve()

    def validate(self) -> List[str]:
        """Return a list of configuration issues (empty when valid)"""
        issues = []
        if not self.main.entry or not self.main.output:
            issues.append("main.entry and main.output are required")
        if not self.main.package:
            issues.append("main.package is required")
        namespaces = [plugin.namespace for plugin in self.plugins]
        for plugin in self.plugins:
            if not plugin.namespace:
                issues.append(f"Plugin package '{plugin.label}' has no namespace")
        duplicates = sorted({ns for ns in namespaces if ns and namespaces.count(ns) > 1})
        if duplicates:
            issues.append(f"Duplicate plugin namespaces: {', '.join(duplicates)}")
        if not self.source_suffixes:
            issues.append("source_suffixes must not be empty")
        return issues

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'BuildConfig':
        """Create BuildConfig from dictionary"""
        defaults = cls()
        plugins = data.get('plugins')
        return cls(
            root=data.get('root', defaults.root),
            main=MainConfig(**data.get('main', {})),
            plugins=[PluginPackageConfig(**p) for p in plugins] if plugins is not None else defaults.plugins,
            framework_externals=list(data.get('framework_externals', defaults.framework_externals)),
            clean_dir=data.get('clean_dir', defaults.clean_dir),
            source_suffixes=list(data.get('source_suffixes', defaults.source_suffixes)),
            tools=ToolsConfig(**data.get('tools', {})),
            watch=WatchConfig(**data.get('watch', {})),
        )

    @classmethod
    def from_yaml(cls, yaml_path: str) -> 'BuildConfig':
        """Load BuildConfig from YAML file"""
        path = Path(yaml_path)
        if not path.exists():
            return cls.default()

        with open(path, 'r') as f:
            data = yaml.safe_load(f)

        config = cls.from_dict(data or {})
        # a relative root is taken relative to the config file
        if not Path(config.root).is_absolute():
            config.root = str((path.parent / config.root).resolve())
        return config

    @classmethod
    def default(cls) -> 'BuildConfig':
        """Return default configuration"""
        return cls()


def load_build_config(config_path: Optional[str] = None) -> BuildConfig:
    """
    Load build configuration from YAML file.
    If no path provided, looks for monobuild.yaml in standard locations.
    """
    if config_path:
        return BuildConfig.from_yaml(config_path)

    search_paths = [
        Path("./monobuild.yaml"),
        Path("./scripts/monobuild.yaml"),
    ]

    for path in search_paths:
        if path.exists():
            return BuildConfig.from_yaml(str(path))

    return BuildConfig.default()
