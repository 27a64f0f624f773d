import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, FrozenSet, List, Optional, Sequence, Set, Tuple

from .parser import ModuleSyntaxError, ParsedModule, parse_module
from .renderer import ChunkRenderer
from ..core.enums import WarningCode
from ..core.exceptions import BuildError
from ..core.models import BuildTarget, BuildWarning, ClassifiedWarning
from ..pipeline.base import (
    OutputOptions,
    PipelineSpec,
    PipelineStage,
    ResolvedId,
    StageContext,
    TransformResult,
)
from ..utils.fs import read_text, write_text


@dataclass
class ModuleRecord:
    """One internal module of the graph"""
    index: int
    path: Path
    parsed: ParsedModule
    commonjs: bool = False
    resolved: Dict[str, ResolvedId] = field(default_factory=dict)

    def internal_dependencies(self) -> List[str]:
        return [r.id for r in self.resolved.values() if not r.external]


@dataclass
class BundleResult:
    code: str
    watch_files: FrozenSet[Path]
    module_count: int


def _is_relative(source: str) -> bool:
    return source.startswith('./') or source.startswith('../') or source.startswith('/')


class Bundler:
    """
    Compiles one entry point into a single CommonJS file.

    Warnings go to `on_warning`: bundler-level warnings carry a code
    (ClassifiedWarning), stage warnings do not (UnclassifiedWarning).
    Unrecoverable problems raise BuildError.
    """

    def __init__(self, entry: Path, is_external: Callable[[str], bool],
                 stages: Sequence[PipelineStage], output: OutputOptions,
                 on_warning: Callable[[BuildWarning], None],
                 target: Optional[BuildTarget] = None, logger: Optional[logging.Logger] = None):
        self.entry = Path(entry)
        self.is_external = is_external
        self.stages = list(stages)
        self.output = output
        self.on_warning = on_warning
        self.target = target or BuildTarget(name=self.entry.name, input_path=self.entry,
                                            output_path=output.file)
        self.context = StageContext(self.target, on_warning)
        self.logger = logger or logging.getLogger(__name__)
        self.modules: Dict[str, ModuleRecord] = {}

    @classmethod
    def from_spec(cls, spec: PipelineSpec, on_warning: Callable[[BuildWarning], None]) -> 'Bundler':
        return cls(
            entry=spec.target.input_path,
            is_external=spec.is_external,
            stages=spec.stages,
            output=spec.output,
            on_warning=on_warning,
            target=spec.target,
        )

    def warn(self, code: WarningCode, message: str) -> None:
        self.on_warning(ClassifiedWarning(code=code.value, message=message))

    def _label(self, path) -> str:
        return os.path.relpath(str(path), str(self.entry.parent))

    async def resolve(self, source: str, importer: Path) -> ResolvedId:
        if self.is_external(source):
            return ResolvedId(id=source, external=True)
        for stage in self.stages:
            resolved = await stage.resolve_id(source, importer)
            if resolved is not None:
                return resolved
        if _is_relative(source):
            raise BuildError(f"Could not resolve '{source}' from {importer}", str(importer))
        self.warn(
            WarningCode.UNRESOLVED_IMPORT,
            f"'{source}' is imported by {self._label(importer)}, but could not be resolved "
            f"- treating it as an external dependency",
        )
        return ResolvedId(id=source, external=True)

    async def load_module(self, path: Path) -> ModuleRecord:
        try:
            code = await read_text(path)
        except (OSError, UnicodeDecodeError) as e:
            raise BuildError(f"Could not load {path}: {e}", str(path)) from e

        meta = {}
        for stage in self.stages:
            transformed = await stage.transform(code, path, self.context)
            if transformed is None:
                continue
            if isinstance(transformed, TransformResult):
                code = transformed.code
                meta.update(transformed.meta)
            else:
                code = transformed

        try:
            parsed = parse_module(code)
        except ModuleSyntaxError as e:
            raise BuildError(f"Could not parse {path}: {e}", str(path)) from e

        record = ModuleRecord(
            index=len(self.modules),
            path=path,
            parsed=parsed,
            commonjs=bool(meta.get('commonjs')),
        )
        self.modules[str(path)] = record
        for source in record.parsed.sources:
            record.resolved[source] = await self.resolve(source, path)
        return record

    async def load_graph(self) -> List[ModuleRecord]:
        queue = [self.entry.resolve()]
        while queue:
            path = queue.pop(0)
            if str(path) in self.modules:
                continue
            record = await self.load_module(path)
            queue.extend(Path(dep) for dep in record.internal_dependencies())
        return sorted(self.modules.values(), key=lambda r: r.index)

    def find_cycles(self) -> List[List[str]]:
        """Return each import cycle once, as a list of module paths"""
        cycles = []
        state: Dict[str, int] = {}
        stack: List[str] = []

        def visit(path: str):
            state[path] = 1
            stack.append(path)
            for dep in self.modules[path].internal_dependencies():
                if state.get(dep) == 1:
                    cycles.append(stack[stack.index(dep):] + [dep])
                elif dep not in state:
                    visit(dep)
            stack.pop()
            state[path] = 2

        for record in sorted(self.modules.values(), key=lambda r: r.index):
            if str(record.path) not in state:
                visit(str(record.path))
        return cycles

    def collect_exports(self) -> Tuple[Dict[int, Set[str]], Dict[int, List[Tuple[str, str]]], Set[int]]:
        """
        Compute every module's export names.

        Returns the names per module index, the names each module receives
        through `export *` from internal modules, and the indexes whose export
        set is not statically known (star re-export of an external).
        """
        names: Dict[int, Set[str]] = {}
        stars: Dict[int, List[Tuple[str, str]]] = {}
        dynamic: Set[int] = set()

        def exports_of(record: ModuleRecord, visiting: Set[int]) -> Set[str]:
            if record.index in names:
                return names[record.index]
            if record.index in visiting:
                return set()
            visiting = visiting | {record.index}

            own = set(record.parsed.local_exports)
            for decl in record.parsed.reexports:
                own.update(exported for _, exported in decl.named)
                if decl.star_as:
                    own.add(decl.star_as)

            providers: Dict[str, str] = {}
            conflicts: Set[str] = set()
            for decl in record.parsed.reexports:
                if not decl.star:
                    continue
                resolved = record.resolved[decl.source]
                if resolved.external:
                    dynamic.add(record.index)
                    continue
                dep = self.modules[resolved.id]
                if dep.index in dynamic:
                    dynamic.add(record.index)
                for name in exports_of(dep, visiting) - {'default'}:
                    if name in own:
                        continue
                    if name in providers and providers[name] != decl.source:
                        conflicts.add(name)
                        self.warn(
                            WarningCode.NAMESPACE_CONFLICT,
                            f"Conflicting namespaces: {self._label(record.path)} re-exports '{name}' "
                            f"from both {providers[name]} and {decl.source} (will be ignored)",
                        )
                    else:
                        providers[name] = decl.source

            star_names = [(name, source) for name, source in providers.items() if name not in conflicts]
            stars[record.index] = star_names
            names[record.index] = own | {name for name, _ in star_names}
            return names[record.index]

        for record in self.modules.values():
            exports_of(record, set())
        return names, stars, dynamic

    def check_imports(self, names: Dict[int, Set[str]], dynamic: Set[int]) -> None:
        for record in self.modules.values():
            for decl in [*record.parsed.imports, *record.parsed.reexports]:
                resolved = record.resolved[decl.source]
                if resolved.external:
                    continue
                dep = self.modules[resolved.id]
                if dep.commonjs or dep.index in dynamic:
                    continue
                wanted = [imported for imported, _ in decl.named]
                if getattr(decl, 'default', None):
                    wanted.append('default')
                for imported in wanted:
                    if imported not in names[dep.index]:
                        self.warn(
                            WarningCode.MISSING_EXPORT,
                            f"'{imported}' is not exported by {self._label(dep.path)}, "
                            f"imported by {self._label(record.path)}",
                        )

    def export_mode(self, entry_names: Set[str], dynamic: bool = False) -> str:
        """
        Pick how the entry's exports become `module.exports`.

        A `dynamic` entry star re-exports an external, so its names are only
        known at runtime and it always uses the named mode.
        """
        if self.output.exports != 'auto':
            return self.output.exports
        if not entry_names and not dynamic:
            return 'none'
        if entry_names == {'default'} and not dynamic:
            return 'default'
        if 'default' in entry_names:
            self.warn(
                WarningCode.MIXED_EXPORTS,
                f"Entry module {self.entry.name} is using named and default exports together; "
                f"consumers will have to use `.default` to access the default export",
            )
        return 'named'

    async def generate(self) -> BundleResult:
        modules = await self.load_graph()

        for cycle in self.find_cycles():
            self.warn(
                WarningCode.CIRCULAR_DEPENDENCY,
                "Circular dependency: " + " -> ".join(self._label(p) for p in cycle),
            )

        names, stars, dynamic = self.collect_exports()
        self.check_imports(names, dynamic)

        renderer = ChunkRenderer(
            modules,
            star_exports=stars,
            export_mode=self.export_mode(names[0], 0 in dynamic),
            base_dir=str(self.entry.parent),
        )
        code = renderer.render()
        for stage in self.stages:
            rendered = await stage.render_chunk(code, self.context)
            if rendered is not None:
                code = rendered

        self.logger.debug(f"Bundled {len(modules)} modules for {self.target.name}")
        return BundleResult(
            code=code,
            watch_files=frozenset(record.path for record in modules),
            module_count=len(modules),
        )

    async def write(self, result: BundleResult) -> None:
        """Write the bundle to the output file, replacing any existing file"""
        await write_text(self.output.file, result.code)
