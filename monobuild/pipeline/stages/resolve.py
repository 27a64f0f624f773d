import json
from pathlib import Path
from typing import List, Optional

from ..base import PipelineStage, ResolvedId
from ...core.enums import StageType
from ...core.models import ExternalTable


class ResolveStage(PipelineStage):
    """Resolves relative and node_modules imports; externals pass through untouched"""

    EXTENSIONS = ['.js', '.jsx', '.json']

    def __init__(self, external_table: ExternalTable, logger=None):
        super().__init__(logger)
        self.external_table = external_table

    @property
    def stage_type(self) -> StageType:
        return StageType.RESOLVE

    async def resolve_id(self, source: str, importer: Optional[Path]) -> Optional[ResolvedId]:
        if self.external_table.is_external(source):
            return ResolvedId(id=source, external=True)

        if source.startswith('./') or source.startswith('../') or source.startswith('/'):
            base = importer.parent if importer else Path.cwd()
            resolved = self._resolve_file(base / source)
        else:
            resolved = self._resolve_package(source, importer)

        if resolved is None:
            return None
        return ResolvedId(id=str(resolved))

    def _candidates(self, path: Path) -> List[Path]:
        candidates = [path]
        candidates.extend(path.with_name(path.name + ext) for ext in self.EXTENSIONS)
        candidates.extend(path / f"index{ext}" for ext in self.EXTENSIONS)
        return candidates

    def _resolve_file(self, path: Path) -> Optional[Path]:
        for candidate in self._candidates(path):
            if candidate.is_file():
                return candidate.resolve()
        return None

    def _resolve_package(self, source: str, importer: Optional[Path]) -> Optional[Path]:
        """Look the package up in node_modules, walking up from the importer"""
        start = importer.parent if importer else Path.cwd()
        for directory in [start, *start.parents]:
            package_dir = directory / 'node_modules' / source
            manifest = package_dir / 'package.json'
            if manifest.is_file():
                with open(manifest, 'r') as f:
                    main = json.load(f).get('main')
                if main:
                    resolved = self._resolve_file(package_dir / main)
                    if resolved:
                        return resolved
            resolved = self._resolve_file(package_dir)
            if resolved:
                return resolved
        return None
