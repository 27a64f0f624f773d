import re
from pathlib import Path
from typing import Mapping, Optional

from ..base import PipelineStage, StageContext
from ...core.enums import StageType


class RemapStage(PipelineStage):
    """Rewrites quoted external module identifiers to their global names"""

    def __init__(self, name_mapping: Mapping[str, str], logger=None):
        super().__init__(logger)
        self.name_mapping = name_mapping
        keys = sorted(name_mapping, key=len, reverse=True)
        self._pattern = (
            re.compile(r'''(['"])(''' + '|'.join(re.escape(k) for k in keys) + r''')\1''')
            if keys else None
        )

    @property
    def stage_type(self) -> StageType:
        return StageType.REMAP

    def remap(self, code: str) -> str:
        if self._pattern is None:
            return code
        return self._pattern.sub(
            lambda m: f"{m.group(1)}{self.name_mapping[m.group(2)]}{m.group(1)}", code
        )

    async def transform(self, code: str, module_path: Path, context: StageContext) -> Optional[str]:
        return self.remap(code)

    async def render_chunk(self, code: str, context: StageContext) -> Optional[str]:
        return self.remap(code)
