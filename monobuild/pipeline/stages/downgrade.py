from pathlib import Path
from typing import List, Optional

from ..base import PipelineStage, StageContext
from ..tools import ToolRunner
from ...core.enums import StageType


class DowngradeStage(PipelineStage):
    """Strips JSX and Flow type annotations through the configured compiler command"""

    def __init__(self, command: List[str], runner: Optional[ToolRunner] = None, logger=None):
        super().__init__(logger)
        self.command = list(command)
        self.runner = runner or ToolRunner()

    @property
    def stage_type(self) -> StageType:
        return StageType.DOWNGRADE

    async def transform(self, code: str, module_path: Path, context: StageContext) -> Optional[str]:
        if 'node_modules' in module_path.parts:
            return None
        result = await self.runner.run(self.command + ['--filename', str(module_path)], code)
        if result.stderr.strip():
            context.warn(result.stderr.strip(), stage=self.name)
        return result.stdout
