from typing import List, Optional

from ..base import PipelineStage, StageContext
from ..tools import ToolRunner
from ...core.enums import StageType


# fixed and conservative: no type-driven or usage-driven optimization
CLOSURE_OPTIONS = {
    'compilation_level': 'SIMPLE',
    'language_in': 'ECMASCRIPT_2018',
    'language_out': 'ECMASCRIPT_2018',
    'env': 'CUSTOM',
    'warning_level': 'QUIET',
    'apply_input_source_maps': False,
    'use_types_for_optimization': False,
    'process_common_js_modules': False,
    'rewrite_polyfills': False,
    'inject_libraries': False,
}


def closure_flags() -> List[str]:
    flags = []
    for key, value in CLOSURE_OPTIONS.items():
        if isinstance(value, bool):
            value = 'true' if value else 'false'
        flags.append(f"--{key}={value}")
    return flags


class OptimizeStage(PipelineStage):
    """Minifies the rendered output with the closure compiler"""

    def __init__(self, command: List[str], runner: Optional[ToolRunner] = None, logger=None):
        super().__init__(logger)
        self.command = list(command)
        self.runner = runner or ToolRunner()

    @property
    def stage_type(self) -> StageType:
        return StageType.OPTIMIZE

    async def render_chunk(self, code: str, context: StageContext) -> Optional[str]:
        result = await self.runner.run(self.command + closure_flags(), code)
        if result.stderr.strip():
            context.warn(result.stderr.strip(), stage=self.name)
        return result.stdout
