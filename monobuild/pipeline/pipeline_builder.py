import logging
from typing import List, Optional

from .base import OutputOptions, PipelineSpec, PipelineStage
from .stages import BannerStage, DowngradeStage, InteropStage, OptimizeStage, RemapStage, ResolveStage
from .tools import ToolRunner
from ..config.build_config import ToolsConfig
from ..core.models import BuildTarget, ExternalTable, ModeFlags


class PipelineBuilder:
    """Assembles the ordered stage list for a target from the mode flags"""

    def __init__(self, external_table: ExternalTable, flags: ModeFlags,
                 tools: Optional[ToolsConfig] = None, runner: Optional[ToolRunner] = None,
                 logger: Optional[logging.Logger] = None):
        self.external_table = external_table
        self.flags = flags
        self.tools = tools or ToolsConfig()
        self.runner = runner or ToolRunner()
        self.logger = logger or logging.getLogger(__name__)

    def build_stages(self) -> List[PipelineStage]:
        """Build a fresh stage list; stages are never shared between targets"""
        stages: List[PipelineStage] = [
            ResolveStage(self.external_table),
            DowngradeStage(self.tools.downgrade_command, self.runner),
            InteropStage(),
        ]
        if self.flags.library_deployment:
            stages.append(RemapStage(self.external_table.name_mapping))
        if self.flags.production:
            stages.append(OptimizeStage(self.tools.optimize_command, self.runner))
        if self.flags.library_deployment:
            stages.append(BannerStage())
        return stages

    def build(self, target: BuildTarget) -> PipelineSpec:
        spec = PipelineSpec(
            target=target,
            is_external=self.external_table.is_external,
            stages=tuple(self.build_stages()),
            output=OutputOptions(file=target.output_path),
        )
        self.logger.debug(
            f"Pipeline for {target.name}: {[t.value for t in spec.stage_types]}"
        )
        return spec
