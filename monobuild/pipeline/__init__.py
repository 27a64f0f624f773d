# Pipeline package initialization
from .base import (
    OutputOptions,
    PipelineSpec,
    PipelineStage,
    ResolvedId,
    StageContext,
    TransformResult,
)
from .pipeline_builder import PipelineBuilder
from .tools import ToolRunner, ToolResult

__all__ = [
    'OutputOptions',
    'PipelineSpec',
    'PipelineStage',
    'ResolvedId',
    'StageContext',
    'TransformResult',
    'PipelineBuilder',
    'ToolRunner',
    'ToolResult',
]
