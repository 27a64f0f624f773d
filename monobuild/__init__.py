"""
monobuild - batch build orchestrator for multi-package source trees

Main modules:
- core: Data models, enums and exceptions
- config: Build configuration loading
- discovery: Target discovery and external reference table
- pipeline: Stage definitions and the pipeline builder
- bundler: Module graph and CommonJS output
- build: Escalation policy, single-shot/watch dispatch, orchestration
"""

from .core.models import BuildTarget, ModeFlags, ExternalTable
from .config.build_config import BuildConfig, load_build_config
from .pipeline.pipeline_builder import PipelineBuilder
from .build.orchestrator import BuildOrchestrator

__version__ = "1.0.0"
__all__ = [
    'BuildTarget',
    'ModeFlags',
    'ExternalTable',
    'BuildConfig',
    'load_build_config',
    'PipelineBuilder',
    'BuildOrchestrator',
]
