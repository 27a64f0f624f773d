import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Tuple, Union

from ..core.enums import StageType
from ..core.models import BuildTarget, BuildWarning, UnclassifiedWarning


@dataclass(frozen=True)
class ResolvedId:
    """Outcome of resolving an import specifier"""
    id: str
    external: bool = False


@dataclass
class TransformResult:
    """Transformed module source plus metadata for the bundler"""
    code: str
    meta: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class OutputOptions:
    """Shape of the single output file; identical for every target"""
    file: Path
    format: str = "cjs"
    freeze: bool = False
    interop: bool = False
    es_module: bool = False
    external_live_bindings: bool = False
    exports: str = "auto"


class StageContext:
    """Handed to stage hooks so they can report stage-local warnings"""

    def __init__(self, target: BuildTarget, on_warning: Callable[[BuildWarning], None]):
        self.target = target
        self._on_warning = on_warning

    def warn(self, message: str, stage: Optional[str] = None) -> None:
        self._on_warning(UnclassifiedWarning(message=message, stage=stage))


class PipelineStage(ABC):
    """
    Base class for all pipeline stages.

    Stages hook into the bundler at three points; every hook defaults to a
    pass-through (returning None).
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(f"{__name__}.{self.stage_type.value}")

    @property
    @abstractmethod
    def stage_type(self) -> StageType:
        """Which fixed pipeline slot this stage occupies"""

    @property
    def name(self) -> str:
        return self.stage_type.value

    async def resolve_id(self, source: str, importer: Optional[Path]) -> Optional[ResolvedId]:
        """Resolve an import specifier, or None to defer to later stages"""
        return None

    async def transform(self, code: str, module_path: Path,
                        context: StageContext) -> Optional[Union[str, TransformResult]]:
        """Transform one module's source"""
        return None

    async def render_chunk(self, code: str, context: StageContext) -> Optional[str]:
        """Transform the final rendered output"""
        return None


@dataclass(frozen=True)
class PipelineSpec:
    """Everything needed to compile one target"""
    target: BuildTarget
    is_external: Callable[[str], bool]
    stages: Tuple[PipelineStage, ...]
    output: OutputOptions

    @property
    def stage_types(self) -> Tuple[StageType, ...]:
        return tuple(stage.stage_type for stage in self.stages)
