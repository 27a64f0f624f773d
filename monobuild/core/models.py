from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Dict, FrozenSet, Mapping, Optional, Union
from types import MappingProxyType

from .enums import BuildEventType


@dataclass(frozen=True)
class BuildTarget:
    """One (input file, output file) pair to be compiled"""
    name: str
    input_path: Path
    output_path: Path


@dataclass(frozen=True)
class ModeFlags:
    """Invocation flags, captured once at startup"""
    watch: bool = False
    production: bool = False
    library_deployment: bool = False
    clean_first: bool = False


@dataclass(frozen=True)
class ExternalTable:
    """Identifiers left unresolved in output, plus the global-name remapping table"""
    externals: FrozenSet[str]
    name_mapping: Mapping[str, str]

    @classmethod
    def create(cls, externals, name_mapping: Dict[str, str]) -> 'ExternalTable':
        missing = set(name_mapping) - set(externals)
        if missing:
            raise ValueError(f"Mapped identifiers are not external: {sorted(missing)}")
        return cls(
            externals=frozenset(externals),
            name_mapping=MappingProxyType(dict(name_mapping)),
        )

    def is_external(self, module_id: str) -> bool:
        return module_id in self.externals


@dataclass(frozen=True)
class ClassifiedWarning:
    """Warning raised by the bundler core, carrying a structured code"""
    code: str
    message: str


@dataclass(frozen=True)
class UnclassifiedWarning:
    """Warning raised by an individual pipeline stage"""
    message: str
    stage: Optional[str] = None


BuildWarning = Union[ClassifiedWarning, UnclassifiedWarning]


@dataclass
class BuildEvent:
    """Lifecycle event emitted by a watcher for one build cycle"""
    type: BuildEventType
    target: BuildTarget
    error: Optional[BaseException] = None
    duration_ms: Optional[float] = None
    created_at: datetime = field(default_factory=datetime.now)
