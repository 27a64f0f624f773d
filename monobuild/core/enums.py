from enum import Enum


class StageType(str, Enum):
    """Pipeline stages, in their fixed relative order"""
    RESOLVE = "resolve"
    DOWNGRADE = "downgrade"
    INTEROP = "interop"
    REMAP = "remap"
    OPTIMIZE = "optimize"
    BANNER = "banner"


STAGE_ORDER = [
    StageType.RESOLVE,
    StageType.DOWNGRADE,
    StageType.INTEROP,
    StageType.REMAP,
    StageType.OPTIMIZE,
    StageType.BANNER,
]


class WarningCode(str, Enum):
    """Codes attached to warnings raised by the bundler itself"""
    CIRCULAR_DEPENDENCY = "CIRCULAR_DEPENDENCY"
    UNRESOLVED_IMPORT = "UNRESOLVED_IMPORT"
    MISSING_EXPORT = "MISSING_EXPORT"
    MIXED_EXPORTS = "MIXED_EXPORTS"
    NAMESPACE_CONFLICT = "NAMESPACE_CONFLICT"


class BuildEventType(str, Enum):
    STARTED = "started"
    COMPLETED = "completed"
    FAILED = "failed"


class WarningDisposition(str, Enum):
    """What the escalation policy does with a warning"""
    SUPPRESSED = "suppressed"
    FATAL = "fatal"
    INFORMATIONAL = "informational"
