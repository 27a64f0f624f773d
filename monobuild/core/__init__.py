from .enums import StageType, WarningCode, BuildEventType, WarningDisposition
from .exceptions import MonobuildError, PreconditionError, BuildError, FatalWarningError
from .models import (
    BuildTarget,
    ModeFlags,
    ExternalTable,
    ClassifiedWarning,
    UnclassifiedWarning,
    BuildWarning,
    BuildEvent,
)

__all__ = [
    'StageType',
    'WarningCode',
    'BuildEventType',
    'WarningDisposition',
    'MonobuildError',
    'PreconditionError',
    'BuildError',
    'FatalWarningError',
    'BuildTarget',
    'ModeFlags',
    'ExternalTable',
    'ClassifiedWarning',
    'UnclassifiedWarning',
    'BuildWarning',
    'BuildEvent',
]
