"""
Exception hierarchy for monobuild.
"""
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import ClassifiedWarning


class MonobuildError(Exception):
    """Base class for all monobuild errors"""


class PreconditionError(MonobuildError):
    """Startup precondition failed (missing source root, invalid config)"""


class BuildError(MonobuildError):
    """Unrecoverable compiler error for a single target"""

    def __init__(self, message: str, module_path: str = None):
        super().__init__(message)
        self.module_path = module_path


class FatalWarningError(MonobuildError):
    """A classified warning that aborts the whole process"""

    def __init__(self, warning: 'ClassifiedWarning', target_name: str = None):
        super().__init__(warning.message)
        self.warning = warning
        self.target_name = target_name
