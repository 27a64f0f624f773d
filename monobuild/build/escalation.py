"""
Decides which compilation warnings abort the process.
"""
import logging
from typing import Optional

import click

from ..core.enums import WarningCode, WarningDisposition
from ..core.exceptions import FatalWarningError
from ..core.models import BuildTarget, BuildWarning, ClassifiedWarning, UnclassifiedWarning


EXEMPT_CODES = frozenset({WarningCode.CIRCULAR_DEPENDENCY.value})


class EscalationPolicy:
    """
    Classifies warnings raised while compiling one target.

    Bundler warnings carry a code and usually mean corrupted output (export
    name clashes, unresolved imports), so they are fatal. Circular
    dependencies are expected and dropped. Stage warnings are only logged.
    The policy keeps no state between warnings or build cycles.
    """

    def __init__(self, target: BuildTarget, logger: Optional[logging.Logger] = None):
        self.target = target
        self.logger = logger or logging.getLogger(__name__)

    @staticmethod
    def classify(warning: BuildWarning) -> WarningDisposition:
        if isinstance(warning, ClassifiedWarning):
            if warning.code in EXEMPT_CODES:
                return WarningDisposition.SUPPRESSED
            return WarningDisposition.FATAL
        if isinstance(warning, UnclassifiedWarning):
            return WarningDisposition.INFORMATIONAL
        raise TypeError(f"Unknown warning type: {type(warning).__name__}")

    def handle(self, warning: BuildWarning) -> None:
        """
        Apply the policy to one warning.

        Raises:
            FatalWarningError: For classified warnings outside the exempt codes,
                after the message has been written to stderr
        """
        disposition = self.classify(warning)
        if disposition is WarningDisposition.SUPPRESSED:
            return
        if disposition is WarningDisposition.FATAL:
            click.echo(err=True)
            click.echo(warning.message, err=True)
            click.echo(err=True)
            raise FatalWarningError(warning, self.target.name)
        self.logger.warning(f"[{self.target.name}] {warning.message}")

    __call__ = handle
