"""
Build execution: escalation policy, single-shot and watch dispatch, orchestration.
"""

from .escalation import EscalationPolicy, EXEMPT_CODES
from .dispatcher import ModeDispatcher
from .watcher import TargetWatcher
from .reporter import BuildReporter
from .orchestrator import BuildOrchestrator

__all__ = [
    'EscalationPolicy',
    'EXEMPT_CODES',
    'ModeDispatcher',
    'TargetWatcher',
    'BuildReporter',
    'BuildOrchestrator',
]
