"""
Target discovery and external reference computation.
"""

from .scanner import TargetScanner, DiscoveryResult
from .externals import ExternalTableBuilder, external_name

__all__ = [
    'TargetScanner',
    'DiscoveryResult',
    'ExternalTableBuilder',
    'external_name',
]
