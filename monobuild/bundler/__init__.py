"""
In-process bundler: module graph, ES import/export scanning, CommonJS rendering.
"""

from .bundler import Bundler, BundleResult, ModuleRecord
from .parser import parse_module, ParsedModule

__all__ = [
    'Bundler',
    'BundleResult',
    'ModuleRecord',
    'parse_module',
    'ParsedModule',
]
