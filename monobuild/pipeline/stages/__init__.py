# Pipeline stages package initialization
from .resolve import ResolveStage
from .downgrade import DowngradeStage
from .interop import InteropStage
from .remap import RemapStage
from .optimize import OptimizeStage, CLOSURE_OPTIONS
from .banner import BannerStage, LICENSE_BANNER

__all__ = [
    'ResolveStage',
    'DowngradeStage',
    'InteropStage',
    'RemapStage',
    'OptimizeStage',
    'CLOSURE_OPTIONS',
    'BannerStage',
    'LICENSE_BANNER',
]
