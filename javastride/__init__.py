"""
javastride - Java to Stride source converter.
"""

from .converter import JavaStrideConverter
from .diagnostics import (
    ConversionError,
    ConversionWarning,
    ParseFailure,
    UnsupportedFeature,
    UnsupportedModifier,
)
from .expression import Expression
from .frontend import ConversionResult, JavaContext, convert, convert_file

__version__ = "0.1.0"

__all__ = [
    'ConversionError',
    'ConversionResult',
    'ConversionWarning',
    'Expression',
    'JavaContext',
    'JavaStrideConverter',
    'ParseFailure',
    'UnsupportedFeature',
    'UnsupportedModifier',
    'convert',
    'convert_file',
]
