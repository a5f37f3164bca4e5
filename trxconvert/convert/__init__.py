"""TRX to JUnit conversion pipeline: reader, normalizer and writer."""

from .reader import TrxReader, parse
from .normalizer import Normalizer, normalize
from .writer import JUnitWriter, WriteResult, output_directory, write

__all__ = [
    'TrxReader',
    'parse',
    'Normalizer',
    'normalize',
    'JUnitWriter',
    'WriteResult',
    'output_directory',
    'write'
]
