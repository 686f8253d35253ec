"""
# elfstruct: lazy reader for ELF files.

An ELF file can be big and usually we are interested only in a small
part of it, so the approach here is to read the minimum:

 1. opening a file reads only the identification bytes (magic, class and endianess)
 2. the header, the sections and the segments are decoded the first time
    they are accessed and then cached
 3. the entities inside the sections and the segments (symbols, relocations,
    dynamic tags, notes) are decoded the same way

Every record is described declaratively (see core.Record) and decoded for the
class (32 or 64 bits) and the endianess of the file it comes from.
"""
from .elffile import ElfFile
from .exceptions import (
    ElfStructException,
    UnpackException,
    FormatException,
    MagicException,
    ElfClassException,
    EndianessException,
    ConstantException,
)
from .lazy import LazyArray
from .streams import Stream

__all__ = [
    'ElfFile',
    'LazyArray',
    'Stream',
    'ElfStructException',
    'UnpackException',
    'FormatException',
    'MagicException',
    'ElfClassException',
    'EndianessException',
    'ConstantException',
]
