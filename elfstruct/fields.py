"""
A Field is "fundamental" datatype from the format point of view, something directly
packable/unpackable from a slice of raw bytes.

The fields of ELF are special since their size depends on the class (32 or 64 bits)
of the file, so every method takes the class and the endianess explicitly.
"""
import logging
import struct

from .exceptions import UnpackException, ElfClassException
from .meta import FieldBase


class Field(FieldBase):
    """Base class to subclass from"""

    def __init__(self, default=None):
        super().__init__()
        self.logger = logging.getLogger(__name__)
        self.name = None
        self.default = default

    def __repr__(self):
        return '<%s(%s)>' % (self.__class__.__name__, self.name)

    def value_from_default(self, elf_class, endianess):
        return self.default

    def get_size(self, elf_class):
        raise NotImplementedError(f"method {self.__class__.__name__}.get_size() not implemented")

    def pack(self, value, elf_class, endianess) -> bytes:
        raise NotImplementedError(f"method {self.__class__.__name__}.pack() not implemented")

    def unpack(self, raw, elf_class, endianess):
        raise NotImplementedError(f"method {self.__class__.__name__}.unpack() not implemented")


class StructField(Field):
    """
    Simplest of the fields: mimic the behaviour of the struct module packing/unpacking
    integers to/from bytes.
    """

    def __init__(self, format, default=0, **kw):
        self.format = format
        super().__init__(default=default, **kw)

    def get_format(self, elf_class):
        return self.format

    def get_size(self, elf_class):
        return struct.calcsize('<%s' % self.get_format(elf_class))

    def pack(self, value, elf_class, endianess):
        fmt = '%s%s' % (endianess.prefix, self.get_format(elf_class))
        try:
            return struct.pack(fmt, value)
        except struct.error as e:
            self.logger.error('cannot pack %r into field \'%s\': %s', value, self.name, e)
            raise ValueError(f'value {value!r} doesn\'t fit field \'{self.name}\' ({fmt})') from e

    def unpack(self, raw, elf_class, endianess):
        fmt = '%s%s' % (endianess.prefix, self.get_format(elf_class))
        try:
            return struct.unpack(fmt, raw)[0]
        except struct.error as e:
            self.logger.error(e)
            raise UnpackException(chain=[self.name])


class StringField(StructField):
    """Represent a contiguous chunk of bytes with fixed length."""

    def __init__(self, n, **kw):
        self.length = n
        kw.setdefault('default', b'\x00' * n)
        super().__init__('%ds' % n, **kw)

    def pack(self, value, elf_class, endianess):
        if len(value) != self.length:
            raise ValueError(f'field \'{self.name}\' can only accept binary strings of length {self.length}')

        return super().pack(value, elf_class, endianess)


class RecordField(Field):
    """Embed a record inside another one (like the identification inside the ELF header)."""

    def __init__(self, record_cls, **kw):
        self.record_cls = record_cls
        super().__init__(**kw)

    def value_from_default(self, elf_class, endianess):
        return self.record_cls(elf_class=elf_class, endian=endianess)

    def get_size(self, elf_class):
        return self.record_cls(elf_class=elf_class).size

    def pack(self, value, elf_class, endianess):
        return value.pack()

    def unpack(self, raw, elf_class, endianess):
        return self.record_cls.from_bytes(raw, elf_class=elf_class, endian=endianess)


class Elf_DataType(StructField):
    '''Wrapper for all the datatype that resolves internally to the EI_CLASS'''

    MAP_CLASS_TYPE = {}

    def __init__(self, **kwargs):
        super().__init__('I', **kwargs)

    def get_format(self, elf_class):
        try:
            return self.MAP_CLASS_TYPE[elf_class]
        except KeyError:
            self.logger.error('ELF class %r has not a value useful', elf_class)
            raise ElfClassException(f'Invalid ELF class {elf_class!r}')


class Elf_Addr(Elf_DataType):
    '''Unsigned program address'''

    MAP_CLASS_TYPE = {
        32: 'I',
        64: 'Q',
    }


class Elf_Off(Elf_DataType):
    '''Unsigned file offset'''

    MAP_CLASS_TYPE = {
        32: 'I',
        64: 'Q',
    }


class Elf_Half(Elf_DataType):

    MAP_CLASS_TYPE = {
        32: 'H',
        64: 'H',
    }


class Elf_Word(Elf_DataType):

    MAP_CLASS_TYPE = {
        32: 'I',
        64: 'I',
    }


class Elf_Sword(Elf_DataType):

    MAP_CLASS_TYPE = {
        32: 'i',
        64: 'i',
    }


class Elf_Xword(Elf_DataType):
    '''Elf_Word on 32 bits'''

    MAP_CLASS_TYPE = {
        32: 'I',
        64: 'Q',
    }


class Elf_Sxword(Elf_DataType):

    MAP_CLASS_TYPE = {
        32: 'i',  # This mean Elf_Sword for 32
        64: 'q',
    }
