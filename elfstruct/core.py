"""
Core module for the description of the records of the ELF format
"""
import logging
from typing import Tuple, List, Dict

from .fields import Field
from .meta import MetaRecord, Endianess
from .exceptions import UnpackException


class Record(metaclass=MetaRecord):
    """
    Main class that defines a record of the format: the class attributes that are
    Field instances describe, in order, its binary layout.

    A record has no meaning without the class (32 or 64 bits) and the endianess
    of the file it comes from, so both are fixed at construction.

    Once unpacked, the values of the fields are plain attributes of the instance:

        header = SectionHeader.from_stream(stream, 0x40, elf_class=64, endian='little')
        header.sh_type
    """

    def __init__(self, elf_class=64, endian=Endianess.LITTLE_ENDIAN, offset=None, **kwargs):
        self.logger = logging.getLogger(f'{self.__module__}.{self.__class__.__name__}')
        self.elf_class = elf_class
        self.endianess = Endianess(endian)
        self.offset = offset

        for name, field in self.get_fields():
            value = kwargs.pop(name) if name in kwargs else field.value_from_default(elf_class, self.endianess)
            setattr(self, name, value)

        if kwargs:
            raise TypeError(f'{self.__class__.__name__} has no fields named {", ".join(kwargs)}')

    @classmethod
    def from_bytes(cls, raw, elf_class=64, endian=Endianess.LITTLE_ENDIAN, offset=None):
        record = cls(elf_class=elf_class, endian=endian, offset=offset)
        record.unpack_raw(raw)

        return record

    @classmethod
    def from_stream(cls, stream, offset, elf_class=64, endian=Endianess.LITTLE_ENDIAN):
        record = cls(elf_class=elf_class, endian=endian, offset=offset)
        record.unpack(stream)

        return record

    def get_ordered_fields_name(self) -> List[str]:
        return self._meta.fields

    def get_fields(self) -> List[Tuple[str, Field]]:
        '''It returns a list of couples (name, instance) for each field.'''
        return [(_, self._meta.instances[_]) for _ in self.get_ordered_fields_name()]

    def values(self) -> Dict[str, object]:
        return {name: getattr(self, name) for name in self.get_ordered_fields_name()}

    @property
    def endian(self):
        return self.endianess.value

    @property
    def size(self):
        size = 0
        for _, field in self.get_fields():
            size += field.get_size(self.elf_class)

        return size

    @property
    def layout(self) -> Dict[str, Tuple[int, int]]:
        result = {}
        offset = 0
        for name, field in self.get_fields():
            size = field.get_size(self.elf_class)
            result[name] = (offset, size)
            offset += size

        return result

    def __repr__(self):
        msg = []
        for field_name, value in self.values().items():
            msg.append('%s=%s' % (field_name, hex(value) if isinstance(value, int) else repr(value)))
        return '<%s(%s)>' % (self.__class__.__name__, ','.join(msg))

    def __eq__(self, other):
        if not isinstance(other, Record):
            return NotImplemented

        return self.__class__ is other.__class__ and self.values() == other.values()

    __hash__ = None

    def pack(self) -> bytes:
        '''Encode the record with its class and endianess.'''
        value = b''
        for field_name, field in self.get_fields():
            value += field.pack(getattr(self, field_name), self.elf_class, self.endianess)

        return value

    def unpack_raw(self, raw):
        if len(raw) < self.size:
            self.logger.debug('got %d bytes but %s needs %d', len(raw), self.__class__.__name__, self.size)
            raise UnpackException(chain=[self.__class__.__name__])

        cursor = 0
        for field_name, field in self.get_fields():
            size = field.get_size(self.elf_class)
            try:
                value = field.unpack(raw[cursor:cursor + size], self.elf_class, self.endianess)
            except UnpackException as e:
                raise UnpackException(chain=[self.__class__.__name__] + e.chain)

            setattr(self, field_name, value)
            cursor += size

    def unpack(self, stream, offset=None):
        '''Read the record from the stream at the given offset (or the one
        passed at construction).'''
        if offset is not None:
            self.offset = offset

        if self.offset is None:
            raise ValueError(f'offset for record {self.__class__.__name__} is not defined!')

        self.logger.debug('unpacking %s at offset 0x%x', self.__class__.__name__, self.offset)
        self.unpack_raw(stream.read_at(self.offset, self.size))
