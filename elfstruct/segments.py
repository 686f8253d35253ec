'''
Segments are the loader's view of an ELF file: what must be mapped into
memory and how. Like for the sections, Segment.create() selects the class
from the p_type of the program header.
'''
import logging
from functools import cached_property

from .dynamic import DynamicMixin
from .enum import ElfSegmentType, ElfSegmentFlag, constant_name
from .note import NoteMixin
from .utils import decode_string


class Segment(object):
    '''Base class of the segments, also used for the types without special meaning.'''

    def __init__(self, header, stream, index=None, elf_class=None, endian=None, offset_from_vma=None):
        self.logger = logging.getLogger(f'{self.__module__}.{self.__class__.__name__}')
        self.header = header
        self.stream = stream
        self.index = index
        self.elf_class = elf_class or header.elf_class
        self.endian = endian or header.endian
        self.offset_from_vma = offset_from_vma

    def __repr__(self):
        return '<%s(index=%s, type=%s)>' % (self.__class__.__name__, self.index, self.type_name or self.type)

    @classmethod
    def create(cls, header, stream, **kwargs):
        '''Use a different class according to header.p_type'''
        klass = SEGMENT_TYPES.get(header.p_type, Segment)
        logging.getLogger(__name__).debug('segment with type 0x%x is a %s', header.p_type, klass.__name__)

        return klass(header, stream, **kwargs)

    @property
    def type(self):
        return self.header.p_type

    @property
    def type_name(self):
        return constant_name(ElfSegmentType, self.type)

    @cached_property
    def data(self) -> bytes:
        '''The content of the segment into the file: it can be shorter than
        what is mapped in memory (p_memsz).'''
        return self.stream.read_at(self.header.p_offset, self.header.p_filesz)

    def is_readable(self):
        return bool(self.header.p_flags & ElfSegmentFlag.PF_R.value)

    def is_writable(self):
        return bool(self.header.p_flags & ElfSegmentFlag.PF_W.value)

    def is_executable(self):
        return bool(self.header.p_flags & ElfSegmentFlag.PF_X.value)


class InterpSegment(Segment):

    @property
    def interp_name(self):
        '''Path of the program interpreter, like "/lib64/ld-linux-x86-64.so.2"'''
        data = self.data
        if data.endswith(b'\x00'):
            data = data[:-1]

        return decode_string(data)


class NoteSegment(NoteMixin, Segment):

    @property
    def note_start(self):
        return self.header.p_offset

    @property
    def note_total_size(self):
        return self.header.p_filesz


class DynamicSegment(DynamicMixin, Segment):

    @property
    def tag_start(self):
        return self.header.p_offset


class LoadSegment(Segment):
    '''A segment mapped into memory: it knows how to translate between file
    offsets and virtual addresses.'''

    @property
    def file_head(self):
        return self.header.p_offset

    @property
    def file_tail(self):
        return self.header.p_offset + self.header.p_filesz

    @property
    def mem_head(self):
        return self.header.p_vaddr

    @property
    def mem_tail(self):
        return self.header.p_vaddr + self.header.p_memsz

    @property
    def aligned_vaddr(self):
        '''p_vaddr rounded down to p_align (0 and 1 mean no alignment)'''
        align = max(self.header.p_align, 1)
        return self.header.p_vaddr & ~(align - 1)

    def offset_in(self, offset, size=0):
        return self.file_head <= offset < self.file_tail and offset + size <= self.file_tail

    def offset_to_vma(self, offset):
        return offset - self.header.p_offset + self.header.p_vaddr

    def vma_in(self, vma, size=0):
        return vma >= self.aligned_vaddr and vma + size <= self.header.p_vaddr + self.header.p_filesz

    def vma_to_offset(self, vma):
        return vma - self.header.p_vaddr + self.header.p_offset


SEGMENT_TYPES = {
    ElfSegmentType.PT_INTERP.value: InterpSegment,
    ElfSegmentType.PT_NOTE.value: NoteSegment,
    ElfSegmentType.PT_DYNAMIC.value: DynamicSegment,
    ElfSegmentType.PT_LOAD.value: LoadSegment,
}
