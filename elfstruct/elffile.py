'''
# ELF format

There are two main aspects of that this format take into consideration

 1. how to statically link (sections)
 2. how to load a program in memory and to execute it (segments)

Reference to <http://www.sco.com/developers/gabi/latest/contents.html>.

Nothing is read until it's needed and nothing is read twice: the header, every
section and every segment are created on first access and then cached.
'''
import logging
from functools import cached_property

from .enum import (
    ElfMachine,
    ElfSectionType,
    ElfSegmentType,
    ElfType,
    MACHINE_NAMES,
    constant_name,
    to_constant,
)
from .exceptions import MagicException, ElfClassException, EndianessException
from .lazy import LazyArray
from .note import NoteMixin
from .sections import Section
from .segments import Segment, LoadSegment
from .streams import Stream
from .structures import ELFMAG, ElfHeader, SectionHeader, ProgramHeader


logger = logging.getLogger(__name__)

EI_CLASS_MAP = {
    1: 32,
    2: 64,
}

EI_DATA_MAP = {
    1: 'little',
    2: 'big',
}

BUILD_ID_SECTION = '.note.gnu.build-id'


class ElfFile(object):
    '''The main class: pass it a path, some bytes or an opened binary file

        elf = ElfFile(open('/bin/cat', 'rb'))
        elf.section_by_name('.text')

    An already opened file is not closed by us: the caller keeps its ownership.
    '''

    def __init__(self, stream):
        self.logger = logging.getLogger(f'{self.__module__}.{self.__class__.__name__}')
        self.stream = stream if isinstance(stream, Stream) else Stream(stream)
        self._section_name_map = {}
        self.identify()

    @classmethod
    def open(cls, stream):
        return cls(stream)

    def __repr__(self):
        return '<%s(elf_class=%d, endian=%s)>' % (self.__class__.__name__, self.elf_class, self.endian)

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()

    def close(self):
        self.stream.close()

    def identify(self):
        '''Fetch the most basic information, the only bytes validated here are
        the magic, the class and the endianess.'''
        magic = self.stream.read_at(0, 4)
        if magic != ELFMAG:
            raise MagicException(f'Invalid magic number {magic!r}')

        ei_class = self.stream.read_at(4, 1)
        self.elf_class = EI_CLASS_MAP.get(ei_class[0]) if ei_class else None
        if self.elf_class is None:
            raise ElfClassException(f'Invalid EI_CLASS {ei_class!r}')

        ei_data = self.stream.read_at(5, 1)
        self.endian = EI_DATA_MAP.get(ei_data[0]) if ei_data else None
        if self.endian is None:
            raise EndianessException(f'Invalid EI_DATA {ei_data!r}')

        self.logger.debug('identified ELF%d %s endian', self.elf_class, self.endian)

    @cached_property
    def header(self) -> ElfHeader:
        return ElfHeader.from_stream(self.stream, 0, elf_class=self.elf_class, endian=self.endian)

    # ========= sections

    @property
    def num_sections(self):
        return self.header.e_shnum

    @cached_property
    def _sections(self):
        return LazyArray(self.num_sections, self._create_section)

    def _create_section(self, n):
        offset = self.header.e_shoff + n * self.header.e_shentsize
        self.logger.debug('creating section %d at offset 0x%x', n, offset)
        header = SectionHeader.from_stream(self.stream, offset, elf_class=self.elf_class, endian=self.endian)

        return Section.create(
            header,
            self.stream,
            index=n,
            elf_class=self.elf_class,
            endian=self.endian,
            strtab=self.strtab_section,
            section_at=self.section_at,
            offset_from_vma=self.offset_from_vma,
            machine=self.header.e_machine,
        )

    def section_at(self, n):
        '''Acquire the n-th section (0-based), None if out of bounds.'''
        return self._sections[n]

    def iter_sections(self):
        for n in range(self.num_sections):
            yield self.section_at(n)

    def sections(self):
        return list(self.iter_sections())

    def strtab_section(self):
        '''The section with the names of the sections.'''
        return self.section_at(self.header.e_shstrndx)

    def section_by_name(self, name):
        '''It returns the first section with the given name, None if there is not.
        The empty name is the one of the null section.'''
        if name in self._section_name_map:
            return self._section_name_map[name]

        for section in self.iter_sections():
            self._section_name_map.setdefault(section.name, section)
            if section.name == name:
                return section

        return None

    def sections_by_type(self, type):
        '''The type can be an integer or a name, see to_constant().'''
        type = to_constant(ElfSectionType, type)
        return [_ for _ in self.iter_sections() if _.type == type]

    def section_by_type(self, type):
        sections = self.sections_by_type(type)
        return sections[0] if sections else None

    @property
    def symtab(self):
        return self.section_by_type(ElfSectionType.SHT_SYMTAB)

    @property
    def dynsym(self):
        return self.section_by_type(ElfSectionType.SHT_DYNSYM)

    # ========= segments

    @property
    def num_segments(self):
        return self.header.e_phnum

    @cached_property
    def _segments(self):
        return LazyArray(self.num_segments, self._create_segment)

    def _create_segment(self, n):
        offset = self.header.e_phoff + n * self.header.e_phentsize
        self.logger.debug('creating segment %d at offset 0x%x', n, offset)
        header = ProgramHeader.from_stream(self.stream, offset, elf_class=self.elf_class, endian=self.endian)

        return Segment.create(
            header,
            self.stream,
            index=n,
            elf_class=self.elf_class,
            endian=self.endian,
            offset_from_vma=self.offset_from_vma,
        )

    def segment_at(self, n):
        '''Acquire the n-th segment (0-based), None if out of bounds.'''
        return self._segments[n]

    def iter_segments(self):
        for n in range(self.num_segments):
            yield self.segment_at(n)

    def segments(self):
        return list(self.iter_segments())

    def segments_by_type(self, type):
        type = to_constant(ElfSegmentType, type)
        return [_ for _ in self.iter_segments() if _.type == type]

    def segment_by_type(self, type):
        '''The type can be an integer or a name, an unknown one raises ConstantException

            elf.segment_by_type('interp')
            elf.segment_by_type(ElfSegmentType.PT_INTERP)
        '''
        segments = self.segments_by_type(type)
        return segments[0] if segments else None

    # ========= cross cutting queries

    def offset_from_vma(self, vma, size=0):
        '''Translate a virtual address to the file offset using the PT_LOAD segments.'''
        for segment in self.segments_by_type(ElfSegmentType.PT_LOAD):
            if isinstance(segment, LoadSegment) and segment.vma_in(vma, size):
                return segment.vma_to_offset(vma)

        self.logger.debug('no segment maps the address 0x%x', vma)
        return None

    def build_id(self):
        '''Hex string of the GNU build id, if present.'''
        section = self.section_by_name(BUILD_ID_SECTION)
        if not isinstance(section, NoteMixin):
            return None

        for note in section.iter_notes():
            return note.desc.hex()

        return None

    def machine_name(self):
        code = self.header.e_machine
        try:
            return MACHINE_NAMES[ElfMachine(code)]
        except (ValueError, KeyError):
            return 'unknown: 0x%x' % code

    @property
    def elf_type(self):
        return constant_name(ElfType, self.header.e_type)
