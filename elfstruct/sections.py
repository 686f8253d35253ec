'''
Sections are the linker's view of an ELF file.

Every section is built from its header by Section.create(), which selects the
class to use from the sh_type of the header: the classes add the methods that
make sense for the data they describe (strings, symbols, relocations...).

Sections need to look at other sections (their names are in the section
names table, the symbols have their names in the table linked via sh_link)
so they receive from the ElfFile the callables to reach them.
'''
import logging
from functools import cached_property

from .dynamic import DynamicMixin
from .enum import (
    ElfSectionType,
    ElfSectionIndex,
    ElfSymbolBindType,
    ElfSymbolType,
    ElfSymbolVisibility,
    RELOCATION_TYPES,
    constant_name,
    to_member,
)
from .lazy import LazyArray
from .note import NoteMixin
from .structures import SymbolEntry, RelEntry, RelaEntry
from .utils import decode_string, r_sym, r_type, st_bind, st_type, st_visibility


class Section(object):
    '''Base class of the sections, also used for the types without special meaning.'''

    def __init__(self, header, stream, index=None, elf_class=None, endian=None,
                 strtab=None, section_at=None, offset_from_vma=None, machine=None):
        self.logger = logging.getLogger(f'{self.__module__}.{self.__class__.__name__}')
        self.header = header
        self.stream = stream
        self.index = index
        self.elf_class = elf_class or header.elf_class
        self.endian = endian or header.endian
        self.machine = machine
        self._strtab = strtab
        self._section_at = section_at
        self.offset_from_vma = offset_from_vma

    def __repr__(self):
        return '<%s(index=%s, type=%s)>' % (self.__class__.__name__, self.index, self.type_name or self.type)

    @classmethod
    def create(cls, header, stream, **kwargs):
        '''Use a different class according to header.sh_type'''
        klass = SECTION_TYPES.get(header.sh_type, Section)
        logging.getLogger(__name__).debug('section with type 0x%x is a %s', header.sh_type, klass.__name__)

        return klass(header, stream, **kwargs)

    @property
    def type(self):
        return self.header.sh_type

    @property
    def type_name(self):
        return constant_name(ElfSectionType, self.type)

    @cached_property
    def name(self):
        '''The name is resolved via the section names table, only once.'''
        strtab = self._strtab() if self._strtab else None

        if not isinstance(strtab, StrTabSection):
            self.logger.warning('no string table to resolve the name of section %s', self.index)
            return None

        return strtab.name_at(self.header.sh_name)

    @cached_property
    def data(self) -> bytes:
        # SHT_NOBITS occupies no space in the file
        if self.type == ElfSectionType.SHT_NOBITS.value:
            return b''

        return self.stream.read_at(self.header.sh_offset, self.header.sh_size)

    def is_null(self):
        return False

    def section_at(self, n):
        '''Other sections of the same file.'''
        return self._section_at(n) if self._section_at else None


class NullSection(Section):
    '''The section at index zero is always null, sh_link refers to it to say "no link".'''

    def is_null(self):
        return True


class StrTabSection(Section):
    '''
    There are three string tables usually identified by their section name

        1. ".shstrtab" for section names (this is actually indicated by the e_shstrndx header field)
        2. ".strtab" names associated with the symbol table entries
        3. ".dynstr" names associated with dynamic linking
    '''

    def name_at(self, offset):
        '''Return the string starting at offset into this table, None if the
        file ends before its terminator.'''
        return decode_string(self.stream.read_cstring(self.header.sh_offset + offset))


class SymTabSection(Section):
    '''Class for .symtab and .dynsym'''

    @property
    def num_symbols(self):
        if self.header.sh_entsize == 0:
            return 0

        return self.header.sh_size // self.header.sh_entsize

    @cached_property
    def _symbols(self):
        return LazyArray(self.num_symbols, self._create_symbol)

    def _create_symbol(self, n):
        entry = SymbolEntry.from_stream(
            self.stream,
            self.header.sh_offset + n * self.header.sh_entsize,
            elf_class=self.elf_class,
            endian=self.endian,
        )
        return Symbol(entry, self, n)

    def symbol_at(self, n):
        '''Acquire the n-th symbol, None if out of bounds.'''
        return self._symbols[n]

    def iter_symbols(self):
        for n in range(self.num_symbols):
            yield self.symbol_at(n)

    def symbols(self):
        return list(self.iter_symbols())

    def symbol_by_name(self, name):
        for symbol in self.iter_symbols():
            if symbol.name == name:
                return symbol

        return None

    @cached_property
    def symstr(self):
        '''The string table with the names of the symbols.'''
        return self.section_at(self.header.sh_link)


class RelocationSection(Section):
    '''SHT_REL and SHT_RELA: the latter carries an explicit addend.'''

    def is_rela(self):
        return self.header.sh_type == ElfSectionType.SHT_RELA.value

    @property
    def num_relocations(self):
        if self.header.sh_entsize == 0:
            return 0

        return self.header.sh_size // self.header.sh_entsize

    @cached_property
    def _relocations(self):
        return LazyArray(self.num_relocations, self._create_relocation)

    def _create_relocation(self, n):
        klass = RelaEntry if self.is_rela() else RelEntry
        entry = klass.from_stream(
            self.stream,
            self.header.sh_offset + n * self.header.sh_entsize,
            elf_class=self.elf_class,
            endian=self.endian,
        )
        return Relocation(entry, self, n)

    def relocation_at(self, n):
        return self._relocations[n]

    def iter_relocations(self):
        for n in range(self.num_relocations):
            yield self.relocation_at(n)

    def relocations(self):
        return list(self.iter_relocations())

    @cached_property
    def symtab(self):
        '''The symbol table the relocations refer to.'''
        return self.section_at(self.header.sh_link)


class DynamicSection(DynamicMixin, Section):

    @property
    def tag_start(self):
        return self.header.sh_offset


class NoteSection(NoteMixin, Section):

    @property
    def note_start(self):
        return self.header.sh_offset

    @property
    def note_total_size(self):
        return self.header.sh_size


SECTION_TYPES = {
    ElfSectionType.SHT_NULL.value: NullSection,
    ElfSectionType.SHT_STRTAB.value: StrTabSection,
    ElfSectionType.SHT_SYMTAB.value: SymTabSection,
    ElfSectionType.SHT_DYNSYM.value: SymTabSection,
    ElfSectionType.SHT_RELA.value: RelocationSection,
    ElfSectionType.SHT_REL.value: RelocationSection,
    ElfSectionType.SHT_DYNAMIC.value: DynamicSection,
    ElfSectionType.SHT_NOTE.value: NoteSection,
}


class Symbol(object):
    '''An entry of a symbol table.'''

    def __init__(self, header, section, index):
        self.header = header
        self.section = section
        self.index = index

    def __repr__(self):
        return '<%s(index=%d, value=0x%x)>' % (self.__class__.__name__, self.index, self.value)

    @cached_property
    def name(self):
        symstr = self.section.symstr
        if not isinstance(symstr, StrTabSection):
            return None

        return symstr.name_at(self.header.st_name)

    @property
    def value(self):
        return self.header.st_value

    @property
    def size(self):
        return self.header.st_size

    @property
    def shndx(self):
        return self.header.st_shndx

    @property
    def bind(self):
        return to_member(ElfSymbolBindType, st_bind(self.header.st_info))

    @property
    def type(self):
        return to_member(ElfSymbolType, st_type(self.header.st_info))

    @property
    def visibility(self):
        return to_member(ElfSymbolVisibility, st_visibility(self.header.st_other))

    @cached_property
    def data(self):
        '''The bytes of the symbol inside the section where it's defined.'''
        if self.shndx == ElfSectionIndex.SHN_UNDEF.value or self.shndx >= ElfSectionIndex.SHN_LORESERVE.value:
            return None

        target = self.section.section_at(self.shndx)
        if target is None or target.type == ElfSectionType.SHT_NOBITS.value:
            return None

        # for relocatable files sh_addr is zero and st_value is an offset into the section
        start = self.value - target.header.sh_addr
        if start < 0:
            return None

        return target.data[start:start + self.size]


class Relocation(object):
    '''An entry of a REL or RELA table.'''

    def __init__(self, header, section, index):
        self.header = header
        self.section = section
        self.index = index

    def __repr__(self):
        return '<%s(offset=0x%x, sym=%d, type=%d)>' % (
            self.__class__.__name__, self.offset, self.symbol_index, self.type)

    @property
    def offset(self):
        return self.header.r_offset

    @property
    def info(self):
        return self.header.r_info

    @property
    def addend(self):
        return getattr(self.header, 'r_addend', None)

    @property
    def symbol_index(self):
        return r_sym(self.header.r_info, self.header.elf_class)

    @property
    def type(self):
        return r_type(self.header.r_info, self.header.elf_class)

    @property
    def type_name(self):
        '''The relocation type is HIGHLY dependent on architecture'''
        enum = RELOCATION_TYPES.get(self.section.machine)
        if enum is None:
            return None

        return constant_name(enum, self.type)

    @cached_property
    def symbol(self):
        symtab = self.section.symtab
        if not isinstance(symtab, SymTabSection):
            return None

        return symtab.symbol_at(self.symbol_index)

    @property
    def symbol_name(self):
        symbol = self.symbol
        return symbol.name if symbol is not None else None
