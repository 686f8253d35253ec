'''
# ELF records

Binary layout of the records found into an ELF file.

Reference to <http://www.sco.com/developers/gabi/latest/contents.html>.

The same record has different sizes depending on the class of the file (the
Elf_* fields take care of that) and in some cases also a different ordering
of the fields, see ProgramHeader and SymbolEntry.
'''
from typing import List

from .core import Record
from .fields import (
    StructField,
    StringField,
    RecordField,
    Elf_Addr,
    Elf_Half,
    Elf_Off,
    Elf_Sxword,
    Elf_Word,
    Elf_Xword,
)

ELFMAG = b'\x7fELF'


class ElfIdent(Record):
    EI_MAG        = StringField(4, default=ELFMAG)
    EI_CLASS      = StructField('B', default=2)  # determines the architecture
    EI_DATA       = StructField('B', default=1)  # determines the endianess of the binary data
    EI_VERSION    = StructField('B', default=1)  # always 1
    EI_OSABI      = StructField('B')
    EI_ABIVERSION = StructField('B')
    EI_PAD        = StringField(7)


class ElfHeader(Record):
    e_ident     = RecordField(ElfIdent)
    e_type      = Elf_Half()
    e_machine   = Elf_Half()
    e_version   = Elf_Word(default=1)
    e_entry     = Elf_Addr()
    e_phoff     = Elf_Off()
    e_shoff     = Elf_Off()
    e_flags     = Elf_Word()
    e_ehsize    = Elf_Half()
    e_phentsize = Elf_Half()
    e_phnum     = Elf_Half()
    e_shentsize = Elf_Half()
    e_shnum     = Elf_Half()
    e_shstrndx  = Elf_Half()


class SectionHeader(Record):
    sh_name      = Elf_Word()
    sh_type      = Elf_Word()
    sh_flags     = Elf_Xword()
    sh_addr      = Elf_Addr()
    sh_offset    = Elf_Off()
    sh_size      = Elf_Xword()
    sh_link      = Elf_Word()
    sh_info      = Elf_Word()
    sh_addralign = Elf_Xword()
    sh_entsize   = Elf_Xword()


class ProgramHeader(Record):
    '''This entity represent runtime information of the executable.

    Note: the field "p_flags"'s position depends on the ELF class.
    '''
    ORDERING_64 = [
        'p_type',
        'p_flags',
        'p_offset',
        'p_vaddr',
        'p_paddr',
        'p_filesz',
        'p_memsz',
        'p_align',
    ]

    p_type   = Elf_Word()
    p_offset = Elf_Off()
    p_vaddr  = Elf_Addr()
    p_paddr  = Elf_Addr()
    p_filesz = Elf_Xword()
    p_memsz  = Elf_Xword()
    p_flags  = Elf_Word()
    p_align  = Elf_Xword()

    def get_ordered_fields_name(self) -> List[str]:
        if self.elf_class == 32:
            return super().get_ordered_fields_name()

        return self.ORDERING_64


class SymbolEntry(Record):
    ORDERING_64 = [
        'st_name',
        'st_info',
        'st_other',
        'st_shndx',
        'st_value',
        'st_size',
    ]

    st_name  = Elf_Word()
    st_value = Elf_Addr()
    st_size  = Elf_Xword()
    st_info  = StructField('B')
    st_other = StructField('B')
    st_shndx = Elf_Half()

    def get_ordered_fields_name(self) -> List[str]:
        if self.elf_class == 32:
            return super().get_ordered_fields_name()

        return self.ORDERING_64


class DynamicEntry(Record):
    d_tag = Elf_Sxword()
    d_val = Elf_Xword()  # d_un is the union of d_val and d_ptr


class NoteHeader(Record):
    '''Its size doesn't depend on the class.'''
    n_namesz = Elf_Word()
    n_descsz = Elf_Word()
    n_type   = Elf_Word()


class RelEntry(Record):
    r_offset = Elf_Addr()
    r_info   = Elf_Xword()


class RelaEntry(RelEntry):
    r_addend = Elf_Sxword()


__all__ = [
    'ELFMAG',
    'ElfIdent',
    'ElfHeader',
    'SectionHeader',
    'ProgramHeader',
    'SymbolEntry',
    'DynamicEntry',
    'NoteHeader',
    'RelEntry',
    'RelaEntry',
]
