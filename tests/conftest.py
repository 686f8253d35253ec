"""
Fixtures building small but complete ELF images in memory, so that the tests
don't need binary files: the same content is generated for a 64 bits little
endian x86-64 file (with RELA relocations) and for a 32 bits big endian
PowerPC one (with REL relocations).
"""
import io

import pytest

from elfstruct import ElfFile
from elfstruct.enum import (
    ElfDynamicTagType,
    ElfMachine,
    ElfNoteType,
    ElfSectionAttributeFlag,
    ElfSectionIndex,
    ElfSectionType,
    ElfSegmentFlag,
    ElfSegmentType,
    ElfSymbolBindType,
    ElfSymbolType,
    ElfSymbolVisibility,
    ElfType,
)
from elfstruct.structures import (
    DynamicEntry,
    ElfHeader,
    ElfIdent,
    NoteHeader,
    ProgramHeader,
    RelaEntry,
    RelEntry,
    SectionHeader,
    SymbolEntry,
)
from elfstruct.utils import align_up, r_info, st_info


BUILD_ID = bytes.fromhex('73ab62cb7bc9959ce053c2b711322158708cdc07')
INTERP = b'/lib64/ld-linux-x86-64.so.2'
TEXT = bytes(range(0x10, 0x30))
BSS_SIZE = 0x40

SHF_ALLOC = ElfSectionAttributeFlag.SHF_ALLOC.value
SHF_WRITE = ElfSectionAttributeFlag.SHF_WRITE.value
SHF_EXECINSTR = ElfSectionAttributeFlag.SHF_EXECINSTR.value

PF_R = ElfSegmentFlag.PF_R.value
PF_W = ElfSegmentFlag.PF_W.value
PF_X = ElfSegmentFlag.PF_X.value


class StringTable(object):

    def __init__(self):
        self.data = b'\x00'
        self.offsets = {'': 0}

    def add(self, name):
        if name not in self.offsets:
            self.offsets[name] = len(self.data)
            self.data += name.encode() + b'\x00'

        return self.offsets[name]


def pack_note(name, type, desc, elf_class=64, endian='little'):
    header = NoteHeader(elf_class=elf_class, endian=endian, n_namesz=len(name), n_descsz=len(desc), n_type=type)

    return (header.pack()
            + name.ljust(align_up(len(name)), b'\x00')
            + desc.ljust(align_up(len(desc)), b'\x00'))


class ElfBuilder(object):
    '''Lay out sections and segments into an ELF image:

        header | program headers | sections data | section headers

    the sections marked SHF_ALLOC get the address base + offset. The data of
    a section can be a callable receiving the builder, for the contents that
    depend on the addresses of other sections.
    '''

    def __init__(self, elf_class=64, endian='little', machine=ElfMachine.EM_X86_64.value, base=0x400000):
        self.elf_class = elf_class
        self.endian = endian
        self.machine = machine
        self.base = base
        self.sections = [dict(name='', type=ElfSectionType.SHT_NULL.value, data=b'', flags=0, link=0,
                              info=0, entsize=0, align=0, size=None)]
        self.segments = []
        self.indexes = {'': 0}
        self.offsets = {}
        self.addresses = {}
        self.sizes = {}
        self.image = None

    def record(self, cls, **kwargs):
        return cls(elf_class=self.elf_class, endian=self.endian, **kwargs)

    def add_section(self, name, type, data=b'', flags=0, link=0, info=0, entsize=0, align=8, size=None):
        self.indexes[name] = len(self.sections)
        self.sections.append(dict(name=name, type=type, data=data, flags=flags, link=link,
                                  info=info, entsize=entsize, align=align, size=size))

    def add_segment(self, type, flags, sections=None, phdr=False, load=False, align=1):
        self.segments.append(dict(type=type, flags=flags, sections=sections, phdr=phdr, load=load, align=align))

    def _layout(self, cursor):
        for section in self.sections[1:]:
            data = section['data'](self) if callable(section['data']) else section['data']
            cursor = align_up(cursor, max(section['align'], 1))

            section['bytes'] = data
            section['offset'] = cursor
            section['sh_size'] = section['size'] if section['size'] is not None else len(data)

            self.offsets[section['name']] = cursor
            self.addresses[section['name']] = self.base + cursor if section['flags'] & SHF_ALLOC else 0
            self.sizes[section['name']] = section['sh_size']

            if section['type'] != ElfSectionType.SHT_NOBITS.value:
                cursor += len(data)

        return cursor

    def _segment_values(self, segment):
        if segment['phdr']:
            size = self.phentsize * len(self.segments)
            return self.phoff, self.base + self.phoff, size, size

        if segment['load']:
            return 0, self.base, self.alloc_end, self.alloc_end + BSS_SIZE

        if segment['sections']:
            first, last = segment['sections'][0], segment['sections'][-1]
            offset = self.offsets[first]
            size = self.offsets[last] + self.sizes[last] - offset
            return offset, self.addresses[first], size, size

        return 0, 0, 0, 0

    def build(self):
        shstrtab = StringTable()
        for section in self.sections:
            shstrtab.add(section['name'])
        shstrtab.add('.shstrtab')
        self.add_section('.shstrtab', ElfSectionType.SHT_STRTAB.value, shstrtab.data, align=1)

        header_size = self.record(ElfHeader).size
        self.phentsize = self.record(ProgramHeader).size
        shentsize = self.record(SectionHeader).size
        self.phoff = header_size

        # twice: the second time the callables see the right addresses
        start = header_size + self.phentsize * len(self.segments)
        self._layout(start)
        data_end = self._layout(start)

        self.alloc_end = max(
            self.offsets[_['name']] + len(_['bytes'])
            for _ in self.sections[1:]
            if _['flags'] & SHF_ALLOC and _['type'] != ElfSectionType.SHT_NOBITS.value
        )
        shoff = align_up(data_end, 8)

        image = bytearray(shoff + shentsize * len(self.sections))

        ident = self.record(
            ElfIdent,
            EI_CLASS=1 if self.elf_class == 32 else 2,
            EI_DATA=1 if self.endian == 'little' else 2,
        )
        header = self.record(
            ElfHeader,
            e_ident=ident,
            e_type=ElfType.ET_DYN.value,
            e_machine=self.machine,
            e_entry=self.addresses.get('.text', 0),
            e_phoff=self.phoff,
            e_shoff=shoff,
            e_ehsize=header_size,
            e_phentsize=self.phentsize,
            e_phnum=len(self.segments),
            e_shentsize=shentsize,
            e_shnum=len(self.sections),
            e_shstrndx=self.indexes['.shstrtab'],
        )
        image[0:header_size] = header.pack()

        for n, segment in enumerate(self.segments):
            offset, vaddr, filesz, memsz = self._segment_values(segment)
            phdr = self.record(
                ProgramHeader,
                p_type=segment['type'],
                p_flags=segment['flags'],
                p_offset=offset,
                p_vaddr=vaddr,
                p_paddr=vaddr,
                p_filesz=filesz,
                p_memsz=memsz,
                p_align=segment['align'],
            )
            position = self.phoff + n * self.phentsize
            image[position:position + self.phentsize] = phdr.pack()

        for n, section in enumerate(self.sections):
            if n and section['type'] != ElfSectionType.SHT_NOBITS.value:
                image[section['offset']:section['offset'] + len(section['bytes'])] = section['bytes']

            link = section['link']
            shdr = self.record(
                SectionHeader,
                sh_name=shstrtab.offsets[section['name']],
                sh_type=section['type'],
                sh_flags=section['flags'],
                sh_addr=self.addresses.get(section['name'], 0) if n else 0,
                sh_offset=section.get('offset', 0) if n else 0,
                sh_size=section.get('sh_size', 0) if n else 0,
                sh_link=self.indexes[link] if isinstance(link, str) else link,
                sh_info=section['info'],
                sh_addralign=section['align'],
                sh_entsize=section['entsize'],
            )
            position = shoff + n * shentsize
            image[position:position + shentsize] = shdr.pack()

        self.image = bytes(image)

        return self.image


def make_sample(elf_class=64, endian='little', machine=ElfMachine.EM_X86_64.value, base=0x400000):
    builder = ElfBuilder(elf_class, endian, machine, base)
    sym_size = builder.record(SymbolEntry).size
    dyn_size = builder.record(DynamicEntry).size

    dynstr = StringTable()
    needed = dynstr.add('libc.so.6')
    soname = dynstr.add('libsample.so')
    dynstr.add('puts')
    dynstr.add('__gmon_start__')

    strtab = StringTable()
    for name in ('sample.c', 'counter', 'helper', 'main', 'puts'):
        strtab.add(name)

    def symbols(entries):
        return b''.join(builder.record(SymbolEntry, **_).pack() for _ in entries)

    builder.add_section('.interp', ElfSectionType.SHT_PROGBITS.value, INTERP + b'\x00', flags=SHF_ALLOC, align=1)
    builder.add_section(
        '.note.gnu.build-id',
        ElfSectionType.SHT_NOTE.value,
        pack_note(b'GNU\x00', ElfNoteType.NT_GNU_BUILD_ID.value, BUILD_ID, elf_class, endian),
        flags=SHF_ALLOC,
        align=4,
    )
    builder.add_section(
        '.note.test',
        ElfSectionType.SHT_NOTE.value,
        pack_note(b'ab\x00', 0x1234, b'\x01\x02\x03\x04\x05', elf_class, endian)
        + pack_note(b'GNU\x00', ElfNoteType.NT_GNU_ABI_TAG.value, b'\x00\x00\x00\x00', elf_class, endian),
        flags=SHF_ALLOC,
        align=4,
    )
    builder.add_section(
        '.dynsym',
        ElfSectionType.SHT_DYNSYM.value,
        symbols([
            {},
            dict(st_name=dynstr.offsets['puts'],
                 st_info=st_info(ElfSymbolBindType.STB_GLOBAL.value, ElfSymbolType.STT_FUNC.value)),
            dict(st_name=dynstr.offsets['__gmon_start__'],
                 st_info=st_info(ElfSymbolBindType.STB_WEAK.value, ElfSymbolType.STT_NOTYPE.value)),
        ]),
        flags=SHF_ALLOC,
        link='.dynstr',
        info=1,
        entsize=sym_size,
    )
    builder.add_section('.dynstr', ElfSectionType.SHT_STRTAB.value, dynstr.data, flags=SHF_ALLOC, align=1)

    if elf_class == 64:
        entries = [
            dict(r_offset=0x601018, r_info=r_info(1, 7, 64), r_addend=0),
            dict(r_offset=0x601020, r_info=r_info(2, 6, 64), r_addend=-8),
        ]
        builder.add_section(
            '.rela.dyn',
            ElfSectionType.SHT_RELA.value,
            b''.join(builder.record(RelaEntry, **_).pack() for _ in entries),
            flags=SHF_ALLOC,
            link='.dynsym',
            entsize=builder.record(RelaEntry).size,
        )
    else:
        entries = [
            dict(r_offset=0x10018, r_info=r_info(1, 21, 32)),
            dict(r_offset=0x1001c, r_info=r_info(2, 20, 32)),
        ]
        builder.add_section(
            '.rel.dyn',
            ElfSectionType.SHT_REL.value,
            b''.join(builder.record(RelEntry, **_).pack() for _ in entries),
            flags=SHF_ALLOC,
            link='.dynsym',
            entsize=builder.record(RelEntry).size,
        )

    builder.add_section('.text', ElfSectionType.SHT_PROGBITS.value, TEXT, flags=SHF_ALLOC | SHF_EXECINSTR, align=16)

    def dynamic(b):
        tags = [
            (ElfDynamicTagType.DT_NEEDED, needed),
            (ElfDynamicTagType.DT_SONAME, soname),
            (ElfDynamicTagType.DT_STRTAB, b.addresses.get('.dynstr', 0)),
            (ElfDynamicTagType.DT_SYMTAB, b.addresses.get('.dynsym', 0)),
            (ElfDynamicTagType.DT_STRSZ, len(dynstr.data)),
            (ElfDynamicTagType.DT_SYMENT, sym_size),
            (ElfDynamicTagType.DT_NULL, 0),
            # after the terminator, must be ignored
            (ElfDynamicTagType.DT_DEBUG, 0),
        ]
        return b''.join(b.record(DynamicEntry, d_tag=tag.value, d_val=value).pack() for tag, value in tags)

    builder.add_section('.dynamic', ElfSectionType.SHT_DYNAMIC.value, dynamic,
                        flags=SHF_ALLOC | SHF_WRITE, link='.dynstr', entsize=dyn_size)
    builder.add_section('.bss', ElfSectionType.SHT_NOBITS.value, flags=SHF_ALLOC | SHF_WRITE, size=BSS_SIZE)

    def symtab(b):
        text = b.addresses.get('.text', 0)
        return symbols([
            {},
            dict(st_name=strtab.offsets['sample.c'],
                 st_info=st_info(ElfSymbolBindType.STB_LOCAL.value, ElfSymbolType.STT_FILE.value),
                 st_shndx=ElfSectionIndex.SHN_ABS.value),
            dict(st_name=strtab.offsets['counter'],
                 st_info=st_info(ElfSymbolBindType.STB_LOCAL.value, ElfSymbolType.STT_OBJECT.value),
                 st_shndx=b.indexes['.bss'], st_value=b.addresses.get('.bss', 0), st_size=4),
            dict(st_name=strtab.offsets['helper'],
                 st_info=st_info(ElfSymbolBindType.STB_LOCAL.value, ElfSymbolType.STT_FUNC.value),
                 st_other=ElfSymbolVisibility.STV_HIDDEN.value,
                 st_shndx=b.indexes['.text'], st_value=text + 12, st_size=4),
            dict(st_name=strtab.offsets['main'],
                 st_info=st_info(ElfSymbolBindType.STB_GLOBAL.value, ElfSymbolType.STT_FUNC.value),
                 st_shndx=b.indexes['.text'], st_value=text + 4, st_size=8),
            dict(st_name=strtab.offsets['puts'],
                 st_info=st_info(ElfSymbolBindType.STB_GLOBAL.value, ElfSymbolType.STT_FUNC.value)),
        ])

    builder.add_section('.symtab', ElfSectionType.SHT_SYMTAB.value, symtab, link='.strtab', info=4, entsize=sym_size)
    builder.add_section('.strtab', ElfSectionType.SHT_STRTAB.value, strtab.data, align=1)

    builder.add_segment(ElfSegmentType.PT_PHDR.value, PF_R, phdr=True, align=8)
    builder.add_segment(ElfSegmentType.PT_INTERP.value, PF_R, sections=['.interp'])
    builder.add_segment(ElfSegmentType.PT_LOAD.value, PF_R | PF_X, load=True, align=0x1000)
    builder.add_segment(ElfSegmentType.PT_DYNAMIC.value, PF_R | PF_W, sections=['.dynamic'], align=8)
    builder.add_segment(ElfSegmentType.PT_NOTE.value, PF_R, sections=['.note.gnu.build-id', '.note.test'], align=4)
    builder.add_segment(ElfSegmentType.PT_GNU_STACK.value, PF_R | PF_W, align=16)

    builder.build()

    return builder


@pytest.fixture
def sample64():
    return make_sample(64, 'little', ElfMachine.EM_X86_64.value, base=0x400000)


@pytest.fixture
def sample32():
    return make_sample(32, 'big', ElfMachine.EM_PPC.value, base=0x10000000)


@pytest.fixture
def elf64(sample64):
    return ElfFile(io.BytesIO(sample64.image))


@pytest.fixture
def elf32(sample32):
    return ElfFile(sample32.image)


@pytest.fixture(params=[
    (64, 'little', ElfMachine.EM_X86_64.value, 0x400000),
    (32, 'big', ElfMachine.EM_PPC.value, 0x10000000),
], ids=['elf64-little', 'elf32-big'])
def sample(request):
    return make_sample(*request.param)


@pytest.fixture
def elf(sample):
    return ElfFile(io.BytesIO(sample.image))
