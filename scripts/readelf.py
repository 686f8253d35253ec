#!/usr/bin/env python3
import sys
import os
import logging

from elfstruct import ElfFile, ElfStructException
from elfstruct.enum import ElfEIData, ElfOsABI, constant_name

if 'DEBUG' in os.environ:
    logging.basicConfig()
    logging.getLogger('elfstruct').setLevel(logging.DEBUG)


def usage(progname):
    print('usage: %s <elf file>' % progname)
    return 1


def dump_header(elf):
    hdr = elf.header
    ident = hdr.e_ident
    magic = ' '.join('%02x' % _ for _ in ident.pack())
    print(f'''ELF Header:
  Magic:                             {magic}
  Class:                             ELF{elf.elf_class}
  Data:                              {constant_name(ElfEIData, ident.EI_DATA)}
  Version:                           {ident.EI_VERSION}
  OS/ABI:                            {constant_name(ElfOsABI, ident.EI_OSABI) or ident.EI_OSABI}
  ABI Version:                       {ident.EI_ABIVERSION}
  Type:                              {elf.elf_type or hdr.e_type}
  Machine:                           {elf.machine_name()}
  Version:                           0x{hdr.e_version:x}
  Entry point address:               0x{hdr.e_entry:x}
  Start of program headers:          {hdr.e_phoff} (bytes into file)
  Start of section headers:          {hdr.e_shoff} (bytes into file)
  Flags:                             0x{hdr.e_flags:x}
  Size of this header:               {hdr.e_ehsize} (bytes)
  Size of program headers:           {hdr.e_phentsize} (bytes)
  Number of program headers:         {hdr.e_phnum}
  Size of section headers:           {hdr.e_shentsize} (bytes)
  Number of section headers:         {hdr.e_shnum}
  Section header string table index: {hdr.e_shstrndx}''')


def dump_sections(elf):
    print('''Section Headers:
  [Nr] Name                 Type             Address          Off      Size     ES Lk Inf Al''')
    for section in elf.iter_sections():
        sh = section.header
        type_name = (section.type_name or hex(section.type)).replace('SHT_', '')
        print(f'''  [{section.index: >2d}] {section.name or "":<20} {type_name:<16} {sh.sh_addr:016x} {sh.sh_offset:08x} {sh.sh_size:08x} {sh.sh_entsize:02x} {sh.sh_link:2d} {sh.sh_info:3d} {sh.sh_addralign:2d}''')


def _flags(segment):
    return '%s%s%s' % (
        'R' if segment.is_readable() else ' ',
        'W' if segment.is_writable() else ' ',
        'E' if segment.is_executable() else ' ',
    )


def dump_segments(elf):
    print('''Program Headers:
  Type             Offset   VirtAddr         PhysAddr         FileSiz  MemSiz   Flg Align''')
    for segment in elf.iter_segments():
        ph = segment.header
        type_name = (segment.type_name or hex(segment.type)).replace('PT_', '')
        print(f'''  {type_name:<16} {ph.p_offset:08x} {ph.p_vaddr:016x} {ph.p_paddr:016x} {ph.p_filesz:08x} {ph.p_memsz:08x} {_flags(segment)} 0x{ph.p_align:x}''')
        if hasattr(segment, 'interp_name'):
            print(f'''      [Requesting program interpreter: {segment.interp_name}]''')


def dump_dynamic(elf):
    dynamic = elf.segment_by_type('dynamic')
    if dynamic is None:
        return

    tags = dynamic.tags()
    print(f'''Dynamic section at offset 0x{dynamic.header.p_offset:x} contains {len(tags)} entries:
  Tag                Type                 Name/Value''')
    for tag in tags:
        type_name = (tag.type_name or hex(tag.tag)).replace('DT_', '')
        value = tag.name if tag.name is not None else '0x%x' % tag.value
        print(f''' 0x{tag.tag & 0xffffffffffffffff:016x} ({type_name:<18}) {value}''')


def dump_notes(elf):
    for section in elf.iter_sections():
        if not hasattr(section, 'iter_notes'):
            continue

        print(f'''Displaying notes found in: {section.name}
  Owner                Data size        Description''')
        for note in section.iter_notes():
            owner = note.name.rstrip(b'\x00').decode('latin1')
            print(f'''  {owner:<20} 0x{note.header.n_descsz:08x}       {note.type_name or note.type}''')

    build_id = elf.build_id()
    if build_id:
        print(f'''Build ID: {build_id}''')


def main(argv):
    if len(argv) < 2:
        return usage(argv[0])

    path = argv[1]

    try:
        with ElfFile(path) as elf:
            dump_header(elf)
            if elf.num_sections:
                dump_sections(elf)
            if elf.num_segments:
                dump_segments(elf)
            dump_dynamic(elf)
            dump_notes(elf)
    except ElfStructException as e:
        print(f'{path}: {e}', file=sys.stderr)
        return 1

    return 0


if __name__ == '__main__':
    sys.exit(main(sys.argv))
