'''
This module contains the constant values used throught the ELF specification.

Note: use Enum for value that cannot ORed together, Flag for the others.

The raw records keep the integers as found into the file, these classes are
used to give them a name and to validate what the user asks for: see to_constant().
'''
from enum import Enum, Flag

from .exceptions import ConstantException


class ElfEIClass(Enum):
    ELFCLASSNONE = 0
    ELFCLASS32   = 1
    ELFCLASS64   = 2


class ElfEIData(Enum):
    ELFDATANONE = 0
    ELFDATA2LSB = 1
    ELFDATA2MSB = 2


class ElfOsABI(Enum):
    ELFOSABI_NONE = 0
    ELFOSABI_HPUX = 1
    ELFOSABI_NETBSD = 2
    ELFOSABI_GNU = 3
    ELFOSABI_SOLARIS = 6
    ELFOSABI_AIX = 7
    ELFOSABI_IRIX = 8
    ELFOSABI_FREEBSD = 9
    ELFOSABI_TRU64 = 10
    ELFOSABI_MODESTO = 11
    ELFOSABI_OPENBSD = 12
    ELFOSABI_ARM_AEABI = 64
    ELFOSABI_ARM = 97
    ELFOSABI_STANDALONE = 255


class ElfType(Enum):
    ET_NONE = 0
    ET_REL  = 1
    ET_EXEC = 2
    ET_DYN  = 3
    ET_CORE = 4
    ET_LOPROC = 0xff00
    ET_HIPROC = 0xffff


class ElfMachine(Enum):
    EM_NONE  = 0
    EM_M32   = 1
    EM_SPARC = 2
    EM_386   = 3
    EM_68K   = 4
    EM_88K   = 5
    EM_860   = 7
    EM_MIPS  = 8
    EM_S370  = 9
    EM_MIPS_RS3_LE = 10
    EM_PARISC = 15
    EM_SPARC32PLUS = 18
    EM_960    = 19
    EM_PPC    = 20
    EM_PPC64  = 21
    EM_S390   = 22
    EM_ARM    = 40
    EM_ALPHA  = 41
    EM_SH     = 42
    EM_SPARCV9 = 43
    EM_IA_64   = 50
    EM_X86_64 = 62
    EM_AVR = 83
    EM_XTENSA = 94
    EM_MSP430 = 105
    EM_AARCH64 = 183
    EM_CUDA = 190
    EM_RISCV = 243
    EM_BPF = 247
    EM_LOONGARCH = 258


# what readelf prints for the machines
MACHINE_NAMES = {
    ElfMachine.EM_NONE: 'None',
    ElfMachine.EM_M32: 'WE32100',
    ElfMachine.EM_SPARC: 'Sparc',
    ElfMachine.EM_386: 'Intel 80386',
    ElfMachine.EM_68K: 'MC68000',
    ElfMachine.EM_88K: 'MC88000',
    ElfMachine.EM_860: 'Intel 80860',
    ElfMachine.EM_MIPS: 'MIPS R3000',
    ElfMachine.EM_S370: 'IBM System/370',
    ElfMachine.EM_MIPS_RS3_LE: 'MIPS R4000 big-endian',
    ElfMachine.EM_PARISC: 'HPPA',
    ElfMachine.EM_SPARC32PLUS: 'Sparc v8+',
    ElfMachine.EM_960: 'Intel 80960',
    ElfMachine.EM_PPC: 'PowerPC',
    ElfMachine.EM_PPC64: 'PowerPC64',
    ElfMachine.EM_S390: 'IBM S/390',
    ElfMachine.EM_ARM: 'ARM',
    ElfMachine.EM_ALPHA: 'Alpha',
    ElfMachine.EM_SH: 'Renesas / SuperH SH',
    ElfMachine.EM_SPARCV9: 'Sparc v9',
    ElfMachine.EM_IA_64: 'Intel IA-64',
    ElfMachine.EM_X86_64: 'Advanced Micro Devices X86-64',
    ElfMachine.EM_AVR: 'Atmel AVR 8-bit microcontroller',
    ElfMachine.EM_XTENSA: 'Tensilica Xtensa Processor',
    ElfMachine.EM_MSP430: 'Texas Instruments msp430 microcontroller',
    ElfMachine.EM_AARCH64: 'AArch64',
    ElfMachine.EM_CUDA: 'NVIDIA CUDA architecture',
    ElfMachine.EM_RISCV: 'RISC-V',
    ElfMachine.EM_BPF: 'Linux BPF',
    ElfMachine.EM_LOONGARCH: 'LoongArch',
}


class ElfVersion(Enum):
    EV_NONE    = 0
    EV_CURRENT = 1


class ElfSegmentType(Enum):
    PT_NULL = 0
    PT_LOAD = 1
    PT_DYNAMIC = 2
    PT_INTERP  = 3
    PT_NOTE    = 4
    PT_SHLIB   = 5
    PT_PHDR    = 6
    PT_TLS     = 7
    PT_LOOS  = 0x60000000
    # see <https://refspecs.linuxfoundation.org/LSB_4.0.0/LSB-Core-generic/LSB-Core-generic.html#PROGHEADER>
    PT_GNU_EH_FRAME = 0x6474e550
    PT_GNU_STACK = 0x6474e551
    PT_GNU_RELRO = 0x6474e552
    PT_GNU_PROPERTY = 0x6474e553
    PT_HIOS = 0x6fffffff
    PT_LOPROC  = 0x70000000
    PT_HIPROC  = 0x7fffffff


class ElfSegmentFlag(Flag):
    PF_X = 0x01
    PF_W = 0x02
    PF_R = 0x04


class ElfSectionIndex(Enum):
    SHN_UNDEF     = 0
    SHN_LORESERVE = 0xff00
    SHN_HIPROC    = 0xff1f
    SHN_ABS       = 0xfff1
    SHN_COMMON    = 0xfff2
    SHN_XINDEX    = 0xffff


class ElfSectionType(Enum):
    SHT_NULL     = 0
    SHT_PROGBITS = 1
    SHT_SYMTAB   = 2
    SHT_STRTAB   = 3
    SHT_RELA     = 4
    SHT_HASH     = 5
    SHT_DYNAMIC  = 6
    SHT_NOTE     = 7
    SHT_NOBITS   = 8
    SHT_REL      = 9
    SHT_SHLIB    = 10
    SHT_DYNSYM   = 11
    # see <https://docs.oracle.com/cd/E19120-01/open.solaris/819-0690/6n33n7fcj/index.html>
    SHT_INIT_ARRAY = 14
    SHT_FINI_ARRAY = 15
    SHT_PREINIT_ARRAY = 16
    SHT_GROUP = 17
    SHT_SYMTAB_SHNDX = 18
    SHT_LOOS     = 0x60000000
    SHT_GNU_HASH = 0x6ffffff6
    SHT_GNU_VERDEF = 0x6ffffffd
    SHT_GNU_VERNEED = 0x6ffffffe
    SHT_GNU_VERSYM = 0x6fffffff
    SHT_LOPROC   = 0x70000000
    SHT_HIPROC   = 0x7fffffff
    SHT_LOUSER   = 0x80000000
    SHT_HIUSER   = 0xffffffff


class ElfSectionAttributeFlag(Flag):
    SHF_WRITE     = 0x01
    SHF_ALLOC     = 0x02
    SHF_EXECINSTR = 0x04


class ElfSymbolBindType(Enum):
    STB_LOCAL  = 0
    STB_GLOBAL = 1
    STB_WEAK   = 2
    STB_GNU_UNIQUE = 10
    STB_HIOS   = 12
    STB_LOPROC = 13
    STB_HIPROC = 15


class ElfSymbolType(Enum):
    STT_NOTYPE = 0
    STT_OBJECT = 1
    STT_FUNC   = 2
    STT_SECTION = 3
    STT_FILE   = 4
    STT_COMMON = 5
    STT_TLS    = 6
    STT_GNU_IFUNC = 10
    STT_HIOS   = 12
    STT_LOPROC = 13
    STT_HIPROC = 15


class ElfSymbolVisibility(Enum):
    STV_DEFAULT   = 0
    STV_INTERNAL  = 1
    STV_HIDDEN    = 2
    STV_PROTECTED = 3


class ElfDynamicTagType(Enum):
    DT_NULL     = 0x00
    DT_NEEDED   = 0x01
    DT_PLTRELSZ = 0x02
    DT_PLTGOT   = 0x03
    DT_HASH     = 0x04
    DT_STRTAB   = 0x05
    DT_SYMTAB   = 0x06
    DT_RELA     = 0x07
    DT_RELASZ   = 0x08
    DT_RELAENT  = 0x09
    DT_STRSZ    = 0x0a
    DT_SYMENT   = 0x0b
    DT_INIT     = 0x0c
    DT_FINI     = 0x0d
    DT_SONAME   = 0x0e
    DT_RPATH    = 0x0f
    DT_SYMBOLIC = 0x10
    DT_REL      = 0x11
    DT_RELSZ    = 0x12
    DT_RELENT   = 0x13
    DT_PLTREL   = 0x14
    DT_DEBUG    = 0x15
    DT_TEXTREL  = 0x16
    DT_JMPREL   = 0x17
    DT_BIND_NOW = 0x18
    DT_INIT_ARRAY = 0x19
    DT_FINI_ARRAY = 0x1a
    DT_INIT_ARRAYSZ = 0x1b
    DT_FINI_ARRAYSZ = 0x1c
    DT_RUNPATH  = 0x1d
    DT_FLAGS    = 0x1e
    DT_ENCODING = 0x20
    DT_PREINIT_ARRAY = 0x20
    DT_PREINIT_ARRAYSZ = 0x21
    DT_SYMTAB_SHNDX = 0x22
    DT_LOOS        = 0x6000000d
    DT_HIOS        = 0x6ffff000
    DT_VALRNGLO    = 0x6ffffd00
    DT_VALRNGHI    = 0x6ffffdff
    DT_ADDRRNGLO   = 0x6ffffe00
    DT_GNU_HASH    = 0x6ffffef5
    DT_ADDRRNGHI   = 0x6ffffeff
    DT_VERSYM      = 0x6ffffff0
    DT_RELACOUNT   = 0x6ffffff9
    DT_RELCOUNT    = 0x6ffffffa
    DT_FLAGS_1     = 0x6ffffffb
    DT_VERDEF      = 0x6ffffffc
    DT_VERDEFNUM   = 0x6ffffffd
    DT_VERNEED     = 0x6ffffffe
    DT_VERNEEDNUM  = 0x6fffffff
    DT_LOPROC   = 0x70000000
    DT_HIPROC   = 0x7fffffff


class ElfNoteType(Enum):
    NT_GNU_ABI_TAG = 1
    NT_GNU_HWCAP = 2
    NT_GNU_BUILD_ID = 3
    NT_GNU_GOLD_VERSION = 4
    NT_GNU_PROPERTY_TYPE_0 = 5


class ElfRelocationType_i386(Enum):
    R_386_NONE = 0
    R_386_32   = 1
    R_386_PC32 = 2
    R_386_GOT32 = 3
    R_386_PLT32 = 4
    R_386_COPY  = 5
    R_386_GLOB_DAT = 6
    R_386_JMP_SLOT = 7
    R_386_RELATIVE = 8
    R_386_GOTOFF   = 9
    R_386_GOTPC    = 10
    R_386_32PLT    = 11
    R_386_TLS_TPOFF = 14
    R_386_16       = 20
    R_386_PC16     = 21
    R_386_8        = 22
    R_386_PC8      = 23
    R_386_TLS_DTPMOD32 = 35
    R_386_TLS_DTPOFF32 = 36
    R_386_TLS_TPOFF32 = 37
    R_386_SIZE32   = 38
    R_386_IRELATIVE = 42
    R_386_GOT32X   = 43


class ElfRelocationType_x64(Enum):
    """
    Source: <https://docs.oracle.com/cd/E19120-01/open.solaris/819-0690/chapter7-2/index.html>

    But probably the best is to read directly from the elf.h of your libc's source code.
    """
    R_X86_64_NONE = 0
    R_X86_64_64 = 1
    R_X86_64_PC32 = 2
    R_X86_64_GOT32 = 3
    R_X86_64_PLT32 = 4
    R_X86_64_COPY = 5
    R_X86_64_GLOB_DAT = 6
    R_X86_64_JUMP_SLOT = 7
    R_X86_64_RELATIVE = 8
    R_X86_64_GOTPCREL = 9
    R_X86_64_32 = 10
    R_X86_64_32S = 11
    R_X86_64_16 = 12
    R_X86_64_PC16 = 13
    R_X86_64_8 = 14
    R_X86_64_PC8 = 15
    # Thread-Local Storage Relocation Types
    R_X86_64_DTPMOD64 = 16
    R_X86_64_DTPOFF64 = 17
    R_X86_64_TPOFF64 = 18
    R_X86_64_TLSGD = 19
    R_X86_64_TLSLD = 20
    R_X86_64_DTPOFF32 = 21
    R_X86_64_GOTTPOFF = 22
    R_X86_64_TPOFF32 = 23
    # end TLS ###
    R_X86_64_PC64 = 24
    R_X86_64_GOTOFF64 = 25
    R_X86_64_GOTPC32 = 26
    R_X86_64_SIZE32 = 32
    R_X86_64_SIZE64 = 33
    R_X86_64_IRELATIVE = 37
    R_X86_64_GOTPCRELX = 41
    R_X86_64_REX_GOTPCRELX = 42


RELOCATION_TYPES = {
    ElfMachine.EM_386.value: ElfRelocationType_i386,
    ElfMachine.EM_X86_64.value: ElfRelocationType_x64,
}

# used to complete the names passed without it
PREFIXES = {
    ElfType: 'ET',
    ElfMachine: 'EM',
    ElfSectionType: 'SHT',
    ElfSegmentType: 'PT',
    ElfDynamicTagType: 'DT',
    ElfSymbolBindType: 'STB',
    ElfSymbolType: 'STT',
    ElfSymbolVisibility: 'STV',
    ElfNoteType: 'NT',
}


def to_constant(enum, value) -> int:
    '''Fetch the correct value from the enum: it accepts an integer, a member
    of the enum itself or a name, with or without the prefix and in whatever case,
    so that all these are equivalent

        to_constant(ElfSegmentType, 4)
        to_constant(ElfSegmentType, ElfSegmentType.PT_NOTE)
        to_constant(ElfSegmentType, 'note')
        to_constant(ElfSegmentType, 'PT_NOTE')
    '''
    if isinstance(value, enum):
        return value.value

    if isinstance(value, Enum):
        value = value.name
    elif isinstance(value, int):
        if any(_.value == value for _ in enum):
            return value
        raise ConstantException(f'No constant is "{value}" in {enum.__name__}')

    name = str(value).upper()
    prefix = PREFIXES.get(enum)
    if prefix and not name.startswith(prefix + '_'):
        name = f'{prefix}_{name}'

    try:
        return enum[name].value
    except KeyError:
        raise ConstantException(f'No constant named "{name}" in {enum.__name__}')


def lookup(enum, code):
    '''It returns the member of the enum with the given value.'''
    try:
        return enum(code)
    except ValueError:
        raise ConstantException(f'No constant is "{code}" in {enum.__name__}')


def constant_name(enum, code):
    '''Like lookup() but it returns the name, or None for unknown values.'''
    try:
        return enum(code).name
    except ValueError:
        return None


def to_member(enum, code):
    '''Like lookup() but an unknown value is returned as the integer itself:
    the codes found into a file are not limited to the ones we know.'''
    try:
        return enum(code)
    except ValueError:
        return code
