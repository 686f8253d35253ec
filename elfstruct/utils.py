'''
Helpers for the values that ELF packs at sub-byte granularity.

Some fields carry more than one information: st_info has the binding in the
high nibble and the type in the low one, st_other has the visibility in its
lowest three bits and r_info has the symbol index in its upper part and the
relocation type in the lower one, where the split point depends on the class
of the file.
'''
from bitstring import BitArray, pack


# (width of the symbol index, width of the type) for each class
R_INFO_LAYOUT = {
    32: (24, 8),
    64: (32, 32),
}


def align_up(value, alignment=4):
    '''Round value up to the next multiple of alignment (a power of two).'''
    if alignment <= 1:
        return value

    return (value + alignment - 1) & ~(alignment - 1)


def split_bits(value, *widths):
    '''It returns the unsigned integers obtained reading value as the
    concatenation (MSB first) of bit fields with the given widths.'''
    bits = BitArray(uint=value, length=sum(widths))

    result = []
    cursor = 0
    for width in widths:
        result.append(bits[cursor:cursor + width].uint)
        cursor += width

    return tuple(result)


def _r_info_layout(elf_class):
    try:
        return R_INFO_LAYOUT[elf_class]
    except KeyError:
        raise ValueError(f'Invalid ELF class {elf_class!r}')


def r_info(sym, type, elf_class):
    '''Pack a symbol index and a relocation type as found in r_info.'''
    sym_width, type_width = _r_info_layout(elf_class)
    return pack(f'uint:{sym_width}, uint:{type_width}', sym, type).uint


def r_sym(info, elf_class):
    return split_bits(info, *_r_info_layout(elf_class))[0]


def r_type(info, elf_class):
    return split_bits(info, *_r_info_layout(elf_class))[1]


def st_info(bind, type):
    return pack('uint:4, uint:4', bind, type).uint


def st_bind(info):
    return split_bits(info, 4, 4)[0]


def st_type(info):
    return split_bits(info, 4, 4)[1]


def st_visibility(other):
    return split_bits(other, 5, 3)[1]


def decode_string(raw):
    '''Names into the string tables are bytes without a declared encoding,
    it returns None if raw is None.'''
    if raw is None:
        return None

    return raw.decode('utf-8', errors='backslashreplace')
