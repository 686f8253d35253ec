'''
Common methods for dynamic sections and dynamic segments.

The dynamic table is an array of (d_tag, d_val) couples terminated by an
entry with tag DT_NULL; the declared size of the table is not reliable, so
the terminator is the only thing that counts.
'''
import itertools
import logging
from functools import cached_property

from .enum import ElfDynamicTagType, to_constant, constant_name
from .structures import DynamicEntry
from .utils import decode_string


logger = logging.getLogger(__name__)


class DynamicMixin(object):
    '''The host class must provide the attributes stream, elf_class, endian
    and tag_start; the string-valued tags can be resolved only if it
    provides also offset_from_vma().'''

    def tag_at(self, n):
        '''Get the n-th tag, tags are lazy loaded.

        We cannot check the upper bound of n here since the only way to know
        the number of tags is to walk them until DT_NULL.'''
        if n < 0:
            return None

        tag_at_map = self.__dict__.setdefault('_tag_at_map', {})
        if n not in tag_at_map:
            entry = DynamicEntry(elf_class=self.elf_class, endian=self.endian)
            entry.unpack(self.stream, self.tag_start + n * entry.size)
            tag_at_map[n] = Tag(entry, self, n)

        return tag_at_map[n]

    def iter_tags(self):
        '''Iterate the tags, the last one yielded is the DT_NULL one.'''
        for n in itertools.count():
            tag = self.tag_at(n)
            yield tag

            if tag.tag == ElfDynamicTagType.DT_NULL.value:
                break

    def tags(self):
        return list(self.iter_tags())

    def tag_by_type(self, type):
        '''It returns the first tag of the given type (see to_constant() for what
        is accepted as type) or None if there is not.'''
        type = to_constant(ElfDynamicTagType, type)
        for tag in self.iter_tags():
            if tag.tag == type:
                return tag

        return None

    def tags_by_type(self, type):
        type = to_constant(ElfDynamicTagType, type)
        return [_ for _ in self.iter_tags() if _.tag == type]

    @cached_property
    def dynstr_offset(self):
        '''File offset of the string table pointed by DT_STRTAB.'''
        strtab = self.tag_by_type(ElfDynamicTagType.DT_STRTAB)
        offset_from_vma = getattr(self, 'offset_from_vma', None)

        if strtab is None or offset_from_vma is None:
            logger.warning('unable to locate the dynamic string table')
            return None

        return offset_from_vma(strtab.value)

    def string_at(self, offset):
        '''Resolve a string from the dynamic string table.'''
        base = self.dynstr_offset
        if base is None:
            return None

        return decode_string(self.stream.read_cstring(base + offset))


class Tag(object):
    '''An entry of the dynamic table.'''

    STRING_TAGS = {
        ElfDynamicTagType.DT_NEEDED.value,
        ElfDynamicTagType.DT_SONAME.value,
        ElfDynamicTagType.DT_RPATH.value,
        ElfDynamicTagType.DT_RUNPATH.value,
    }

    def __init__(self, header, dynamic, index):
        self.header = header
        self.dynamic = dynamic
        self.index = index

    def __repr__(self):
        return '<%s(%s, 0x%x)>' % (self.__class__.__name__, self.type_name or self.tag, self.value)

    @property
    def tag(self):
        return self.header.d_tag

    @property
    def value(self):
        return self.header.d_val

    @property
    def type_name(self):
        return constant_name(ElfDynamicTagType, self.tag)

    @cached_property
    def name(self):
        '''For the tags pointing into the string table (like DT_NEEDED) it's
        the string itself, None for the others.'''
        if self.tag not in self.STRING_TAGS:
            return None

        return self.dynamic.string_at(self.value)
