'''
Since both note sections and note segments refer to notes, this module
defines the common methods for NoteSection and NoteSegment.

Structure of notes are:

    +---------------+
    | Note 1 header |
    +---------------+
    |  Note 1 name  |
    +---------------+
    |  Note 1 desc  |
    +---------------+
    | Note 2 header |
    +---------------+
    |      ...      |
    +---------------+

where name and desc are padded to a multiple of four bytes.
'''
import logging
from functools import cached_property

from .enum import ElfNoteType, constant_name
from .structures import NoteHeader
from .utils import align_up


logger = logging.getLogger(__name__)

NOTE_ALIGNMENT = 4
# it doesn't depend on the class nor on the endianess
SIZE_OF_NHDR = NoteHeader().size


class NoteMixin(object):
    '''The host class must provide the attributes stream, elf_class, endian,
    note_start and note_total_size.'''

    def _create_note(self, offset):
        header = NoteHeader.from_stream(self.stream, offset, elf_class=self.elf_class, endian=self.endian)
        return Note(header, self.stream, offset)

    def iter_notes(self):
        '''Iterate all the notes, each one is created only the first time.'''
        notes_offset_map = self.__dict__.setdefault('_notes_offset_map', {})

        cursor = self.note_start
        end = self.note_start + self.note_total_size
        while cursor < end:
            if cursor not in notes_offset_map:
                logger.debug('creating note at offset 0x%x', cursor)
                notes_offset_map[cursor] = self._create_note(cursor)

            note = notes_offset_map[cursor]
            yield note

            cursor += note.total_size

    def notes(self):
        return list(self.iter_notes())


class Note(object):
    '''A single note: the name and the description are read only when needed.'''

    def __init__(self, header, stream, offset):
        self.header = header
        self.stream = stream
        self.offset = offset  # where the header starts

    def __repr__(self):
        return '<%s(offset=0x%x, type=%d)>' % (self.__class__.__name__, self.offset, self.type)

    @property
    def type(self):
        return self.header.n_type

    @property
    def type_name(self):
        return constant_name(ElfNoteType, self.type)

    @property
    def name_offset(self):
        return self.offset + SIZE_OF_NHDR

    @property
    def desc_offset(self):
        return self.name_offset + align_up(self.header.n_namesz, NOTE_ALIGNMENT)

    @property
    def total_size(self):
        '''distance from the start of this note to the next one'''
        return (SIZE_OF_NHDR
                + align_up(self.header.n_namesz, NOTE_ALIGNMENT)
                + align_up(self.header.n_descsz, NOTE_ALIGNMENT))

    @cached_property
    def name(self) -> bytes:
        # the terminating NULL byte is part of n_namesz
        return self.stream.read_at(self.name_offset, self.header.n_namesz)

    @cached_property
    def desc(self) -> bytes:
        return self.stream.read_at(self.desc_offset, self.header.n_descsz)

    @property
    def description(self) -> bytes:
        return self.desc
