import io
import os
import logging


logger = logging.getLogger(__name__)


class Stream(object):
    '''This is a simple wrapper around bytes/file objects to
    uniform its properties: mainly we need to have a read_at() method
    that seeks explicitly before every read, since the position of the
    underlying object is shared between all the entities of a file.'''

    CSTRING_CHUNK = 0x40

    def __init__(self, obj):
        '''Here we normalize the object in order to be accessed as a normal file object'''
        self._type = type(obj)
        self.obj = obj
        self.owned = False

        init_method_name = 'init_%s' % self.obj.__class__.__name__

        init_method = getattr(self, init_method_name, self.init_default)

        init_method()

    def __repr__(self):
        return '<%s(%r)>' % (self.__class__.__name__, self.obj)

    def __getattr__(self, name):
        # not yet initialized (copy, pickle)
        if name == 'obj':
            raise AttributeError(name)

        return getattr(self.obj, name)

    def init_str(self):
        '''We think this is a path'''
        logger.debug('opening path \'%s\'', self.obj)
        self.obj = open(self.obj, 'rb')
        self.owned = True

    def init_bytes(self):
        '''We think these are raw bytes'''
        self.obj = io.BytesIO(self.obj)

    init_bytearray = init_bytes

    def init_memoryview(self):
        self.obj = io.BytesIO(self.obj.tobytes())

    def init_default(self):
        '''paths from pathlib or already opened files: the latter remain owned by the caller'''
        if isinstance(self.obj, os.PathLike):
            self.obj = os.fspath(self.obj)
            self.init_str()
            return

        if not (hasattr(self.obj, 'seek') and hasattr(self.obj, 'read')):
            raise ValueError('\'%s\' is the wrong kind of object to use as stream' % self._type.__name__)

    def seek(self, offset):
        if not isinstance(offset, int):
            raise ValueError('\'%s\' is the wrong kind of offset to use' % offset.__class__.__name__)

        self.obj.seek(offset)

        return self

    def read_at(self, offset, size) -> bytes:
        '''It returns at most size bytes starting at offset'''
        self.seek(offset)
        return self.obj.read(size)

    def read_cstring(self, offset):
        '''Read a NULL terminated string starting at offset (the terminator is not
        included); if the stream ends before the terminator it returns None.'''
        self.seek(offset)
        data = []
        while True:
            chunk = self.obj.read(self.CSTRING_CHUNK)
            if not chunk:
                logger.debug('stream exhausted looking for a terminator from 0x%x', offset)
                return None

            index = chunk.find(b'\x00')
            if index != -1:
                data.append(chunk[:index])
                break

            data.append(chunk)

        return b''.join(data)

    def close(self):
        '''Only the files opened by us are closed.'''
        if self.owned:
            self.obj.close()
