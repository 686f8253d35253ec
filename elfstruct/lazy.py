_MISSING = object()


class LazyArray(object):
    '''
    Fixed size array whose elements are created by a factory the first
    time they are accessed and then cached forever.

        arr = LazyArray(10, lambda i: i * i)
        arr[3]   # calls the factory
        arr[3]   # doesn't

    Differently from a list, an index out of the bounds (negative ones
    included) returns None.
    '''

    def __init__(self, size, factory):
        self._internal = [_MISSING] * size
        self._factory = factory

    def __repr__(self):
        loaded = sum(1 for _ in self._internal if _ is not _MISSING)
        return f'<{self.__class__.__name__}({loaded}/{len(self)} loaded)>'

    def __len__(self):
        return len(self._internal)

    def __getitem__(self, i):
        if i < 0 or i >= len(self._internal):
            return None

        if self._internal[i] is _MISSING:
            self._internal[i] = self._factory(i)

        return self._internal[i]

    def __iter__(self):
        for i in range(len(self)):
            yield self[i]
