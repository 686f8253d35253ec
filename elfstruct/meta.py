import logging
from enum import Enum


class Endianess(Enum):
    LITTLE_ENDIAN = 'little'
    BIG_ENDIAN    = 'big'

    @property
    def prefix(self):
        '''the byte order character used by the struct module'''
        return '<' if self is Endianess.LITTLE_ENDIAN else '>'


class FieldBase(object):

    def contribute_to_record(self, cls, name):
        if name in cls._meta.fields:
            raise AttributeError(f'field {name} is already present in class {cls.__name__}')

        self.name = name
        cls._meta.fields.append(name)
        cls._meta.instances[name] = self


class Meta(object):
    """Class containing metadata about the record"""

    def __init__(self):
        self.fields = []
        self.instances = {}


class MetaRecord(type):

    def __new__(cls, names, bases, attrs):
        '''Fields are collected in the order they are defined, the ones inherited
        from the parents come first.'''
        fields = {}
        new_attrs = {}
        for obj_name, obj in attrs.items():
            if hasattr(obj, 'contribute_to_record'):
                fields[obj_name] = obj
            else:
                new_attrs[obj_name] = obj

        new_cls = super(MetaRecord, cls).__new__(cls, names, bases, new_attrs)

        new_cls._meta = Meta()

        # handle inheritance
        parents = [_ for _ in bases if isinstance(_, MetaRecord)]
        for parent in parents:
            for obj_name in parent._meta.fields:
                if obj_name not in new_cls._meta.fields:
                    new_cls._meta.fields.append(obj_name)
                    new_cls._meta.instances[obj_name] = parent._meta.instances[obj_name]

        for obj_name, obj in fields.items():
            new_cls.add_to_class(obj_name, obj)

        return new_cls

    def add_to_class(cls, name, value):
        logging.getLogger(__name__).debug('contribute_to_record() found for field \'%s\'', name)
        value.contribute_to_record(cls, name)
