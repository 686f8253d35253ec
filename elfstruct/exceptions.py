class ElfStructException(Exception):
    '''Base class to extend in order to throw exception in elfstruct.'''
    pass


class UnpackException(ElfStructException):
    '''It takes a single argument that represents the chain of the records
    and fields that caused the exception.
    '''

    def __init__(self, chain):
        self.chain = chain
        super().__init__('unable to unpack %s' % '.'.join(chain))


class FormatException(ElfStructException):
    '''The identification bytes don't describe an ELF file we can read.'''
    pass


class MagicException(FormatException):
    pass


class ElfClassException(FormatException):
    pass


class EndianessException(FormatException):
    pass


class ConstantException(ElfStructException, ValueError):
    '''This is raised when a value cannot be resolved to a known constant.'''
    pass
