from enum import Enum, Flag, auto


class Compliant(Flag):
    '''It indicates which degree of compliantness the data must reflect the format'''
    NONE       = 0
    TYPE       = 1 << 0
    IDENTIFIER = 1 << 1


class DataType(Enum):
    '''Well-known types stored in the first word of a "data" atom.'''
    IMPLICIT = 0
    UTF8     = 1
    JPEG     = 13
    PNG      = 14
    INTEGER  = 21
    BMP      = 27


class ValueShape(Enum):
    '''How the value bytes of a metadata entry must be interpreted.'''
    STRING = auto()
    UINT8  = auto()
    UINT16 = auto()
    UINT32 = auto()
    UINT64 = auto()
    PAIR   = auto()
    IMAGE  = auto()
