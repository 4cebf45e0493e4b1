'''
Registry of the atom types the parser knows about.

Only the top-level atoms are checked against VALID_TYPES: anything else in
the outermost sequence means we are not looking at an M4A file. Nested atoms
can have any type, but only the ones listed as containers are decoded into
children, the others keep their payload as an opaque blob.
'''

VALID_TYPES = frozenset([
    'ftyp', 'mdat', 'moov', 'pnot', 'udta',
    'uuid', 'moof', 'free', 'skip', 'jP2 ',
    'wide', 'load', 'ctab', 'imap', 'matt',
    'kmat', 'clip', 'crgn', 'sync', 'chap',
    'tmcd', 'scpt', 'ssrc', 'PICT',
])

CONTAINER_TYPES = frozenset([
    'moov',
    'udta',
    'meta',
    'ilst',
])

# atoms with a 4 bytes version/flags word before the children
FULL_CONTAINER_TYPES = frozenset([
    'meta',
])

METADATA_PATH = ('moov', 'udta', 'meta', 'ilst')

METADATA_CONTAINER_TYPE = METADATA_PATH[-1]

# the only type that can use the 64 bits size escape
EXTENDED_SIZE_TYPE = 'mdat'

# encoding of the four bytes of the type
TYPE_ENCODING = 'mac_roman'


def is_valid_type(type_):
    return type_ in VALID_TYPES


def is_metadata_entry(father):
    '''The children of the metadata container are the metadata entries.'''
    return father is not None and father.type == METADATA_CONTAINER_TYPE


def is_container(type_, father=None):
    return type_ in CONTAINER_TYPES or is_metadata_entry(father)


def encode_type(type_):
    raw = type_.encode(TYPE_ENCODING)
    if len(raw) != 4:
        raise ValueError(f'atom type {type_!r} must be exactly 4 bytes long')

    return raw


def decode_type(raw):
    return raw.decode(TYPE_ENCODING)
