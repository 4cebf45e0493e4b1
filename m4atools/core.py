"""
Core module for the atoms (a.k.a. boxes) of the MPEG-4 container.

Each atom starts with an header

    .----------------.------------.
    | size (u32, BE) | type (4cc) |
    '----------------'------------'

and the size counts also the header itself. The "mdat" atom can use
the legacy escape size == 1, in which case the real size is the u64
following the type and the header is 16 bytes long.

Container atoms have as payload a sequence of other atoms, possibly
preceded by a fixed prefix (the version/flags word of a full box).
"""
import logging
import struct
import weakref
from typing import Iterable, List, Optional

from .atoms import (
    EXTENDED_SIZE_TYPE,
    FULL_CONTAINER_TYPES,
    decode_type,
    encode_type,
    is_container,
    is_metadata_entry,
    is_valid_type,
)
from .enum import Compliant
from .exceptions import InvalidBlockType, InvalidFile
from .properties import get_chain_from_atom, get_root_from_atom
from .streams import Stream


logger = logging.getLogger(__name__)

HEADER = struct.Struct('>I4s')
EXTENDED_HEADER = struct.Struct('>I4sQ')
FULL_BOX_PREFIX_SIZE = 4

HEADER_SIZE = HEADER.size
EXTENDED_HEADER_SIZE = EXTENDED_HEADER.size

MAX_SIZE = 0xffffffff


class Atom(object):
    '''Node of the tree of atoms.

    The payload contains the bytes following the header that are not decoded
    as children: for a leaf atom it's all the content, for a container it's
    the (usually empty) prefix before the children.'''

    def __init__(self, type_, payload=b'', children=None, father=None, is_extended_size=False):
        encode_type(type_)  # validate early
        self.type = type_
        self.payload = payload
        self.children: List["Atom"] = []
        self.father = father
        self.is_extended_size = is_extended_size
        self.offset = None

        for child in children or []:
            self.append(child)

    def __repr__(self):
        if self.children:
            return '<%s(%r, children=%r)>' % (self.__class__.__name__, self.type, self.children)

        return '<%s(%r, size=%d)>' % (self.__class__.__name__, self.type, self.size)

    def __str__(self):
        return '\n'.join(self.dump())

    def __iter__(self):
        return iter(self.children)

    def __len__(self):
        return len(self.children)

    def dump(self, level=0):
        '''Human readable representation of the tree, one line per atom.'''
        offset = '%08x' % self.offset if self.offset is not None else '????????'
        lines = ['%s%s %s size=%d' % ('  ' * level, offset, self.type, self.size)]
        for child in self.children:
            lines.extend(child.dump(level=level + 1))

        return lines

    def __get_father(self):
        return self._father() if self._father is not None else None

    def __set_father(self, value):
        self._father = weakref.ref(value) if value is not None else None

    father = property(__get_father, __set_father)

    @property
    def root(self):
        '''Obtain the outermost atom containing this one'''
        return get_root_from_atom(self)

    @property
    def chain(self):
        return get_chain_from_atom(self)

    @property
    def header_size(self):
        return EXTENDED_HEADER_SIZE if self.is_extended_size else HEADER_SIZE

    @property
    def content_size(self):
        return len(self.payload) + sum(child.size for child in self.children)

    @property
    def size(self):
        '''The size MUST not be set but MUST be derived from the content'''
        return self.header_size + self.content_size

    @property
    def raw(self):
        return self.pack()

    @property
    def layout(self):
        return [(child.type, child.offset, child.size) for child in self.children]

    def append(self, child):
        child.father = self
        self.children.append(child)

        return child

    def remove(self, child):
        self.children.remove(child)
        child.father = None

    def relayout(self, offset=0):
        '''Set the offset of this atom and of its descendants, returns the size.'''
        self.offset = offset

        size = self.header_size + len(self.payload)
        for child in self.children:
            size += child.relayout(offset=offset + size)

        return size

    def pack_header(self):
        size = self.size
        raw_type = encode_type(self.type)

        if self.is_extended_size:
            return EXTENDED_HEADER.pack(1, raw_type, size)

        if size > MAX_SIZE:
            raise ValueError(f'atom \'{self.type}\' of {size} bytes needs the extended size')

        return HEADER.pack(size, raw_type)

    def pack(self):
        '''The sizes are derived from the content so a change in a
        descendant is reflected in the headers of all its ancestors.'''
        return self.pack_header() + self.payload + pack_atoms(self.children)

    @classmethod
    def unpack(cls, stream, end, father=None, compliant=Compliant.TYPE):
        '''Read an atom starting at the actual position of the stream,
        the atom can't go past the offset indicated by end.'''
        offset = stream.tell()

        if end - offset < HEADER_SIZE:
            raise InvalidFile(chain=[], message=f'{end - offset} trailing bytes at offset 0x{offset:x}')

        size, raw_type = HEADER.unpack(stream.read(HEADER_SIZE))
        type_ = decode_type(raw_type)

        if father is None and compliant & Compliant.TYPE and not is_valid_type(type_):
            raise InvalidBlockType(chain=[type_], message=f'unknown atom type at offset 0x{offset:x}')

        is_extended_size = False
        header_size = HEADER_SIZE

        if size == 1 and type_ == EXTENDED_SIZE_TYPE:
            if end - offset < EXTENDED_HEADER_SIZE:
                raise InvalidFile(chain=[type_], message='truncated extended size')
            stream.seek(offset)
            _, _, size = EXTENDED_HEADER.unpack(stream.read(EXTENDED_HEADER_SIZE))
            is_extended_size = True
            header_size = EXTENDED_HEADER_SIZE

        if size < header_size or offset + size > end:
            raise InvalidFile(
                chain=[type_],
                message=f'size {size} at offset 0x{offset:x} doesn\'t fit in 0x{end:x}')

        logger.debug('unpacking atom \'%s\' at offset 0x%x with size %d' % (type_, offset, size))

        atom = cls(type_, father=father, is_extended_size=is_extended_size)
        atom.offset = offset

        content_end = offset + size

        if not is_container(type_, father=father):
            atom.payload = stream.read(content_end - stream.tell())
            return atom

        content_offset = stream.tell()
        atom.payload = stream.read(get_prefix_size(type_, stream, content_end))

        try:
            atom.children = unpack_atoms(stream, content_end, father=atom, compliant=compliant)
        except InvalidFile as e:
            if not is_metadata_entry(father):
                e.chain.append(type_)
                raise

            # a broken entry must not invalidate the file: keep it as it is
            logger.warning('metadata entry \'%s\' at offset 0x%x is not made of atoms' % (type_, offset))
            stream.seek(content_offset)
            atom.payload = stream.read(content_end - content_offset)
            atom.children = []

        return atom


def get_prefix_size(type_, stream, end):
    '''A full box has a version/flags word before the children; for "meta" it's
    not always there (QuickTime) so we check that it is zero: the size of an
    atom can't be.'''
    if type_ not in FULL_CONTAINER_TYPES or end - stream.tell() < FULL_BOX_PREFIX_SIZE:
        return 0

    stream.save()
    word = stream.read(FULL_BOX_PREFIX_SIZE)
    stream.restore()

    return FULL_BOX_PREFIX_SIZE if word == b'\x00' * FULL_BOX_PREFIX_SIZE else 0


def unpack_atoms(stream: Stream, end: int, father: Optional[Atom] = None, compliant=Compliant.TYPE) -> List[Atom]:
    '''Read the atoms until the offset indicated by end, it must be reached exactly.'''
    atoms = []
    while stream.tell() != end:
        atoms.append(Atom.unpack(stream, end, father=father, compliant=compliant))

    return atoms


def pack_atoms(atoms: Iterable[Atom]) -> bytes:
    return b''.join(atom.pack() for atom in atoms)
