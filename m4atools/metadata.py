'''
# Metadata entries

The "ilst" atom contains one atom for each metadata field, whose type is the
identifier of the field, wrapping a single "data" atom

    .---------------------------------------------------------------.
    | size | identifier                                             |
    |   .-----------------------------------------------------------.
    |   | size | "data" | type (u32) | locale (u32) | value bytes   |
    |   '-----------------------------------------------------------'
    '---------------------------------------------------------------'

The sizes are recomputed when packing so here we only take care of the
payload of the "data" atom, the layout of which is handled by the fields.
A wrong size in the header of the "data" atom breaks the tiling of the
entry while unpacking: such an entry is kept opaque, without children,
and it is reported here as malformed.
'''
import logging

from .core import Atom
from .enum import ValueShape
from .exceptions import (
    MalformedMetadataEntry,
    MetadataContainerAbsent,
)
from .fields import Field, field_for_shape
from .utils import find_entry


logger = logging.getLogger(__name__)

DATA_TYPE = 'data'


def get_data_atom(entry: Atom) -> Atom:
    '''An entry must wrap exactly one "data" atom.'''
    if len(entry.children) != 1:
        raise MalformedMetadataEntry(
            chain=[entry.type],
            message=f'expected exactly one "{DATA_TYPE}" atom, found {len(entry.children)}')

    data = entry.children[0]

    if data.type != DATA_TYPE:
        raise MalformedMetadataEntry(chain=[data.type, entry.type], message=f'expected a "{DATA_TYPE}" atom')

    return data


def unpack_field(entry: Atom, shape: ValueShape) -> Field:
    data = get_data_atom(entry)

    field = field_for_shape(shape)

    try:
        field.unpack(data.payload)
    except MalformedMetadataEntry as e:
        e.chain.extend([DATA_TYPE, entry.type])
        raise

    return field


def decode_entry(entry: Atom, shape: ValueShape):
    '''Returns the value of the entry, it raises MalformedMetadataEntry (or
    its subclass UnsupportedShapeWidth) if the entry can't be interpreted
    with the given shape.'''
    return unpack_field(entry, shape).value


def build_data_atom(field: Field) -> Atom:
    return Atom(DATA_TYPE, payload=field.pack())


def build_entry(identifier: str, field: Field) -> Atom:
    return Atom(identifier, children=[build_data_atom(field)])


def encode_entry(identifier: str, value, shape: ValueShape) -> bytes:
    return build_entry(identifier, field_for_shape(shape, value=value)).pack()


def upsert_entry(container: Atom, identifier: str, shape: ValueShape, value) -> Atom:
    '''Set the value of the entry, creating it if it doesn't exist.

    When the entry is already present and well formed, the bytes not
    carrying the value (like the padding of the pairs) are preserved.'''
    if container is None:
        raise MetadataContainerAbsent(chain=[identifier], message='there is no metadata container')

    entry = find_entry(container, identifier)

    if entry is None:
        entry = build_entry(identifier, field_for_shape(shape, value=value))
        logger.debug('appending new entry \'%s\' to \'%s\'' % (identifier, container.type))
        return container.append(entry)

    try:
        field = unpack_field(entry, shape)
    except MalformedMetadataEntry as e:
        logger.warning('rebuilding entry \'%s\': %s' % (identifier, e))
        field = None

    if field is None:
        field = field_for_shape(shape, value=value)
        for child in list(entry.children):
            entry.remove(child)
        entry.payload = b''
        entry.append(build_data_atom(field))
        return entry

    field.value = value
    entry.children[0].payload = field.pack()

    return entry


def remove_entry(container: Atom, identifier: str) -> bool:
    if container is None:
        return False

    entry = find_entry(container, identifier)

    if entry is None:
        return False

    container.remove(entry)

    return True
