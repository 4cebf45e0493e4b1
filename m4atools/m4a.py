'''
# MPEG-4 audio files

Editable representation of an .m4a file: the atoms are kept as they are
read, so packing a file without modifications gives back the same bytes,
and the metadata are read and written in the "ilst" atom

    moov/udta/meta/ilst

Reference for the metadata atoms at
<https://developer.apple.com/documentation/quicktime-file-format/metadata_item_list_atom>.
'''
import logging
from typing import List, Optional

from .atoms import METADATA_PATH
from .catalogue import is_known_identifier, resolve, to_identifier
from .core import Atom, HEADER_SIZE, pack_atoms, unpack_atoms
from .enum import Compliant, ValueShape
from .exceptions import (
    InvalidFile,
    M4AToolsException,
    MalformedMetadataEntry,
    MetadataContainerAbsent,
    UnrecognizedMetadataIdentifier,
)
from .metadata import decode_entry, remove_entry, upsert_entry
from .streams import Stream
from .utils import find_atom, find_child, find_entry, find_metadata_container


# payload of the handler atom written by iTunes
HDLR_PAYLOAD = b'\x00' * 8 + b'mdirappl' + b'\x00' * 9


class M4AFile(object):
    '''The source can be a path or the bytes of the file; without source
    we have an empty file with no atoms.

    The diagnostics found while parsing and accessing the metadata are
    collected in the attribute of the same name as exception instances.'''

    def __init__(self, source=None, compliant=Compliant.TYPE):
        self.logger = logging.getLogger(__name__)
        self.compliant = compliant
        self.atoms: List[Atom] = []
        self.diagnostics: List[M4AToolsException] = []
        self.file_name = None
        self.path = None

        if source is None:
            return

        with Stream(source) as stream:
            self.logger.debug('unpacking \'%s\' from %s' % (self.__class__.__name__, stream))
            self.file_name = stream.file_name
            self.path = stream.path
            self.unpack(stream)

    def __repr__(self):
        return '<%s(%s)>' % (self.__class__.__name__, ','.join(atom.type for atom in self.atoms))

    def __str__(self):
        self.relayout()
        return '\n'.join(line for atom in self.atoms for line in atom.dump())

    def unpack(self, stream):
        '''Nothing is exposed if the parsing fails.'''
        end = stream.size

        if end < HEADER_SIZE:
            raise InvalidFile(chain=[], message=f'{end} bytes are too few for an atom')

        stream.seek(0)
        atoms = unpack_atoms(stream, end, compliant=self.compliant)
        diagnostics = self.validate(atoms)

        self.atoms = atoms
        self.diagnostics = diagnostics

    def validate(self, atoms):
        '''Check that the identifiers in the metadata container are known.'''
        diagnostics = []
        container = find_metadata_container(atoms)

        if container is None:
            return diagnostics

        for entry in container.children:
            if is_known_identifier(entry.type):
                continue

            exc = UnrecognizedMetadataIdentifier(chain=entry.chain, message='unrecognized metadata type')
            self.logger.warning(str(exc))

            if self.compliant & Compliant.IDENTIFIER:
                raise exc

            diagnostics.append(exc)

        return diagnostics

    def report(self, exc):
        '''Add the finding to the diagnostics, unless the same one is already there.'''
        key = (exc.__class__, tuple(exc.chain), exc.message)

        for other in self.diagnostics:
            if (other.__class__, tuple(other.chain), other.message) == key:
                return

        self.logger.warning('invalid metadata entry %s' % exc)
        self.diagnostics.append(exc)

    def relayout(self):
        offset = 0
        for atom in self.atoms:
            offset += atom.relayout(offset=offset)

        return offset

    def pack(self) -> bytes:
        self.relayout()
        return pack_atoms(self.atoms)

    def write(self, path) -> None:
        data = self.pack()
        self.logger.debug('writing %d bytes to \'%s\'' % (len(data), path))

        with open(path, 'wb') as f:
            f.write(data)

    def find_atom(self, *path) -> Optional[Atom]:
        return find_atom(self.atoms, path)

    @property
    def metadata_container(self) -> Optional[Atom]:
        return find_metadata_container(self.atoms)

    def create_metadata_container(self) -> Atom:
        '''Create what is missing of the moov/udta/meta/ilst chain.'''
        atoms = self.atoms
        father = None

        for component in METADATA_PATH:
            atom = find_child(atoms, component)

            if atom is None:
                if father is None:
                    raise MetadataContainerAbsent(chain=[component], message='the file has no movie atom')

                atom = father.append(self._build_container(component))
                self.logger.info('created \'%s\' in \'%s\'' % (component, father.type))

            father = atom
            atoms = atom.children

        return father

    @staticmethod
    def _build_container(type_):
        if type_ == 'meta':
            return Atom('meta', payload=b'\x00' * 4, children=[Atom('hdlr', payload=HDLR_PAYLOAD)])

        return Atom(type_)

    def metadata_identifiers(self) -> List[str]:
        container = self.metadata_container
        return [entry.type for entry in container.children] if container is not None else []

    def get_metadata(self, key, shape: Optional[ValueShape] = None):
        '''Return the value of the metadata or None if it's missing or
        it can't be interpreted (the reason ends up in the diagnostics).'''
        field = resolve(key, shape)
        container = self.metadata_container

        if container is None:
            return None

        entry = find_entry(container, field.identifier)

        if entry is None:
            return None

        try:
            return decode_entry(entry, field.shape)
        except MalformedMetadataEntry as e:
            self.report(e)

        return None

    def set_metadata(self, key, value, shape: Optional[ValueShape] = None, create_container=False) -> None:
        '''Set the value of the metadata; if the metadata container is
        missing it's created only when explicitly requested.'''
        field = resolve(key, shape)
        container = self.metadata_container

        if container is None and create_container:
            container = self.create_metadata_container()

        upsert_entry(container, field.identifier, field.shape, value)

    def delete_metadata(self, key) -> bool:
        return remove_entry(self.metadata_container, to_identifier(key))
