import logging
from typing import Iterable, Optional, Sequence

from .atoms import METADATA_PATH


logger = logging.getLogger(__name__)


def find_child(atoms: Iterable["Atom"], type_: str) -> Optional["Atom"]:
    '''The first atom with the given type wins.'''
    for atom in atoms:
        if atom.type == type_:
            return atom

    return None


def find_atom(atoms: Iterable["Atom"], path: Sequence[str]) -> Optional["Atom"]:
    '''Follow the path of types, like ["moov", "udta"], starting from the
    given sequence of atoms.'''
    if not path:
        raise ValueError('the path must have at least one component')

    atom = None
    for component in path:
        atom = find_child(atoms, component)
        if atom is None:
            logger.debug('no \'%s\' found while looking for %s' % (component, '/'.join(path)))
            return None

        atoms = atom.children

    return atom


def find_metadata_container(atoms: Iterable["Atom"]) -> Optional["Atom"]:
    return find_atom(atoms, METADATA_PATH)


def find_entry(container: "Atom", identifier: str) -> Optional["Atom"]:
    return find_child(container.children, identifier)
