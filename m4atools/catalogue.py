'''
Catalogue of the metadata identifiers stored inside the "ilst" atom.

Each identifier is the four characters type of the entry (decoded as Mac OS
Roman, so that b'\\xa9nam' becomes '©nam') and is associated to a friendly
name and to the shape of its value.
'''
from types import MappingProxyType
from typing import NamedTuple, Optional, Union

from .atoms import decode_type
from .enum import ValueShape


class MetadataField(NamedTuple):
    identifier: str
    name: Optional[str]
    shape: ValueShape


_FIELDS = [
    # strings
    MetadataField('©nam', 'title', ValueShape.STRING),
    MetadataField('©ART', 'artist', ValueShape.STRING),
    MetadataField('aART', 'album_artist', ValueShape.STRING),
    MetadataField('©alb', 'album', ValueShape.STRING),
    MetadataField('©wrt', 'composer', ValueShape.STRING),
    MetadataField('©day', 'year', ValueShape.STRING),
    MetadataField('©gen', 'genre', ValueShape.STRING),
    MetadataField('©cmt', 'comment', ValueShape.STRING),
    MetadataField('©grp', 'grouping', ValueShape.STRING),
    MetadataField('©lyr', 'lyrics', ValueShape.STRING),
    MetadataField('©too', 'encoder', ValueShape.STRING),
    MetadataField('cprt', 'copyright', ValueShape.STRING),
    MetadataField('desc', 'description', ValueShape.STRING),
    MetadataField('ldes', 'long_description', ValueShape.STRING),
    MetadataField('catg', 'category', ValueShape.STRING),
    MetadataField('keyw', 'keyword', ValueShape.STRING),
    MetadataField('purd', 'purchase_date', ValueShape.STRING),
    MetadataField('purl', 'podcast_url', ValueShape.STRING),
    MetadataField('egid', 'episode_guid', ValueShape.STRING),
    MetadataField('soal', 'sort_album', ValueShape.STRING),
    MetadataField('soaa', 'sort_album_artist', ValueShape.STRING),
    MetadataField('soar', 'sort_artist', ValueShape.STRING),
    MetadataField('sonm', 'sort_title', ValueShape.STRING),
    MetadataField('soco', 'sort_composer', ValueShape.STRING),
    MetadataField('sosn', 'sort_show', ValueShape.STRING),
    MetadataField('tvsh', 'tv_show', ValueShape.STRING),
    MetadataField('tvnn', 'tv_network', ValueShape.STRING),
    MetadataField('tven', 'tv_episode_id', ValueShape.STRING),
    # integers
    MetadataField('cpil', 'compilation', ValueShape.UINT8),
    MetadataField('pgap', 'gapless', ValueShape.UINT8),
    MetadataField('pcst', 'podcast', ValueShape.UINT8),
    MetadataField('stik', 'media_kind', ValueShape.UINT8),
    MetadataField('rtng', 'rating', ValueShape.UINT8),
    MetadataField('hdvd', 'hd_video', ValueShape.UINT8),
    MetadataField('tmpo', 'tempo', ValueShape.UINT16),
    MetadataField('gnre', 'genre_id', ValueShape.UINT16),
    MetadataField('tves', 'tv_episode', ValueShape.UINT32),
    MetadataField('tvsn', 'tv_season', ValueShape.UINT32),
    MetadataField('cnID', 'catalog_id', ValueShape.UINT32),
    MetadataField('atID', 'artist_id', ValueShape.UINT32),
    MetadataField('cmID', 'composer_id', ValueShape.UINT32),
    MetadataField('geID', 'genre_store_id', ValueShape.UINT32),
    MetadataField('sfID', 'storefront_id', ValueShape.UINT32),
    MetadataField('plID', 'playlist_id', ValueShape.UINT64),
    # pairs
    MetadataField('trkn', 'track_number', ValueShape.PAIR),
    MetadataField('disk', 'disc_number', ValueShape.PAIR),
    # images
    MetadataField('covr', 'cover_art', ValueShape.IMAGE),
]

IDENTIFIERS = MappingProxyType({_.identifier: _ for _ in _FIELDS})

NAMES = MappingProxyType({_.name: _ for _ in _FIELDS})


def is_known_identifier(identifier: str) -> bool:
    return identifier in IDENTIFIERS


def to_identifier(key: Union[str, bytes]) -> str:
    if isinstance(key, bytes):
        key = decode_type(key)

    field = NAMES.get(key)

    return field.identifier if field is not None else key


def resolve(key: Union[str, bytes], shape: Optional[ValueShape] = None) -> MetadataField:
    '''Find the field for a key that can be a name ('title'), an identifier
    ('©nam') or the raw identifier (b'\\xa9nam').

    An explicit shape overrides the one of the catalogue and is mandatory
    for identifiers the catalogue doesn't know.'''
    identifier = to_identifier(key)
    field = IDENTIFIERS.get(identifier)

    if field is None:
        if shape is None:
            raise KeyError(f"unknown metadata key {key!r}, you need to indicate its shape")
        return MetadataField(identifier, None, shape)

    if shape is not None and shape != field.shape:
        return field._replace(shape=shape)

    return field
