import pytest

from m4atools.enum import Compliant, ValueShape
from m4atools.exceptions import (
    InvalidBlockType,
    InvalidFile,
    MalformedMetadataEntry,
    MetadataContainerAbsent,
    UnrecognizedMetadataIdentifier,
    UnsupportedShapeWidth,
)
from m4atools.m4a import M4AFile


def test_m4a_file(m4a_data):
    """Check unpacking a pre-established file is fine"""
    m4a = M4AFile(m4a_data)

    assert [_.type for _ in m4a.atoms] == ['ftyp', 'moov', 'mdat']
    assert m4a.metadata_container.type == 'ilst'
    assert m4a.metadata_identifiers() == ['©nam', 'tmpo', 'trkn']
    assert m4a.diagnostics == []
    assert m4a.pack() == m4a_data


def test_empty_file():
    m4a = M4AFile()

    assert m4a.atoms == []
    assert m4a.metadata_container is None
    assert m4a.get_metadata('title') is None
    assert m4a.pack() == b''


def test_invalid_files(atom):
    with pytest.raises(InvalidFile):
        M4AFile(b'\x00\x00\x00\x08')

    with pytest.raises(InvalidBlockType):
        M4AFile(atom('ftyp') + atom('zzzz'))


def test_get_metadata(m4a_data):
    m4a = M4AFile(m4a_data)

    assert m4a.get_metadata('title') == 'Kebab'
    assert m4a.get_metadata('©nam') == 'Kebab'
    assert m4a.get_metadata(b'\xa9nam') == 'Kebab'
    assert m4a.get_metadata('tempo') == 120
    assert m4a.get_metadata('track_number') == (2, 10)
    assert m4a.get_metadata('artist') is None


def test_get_unknown_key(m4a_data):
    m4a = M4AFile(m4a_data)

    with pytest.raises(KeyError):
        m4a.get_metadata('xxxx')

    assert m4a.get_metadata('xxxx', shape=ValueShape.STRING) is None


def test_set_string(m4a_data):
    m4a = M4AFile(m4a_data)

    m4a.set_metadata('title', 'Hello')

    assert m4a.get_metadata('title') == 'Hello'

    reloaded = M4AFile(m4a.pack())

    assert reloaded.get_metadata('title') == 'Hello'
    assert reloaded.get_metadata('tempo') == 120


def test_set_new_entry(m4a_data):
    m4a = M4AFile(m4a_data)

    m4a.set_metadata('artist', 'Ghali')
    m4a.set_metadata('catalog_id', 1000)

    assert m4a.metadata_identifiers() == ['©nam', 'tmpo', 'trkn', '©ART', 'cnID']

    reloaded = M4AFile(m4a.pack())

    assert reloaded.get_metadata('artist') == 'Ghali'
    assert reloaded.get_metadata('catalog_id') == 1000

    entry = reloaded.metadata_container.children[-1]

    assert entry.raw == (
        b'\x00\x00\x00\x1ccnID'
        b'\x00\x00\x00\x14data'
        b'\x00\x00\x00\x15\x00\x00\x00\x00'
        b'\x00\x00\x03\xe8'
    )


@pytest.mark.parametrize('shape,value', [
    (ValueShape.UINT8, 0xff),
    (ValueShape.UINT16, 0xbeef),
    (ValueShape.UINT32, 1000),
    (ValueShape.UINT64, 0xcafebabedeadbeef),
])
def test_set_integers(m4a_data, shape, value):
    m4a = M4AFile(m4a_data)

    m4a.set_metadata('xint', value, shape=shape)

    assert M4AFile(m4a.pack()).get_metadata('xint', shape=shape) == value


def test_integer_wrong_width(build_m4a, entry):
    m4a = M4AFile(build_m4a(entry('cnID', 21, b'\x00\x03\xe8')))

    assert m4a.get_metadata('catalog_id') is None
    assert len(m4a.diagnostics) == 1
    assert isinstance(m4a.diagnostics[0], UnsupportedShapeWidth)
    assert m4a.diagnostics[0].chain == ['data', 'cnID']


def test_set_pair(build_m4a, entry):
    data = build_m4a(entry('trkn', 0, b'\x00\x01\x00\x01\x00\x01\x00\x02'))
    m4a = M4AFile(data)

    m4a.set_metadata('track_number', (3, 16))

    assert m4a.get_metadata('track_number') == (3, 16)

    packed = m4a.pack()

    assert len(packed) == len(data)
    assert b'\x00\x01\x00\x03\x00\x10\x00\x02' in packed


def test_idempotent_set(m4a_data):
    m4a = M4AFile(m4a_data)

    for key in m4a.metadata_identifiers():
        m4a.set_metadata(key, m4a.get_metadata(key))

    assert m4a.pack() == m4a_data


def test_entry_without_data(build_m4a, atom):
    m4a = M4AFile(build_m4a(atom('©nam')))

    for shape in ValueShape:
        assert m4a.get_metadata('title', shape=shape) is None

    # the same finding is reported once
    assert len(m4a.diagnostics) == 1
    assert isinstance(m4a.diagnostics[0], MalformedMetadataEntry)
    assert m4a.diagnostics[0].chain == ['©nam']


def test_entry_with_two_data(build_m4a, atom, data):
    m4a = M4AFile(build_m4a(atom('©nam', data(1, b'a') + data(1, b'b'))))

    assert m4a.get_metadata('title') is None


def test_entry_with_wrong_data_type(build_m4a, entry):
    m4a = M4AFile(build_m4a(entry('©nam', 21, b'abc')))

    assert m4a.get_metadata('title') is None
    assert isinstance(m4a.diagnostics[0], MalformedMetadataEntry)


def test_set_rebuilds_malformed_entry(build_m4a, atom):
    m4a = M4AFile(build_m4a(atom('©nam', b'\x01\x02\x03')))

    m4a.set_metadata('title', 'Fixed')

    assert M4AFile(m4a.pack()).get_metadata('title') == 'Fixed'


def test_set_invalid_value_does_not_touch_the_file(m4a_data):
    m4a = M4AFile(m4a_data)

    with pytest.raises(ValueError):
        m4a.set_metadata('tempo', 0x10000)

    with pytest.raises(TypeError):
        m4a.set_metadata('title', 42)

    assert m4a.pack() == m4a_data


def test_cover_art(m4a_data, png_image):
    m4a = M4AFile(m4a_data)

    m4a.set_metadata('cover_art', png_image)

    reloaded = M4AFile(m4a.pack())
    data = reloaded.metadata_container.children[-1].children[0]

    assert reloaded.get_metadata('cover_art') == png_image
    assert data.payload[:4] == b'\x00\x00\x00\x0e'


def test_unrecognized_identifier(build_m4a, entry):
    data = build_m4a(entry('©nam', 1, b'ok'), entry('xyzw', 1, b'??'))

    m4a = M4AFile(data)

    assert len(m4a.diagnostics) == 1
    assert isinstance(m4a.diagnostics[0], UnrecognizedMetadataIdentifier)
    assert m4a.diagnostics[0].chain == ['xyzw', 'ilst', 'meta', 'udta', 'moov']
    assert m4a.get_metadata('title') == 'ok'
    assert m4a.pack() == data

    with pytest.raises(UnrecognizedMetadataIdentifier):
        M4AFile(data, compliant=Compliant.TYPE | Compliant.IDENTIFIER)


def test_metadata_container_absent(atom):
    data = atom('ftyp', b'M4A ') + atom('moov', atom('mvhd', b'\x00' * 4)) + atom('mdat')
    m4a = M4AFile(data)

    assert m4a.get_metadata('title') is None

    with pytest.raises(MetadataContainerAbsent):
        m4a.set_metadata('title', 'Hello')

    assert m4a.pack() == data

    m4a.set_metadata('title', 'Hello', create_container=True)

    reloaded = M4AFile(m4a.pack())

    assert reloaded.get_metadata('title') == 'Hello'
    assert reloaded.find_atom('moov', 'udta', 'meta', 'hdlr').payload[8:12] == b'mdir'
    assert reloaded.find_atom('moov', 'udta', 'meta').payload == b'\x00' * 4


def test_create_container_without_moov(atom):
    m4a = M4AFile(atom('ftyp', b'M4A ') + atom('mdat'))

    with pytest.raises(MetadataContainerAbsent):
        m4a.set_metadata('title', 'Hello', create_container=True)


def test_delete_metadata(m4a_data):
    m4a = M4AFile(m4a_data)

    assert m4a.delete_metadata('tempo')
    assert not m4a.delete_metadata('tempo')
    assert m4a.metadata_identifiers() == ['©nam', 'trkn']
    assert M4AFile(m4a.pack()).get_metadata('tempo') is None


def test_read_write_path(tmp_path, m4a_data):
    path = tmp_path / 'song.m4a'
    path.write_bytes(m4a_data)

    m4a = M4AFile(str(path))

    assert m4a.file_name == 'song.m4a'
    assert m4a.path == str(path)

    m4a.set_metadata('album', 'Album')
    m4a.write(str(tmp_path / 'edited.m4a'))

    edited = M4AFile(tmp_path / 'edited.m4a')

    assert edited.get_metadata('album') == 'Album'
    assert edited.get_metadata('title') == 'Kebab'


def test_str(m4a_data):
    lines = str(M4AFile(m4a_data)).splitlines()

    assert lines[0].startswith('00000000 ftyp')
    assert any(_.strip().endswith('©nam size=%d' % (8 + 8 + 8 + 5)) for _ in lines)


def test_repeated_reads_report_once(build_m4a, entry):
    m4a = M4AFile(build_m4a(entry('cnID', 21, b'\x00\x03\xe8')))

    for _ in range(3):
        assert m4a.get_metadata('catalog_id') is None

    assert len(m4a.diagnostics) == 1


def test_data_with_wrong_declared_size(build_m4a, atom):
    # the "data" atom declares 32 bytes but only 21 are there
    broken = atom('©nam', b'\x00\x00\x00\x20data' + b'\x00\x00\x00\x01\x00\x00\x00\x00' + b'Hello')
    data = build_m4a(broken)

    m4a = M4AFile(data)
    entry = m4a.metadata_container.children[0]

    assert entry.children == []
    assert m4a.get_metadata('title') is None
    assert len(m4a.diagnostics) == 1
    assert isinstance(m4a.diagnostics[0], MalformedMetadataEntry)
    assert m4a.diagnostics[0].chain == ['©nam']
    assert m4a.pack() == data


def test_idempotent_set_cover_implicit(build_m4a, entry, png_image):
    data = build_m4a(entry('covr', 0, png_image))
    m4a = M4AFile(data)

    m4a.set_metadata('cover_art', m4a.get_metadata('cover_art'))

    assert m4a.pack() == data


def test_idempotent_set_cover_unknown_format(build_m4a, entry):
    gif = b'GIF89a' + b'\x00' * 32
    data = build_m4a(entry('covr', 13, gif))
    m4a = M4AFile(data)

    assert m4a.get_metadata('cover_art') == gif

    m4a.set_metadata('cover_art', gif)

    assert m4a.pack() == data


def test_set_cover_unknown_format_is_implicit(m4a_data):
    m4a = M4AFile(m4a_data)

    m4a.set_metadata('cover_art', b'\x01\x02\x03\x04')

    data = M4AFile(m4a.pack()).find_atom('moov', 'udta', 'meta', 'ilst', 'covr', 'data')

    assert data.payload == b'\x00' * 8 + b'\x01\x02\x03\x04'
