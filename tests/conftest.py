import io
import struct

import pytest
from PIL import Image


def _atom(type_, payload=b''):
    return struct.pack('>I', 8 + len(payload)) + type_.encode('mac_roman') + payload


def _data(data_type, value, locale=0):
    return _atom('data', struct.pack('>II', data_type, locale) + value)


def _entry(identifier, data_type, value):
    return _atom(identifier, _data(data_type, value))


def _m4a(*entries, mdat=b'\xde\xad\xbe\xef' * 4):
    '''Minimal file with the metadata container filled with the given entries.'''
    hdlr = _atom('hdlr', b'\x00' * 8 + b'mdirappl' + b'\x00' * 9)
    ilst = _atom('ilst', b''.join(entries))
    meta = _atom('meta', b'\x00' * 4 + hdlr + ilst)
    udta = _atom('udta', meta)
    mvhd = _atom('mvhd', b'\x00' * 100)
    moov = _atom('moov', mvhd + udta)
    ftyp = _atom('ftyp', b'M4A \x00\x00\x02\x00M4A mp42isom')

    return ftyp + moov + _atom('mdat', mdat)


@pytest.fixture
def atom():
    return _atom


@pytest.fixture
def data():
    return _data


@pytest.fixture
def entry():
    return _entry


@pytest.fixture
def build_m4a():
    return _m4a


@pytest.fixture
def m4a_data():
    return _m4a(
        _entry('©nam', 1, 'Kebab'.encode('utf-8')),
        _entry('tmpo', 21, b'\x00\x78'),
        _entry('trkn', 0, b'\x00\x00\x00\x02\x00\x0a\x00\x00'),
    )


def _image(image_format):
    buffer = io.BytesIO()
    Image.new('RGB', (4, 4), color=(0xff, 0x00, 0x00)).save(buffer, image_format)
    return buffer.getvalue()


@pytest.fixture
def png_image():
    return _image('PNG')


@pytest.fixture
def jpeg_image():
    return _image('JPEG')
