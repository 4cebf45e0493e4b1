"""
A Field is the value carried by the "data" atom of a metadata entry.

The payload of the "data" atom is

    .------------------.-----------------.---------.
    | type (u32, BE)   | locale (u32, 0) | value   |
    '------------------'-----------------'---------'

where the type tells how to interpret the value bytes (see DataType).
Each field accepts a set of types on unpacking and uses the first one
(or the one already present) on packing.
"""
import io
import logging
import struct

from bitstring import Bits
from PIL import Image, UnidentifiedImageError

from .enum import DataType, ValueShape
from .exceptions import MalformedMetadataEntry, UnsupportedShapeWidth


PREFIX = struct.Struct('>II')


class Field(object):
    """Base class to subclass from"""
    data_types = (DataType.IMPLICIT,)

    def __init__(self, value=None):
        self.logger = logging.getLogger(__name__)
        self.data_type = self.data_types[0]
        self.init()

        if value is not None:
            self.value = value

    def init(self):
        self._raw = b''

    def __repr__(self):
        return '<%s(%r)>' % (self.__class__.__name__, self.value)

    value = property(
        fget=lambda self: self._get_value(),
        fset=lambda self, value: self._set_value(value))

    raw = property(
        fget=lambda self: self._get_raw(),
        fset=lambda self, value: self._set_raw(value),
    )

    size = property(
        fget=lambda self: len(self.raw),
    )

    def _get_value(self):
        raise NotImplementedError(f"method {self.__class__.__name__}._get_value() not implemented")

    def _set_value(self, value) -> None:
        raise NotImplementedError(f"method {self.__class__.__name__}._set_value() not implemented")

    def _get_raw(self) -> bytes:
        return self._raw

    def _set_raw(self, raw: bytes) -> None:
        self._raw = raw

    def pack(self) -> bytes:
        return PREFIX.pack(self.data_type.value, 0) + self.raw

    def unpack(self, payload: bytes) -> None:
        if len(payload) < PREFIX.size:
            raise MalformedMetadataEntry(chain=[], message=f'"data" payload of {len(payload)} bytes is too short')

        data_type, locale = PREFIX.unpack_from(payload)

        try:
            data_type = DataType(data_type)
        except ValueError:
            raise MalformedMetadataEntry(chain=[], message=f'unknown data type 0x{data_type:x}')

        if data_type not in self.data_types:
            raise MalformedMetadataEntry(
                chain=[], message=f'data type {data_type.name} is not valid for {self.__class__.__name__}')

        if locale != 0:
            raise MalformedMetadataEntry(chain=[], message=f'reserved word is 0x{locale:x} instead of zero')

        self.data_type = data_type
        self.raw = payload[PREFIX.size:]


class StringField(Field):
    """UTF-8 encoded text."""
    data_types = (DataType.UTF8,)

    def _get_value(self):
        return self._raw.decode('utf-8')

    def _set_value(self, value) -> None:
        if not isinstance(value, str):
            raise TypeError(f'{self.__class__.__name__} accepts only str, not {value.__class__.__name__}')

        self._raw = value.encode('utf-8')

    def _set_raw(self, raw: bytes) -> None:
        try:
            raw.decode('utf-8')
        except UnicodeDecodeError as e:
            raise MalformedMetadataEntry(chain=[], message=f'invalid UTF-8: {e}')

        super()._set_raw(raw)


class IntegerField(Field):
    """Unsigned big-endian integer with a fixed width in bytes."""
    data_types = (DataType.INTEGER, DataType.IMPLICIT)

    def __init__(self, width, **kw):
        self.width = width
        super().__init__(**kw)

    def init(self):
        self._raw = b'\x00' * self.width

    def _get_value(self):
        return Bits(bytes=self._raw).uint

    def _set_value(self, value) -> None:
        if not isinstance(value, int) or isinstance(value, bool):
            raise TypeError(f'{self.__class__.__name__} accepts only int, not {value.__class__.__name__}')

        try:
            self._raw = Bits(uint=value, length=self.width * 8).bytes
        except ValueError as e:
            raise ValueError(f'{value} doesn\'t fit in {self.width} unsigned bytes') from e

    def _set_raw(self, raw: bytes) -> None:
        if len(raw) != self.width:
            raise UnsupportedShapeWidth(
                chain=[], message=f'expected {self.width} bytes of integer, found {len(raw)}')

        super()._set_raw(raw)


class PairField(Field):
    """Couple of u16 like (track, total), stored in a block of eight bytes
    with the integers at offset 2 and 4. Some writers drop the last two
    bytes so we accept also six bytes."""
    data_types = (DataType.IMPLICIT, DataType.INTEGER)
    PAIR = struct.Struct('>HH')
    OFFSET = 2
    WIDTHS = (6, 8)

    def init(self):
        self._raw = b'\x00' * self.WIDTHS[-1]

    def _get_value(self):
        return self.PAIR.unpack_from(self._raw, self.OFFSET)

    def _set_value(self, value) -> None:
        '''Only the integers are overwritten, the other bytes stay as they are.'''
        try:
            first, second = value
            packed = self.PAIR.pack(first, second)
        except (TypeError, ValueError, struct.error) as e:
            raise ValueError(f'{value!r} is not a couple of unsigned 16 bits integers') from e

        end = self.OFFSET + self.PAIR.size
        self._raw = self._raw[:self.OFFSET] + packed + self._raw[end:]

    def _set_raw(self, raw: bytes) -> None:
        if len(raw) not in self.WIDTHS:
            raise UnsupportedShapeWidth(
                chain=[], message=f'expected {" or ".join(map(str, self.WIDTHS))} bytes of pair, found {len(raw)}')

        super()._set_raw(raw)


class ImageField(Field):
    """Opaque image data; when set with new bytes the data type follows the
    image format, IMPLICIT if Pillow doesn't recognize it. Setting the bytes
    already present keeps the data type read from the file."""
    data_types = (DataType.JPEG, DataType.PNG, DataType.BMP, DataType.IMPLICIT)
    format2type = {
        'JPEG': DataType.JPEG,
        'PNG': DataType.PNG,
        'BMP': DataType.BMP,
    }

    def _get_value(self):
        return self._raw

    def _set_value(self, value) -> None:
        if not isinstance(value, (bytes, bytearray)):
            raise TypeError(f'{self.__class__.__name__} accepts only bytes, not {value.__class__.__name__}')

        value = bytes(value)
        if value and value == self._raw:
            return

        self.data_type = self.detect_data_type(value)
        self._raw = value

    def detect_data_type(self, value: bytes) -> DataType:
        try:
            with Image.open(io.BytesIO(value)) as image:
                image_format = image.format
        except UnidentifiedImageError:
            self.logger.debug('cover data is not a known image, storing it as implicit')
            return DataType.IMPLICIT

        self.logger.debug('detected image format %s' % image_format)

        return self.format2type.get(image_format, DataType.IMPLICIT)


shape2field = {
    ValueShape.STRING: (StringField, (), {}),
    ValueShape.UINT8:  (IntegerField, (1,), {}),
    ValueShape.UINT16: (IntegerField, (2,), {}),
    ValueShape.UINT32: (IntegerField, (4,), {}),
    ValueShape.UINT64: (IntegerField, (8,), {}),
    ValueShape.PAIR:   (PairField, (), {}),
    ValueShape.IMAGE:  (ImageField, (), {}),
}


def field_for_shape(shape: ValueShape, value=None) -> Field:
    field_class, args, kwargs = shape2field[shape]

    return field_class(*args, value=value, **kwargs)
