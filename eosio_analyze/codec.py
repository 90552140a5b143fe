# standard imports
import logging
import re
import struct
import datetime

# external imports
from hexathon import strip_0x

# local imports
from eosio_analyze.name import (
        str_to_name,
        name_to_str,
        )
from eosio_analyze.error import (
        DecodeError,
        EncodeError,
        SchemaError,
        TruncatedDataError,
        UnknownTypeError,
        )

logg = logging.getLogger(__name__)

# bound for typedef chains and struct nesting
MAX_DEPTH = 32

KEY_TYPES = [
    'K1',
    'R1',
    ]
PUBLIC_KEY_SIZE = 33
SIGNATURE_SIZE = 65

EPOCH = datetime.datetime(1970, 1, 1)
TIME_FORMAT = '%Y-%m-%dT%H:%M:%S'
BLOCK_TIMESTAMP_EPOCH_MS = 946684800000
BLOCK_INTERVAL_MS = 500


class Reader:
    """Sequential reader over an immutable copy of the input bytes.

    :param data: Bytes to read
    :type data: bytes
    """
    def __init__(self, data):
        self.data = bytes(data)
        self.offset = 0


    def remaining(self):
        return len(self.data) - self.offset


    def read(self, n):
        if n > self.remaining():
            raise TruncatedDataError('need {} bytes at offset {}, only {} left'.format(n, self.offset, self.remaining()), offset=self.offset, wanted=n)
        b = self.data[self.offset:self.offset+n]
        self.offset += n
        return b


    def unpack(self, fmt):
        b = self.read(struct.calcsize(fmt))
        return struct.unpack(fmt, b)[0]


    def read_varuint32(self):
        v = 0
        for i in range(5):
            b = self.read(1)[0]
            # fifth byte carries only the top four bits
            if i == 4 and b & 0xf0:
                raise DecodeError('varuint32 overflow at offset {}'.format(self.offset - 1))
            v |= (b & 0x7f) << (7 * i)
            if b & 0x80 == 0:
                return v
        raise DecodeError('varuint32 overflow at offset {}'.format(self.offset))


class Writer:

    def __init__(self):
        self.buf = bytearray()


    def write(self, b):
        self.buf += b


    def pack(self, fmt, v):
        try:
            self.buf += struct.pack(fmt, v)
        except struct.error as e:
            raise EncodeError('cannot pack {!r} as {}: {}'.format(v, fmt, e))


    def write_varuint32(self, v):
        if not isinstance(v, int) or v < 0 or v > 0xffffffff:
            raise EncodeError('{!r} is not a valid varuint32'.format(v))
        while True:
            b = v & 0x7f
            v >>= 7
            if v > 0:
                self.buf.append(b | 0x80)
            else:
                self.buf.append(b)
                break


    def getvalue(self):
        return bytes(self.buf)


def hex_to_bytes(v):
    """Accept bytes as-is or convert a hex string, with or without 0x prefix, to bytes.

    :raises ValueError: Not valid hex
    """
    if isinstance(v, (bytes, bytearray)):
        return bytes(v)
    if not isinstance(v, str):
        raise ValueError('expected bytes or hex string, got {}'.format(type(v).__name__))
    if v == '' or v == '0x':
        return b''
    # strip_0x pads odd length input, which would shift every nibble
    if len(v) % 2 != 0:
        raise ValueError('odd length hex string "{}"'.format(v))
    return bytes.fromhex(strip_0x(v))


def jsonable(v):
    """Recursively convert a decoded value tree so that json can serialize it; bytes become hex.
    """
    if isinstance(v, (bytes, bytearray)):
        return v.hex()
    if isinstance(v, dict):
        return {k: jsonable(x) for k, x in v.items()}
    if isinstance(v, (list, tuple)):
        return [jsonable(x) for x in v]
    return v


def _to_datetime(v):
    if isinstance(v, datetime.datetime):
        if v.tzinfo != None:
            v = v.astimezone(datetime.timezone.utc).replace(tzinfo=None)
        return v
    if not isinstance(v, str):
        raise EncodeError('expected time string, got {!r}'.format(v))
    try:
        return datetime.datetime.fromisoformat(v.rstrip('Z'))
    except ValueError as e:
        raise EncodeError('invalid time "{}": {}'.format(v, e))


def _format_ms(dt):
    return '{}.{:03d}'.format(dt.strftime(TIME_FORMAT), dt.microsecond // 1000)


def _offset_time(**kwargs):
    try:
        return EPOCH + datetime.timedelta(**kwargs)
    except OverflowError as e:
        raise DecodeError('time out of range: {}'.format(e))


# integers and floats

def _fixed(fmt):
    def decoder(r):
        return r.unpack(fmt)
    def encoder(w, v):
        if isinstance(v, bool) or (not isinstance(v, int) and fmt[-1] not in 'fd'):
            raise EncodeError('{!r} is not an integer'.format(v))
        w.pack(fmt, v)
    return (decoder, encoder)


def _wide(signed):
    def decoder(r):
        return int.from_bytes(r.read(16), 'little', signed=signed)
    def encoder(w, v):
        try:
            w.write(int(v).to_bytes(16, 'little', signed=signed))
        except (OverflowError, ValueError, TypeError) as e:
            raise EncodeError('{!r} does not fit 128 bits: {}'.format(v, e))
    return (decoder, encoder)


def _decode_bool(r):
    return r.unpack('<B') != 0


def _encode_bool(w, v):
    if not isinstance(v, bool):
        raise EncodeError('{!r} is not a bool'.format(v))
    w.pack('<B', int(v))


def _decode_varint32(r):
    v = r.read_varuint32()
    return (v >> 1) ^ -(v & 1)


def _encode_varint32(w, v):
    if not isinstance(v, int) or v < -0x80000000 or v > 0x7fffffff:
        raise EncodeError('{!r} is not a valid varint32'.format(v))
    w.write_varuint32(((v << 1) ^ (v >> 31)) & 0xffffffff)


def _encode_varuint32(w, v):
    w.write_varuint32(v)


# names, strings and byte sequences

def _decode_name(r):
    return name_to_str(r.unpack('<Q'))


def _encode_name(w, v):
    try:
        w.pack('<Q', str_to_name(v))
    except (ValueError, TypeError) as e:
        raise EncodeError('invalid name {!r}: {}'.format(v, e))


def _decode_bytes(r):
    n = r.read_varuint32()
    return r.read(n)


def _encode_bytes(w, v):
    try:
        b = hex_to_bytes(v)
    except ValueError as e:
        raise EncodeError(str(e))
    w.write_varuint32(len(b))
    w.write(b)


def _decode_string(r):
    b = _decode_bytes(r)
    try:
        return b.decode('utf-8')
    except UnicodeDecodeError as e:
        raise DecodeError('string is not valid utf-8: {}'.format(e))


def _encode_string(w, v):
    if not isinstance(v, str):
        raise EncodeError('{!r} is not a string'.format(v))
    b = v.encode('utf-8')
    w.write_varuint32(len(b))
    w.write(b)


def _checksum(size):
    def decoder(r):
        return r.read(size).hex()
    def encoder(w, v):
        try:
            b = hex_to_bytes(v)
        except ValueError as e:
            raise EncodeError(str(e))
        if len(b) != size:
            raise EncodeError('checksum must be {} bytes, got {}'.format(size, len(b)))
        w.write(b)
    return (decoder, encoder)


# time

def _decode_time_point(r):
    return _format_ms(_offset_time(microseconds=r.unpack('<q')))


def _encode_time_point(w, v):
    delta = _to_datetime(v) - EPOCH
    w.pack('<q', (delta.days * 86400 + delta.seconds) * 1000000 + delta.microseconds)


def _decode_time_point_sec(r):
    return _offset_time(seconds=r.unpack('<I')).strftime(TIME_FORMAT)


def _encode_time_point_sec(w, v):
    delta = _to_datetime(v) - EPOCH
    w.pack('<I', delta.days * 86400 + delta.seconds)


def _decode_block_timestamp(r):
    ms = r.unpack('<I') * BLOCK_INTERVAL_MS + BLOCK_TIMESTAMP_EPOCH_MS
    return _format_ms(_offset_time(milliseconds=ms))


def _encode_block_timestamp(w, v):
    delta = _to_datetime(v) - EPOCH
    ms = (delta.days * 86400 + delta.seconds) * 1000 + delta.microseconds // 1000
    w.pack('<I', (ms - BLOCK_TIMESTAMP_EPOCH_MS) // BLOCK_INTERVAL_MS)


# tokens

def _symbol_code_to_str(b):
    try:
        return b.rstrip(b'\x00').decode('ascii')
    except UnicodeDecodeError:
        raise DecodeError('symbol code {} is not ascii'.format(b.hex()))


def _str_to_symbol_code(s, size):
    if not isinstance(s, str) or re.fullmatch('[A-Z]{{1,{}}}'.format(size), s) == None:
        raise EncodeError('invalid symbol code {!r}'.format(s))
    return s.encode('ascii').ljust(size, b'\x00')


def _decode_symbol_code(r):
    return _symbol_code_to_str(r.read(8))


def _encode_symbol_code(w, v):
    w.write(_str_to_symbol_code(v, 8))


def _read_symbol(r):
    b = r.read(8)
    return (b[0], _symbol_code_to_str(b[1:]),)


def _write_symbol(w, precision, code):
    if precision > 18:
        raise EncodeError('symbol precision {} too large'.format(precision))
    w.pack('<B', precision)
    w.write(_str_to_symbol_code(code, 7))


def _decode_symbol(r):
    (precision, code) = _read_symbol(r)
    return '{},{}'.format(precision, code)


def _encode_symbol(w, v):
    try:
        (precision, code) = v.split(',')
        precision = int(precision)
    except (AttributeError, ValueError):
        raise EncodeError('invalid symbol {!r}'.format(v))
    _write_symbol(w, precision, code)


def format_asset(amount, precision, code):
    sign = ''
    if amount < 0:
        sign = '-'
        amount = -amount
    s = str(amount)
    if precision > 0:
        unit = 10 ** precision
        s = '{}.{}'.format(amount // unit, str(amount % unit).zfill(precision))
    return '{}{} {}'.format(sign, s, code)


def _decode_asset(r):
    amount = r.unpack('<q')
    (precision, code) = _read_symbol(r)
    return format_asset(amount, precision, code)


def _encode_asset(w, v):
    try:
        (amount_str, code) = v.split(' ')
    except (AttributeError, ValueError):
        raise EncodeError('invalid asset {!r}'.format(v))
    precision = 0
    digits = amount_str
    if '.' in amount_str:
        (whole, fraction) = amount_str.split('.', 1)
        precision = len(fraction)
        digits = whole + fraction
    try:
        amount = int(digits)
    except ValueError:
        raise EncodeError('invalid asset amount {!r}'.format(amount_str))
    w.pack('<q', amount)
    _write_symbol(w, precision, code)


# keys

def _key(prefix, size):
    def decoder(r):
        i = r.read_varuint32()
        if i >= len(KEY_TYPES):
            raise DecodeError('unsupported {} key type {}'.format(prefix, i))
        return '{}_{}:{}'.format(prefix, KEY_TYPES[i], r.read(size).hex())
    def encoder(w, v):
        try:
            (head, data) = v.split(':', 1)
            (head_prefix, key_type) = head.split('_', 1)
            b = bytes.fromhex(data)
        except (AttributeError, ValueError):
            raise EncodeError('invalid {} {!r}'.format(prefix, v))
        if head_prefix != prefix or key_type not in KEY_TYPES or len(b) != size:
            raise EncodeError('invalid {} {!r}'.format(prefix, v))
        w.write_varuint32(KEY_TYPES.index(key_type))
        w.write(b)
    return (decoder, encoder)


PRIMITIVES = {
    'bool': (_decode_bool, _encode_bool),
    'int8': _fixed('<b'),
    'uint8': _fixed('<B'),
    'int16': _fixed('<h'),
    'uint16': _fixed('<H'),
    'int32': _fixed('<i'),
    'uint32': _fixed('<I'),
    'int64': _fixed('<q'),
    'uint64': _fixed('<Q'),
    'int128': _wide(True),
    'uint128': _wide(False),
    'varint32': (_decode_varint32, _encode_varint32),
    'varuint32': (lambda r: r.read_varuint32(), _encode_varuint32),
    'float32': _fixed('<f'),
    'float64': _fixed('<d'),
    'time_point': (_decode_time_point, _encode_time_point),
    'time_point_sec': (_decode_time_point_sec, _encode_time_point_sec),
    'block_timestamp_type': (_decode_block_timestamp, _encode_block_timestamp),
    'name': (_decode_name, _encode_name),
    'bytes': (_decode_bytes, _encode_bytes),
    'string': (_decode_string, _encode_string),
    'checksum160': _checksum(20),
    'checksum256': _checksum(32),
    'checksum512': _checksum(64),
    'public_key': _key('PUB', PUBLIC_KEY_SIZE),
    'signature': _key('SIG', SIGNATURE_SIZE),
    'symbol': (_decode_symbol, _encode_symbol),
    'symbol_code': (_decode_symbol_code, _encode_symbol_code),
    'asset': (_decode_asset, _encode_asset),
    }


MIN_WIDTHS = {
    'bool': 1,
    'int8': 1,
    'uint8': 1,
    'int16': 2,
    'uint16': 2,
    'int32': 4,
    'uint32': 4,
    'int64': 8,
    'uint64': 8,
    'int128': 16,
    'uint128': 16,
    'varint32': 1,
    'varuint32': 1,
    'float32': 4,
    'float64': 8,
    'time_point': 8,
    'time_point_sec': 4,
    'block_timestamp_type': 4,
    'name': 8,
    'bytes': 1,
    'string': 1,
    'checksum160': 20,
    'checksum256': 32,
    'checksum512': 64,
    'public_key': 1 + PUBLIC_KEY_SIZE,
    'signature': 1 + SIGNATURE_SIZE,
    'symbol': 8,
    'symbol_code': 8,
    'asset': 16,
    }

# bound on the count of arrays whose items may take no bytes at all
MAX_EMPTY_ITEMS = 1 << 16


def _check_depth(depth, type_name):
    if depth > MAX_DEPTH:
        raise SchemaError('type nesting deeper than {} resolving "{}"'.format(MAX_DEPTH, type_name))


def _lookup(abi, type_name):
    if abi == None:
        return (None, None, None)
    return (abi.typedef(type_name), abi.struct(type_name), abi.variant(type_name),)


def _base_struct(abi, s):
    base = s.get('base', '')
    if not base:
        return None
    base_struct = None
    if abi != None:
        base_struct = abi.struct(abi.resolve(base))
    if base_struct == None:
        raise UnknownTypeError(base)
    return base_struct


def _min_width(type_name, abi, depth):
    """Smallest number of bytes a value of the given type can be encoded in.

    :raises UnknownTypeError: Type reference not resolvable in schema
    """
    _check_depth(depth, type_name)
    if type_name.endswith('$'):
        return 0
    if type_name.endswith('?') or type_name.endswith('[]'):
        return 1

    (typedef, s, variant) = _lookup(abi, type_name)
    if typedef != None:
        return _min_width(typedef, abi, depth + 1)

    width = MIN_WIDTHS.get(type_name)
    if width != None:
        return width

    if s != None:
        width = 0
        base_struct = _base_struct(abi, s)
        if base_struct != None:
            width += _min_width(base_struct['name'], abi, depth + 1)
        for field in s['fields']:
            width += _min_width(field['type'], abi, depth + 1)
        return width

    if variant != None:
        return 1

    raise UnknownTypeError(type_name)


def _decode_type(r, type_name, abi, depth):
    _check_depth(depth, type_name)
    if type_name.endswith('$'):
        type_name = type_name[:-1]

    if type_name.endswith('?'):
        if r.unpack('<B') == 0:
            return None
        return _decode_type(r, type_name[:-1], abi, depth + 1)

    if type_name.endswith('[]'):
        n = r.read_varuint32()
        if n == 0:
            return []
        width = _min_width(type_name[:-2], abi, depth + 1)
        if width > 0 and n * width > r.remaining():
            raise TruncatedDataError('array of {} "{}" cannot fit in {} remaining bytes'.format(n, type_name, r.remaining()), offset=r.offset, wanted=n * width)
        if width == 0 and n > MAX_EMPTY_ITEMS:
            raise DecodeError('array of {} "{}" with empty items exceeds {}'.format(n, type_name, MAX_EMPTY_ITEMS))
        return [_decode_type(r, type_name[:-2], abi, depth + 1) for i in range(n)]

    (typedef, s, variant) = _lookup(abi, type_name)
    if typedef != None:
        return _decode_type(r, typedef, abi, depth + 1)

    codec = PRIMITIVES.get(type_name)
    if codec != None:
        return codec[0](r)

    if s != None:
        return _decode_struct(r, s, abi, depth + 1)

    if variant != None:
        i = r.read_varuint32()
        if i >= len(variant['types']):
            raise DecodeError('variant index {} out of range for "{}"'.format(i, type_name))
        t = variant['types'][i]
        return [t, _decode_type(r, t, abi, depth + 1)]

    raise UnknownTypeError(type_name)


def _decode_struct(r, s, abi, depth):
    _check_depth(depth, s['name'])
    o = {}
    base_struct = _base_struct(abi, s)
    if base_struct != None:
        o.update(_decode_struct(r, base_struct, abi, depth + 1))
    for field in s['fields']:
        t = field['type']
        if t.endswith('$'):
            if r.remaining() == 0:
                break
            t = t[:-1]
        o[field['name']] = _decode_type(r, t, abi, depth + 1)
    return o


def _encode_type(w, v, type_name, abi, depth):
    _check_depth(depth, type_name)
    if type_name.endswith('$'):
        type_name = type_name[:-1]

    if type_name.endswith('?'):
        if v == None:
            w.pack('<B', 0)
            return
        w.pack('<B', 1)
        return _encode_type(w, v, type_name[:-1], abi, depth + 1)

    if type_name.endswith('[]'):
        if not isinstance(v, (list, tuple)):
            raise EncodeError('expected a list for "{}", got {}'.format(type_name, type(v).__name__))
        w.write_varuint32(len(v))
        for item in v:
            _encode_type(w, item, type_name[:-2], abi, depth + 1)
        return

    (typedef, s, variant) = _lookup(abi, type_name)
    if typedef != None:
        return _encode_type(w, v, typedef, abi, depth + 1)

    codec = PRIMITIVES.get(type_name)
    if codec != None:
        return codec[1](w, v)

    if s != None:
        return _encode_struct(w, v, s, abi, depth + 1)

    if variant != None:
        if not isinstance(v, (list, tuple)) or len(v) != 2 or v[0] not in variant['types']:
            raise EncodeError('expected [type, value] for variant "{}", got {!r}'.format(type_name, v))
        w.write_varuint32(variant['types'].index(v[0]))
        return _encode_type(w, v[1], v[0], abi, depth + 1)

    raise UnknownTypeError(type_name)


def _encode_struct(w, v, s, abi, depth):
    _check_depth(depth, s['name'])
    if not isinstance(v, dict):
        raise EncodeError('expected a mapping for struct "{}", got {}'.format(s['name'], type(v).__name__))
    base_struct = _base_struct(abi, s)
    if base_struct != None:
        _encode_struct(w, v, base_struct, abi, depth + 1)
    extension_absent = None
    for field in s['fields']:
        t = field['type']
        k = field['name']
        if t.endswith('$'):
            if k not in v:
                extension_absent = k
                continue
            if extension_absent != None:
                raise EncodeError('binary extension "{}" given while "{}" is absent'.format(k, extension_absent))
        elif k not in v:
            raise EncodeError('missing field "{}" in struct "{}"'.format(k, s['name']))
        _encode_type(w, v[k], t, abi, depth + 1)


def decode(data, type_name, abi=None):
    """Decode bytes as the given type, resolving non-primitive types in the given ABI document.

    :param data: Serialized value
    :type data: bytes
    :param type_name: Type to decode, may carry [] ? and $ suffixes
    :type type_name: str
    :param abi: Schema to resolve typedefs, structs and variants in
    :type abi: eosio_analyze.abi.Abi
    :raises TruncatedDataError: Input shorter than the schema requires
    :raises UnknownTypeError: Type reference not resolvable in schema
    :raises DecodeError: Malformed input
    :rtype: any
    :returns: Decoded value tree
    """
    r = Reader(data)
    v = _decode_type(r, type_name, abi, 0)
    if r.remaining() > 0:
        logg.debug('{} trailing bytes ignored after decoding "{}"'.format(r.remaining(), type_name))
    return v


def encode(value, type_name, abi=None):
    """Inverse of decode.

    :raises EncodeError: Value does not match the schema
    :raises UnknownTypeError: Type reference not resolvable in schema
    :rtype: bytes
    :returns: Serialized value
    """
    w = Writer()
    _encode_type(w, value, type_name, abi, 0)
    return w.getvalue()
