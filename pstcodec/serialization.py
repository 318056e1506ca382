# Copyright (C) 2026 The pstcodec developers
# Distributed under the MIT software license, see the accompanying
# file LICENCE or http://www.opensource.org/licenses/mit-license.php

"""Key-value records of a PST field map.

One record on the wire:

    <type: 1 byte> <compact size: len(keydata)> <keydata> <compact size: len(value)> <value>

A field map is a sequence of records terminated by the single byte
PST_SEPARATOR. Every length is a Bitcoin CompactSize integer, and only its
shortest encoding is accepted.
"""

from typing import Optional, Tuple, BinaryIO


PST_SEPARATOR = 0xFF


class SerializationError(Exception):
    """ Thrown when there's a problem deserializing or serializing """


class UnexpectedEndOfStream(SerializationError):
    pass


class OversizedValue(SerializationError):
    pass


class DuplicateKey(SerializationError):
    pass


class InvalidKeyData(SerializationError):
    pass


class MalformedValue(SerializationError):
    pass


class InvalidPSTFormat(SerializationError):
    pass


def var_int(i: int) -> bytes:
    # https://en.bitcoin.it/wiki/Protocol_specification#Variable_length_integer
    # "CompactSize"
    assert i >= 0, i
    if i < 0xfd:
        return int.to_bytes(i, length=1, byteorder="little", signed=False)
    elif i <= 0xffff:
        return b"\xfd" + int.to_bytes(i, length=2, byteorder="little", signed=False)
    elif i <= 0xffffffff:
        return b"\xfe" + int.to_bytes(i, length=4, byteorder="little", signed=False)
    else:
        return b"\xff" + int.to_bytes(i, length=8, byteorder="little", signed=False)


def _read_exactly(fd: BinaryIO, n: int) -> bytes:
    data = fd.read(n)
    if len(data) != n:
        raise UnexpectedEndOfStream(f"expected {n} bytes, got {len(data)}")
    return data


# payload width and smallest value each prefix may carry
_COMPACT_SIZE_PAYLOADS = {
    0xfd: (2, 0xfd),
    0xfe: (4, 0x10000),
    0xff: (8, 0x100000000),
}


def deser_compact_size(fd: BinaryIO) -> Optional[int]:
    # note: inverse of var_int. returns None only if the stream is already exhausted
    prefix = fd.read(1)
    if not prefix:
        return None
    if prefix[0] not in _COMPACT_SIZE_PAYLOADS:
        return prefix[0]
    width, minimum = _COMPACT_SIZE_PAYLOADS[prefix[0]]
    value = int.from_bytes(_read_exactly(fd, width), byteorder="little", signed=False)
    if value < minimum:
        # would re-encode to different bytes
        raise InvalidPSTFormat(f"non-canonical compact size: prefix {prefix.hex()} for {value}")
    return value


def read_field(fd: BinaryIO, *, max_key_length: int) -> Tuple[Optional[int], Optional[bytes]]:
    """Reads the key part of the next record.

    Returns (None, None) if the separator was read. Otherwise returns the
    type code and the keydata, where empty keydata is returned as None.
    """
    try:
        key_type = fd.read(1)[0]
    except IndexError:
        raise UnexpectedEndOfStream("field map ended without separator") from None
    if key_type == PST_SEPARATOR:
        return None, None

    key_size = deser_compact_size(fd)
    if key_size is None:
        raise UnexpectedEndOfStream(f"missing keydata length for type {key_type:#04x}")
    if key_size > max_key_length:
        raise OversizedValue(f"keydata length {key_size} exceeds maximum {max_key_length}")
    key = _read_exactly(fd, key_size)
    return key_type, (key or None)


def read_value(fd: BinaryIO, *, max_length: int) -> bytes:
    val_size = deser_compact_size(fd)
    if val_size is None:
        raise UnexpectedEndOfStream("missing value length")
    if val_size > max_length:
        raise OversizedValue(f"value length {val_size} exceeds maximum {max_length}")
    return _read_exactly(fd, val_size)


def write_field(fd: BinaryIO, key_type: int, val: bytes, key: Optional[bytes] = None) -> None:
    assert 0 <= key_type < PST_SEPARATOR, key_type
    key = key or b''
    fd.write(bytes([key_type]))
    fd.write(var_int(len(key)))  # key_size
    fd.write(key)
    fd.write(var_int(len(val)))  # val_size
    fd.write(val)


def write_separator(fd: BinaryIO) -> None:
    fd.write(bytes([PST_SEPARATOR]))


def create_pst_writer(fd: BinaryIO):
    def wr(key_type: int, val: bytes, key: bytes = b''):
        write_field(fd, key_type, val, key)
    return wr
