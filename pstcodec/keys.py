# Copyright (C) 2026 The pstcodec developers
# Distributed under the MIT software license, see the accompanying
# file LICENCE or http://www.opensource.org/licenses/mit-license.php

import io
from typing import List, Sequence, Tuple

from .bip32 import (pack_bip32_root_fingerprint_and_int_path,
                    unpack_bip32_root_fingerprint_and_int_path)
from .serialization import var_int, deser_compact_size, MalformedValue, SerializationError


COMPRESSED_PUBKEY_LEN = 33
XONLY_PUBKEY_LEN = 32
TAP_LEAF_HASH_LEN = 32


def is_compressed_pubkey(pubkey: bytes) -> bool:
    # note: structural check only, the point is not decoded
    if not isinstance(pubkey, (bytes, bytearray)):
        return False
    return len(pubkey) == COMPRESSED_PUBKEY_LEN and pubkey[0] in (0x02, 0x03)


def is_xonly_pubkey(pubkey: bytes) -> bool:
    if not isinstance(pubkey, (bytes, bytearray)):
        return False
    return len(pubkey) == XONLY_PUBKEY_LEN


def unpack_tap_bip32_derivation(val: bytes) -> Tuple[List[bytes], bytes, List[int]]:
    """Splits a taproot bip32 derivation value into (leaf_hashes, xfp, path).

    <compact size: n> <n * 32 byte leaf hash> <4 byte xfp> <uint32 path element>*
    """
    # at least the compact size and the fingerprint
    if len(val) < 5:
        raise MalformedValue(f"taproot derivation value too short: {len(val)}")
    with io.BytesIO(val) as fd:
        try:
            num_hashes = deser_compact_size(fd)
        except SerializationError as e:
            raise MalformedValue(f"cannot read number of leaf hashes: {e!r}") from e
        remaining = val[fd.tell():]
    if len(remaining) < num_hashes * TAP_LEAF_HASH_LEN + 4:
        raise MalformedValue(
            f"taproot derivation value too short for {num_hashes} leaf hashes: {len(val)}")
    hashes_len = num_hashes * TAP_LEAF_HASH_LEN
    leaf_hashes = [remaining[i:i + TAP_LEAF_HASH_LEN]
                   for i in range(0, hashes_len, TAP_LEAF_HASH_LEN)]
    xfp, path = unpack_bip32_root_fingerprint_and_int_path(remaining[hashes_len:])
    return leaf_hashes, xfp, path


def pack_tap_bip32_derivation(leaf_hashes: Sequence[bytes], xfp: bytes, path: Sequence[int]) -> bytes:
    for leaf_hash in leaf_hashes:
        if len(leaf_hash) != TAP_LEAF_HASH_LEN:
            raise ValueError(f"unexpected leaf hash length: {len(leaf_hash)}")
    return (var_int(len(leaf_hashes))
            + b''.join(leaf_hashes)
            + pack_bip32_root_fingerprint_and_int_path(xfp, path))
