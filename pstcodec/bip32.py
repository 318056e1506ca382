# Copyright (C) 2026 The pstcodec developers
# Distributed under the MIT software license, see the accompanying
# file LICENCE or http://www.opensource.org/licenses/mit-license.php

from typing import List, Tuple, Sequence

from .serialization import MalformedValue


BIP32_PRIME = 0x80000000
UINT32_MAX = (1 << 32) - 1


def convert_bip32_strpath_to_intpath(path: str) -> List[int]:
    """m/84'/0'/5 -> [0x80000054, 0x80000000, 5]

    Hardened levels are marked with ' or h. The leading "m" is optional.
    """
    levels = [level for level in path.split('/') if level]
    if levels and levels[0] == 'm':
        levels = levels[1:]
    int_path = []
    for level in levels:
        hardened = level[-1] in ("'", "h")
        digits = level[:-1] if hardened else level
        if not (digits.isascii() and digits.isdigit()):
            raise ValueError(f"invalid bip32 path level: {level!r}")
        child_index = int(digits)
        if child_index >= BIP32_PRIME:
            raise ValueError(f"bip32 path level out of range: {level!r}")
        int_path.append(child_index | BIP32_PRIME if hardened else child_index)
    return int_path


def convert_bip32_intpath_to_strpath(path: Sequence[int], *, hardened_char: str = "'") -> str:
    levels = ['m']
    for child_index in path:
        if not isinstance(child_index, int):
            raise TypeError(f"bip32 path level must be int: {child_index!r}")
        if not 0 <= child_index <= UINT32_MAX:
            raise ValueError(f"bip32 path level out of range: {child_index}")
        if child_index & BIP32_PRIME:
            levels.append(f"{child_index ^ BIP32_PRIME}{hardened_char}")
        else:
            levels.append(str(child_index))
    return '/'.join(levels)


def pack_bip32_root_fingerprint_and_int_path(xfp: bytes, path: Sequence[int]) -> bytes:
    if len(xfp) != 4:
        raise ValueError(f'unexpected xfp length. xfp={xfp.hex()}')
    return xfp + b''.join(i.to_bytes(4, byteorder='little', signed=False) for i in path)


def unpack_bip32_root_fingerprint_and_int_path(val: bytes) -> Tuple[bytes, List[int]]:
    """<4 byte xfp> <uint32 path element>*, zero or more path elements"""
    if len(val) < 4 or len(val) % 4 != 0:
        raise MalformedValue(f'unexpected packed path length: {len(val)}. val={val.hex()}')
    int_path = [int.from_bytes(val[i:i + 4], byteorder='little', signed=False)
                for i in range(4, len(val), 4)]
    return val[:4], int_path
