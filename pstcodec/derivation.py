# Copyright (C) 2026 The pstcodec developers
# Distributed under the MIT software license, see the accompanying
# file LICENCE or http://www.opensource.org/licenses/mit-license.php

import functools
from typing import Iterable, List, Tuple, Union

import attr

from .util import hex_to_bytes, bytes_to_hex
from .bip32 import (UINT32_MAX, convert_bip32_strpath_to_intpath, convert_bip32_intpath_to_strpath,
                    pack_bip32_root_fingerprint_and_int_path,
                    unpack_bip32_root_fingerprint_and_int_path)
from .keys import (is_compressed_pubkey, is_xonly_pubkey, TAP_LEAF_HASH_LEN,
                   pack_tap_bip32_derivation, unpack_tap_bip32_derivation)


def _to_int_path(path: Union[str, Iterable[int]]) -> Tuple[int, ...]:
    if isinstance(path, str):
        path = convert_bip32_strpath_to_intpath(path)
    return tuple(path)


def _to_leaf_hashes(leaf_hashes: Iterable) -> Tuple[bytes, ...]:
    return tuple(hex_to_bytes(h) for h in leaf_hashes)


def _check_fingerprint(instance, attribute, value):
    if len(value) != 4:
        raise ValueError(f"{attribute.name} must be 4 bytes, got {len(value)}")


def _check_int_path(instance, attribute, value):
    for child_index in value:
        if not isinstance(child_index, int) or not (0 <= child_index <= UINT32_MAX):
            raise ValueError(f"bip32 path child index out of range: {child_index!r}")


@attr.s(frozen=True)
class Bip32Derivation:
    """A pubkey together with the root fingerprint and path it was derived at."""

    pubkey = attr.ib(type=bytes, kw_only=True, converter=hex_to_bytes, repr=bytes_to_hex)
    fingerprint = attr.ib(type=bytes, kw_only=True, converter=hex_to_bytes, repr=bytes_to_hex,
                          validator=_check_fingerprint)
    path = attr.ib(type=tuple, kw_only=True, converter=_to_int_path, validator=_check_int_path)

    @pubkey.validator
    def _check_pubkey(self, attribute, value):
        if not is_compressed_pubkey(value):
            raise ValueError(f"not a compressed pubkey: {value.hex()}")

    @classmethod
    def from_pst_kv(cls, key: bytes, val: bytes) -> 'Bip32Derivation':
        xfp, path = unpack_bip32_root_fingerprint_and_int_path(val)
        return cls(pubkey=key, fingerprint=xfp, path=path)

    def to_pst_value(self) -> bytes:
        return pack_bip32_root_fingerprint_and_int_path(self.fingerprint, self.path)

    def sort_key(self) -> bytes:
        return self.pubkey

    def to_json(self):
        return {
            'pubkey': self.pubkey.hex(),
            'fingerprint': self.fingerprint.hex(),
            'path': convert_bip32_intpath_to_strpath(self.path),
        }


@attr.s(frozen=True)
class TaprootBip32Derivation:
    """An x-only pubkey, the tap leaves it is used in, and its derivation."""

    xonly_pubkey = attr.ib(type=bytes, kw_only=True, converter=hex_to_bytes, repr=bytes_to_hex)
    leaf_hashes = attr.ib(type=tuple, kw_only=True, converter=_to_leaf_hashes, factory=tuple)
    fingerprint = attr.ib(type=bytes, kw_only=True, converter=hex_to_bytes, repr=bytes_to_hex,
                          validator=_check_fingerprint)
    path = attr.ib(type=tuple, kw_only=True, converter=_to_int_path, validator=_check_int_path)

    @xonly_pubkey.validator
    def _check_xonly_pubkey(self, attribute, value):
        if not is_xonly_pubkey(value):
            raise ValueError(f"not an x-only pubkey: {value.hex()}")

    @leaf_hashes.validator
    def _check_leaf_hashes(self, attribute, value):
        for leaf_hash in value:
            if len(leaf_hash) != TAP_LEAF_HASH_LEN:
                raise ValueError(f"unexpected leaf hash length: {len(leaf_hash)}")

    @classmethod
    def from_pst_kv(cls, key: bytes, val: bytes) -> 'TaprootBip32Derivation':
        leaf_hashes, xfp, path = unpack_tap_bip32_derivation(val)
        return cls(xonly_pubkey=key, leaf_hashes=leaf_hashes, fingerprint=xfp, path=path)

    def to_pst_value(self) -> bytes:
        return pack_tap_bip32_derivation(self.leaf_hashes, self.fingerprint, self.path)

    def sort_key(self) -> bytes:
        return self.xonly_pubkey

    def sort_before(self, other: 'TaprootBip32Derivation') -> bool:
        """Serialization order only; says nothing about identity."""
        return self.sort_key() < other.sort_key()

    def to_json(self):
        return {
            'xonly_pubkey': self.xonly_pubkey.hex(),
            'leaf_hashes': [h.hex() for h in self.leaf_hashes],
            'fingerprint': self.fingerprint.hex(),
            'path': convert_bip32_intpath_to_strpath(self.path),
        }


def sort_bip32_derivations(derivations: Iterable[Bip32Derivation]) -> List[Bip32Derivation]:
    """Returns a new list, ascending by raw pubkey bytes."""
    return sorted(derivations, key=lambda d: d.sort_key())


def _compare_tap_derivations(a: TaprootBip32Derivation, b: TaprootBip32Derivation) -> int:
    if a.sort_before(b):
        return -1
    if b.sort_before(a):
        return 1
    return 0


def sort_tap_bip32_derivations(derivations: Iterable[TaprootBip32Derivation]) -> List[TaprootBip32Derivation]:
    """Returns a new list, ordered by TaprootBip32Derivation.sort_before."""
    return sorted(derivations, key=functools.cmp_to_key(_compare_tap_derivations))
