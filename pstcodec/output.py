# Copyright (C) 2026 The pstcodec developers
# Distributed under the MIT software license, see the accompanying
# file LICENCE or http://www.opensource.org/licenses/mit-license.php

import io
from enum import IntEnum
from typing import BinaryIO, Iterable, List, Optional, Union

from .util import bfh, is_hex_str
from .logging import get_logger
from .simple_config import SimpleConfig, get_default_config
from .serialization import (read_field, read_value, write_separator, create_pst_writer,
                            DuplicateKey, InvalidKeyData, InvalidPSTFormat)
from .keys import is_compressed_pubkey, is_xonly_pubkey
from .derivation import (Bip32Derivation, TaprootBip32Derivation,
                         sort_bip32_derivations, sort_tap_bip32_derivations)


_logger = get_logger(__name__)


class PSTOutputType(IntEnum):
    REDEEM_SCRIPT = 0x01
    WITNESS_SCRIPT = 0x02
    BIP32_DERIVATION = 0x03
    TAP_INTERNAL_KEY = 0x04
    TAP_TREE = 0x05
    TAP_BIP32_DERIVATION = 0x06


class PSTSection:
    """A field map of a PST document, terminated by the separator."""

    def _populate_pst_fields_from_fd(
            self,
            fd: BinaryIO,
            *,
            config: SimpleConfig = None,
            max_value_length: int = None,
    ) -> None:
        if config is None:
            config = get_default_config()
        if max_value_length is None:
            max_value_length = config.PST_MAX_VALUE_LENGTH
        max_key_length = config.PST_MAX_KEY_LENGTH
        debug = config.DEBUG_PST_PARSING

        while True:
            key_type, key = read_field(fd, max_key_length=max_key_length)
            if key_type is None:
                break
            val = read_value(fd, max_length=max_value_length)
            if debug:
                _logger.debug(f"{key_type:#04x} {key.hex() if key else None} {val.hex()}")
            self.parse_pst_section_kv(key_type, key, val)

    def _serialize_pst_section(self, fd: BinaryIO) -> None:
        wr = create_pst_writer(fd)
        self.serialize_pst_section_kvs(wr)
        write_separator(fd)

    def parse_pst_section_kv(self, kt: int, key: Optional[bytes], val: bytes) -> None:
        raise NotImplementedError()  # implemented by subclasses

    def serialize_pst_section_kvs(self, wr) -> None:
        raise NotImplementedError()  # implemented by subclasses


class PSTOutput(PSTSection):
    """The per-output field map of a PST document."""

    def __init__(
            self,
            *,
            redeem_script: Optional[bytes] = None,
            witness_script: Optional[bytes] = None,
            bip32_derivations: Iterable[Bip32Derivation] = None,
            tap_internal_key: Optional[bytes] = None,
            tap_tree: Optional[bytes] = None,
            tap_bip32_derivations: Iterable[TaprootBip32Derivation] = None,
    ):
        if tap_internal_key is not None and not is_xonly_pubkey(tap_internal_key):
            raise ValueError(f"tap_internal_key must be an x-only pubkey: {tap_internal_key.hex()}")
        self.redeem_script = redeem_script  # type: Optional[bytes]
        self.witness_script = witness_script  # type: Optional[bytes]
        self.bip32_derivations = []  # type: List[Bip32Derivation]
        self.tap_internal_key = tap_internal_key  # type: Optional[bytes]
        self.tap_tree = tap_tree  # type: Optional[bytes]
        self.tap_bip32_derivations = []  # type: List[TaprootBip32Derivation]
        for d in bip32_derivations or []:
            self.add_bip32_derivation(d)
        for d in tap_bip32_derivations or []:
            self.add_tap_bip32_derivation(d)

    @classmethod
    def from_fd(cls, fd: BinaryIO, *, config: SimpleConfig = None,
                max_value_length: int = None) -> 'PSTOutput':
        """Reads one output field map, up to and including the separator."""
        out = cls()
        out._populate_pst_fields_from_fd(fd, config=config, max_value_length=max_value_length)
        return out

    @classmethod
    def from_bytes(cls, raw: Union[bytes, str], *, config: SimpleConfig = None,
                   max_value_length: int = None) -> 'PSTOutput':
        if isinstance(raw, str):
            if not is_hex_str(raw):
                raise ValueError("expected raw bytes or a hex string")
            raw = bfh(raw)
        with io.BytesIO(raw) as fd:
            out = cls.from_fd(fd, config=config, max_value_length=max_value_length)
            trailing = len(raw) - fd.tell()
        if trailing:
            raise InvalidPSTFormat(f"{trailing} trailing bytes after output separator")
        return out

    def serialize_pst_section(self, fd: BinaryIO) -> None:
        self._serialize_pst_section(fd)

    def serialize_to_bytes(self) -> bytes:
        with io.BytesIO() as fd:
            self.serialize_pst_section(fd)
            return fd.getvalue()

    def get_bip32_derivation(self, pubkey: bytes) -> Optional[Bip32Derivation]:
        for d in self.bip32_derivations:
            if d.pubkey == pubkey:
                return d
        return None

    def get_tap_bip32_derivation(self, xonly_pubkey: bytes) -> Optional[TaprootBip32Derivation]:
        for d in self.tap_bip32_derivations:
            if d.xonly_pubkey == xonly_pubkey:
                return d
        return None

    def add_bip32_derivation(self, derivation: Bip32Derivation) -> None:
        if self.get_bip32_derivation(derivation.pubkey) is not None:
            raise DuplicateKey(f"duplicate key: {repr(PSTOutputType.BIP32_DERIVATION)} "
                               f"{derivation.pubkey.hex()}")
        self.bip32_derivations.append(derivation)

    def add_tap_bip32_derivation(self, derivation: TaprootBip32Derivation) -> None:
        if self.get_tap_bip32_derivation(derivation.xonly_pubkey) is not None:
            raise DuplicateKey(f"duplicate key: {repr(PSTOutputType.TAP_BIP32_DERIVATION)} "
                               f"{derivation.xonly_pubkey.hex()}")
        self.tap_bip32_derivations.append(derivation)

    def parse_pst_section_kv(self, kt, key, val):
        try:
            kt = PSTOutputType(kt)
        except ValueError:
            # unknown types may be kept in input maps, but not here
            raise InvalidPSTFormat(f"unknown PST output field type: {kt:#04x}") from None
        parse = getattr(self, f"_parse_{kt.name.lower()}")
        parse(kt, key, val)

    @staticmethod
    def _check_no_keydata(kt: PSTOutputType, key: Optional[bytes]) -> None:
        if key:
            raise InvalidKeyData(f"key for {repr(kt)} must be empty")

    def _parse_redeem_script(self, kt, key, val):
        if self.redeem_script is not None:
            raise DuplicateKey(f"duplicate key: {repr(kt)}")
        self._check_no_keydata(kt, key)
        self.redeem_script = val

    def _parse_witness_script(self, kt, key, val):
        if self.witness_script is not None:
            raise DuplicateKey(f"duplicate key: {repr(kt)}")
        self._check_no_keydata(kt, key)
        self.witness_script = val

    def _parse_bip32_derivation(self, kt, key, val):
        if not is_compressed_pubkey(key):
            raise InvalidKeyData(f"key for {repr(kt)} is not a compressed pubkey: "
                                 f"len={len(key) if key else 0}")
        self.add_bip32_derivation(Bip32Derivation.from_pst_kv(key, val))

    def _parse_tap_internal_key(self, kt, key, val):
        if self.tap_internal_key is not None:
            raise DuplicateKey(f"duplicate key: {repr(kt)}")
        self._check_no_keydata(kt, key)
        if not is_xonly_pubkey(val):
            raise InvalidKeyData(f"value for {repr(kt)} is not an x-only pubkey: len={len(val)}")
        self.tap_internal_key = val

    def _parse_tap_tree(self, kt, key, val):
        if self.tap_tree is not None:
            raise DuplicateKey(f"duplicate key: {repr(kt)}")
        self._check_no_keydata(kt, key)
        self.tap_tree = val

    def _parse_tap_bip32_derivation(self, kt, key, val):
        if not is_xonly_pubkey(key):
            raise InvalidKeyData(f"key for {repr(kt)} is not an x-only pubkey: "
                                 f"len={len(key) if key else 0}")
        self.add_tap_bip32_derivation(TaprootBip32Derivation.from_pst_kv(key, val))

    def serialize_pst_section_kvs(self, wr):
        if self.redeem_script is not None:
            wr(PSTOutputType.REDEEM_SCRIPT, self.redeem_script)
        if self.witness_script is not None:
            wr(PSTOutputType.WITNESS_SCRIPT, self.witness_script)
        for d in sort_bip32_derivations(self.bip32_derivations):
            wr(PSTOutputType.BIP32_DERIVATION, d.to_pst_value(), d.pubkey)
        if self.tap_internal_key is not None:
            wr(PSTOutputType.TAP_INTERNAL_KEY, self.tap_internal_key)
        if self.tap_tree is not None:
            wr(PSTOutputType.TAP_TREE, self.tap_tree)
        for d in sort_tap_bip32_derivations(self.tap_bip32_derivations):
            wr(PSTOutputType.TAP_BIP32_DERIVATION, d.to_pst_value(), d.xonly_pubkey)

    def combine_with_other_output(self, other: 'PSTOutput') -> None:
        """Merges the fields of another copy of the same output into this one.
        Fields set on other take precedence.
        """
        if other.redeem_script is not None:
            self.redeem_script = other.redeem_script
        if other.witness_script is not None:
            self.witness_script = other.witness_script
        if other.tap_internal_key is not None:
            self.tap_internal_key = other.tap_internal_key
        if other.tap_tree is not None:
            self.tap_tree = other.tap_tree
        for d in other.bip32_derivations:
            self.bip32_derivations = [x for x in self.bip32_derivations if x.pubkey != d.pubkey]
            self.bip32_derivations.append(d)
        for d in other.tap_bip32_derivations:
            self.tap_bip32_derivations = [x for x in self.tap_bip32_derivations
                                          if x.xonly_pubkey != d.xonly_pubkey]
            self.tap_bip32_derivations.append(d)

    def is_empty(self) -> bool:
        return (self.redeem_script is None
                and self.witness_script is None
                and not self.bip32_derivations
                and self.tap_internal_key is None
                and self.tap_tree is None
                and not self.tap_bip32_derivations)

    def to_json(self):
        return {
            'redeem_script': self.redeem_script.hex() if self.redeem_script is not None else None,
            'witness_script': self.witness_script.hex() if self.witness_script is not None else None,
            'bip32_derivations': [d.to_json() for d in sort_bip32_derivations(self.bip32_derivations)],
            'tap_internal_key': self.tap_internal_key.hex() if self.tap_internal_key is not None else None,
            'tap_tree': self.tap_tree.hex() if self.tap_tree is not None else None,
            'tap_bip32_derivations': [d.to_json() for d in sort_tap_bip32_derivations(self.tap_bip32_derivations)],
        }

    def __eq__(self, other):
        if not isinstance(other, PSTOutput):
            return NotImplemented
        return (self.redeem_script == other.redeem_script
                and self.witness_script == other.witness_script
                and sort_bip32_derivations(self.bip32_derivations) == sort_bip32_derivations(other.bip32_derivations)
                and self.tap_internal_key == other.tap_internal_key
                and self.tap_tree == other.tap_tree
                and (sort_tap_bip32_derivations(self.tap_bip32_derivations)
                     == sort_tap_bip32_derivations(other.tap_bip32_derivations)))

    def __repr__(self):
        return f"<PSTOutput {self.to_json()!r}>"
