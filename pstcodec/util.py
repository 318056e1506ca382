# Copyright (C) 2026 The pstcodec developers
# Distributed under the MIT software license, see the accompanying
# file LICENCE or http://www.opensource.org/licenses/mit-license.php

from typing import Any, Optional, Union


bfh = bytes.fromhex


def hex_to_bytes(arg: Optional[Union[bytes, bytearray, str]]) -> Optional[bytes]:
    """attrs converter: accepts raw bytes or their hex form."""
    if arg is None or isinstance(arg, bytes):
        return arg
    if isinstance(arg, str):
        return bfh(arg)
    return bytes(arg)


def bytes_to_hex(arg: Optional[bytes]) -> str:
    # attrs repr
    return repr(arg.hex()) if arg is not None else 'None'


def is_hex_str(text: Any) -> bool:
    if not isinstance(text, str) or len(text) % 2:
        return False
    # bytes.fromhex skips whitespace between pairs
    if any(c.isspace() for c in text):
        return False
    try:
        bfh(text)
    except ValueError:
        return False
    return True
