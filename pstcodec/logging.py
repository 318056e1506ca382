# Copyright (C) 2026 The pstcodec developers
# Distributed under the MIT software license, see the accompanying
# file LICENCE or http://www.opensource.org/licenses/mit-license.php

import logging
import platform
import sys
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .simple_config import SimpleConfig


# every module logs through a child of this one; handlers sit on the root logger
pstcodec_logger = logging.getLogger("pstcodec")
pstcodec_logger.setLevel(logging.DEBUG)

console_stderr_handler = None  # type: Optional[logging.Handler]


def get_logger(name: str) -> logging.Logger:
    if name.startswith("pstcodec."):
        name = name[len("pstcodec."):]
    return pstcodec_logger.getChild(name)


_logger = get_logger(__name__)
_logger.setLevel(logging.INFO)


def apply_verbosity(verbosity: Optional[str]) -> None:
    """Sets logger levels from a filter string.

    "warning,output=debug" puts the package at WARNING and pstcodec.output
    at DEBUG. "*" or an empty string leaves every level alone.
    """
    if not verbosity or verbosity == '*':
        return
    for filt in verbosity.split(','):
        if not filt:
            continue
        parts = filt.split('=')
        if len(parts) == 1:
            pstcodec_logger.setLevel(parts[0].upper())
        elif len(parts) == 2:
            get_logger(parts[0]).setLevel(parts[1].upper())
        else:
            raise ValueError(f"invalid log filter: {filt!r}")


def add_stderr_handler(*, verbosity: Optional[str] = None) -> logging.Handler:
    """Installs the console handler once; calling again only re-applies verbosity."""
    global console_stderr_handler
    if console_stderr_handler is None:
        console_stderr_handler = logging.StreamHandler(sys.stderr)
        console_stderr_handler.setFormatter(
            logging.Formatter("%(levelname).1s | %(name)s | %(message)s"))
        logging.getLogger().addHandler(console_stderr_handler)
    # without a filter only warnings reach the console
    console_stderr_handler.setLevel(logging.DEBUG if verbosity else logging.WARNING)
    apply_verbosity(verbosity)
    return console_stderr_handler


def configure_logging(config: 'SimpleConfig') -> None:
    verbosity = config.LOG_VERBOSITY
    add_stderr_handler(verbosity=verbosity)

    from . import PSTCODEC_VERSION
    _logger.info(f"pstcodec version: {PSTCODEC_VERSION}, "
                 f"python {platform.python_version()} on {platform.platform()}")
    _logger.info(f"log filters: verbosity {verbosity!r}")
