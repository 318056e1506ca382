from .version import PSTCODEC_VERSION
from .simple_config import SimpleConfig
from .serialization import (SerializationError, UnexpectedEndOfStream, OversizedValue,
                            DuplicateKey, InvalidKeyData, MalformedValue, InvalidPSTFormat)
from .derivation import Bip32Derivation, TaprootBip32Derivation
from .output import PSTOutput, PSTOutputType


__version__ = PSTCODEC_VERSION
