# Copyright (C) 2026 The pstcodec developers
# Distributed under the MIT software license, see the accompanying
# file LICENCE or http://www.opensource.org/licenses/mit-license.php

import json
import os
from typing import Any, Callable, Dict, Optional, Sequence


_config_var_from_key = {}  # type: Dict[str, ConfigVar]


class ConfigVar(property):
    """A read-only, typed config key. Unset keys fall back to the default."""

    def __init__(self, key: str, *, default: Any, type_: Callable = None, short_desc: str = None):
        self._key = key
        self._default = default
        self._type = type_
        self._short_desc = short_desc
        property.__init__(self, self._get_config_value)
        assert key not in _config_var_from_key, f"duplicate config key: {key!r}"
        _config_var_from_key[key] = self

    def _get_config_value(self, config: 'SimpleConfig') -> Any:
        value = config.get(self._key)
        if value is None:
            return self._default
        if self._type is None:
            return value
        try:
            return self._type(value)
        except (TypeError, ValueError) as e:
            raise ValueError(f"config key {self._key!r}: cannot read {value!r} "
                             f"as {self._type.__name__}") from e

    def key(self) -> str:
        return self._key

    def get_default_value(self) -> Any:
        return self._default

    def get_short_desc(self) -> Optional[str]:
        return self._short_desc

    def __repr__(self):
        return f"<ConfigVar key={self._key!r}>"


class SimpleConfig:
    """Codec settings, looked up in order:
        1. options passed in by the caller
        2. the json "config" file in options['config_dir'], if given
        3. the ConfigVar defaults
    The codec only reads settings; nothing is written back.
    """

    def __init__(self, options: Dict[str, Any] = None,
                 read_user_config_function: Callable[[Optional[str]], Dict[str, Any]] = None):
        self.options = dict(options or {})
        for key in self.options:
            assert isinstance(key, str), f"config key must be str, got {key!r}"
        if read_user_config_function is None:
            read_user_config_function = read_user_config
        self.path = self.options.get('config_dir')  # type: Optional[str]
        self.user_config = read_user_config_function(self.path) or {}

    def get(self, key: str, default: Any = None) -> Any:
        value = self.options.get(key)
        if value is None:
            value = self.user_config.get(key, default)
        return value

    def is_set(self, key) -> bool:
        if isinstance(key, ConfigVar):
            key = key.key()
        return self.get(key) is not None

    def list_config_vars(self) -> Sequence[str]:
        return sorted(_config_var_from_key)

    PST_MAX_VALUE_LENGTH = ConfigVar(
        'pst_max_value_length', default=4_000_000, type_=int,
        short_desc="Largest value (in bytes) accepted for a single PST field",
    )
    PST_MAX_KEY_LENGTH = ConfigVar(
        'pst_max_key_length', default=10_000, type_=int,
        short_desc="Largest key data (in bytes) accepted for a single PST field",
    )
    DEBUG_PST_PARSING = ConfigVar('debug_pst_parsing', default=False, type_=bool)
    LOG_VERBOSITY = ConfigVar('verbosity', default=None, type_=str)


def read_user_config(path: Optional[str]) -> Dict[str, Any]:
    """Loads <path>/config. A missing file is an empty config, a broken one an error."""
    if not path:
        return {}
    config_path = os.path.join(path, "config")
    if not os.path.exists(config_path):
        return {}
    try:
        with open(config_path, "r", encoding='utf-8') as f:
            result = json.load(f)
    except ValueError as e:
        raise ValueError(f"invalid config file at {config_path}: {e}") from e
    if not isinstance(result, dict):
        raise ValueError(f"invalid config file at {config_path}: not a json object")
    return result


_default_config = None  # type: Optional[SimpleConfig]


def get_default_config() -> SimpleConfig:
    """Built-in defaults only; never touches the filesystem."""
    global _default_config
    if _default_config is None:
        _default_config = SimpleConfig(options={}, read_user_config_function=lambda _: {})
    return _default_config
