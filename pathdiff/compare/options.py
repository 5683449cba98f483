# Copyright Red Hat
#
# pathdiff/compare/options.py - Path diff comparison options
#
# This file is part of the pathdiff project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Path comparison options and configuration file support.
"""
from dataclasses import dataclass, fields, replace
from configparser import ConfigParser, Error as ConfigParserError
from argparse import Namespace
from os.path import exists
from typing import Union
import logging

from pathdiff import PathdiffConfigError
from pathdiff.terminal import COLOR_MODES

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error

#: Abort the comparison on the first fatal error.
ERROR_POLICY_FAIL_FAST = "fail-fast"
#: Record fatal errors and continue with sibling entries.
ERROR_POLICY_COLLECT = "collect"

ERROR_POLICIES = (ERROR_POLICY_FAIL_FAST, ERROR_POLICY_COLLECT)

#: Default configuration file location.
DEFAULT_CONFIG_FILE = "/etc/pathdiff/pathdiff.conf"

_CFG_COMPARE = "compare"

# Configuration file keys mapped to ``CompareOptions`` fields.
_CFG_KEYS = {
    "symmetric": "symmetric",
    "error_policy": "error_policy",
    "magic": "use_magic_file_type",
    "color": "color",
    "quiet": "quiet",
}

_CFG_BOOL_FIELDS = ("symmetric", "use_magic_file_type", "quiet")


@dataclass(frozen=True)
class CompareOptions:
    """
    Path comparison options.
    """

    #: Also report entries that exist only in the destination directory
    symmetric: bool = False
    #: Error handling policy: "fail-fast" or "collect"
    error_policy: str = ERROR_POLICY_FAIL_FAST
    #: Use libmagic to decide whether file content is text or binary
    use_magic_file_type: bool = False
    #: Color mode for terminal output: "auto", "always" or "never"
    color: str = "auto"
    #: Do not output the comparison summary
    quiet: bool = False

    def __post_init__(self):
        if self.error_policy not in ERROR_POLICIES:
            raise ValueError(f"Invalid error policy: {self.error_policy}")
        if self.color not in COLOR_MODES:
            raise ValueError(f"Invalid color mode: {self.color}")

    def __str__(self):
        """
        Return a human readable string representation of this
        ``CompareOptions`` instance.

        :returns: A human readable string.
        :rtype: ``str``
        """
        return "\n".join(f"{key}={val}" for key, val in self.__dict__.items())

    @property
    def keep_going(self) -> bool:
        """
        ``True`` if fatal errors are collected rather than raised
        immediately.
        """
        return self.error_policy == ERROR_POLICY_COLLECT

    @classmethod
    def from_cmd_args(cls, cmd_args: Namespace, base=None) -> "CompareOptions":
        """
        Initialise CompareOptions from command line arguments.

        Attributes of ``cmd_args`` that are ``None`` or that do not name
        a ``CompareOptions`` field are ignored, leaving the value from
        ``base`` (or the default) in place.

        :param cmd_args: The parsed command line arguments.
        :type cmd_args: ``Namespace``
        :param base: Options to override, for example those loaded from
                     a configuration file.
        :type base: ``Optional[CompareOptions]``
        :returns: A new ``CompareOptions`` instance
        :rtype: ``CompareOptions``
        """
        base = base or cls()
        field_names = {f.name for f in fields(cls)}
        kwargs = {
            name: getattr(cmd_args, name)
            for name in field_names
            if getattr(cmd_args, name, None) is not None
        }
        options = replace(base, **kwargs)
        _log_debug("Initialised CompareOptions from arguments: %s", repr(options))
        return options

    @classmethod
    def from_file(cls, config_file: str) -> "CompareOptions":
        """
        Load ``CompareOptions`` from the ``[compare]`` section of an
        INI-style configuration file located at ``config_file``.

        A missing file yields the default options.

        :param config_file: path to pathdiff.conf
        :type config_file: ``str``
        :returns: A ``CompareOptions`` instance initialised from
                  ``config_file``.
        :rtype: ``CompareOptions``
        :raises: ``PathdiffConfigError`` if the file cannot be parsed or
                 contains invalid values.
        """
        if not exists(config_file):
            _log_debug("No configuration file at '%s'", config_file)
            return cls()

        _log_debug("Loading configuration from '%s'", config_file)
        cfg = ConfigParser()
        try:
            cfg.read([config_file])
        except ConfigParserError as err:
            raise PathdiffConfigError(
                f"Error parsing configuration file '{config_file}': {err}"
            ) from err

        if not cfg.has_section(_CFG_COMPARE):
            return cls()

        kwargs = {}
        for key, value in cfg[_CFG_COMPARE].items():
            if key not in _CFG_KEYS:
                _log_warn("Ignoring unknown option '%s' in %s", key, config_file)
                continue
            name = _CFG_KEYS[key]
            kwargs[name] = _parse_value(cfg, name, key, config_file)

        try:
            return cls(**kwargs)
        except ValueError as err:
            raise PathdiffConfigError(
                f"Invalid value in configuration file '{config_file}': {err}"
            ) from err


def _parse_value(
    cfg: ConfigParser, name: str, key: str, config_file: str
) -> Union[bool, str]:
    """
    Read option ``key`` from the compare section, converting boolean fields.
    """
    if name not in _CFG_BOOL_FIELDS:
        return cfg.get(_CFG_COMPARE, key).strip()
    try:
        return cfg.getboolean(_CFG_COMPARE, key)
    except ValueError as err:
        raise PathdiffConfigError(
            f"Invalid boolean for '{key}' in configuration file "
            f"'{config_file}': {err}"
        ) from err
