# Copyright Red Hat
#
# pathdiff/command.py - Path diff command interface
#
# This file is part of the pathdiff project.
#
# SPDX-License-Identifier: Apache-2.0
"""The ``pathdiff.command`` module provides the pathdiff command line
interface.

The command compares two files or directory trees and writes warnings and
unified diffs to standard output. The exit status follows ``diff(1)``:
0 when no differences were found, 1 when differences were found and 2 on
error.
"""
from argparse import ArgumentParser
from os.path import basename
import logging
import sys

from pathdiff import (
    PathdiffError,
    PathdiffCompareErrors,
    PATHDIFF_DEBUG_COMPARE,
    PATHDIFF_DEBUG_COMMAND,
    PATHDIFF_DEBUG_ALL,
    PATHDIFF_SUBSYSTEM_COMMAND,
    SubsystemFilter,
    set_debug_mask,
    __version__,
)
from pathdiff.compare import CompareOptions, TerminalReporter, diff
from pathdiff.compare.options import DEFAULT_CONFIG_FILE, ERROR_POLICY_COLLECT
from pathdiff.terminal import COLOR_MODES, flush_with_broken_pipe_guard

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error


def _log_debug_command(msg, *args, **kwargs):
    """A wrapper for command subsystem debug logs."""
    _log.debug(msg, *args, extra={"subsystem": PATHDIFF_SUBSYSTEM_COMMAND}, **kwargs)


#: Exit status: no differences found.
EXIT_SAME = 0
#: Exit status: differences found.
EXIT_DIFFERENT = 1
#: Exit status: an error occurred.
EXIT_ERROR = 2
#: Exit status: interrupted by the user.
EXIT_INTERRUPTED = 130

_DEFAULT_LOG_LEVEL = logging.WARNING
_CONSOLE_HANDLER = None


def diff_paths(src, dst, options=None, stream=None):
    """
    Compare ``src`` with ``dst`` and report to ``stream``.

    :param src: The source path (may begin with ``~``).
    :type src: ``str``
    :param dst: The destination path (may begin with ``~``).
    :type dst: ``str``
    :param options: Comparison options.
    :type options: ``Optional[CompareOptions]``
    :param stream: Output stream (default ``sys.stdout``).
    :type stream: ``Optional[TextIO]``
    :returns: The comparison results.
    :rtype: ``CompareResults``
    """
    options = options or CompareOptions()
    reporter = TerminalReporter(stream=stream, options=options)
    return diff(src, dst, reporter=reporter, options=options)


def _options_from_args(cmd_args):
    """
    Build ``CompareOptions`` from the configuration file and command line.

    Command line arguments take precedence over configuration file values.

    :param cmd_args: Command line arguments for the command
    :returns: The effective ``CompareOptions``.
    """
    base = CompareOptions.from_file(cmd_args.config)
    if cmd_args.keep_going:
        cmd_args.error_policy = ERROR_POLICY_COLLECT
    return CompareOptions.from_cmd_args(cmd_args, base=base)


def _diff_cmd(cmd_args):
    """
    Diff command handler.

    :param cmd_args: Command line arguments for the command
    :returns: integer status code returned from ``main()``
    """
    try:
        options = _options_from_args(cmd_args)
    except (PathdiffError, ValueError) as err:
        _log_error("Invalid configuration: %s", err)
        return EXIT_ERROR

    _log_debug_command("Effective options:\n%s", options)

    try:
        results = diff_paths(cmd_args.src, cmd_args.dst, options=options)
    except PathdiffCompareErrors as err:
        for error in err.errors:
            _log_error("%s", error)
        if err.results is not None and not options.quiet:
            print(err.results.summary())
        return EXIT_ERROR

    # Identical inputs produce no output unless verbose.
    if not options.quiet and (results.has_differences or cmd_args.verbose):
        print(results.summary())

    return EXIT_DIFFERENT if results.has_differences else EXIT_SAME


def setup_logging(cmd_args):
    """
    Set up pathdiff logging.
    """
    # pylint: disable=global-statement
    global _CONSOLE_HANDLER
    level = _DEFAULT_LOG_LEVEL
    if cmd_args.verbose and cmd_args.verbose > 1:
        level = logging.DEBUG
    elif cmd_args.verbose and cmd_args.verbose > 0:
        level = logging.INFO

    pathdiff_log = logging.getLogger("pathdiff")
    formatter = logging.Formatter("%(levelname)s - %(message)s")
    pathdiff_log.setLevel(level)
    if pathdiff_log.hasHandlers():
        pathdiff_log.handlers.clear()

    _CONSOLE_HANDLER = logging.StreamHandler(sys.stderr)
    _CONSOLE_HANDLER.setLevel(level)
    _CONSOLE_HANDLER.setFormatter(formatter)
    _CONSOLE_HANDLER.addFilter(SubsystemFilter("pathdiff"))

    pathdiff_log.addHandler(_CONSOLE_HANDLER)


def shutdown_logging():
    """
    Shut down pathdiff logging.
    """
    logging.shutdown()


def set_debug(debug_arg):
    """
    Set debugging mask from command line argument.
    """
    if not debug_arg:
        return

    mask_map = {
        "compare": PATHDIFF_DEBUG_COMPARE,
        "command": PATHDIFF_DEBUG_COMMAND,
        "all": PATHDIFF_DEBUG_ALL,
    }

    mask = 0
    for name in debug_arg.split(","):
        if name not in mask_map:
            raise ValueError(f"Unknown debug option: {name}")
        mask |= mask_map[name]
    set_debug_mask(mask)


def _add_compare_args(parser):
    parser.add_argument(
        "--color",
        choices=COLOR_MODES,
        default=None,
        help="Colorize output (default: auto)",
    )
    parser.add_argument(
        "-s",
        "--symmetric",
        action="store_true",
        default=None,
        help="Also report entries that exist only in DST",
    )
    parser.add_argument(
        "-k",
        "--keep-going",
        action="store_true",
        default=False,
        help="Continue comparing sibling entries after an error",
    )
    parser.add_argument(
        "-m",
        "--magic",
        dest="use_magic_file_type",
        action="store_true",
        default=None,
        help="Use libmagic to detect binary files (slower)",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        default=None,
        help="Do not print the comparison summary",
    )
    parser.add_argument(
        "-c",
        "--config",
        metavar="CONFIG",
        default=DEFAULT_CONFIG_FILE,
        help=f"Configuration file (default: {DEFAULT_CONFIG_FILE})",
    )
    parser.add_argument("src", metavar="SRC", help="Source file or directory")
    parser.add_argument("dst", metavar="DST", help="Destination file or directory")


def main(args):
    """
    Main entry point for pathdiff.
    """
    parser = ArgumentParser(
        description="Compare files and directory trees", prog=basename(args[0])
    )

    # Global arguments
    parser.add_argument(
        "-d",
        "--debug",
        metavar="DEBUGOPTS",
        type=str,
        help="A list of debug options to enable (compare, command, all)",
    )
    parser.add_argument("-v", "--verbose", help="Enable verbose output", action="count")
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        help="Report the version number of pathdiff",
        version=__version__,
    )
    _add_compare_args(parser)

    cmd_args = parser.parse_args(args[1:])
    cmd_args.error_policy = None

    status = EXIT_ERROR

    setup_logging(cmd_args)

    try:
        set_debug(cmd_args.debug)
    except ValueError as err:
        print(err)
        parser.print_help()
        shutdown_logging()
        return status

    try:
        status = _diff_cmd(cmd_args)
    except KeyboardInterrupt:  # pragma: no cover
        _log_error("Exiting on user cancel")
        status = EXIT_INTERRUPTED
    except PathdiffError as err:
        _log_error("Command failed: %s", err)
        status = EXIT_ERROR

    flush_with_broken_pipe_guard(sys.stdout)
    shutdown_logging()
    return status


def run():
    """
    Console script entry point.
    """
    sys.exit(main(sys.argv))
