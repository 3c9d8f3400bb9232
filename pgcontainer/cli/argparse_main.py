##############################################################################
# Copyright (c) the pgcontainer Project developers. See top-level LICENSE
# file for details. No copyright assignment is required to contribute to
# pgcontainer.
##############################################################################

"""
Argument parser for the `run-postgresql` container entrypoint.

Everything after the options is the command to hand off to, passed through
untouched.
"""

import argparse
import sys
from argparse import ArgumentParser, RawDescriptionHelpFormatter

from pgcontainer import VERSION
from pgcontainer.server.server_util import ENGINE_COMMAND


DEFAULT_LOG_LEVEL = "INFO"
LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
COMMAND_SEPARATOR = "--"

DESCRIPTION = f"""Entrypoint for the PostgreSQL container image.

Renders the custom configuration, initializes the database cluster on first
start when the command is '{ENGINE_COMMAND}', removes the credential variables
from the environment and replaces itself with the given command."""


class CommandAction(argparse.Action):  # pylint: disable=R0903
    """
    Store the command to hand off to, dropping a leading `--` that separates
    it from the entrypoint's own options.
    """

    def __call__(self, parser, namespace, values, option_string=None):
        command = list(values)
        if command[:1] == [COMMAND_SEPARATOR]:
            command = command[1:]
        setattr(namespace, self.dest, command)


class HelpParser(ArgumentParser):
    """
    This class overrides the error message of the argument parser to
    print the help message when an error happens.

    Methods:
        error: Override the error message of the `ArgumentParser` class.
    """

    def error(self, message: str):
        """
        Override the error message of the `ArgumentParser` class.

        Args:
            message: The error message to log.
        """
        sys.stderr.write(f"error: {message}\n")
        self.print_help(sys.stderr)
        sys.exit(2)


def build_main_parser() -> ArgumentParser:
    """
    Set up the command-line argument parser for the entrypoint.

    Returns:
        An `ArgumentParser` object for `run-postgresql`.
    """
    parser = HelpParser(
        prog="run-postgresql",
        description=DESCRIPTION,
        formatter_class=RawDescriptionHelpFormatter,
    )
    parser.add_argument("-v", "--version", action="version", version=VERSION)
    parser.add_argument(
        "-lvl",
        "--level",
        type=str.upper,
        choices=LOG_LEVELS,
        default=DEFAULT_LOG_LEVEL,
        help="Set log level: DEBUG, INFO, WARNING, ERROR, CRITICAL [Default: %(default)s]",
    )
    parser.add_argument(
        "command",
        nargs=argparse.REMAINDER,
        action=CommandAction,
        help=f"The command to execute [Default: {ENGINE_COMMAND}]",
    )
    return parser
