##############################################################################
# Copyright (c) the pgcontainer Project developers. See top-level LICENSE
# file for details. No copyright assignment is required to contribute to
# pgcontainer.
##############################################################################

"""
Tests for the `argparse_main.py` module.
"""

import pytest

from pgcontainer import VERSION
from pgcontainer.cli.argparse_main import DEFAULT_LOG_LEVEL, build_main_parser


@pytest.mark.parametrize(
    "argv, expected_command",
    [
        ([], []),
        (["postgres"], ["postgres"]),
        (["postgres", "-c", "log_connections=on"], ["postgres", "-c", "log_connections=on"]),
        (["bash", "-c", "cat $HOME/openshift-custom-postgresql.conf"], ["bash", "-c", "cat $HOME/openshift-custom-postgresql.conf"]),
        (["--", "postgres"], ["postgres"]),
        (["--", "bash", "-c", "exit 0"], ["bash", "-c", "exit 0"]),
        (["postgres", "--", "-c"], ["postgres", "--", "-c"]),
    ],
)
def test_command_passthrough(argv, expected_command):
    """
    Test that everything after the options is kept as the command, including
    arguments that look like options. Only a leading `--` separator is dropped.

    :param argv: The arguments given to the entrypoint
    :param expected_command: The command we expect to be parsed out
    """
    args = build_main_parser().parse_args(argv)
    assert args.command == expected_command
    assert args.level == DEFAULT_LOG_LEVEL


def test_level_before_command():
    """
    Test that the log level can be set ahead of the command.
    """
    args = build_main_parser().parse_args(["-lvl", "DEBUG", "postgres"])
    assert args.level == "DEBUG"
    assert args.command == ["postgres"]


@pytest.mark.parametrize(
    "argv, expected_level",
    [
        (["-lvl", "debug", "postgres"], "DEBUG"),
        (["--level", "Warning", "--", "postgres"], "WARNING"),
        (["-lvl", "ERROR"], "ERROR"),
    ],
)
def test_level_case_insensitive(argv, expected_level):
    """
    Test that the log level is accepted in any case and stored upper case.

    :param argv: The arguments given to the entrypoint
    :param expected_level: The log level we expect to be parsed out
    """
    args = build_main_parser().parse_args(argv)
    assert args.level == expected_level


def test_invalid_level(capsys: pytest.CaptureFixture):
    """
    Test that an unknown log level is rejected by the parser with the usual
    error output instead of failing later while setting up logging.

    :param capsys: A built-in fixture from the pytest library to capture stdout and stderr
    """
    with pytest.raises(SystemExit) as excinfo:
        build_main_parser().parse_args(["-lvl", "foo", "postgres"])
    assert excinfo.value.code == 2
    captured = capsys.readouterr()
    assert "error: argument -lvl/--level: invalid choice" in captured.err
    assert "FOO" in captured.err
    assert "usage: run-postgresql" in captured.err


def test_version(capsys: pytest.CaptureFixture):
    """
    Test that `--version` prints the version and exits cleanly.

    :param capsys: A built-in fixture from the pytest library to capture stdout and stderr
    """
    with pytest.raises(SystemExit) as excinfo:
        build_main_parser().parse_args(["--version"])
    assert excinfo.value.code == 0
    assert VERSION in capsys.readouterr().out


def test_unknown_option(capsys: pytest.CaptureFixture):
    """
    Test that an unknown option prints the error and help to stderr and exits with 2.

    :param capsys: A built-in fixture from the pytest library to capture stdout and stderr
    """
    with pytest.raises(SystemExit) as excinfo:
        build_main_parser().parse_args(["--bogus"])
    assert excinfo.value.code == 2
    captured = capsys.readouterr()
    assert "error: unrecognized arguments: --bogus" in captured.err
    assert "usage: run-postgresql" in captured.err
