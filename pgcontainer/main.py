##############################################################################
# Copyright (c) the pgcontainer Project developers. See top-level LICENSE
# file for details. No copyright assignment is required to contribute to
# pgcontainer.
##############################################################################

"""
Main entry point into the container's startup code.
"""

import logging
import sys
import traceback

from pgcontainer.cli.argparse_main import build_main_parser
from pgcontainer.exceptions import ValidationError
from pgcontainer.log_formatter import setup_logging
from pgcontainer.server.server_commands import run_entrypoint
from pgcontainer.server.validation import usage


LOG = logging.getLogger("pgcontainer")


def main():
    """
    Entry point for the `run-postgresql` container entrypoint.

    Parses the command to hand off to, sets up logging, and runs the
    entrypoint. On success this never returns since the process is replaced
    by the requested command. Invalid credentials print the usage message to
    stderr; every failure exits with a code of 1.
    """
    parser = build_main_parser()
    args = parser.parse_args()

    setup_logging(logger=LOG, log_level=args.level, colors=True)

    try:
        run_entrypoint(args.command)
    except ValidationError as exc:
        sys.stderr.write(usage(exc.message))
        sys.exit(1)
    # pylint complains that this exception is too broad - being at the literal top of the program stack, it's ok.
    except Exception as excpt:  # pylint: disable=broad-except
        LOG.debug(traceback.format_exc())
        LOG.error(str(excpt))
        sys.exit(1)


if __name__ == "__main__":
    main()
