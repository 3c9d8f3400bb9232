##############################################################################
# Copyright (c) the pgcontainer Project developers. See top-level LICENSE
# file for details. No copyright assignment is required to contribute to
# pgcontainer.
##############################################################################

"""
The `cli` package holds the argument parser for the `run-postgresql` entrypoint.

Modules:
    argparse_main.py: Builds the main argument parser.
"""
