##############################################################################
# Copyright (c) the pgcontainer Project developers. See top-level LICENSE
# file for details. No copyright assignment is required to contribute to
# pgcontainer.
##############################################################################

"""
The `server` package defines the functionality for validating, initializing,
and handing off control to the PostgreSQL server inside the container.

Modules:
    server_commands.py: First-run initialization and the process handoff.
    server_config.py: Config rendering and the engine command table.
    server_util.py: Defines the filesystem layout and configuration file helpers.
    validation.py: Validation of the operator-supplied environment.
"""
