##############################################################################
# Copyright (c) the pgcontainer Project developers. See top-level LICENSE
# file for details. No copyright assignment is required to contribute to
# pgcontainer.
##############################################################################

"""
Module of all pgcontainer-specific exception types.
"""

__all__ = (
    "ValidationError",
    "InitializationError",
    "ServerConfigError",
)


class ValidationError(Exception):
    """
    Exception to signal that the operator-supplied environment is missing
    a required variable or has a malformed value. No side effects have
    happened when this is raised.
    """

    def __init__(self, message: str = None):
        super().__init__(message)
        self.message = message


class InitializationError(Exception):
    """
    Exception for fatal errors during first-run initialization of the
    database cluster. Nothing is retried or rolled back.
    """

    def __init__(self, step: str, command: list = None, returncode: int = None):
        self.step = step
        self.command = command
        self.returncode = returncode
        message = f"Initialization step '{step}' failed"
        if command:
            message += f" running '{command[0]}'"
        if returncode is not None:
            message += f" with exit code {returncode}"
        super().__init__(message)


class ServerConfigError(Exception):
    """
    Exception to signal that the engine command table could not be loaded.
    """
