##############################################################################
# Copyright (c) the pgcontainer Project developers. See top-level LICENSE
# file for details. No copyright assignment is required to contribute to
# pgcontainer.
##############################################################################

"""
Validation of the credentials an operator passes to the container.

Every check here happens before any side effect. The patterns are stricter
than PostgreSQL requires: the values are interpolated into SQL string literals
and command lines without further escaping.
"""

import os
import re
from dataclasses import dataclass
from typing import Mapping, Optional

from pgcontainer.exceptions import ValidationError
from pgcontainer.server.server_util import (
    ADMIN_PASSWORD_VAR,
    DATABASE_VAR,
    DEFAULT_MAX_CONNECTIONS,
    DEFAULT_SHARED_BUFFERS,
    MAX_CONNECTIONS_VAR,
    PASSWORD_VAR,
    SHARED_BUFFERS_VAR,
    USERNAME_VAR,
)


IDENTIFIER_REGEX = r"^[a-zA-Z_][a-zA-Z0-9_]*$"
PASSWORD_REGEX = r"^[a-zA-Z0-9_~!@#$%^&*()\-=<>,.?;:|]+$"
MAX_IDENTIFIER_LENGTH = 63

_IDENTIFIER_PATTERN = re.compile(IDENTIFIER_REGEX[1:-1])
_PASSWORD_PATTERN = re.compile(PASSWORD_REGEX[1:-1])


@dataclass(frozen=True)
class Credentials:
    """
    The validated set of credentials used during first-run initialization.

    Attributes:
        username: Name of the operator role.
        password: Password of the operator role.
        database: Name of the operator database, owned by `username`.
        admin_password: Password for the `postgres` superuser, or None.
    """

    username: str
    password: str
    database: str
    admin_password: Optional[str] = None

    def __repr__(self) -> str:
        return f"Credentials(username={self.username!r}, database={self.database!r})"


def valid_password(value: str) -> bool:
    """
    Check that `value` only uses characters from the allowed password set.

    Args:
        value: The password to check.

    Returns:
        True if `value` is non-empty and matches the password pattern.
    """
    return _PASSWORD_PATTERN.fullmatch(value) is not None


def usage(error: str = None) -> str:
    """
    Build the usage message printed when validation fails.

    Args:
        error: An optional description of the specific failure.

    Returns:
        The usage message, one line per variable.
    """
    lines = []
    if error:
        lines.append(f"error: {error}")
    lines.extend(
        [
            "You must specify following environment variables:",
            f"  {USERNAME_VAR} (regex: '{IDENTIFIER_REGEX}')",
            f"  {PASSWORD_VAR} (regex: '{PASSWORD_REGEX}')",
            f"  {DATABASE_VAR} (regex: '{IDENTIFIER_REGEX}')",
            "Optional:",
            f"  {ADMIN_PASSWORD_VAR} (regex: '{PASSWORD_REGEX}')",
            "Settings:",
            f"  {MAX_CONNECTIONS_VAR} (default: {DEFAULT_MAX_CONNECTIONS})",
            f"  {SHARED_BUFFERS_VAR} (default: {DEFAULT_SHARED_BUFFERS})",
        ]
    )
    return "\n".join(lines) + "\n"


def check_env_vars(environ: Mapping[str, str] = None) -> Credentials:
    """
    Validate the credential variables in `environ`.

    The checks run in a fixed order and the first one that fails raises.

    Args:
        environ: The environment to validate. Defaults to `os.environ`.

    Returns:
        The validated credentials.

    Raises:
        ValidationError: If a required variable is missing or any value is malformed.
    """
    if environ is None:
        environ = os.environ

    if not all(var in environ for var in (USERNAME_VAR, PASSWORD_VAR, DATABASE_VAR)):
        raise ValidationError()

    username = environ[USERNAME_VAR]
    password = environ[PASSWORD_VAR]
    database = environ[DATABASE_VAR]

    if _IDENTIFIER_PATTERN.fullmatch(username) is None:
        raise ValidationError()
    if len(username) > MAX_IDENTIFIER_LENGTH:
        raise ValidationError(f"PostgreSQL username too long (maximum {MAX_IDENTIFIER_LENGTH} characters)")
    if not valid_password(password):
        raise ValidationError()
    if _IDENTIFIER_PATTERN.fullmatch(database) is None:
        raise ValidationError()
    if len(database) > MAX_IDENTIFIER_LENGTH:
        raise ValidationError(f"Database name too long (maximum {MAX_IDENTIFIER_LENGTH} characters)")

    admin_password = environ.get(ADMIN_PASSWORD_VAR)
    if admin_password is not None and not valid_password(admin_password):
        raise ValidationError()

    return Credentials(username=username, password=password, database=database, admin_password=admin_password)
