##############################################################################
# Copyright (c) the pgcontainer Project developers. See top-level LICENSE
# file for details. No copyright assignment is required to contribute to
# pgcontainer.
##############################################################################

"""Utils relating to the PostgreSQL server layout and configuration files"""

import logging
import os
from typing import Dict, List


LOG = logging.getLogger("pgcontainer")

# Environment variables read by the entrypoint.
USERNAME_VAR = "POSTGRESQL_USERNAME"
PASSWORD_VAR = "POSTGRESQL_PASSWORD"
DATABASE_VAR = "POSTGRESQL_DATABASE"
ADMIN_PASSWORD_VAR = "POSTGRESQL_ADMIN_PASSWORD"
MAX_CONNECTIONS_VAR = "POSTGRESQL_MAX_CONNECTIONS"
SHARED_BUFFERS_VAR = "POSTGRESQL_SHARED_BUFFERS"
CREDENTIAL_VARS = [USERNAME_VAR, PASSWORD_VAR, DATABASE_VAR, ADMIN_PASSWORD_VAR]

DEFAULT_MAX_CONNECTIONS = "100"
DEFAULT_SHARED_BUFFERS = "32MB"
DEFAULT_LANG = "en_US.utf8"
SETTING_DEFAULTS = {
    MAX_CONNECTIONS_VAR: DEFAULT_MAX_CONNECTIONS,
    SHARED_BUFFERS_VAR: DEFAULT_SHARED_BUFFERS,
}

# Filesystem layout relative to the home directory of the postgres user.
DATA_SUBDIR = "data"
CUSTOM_CONFIG_NAME = "openshift-custom-postgresql.conf"
TEMPLATE_SUFFIX = ".template"
MAIN_CONFIG_NAME = "postgresql.conf"
HBA_CONFIG_NAME = "pg_hba.conf"
SERVER_COMMANDS_CONFIG = "postgresql.yaml"

ENGINE_COMMAND = "postgres"
ADMIN_ROLE = "postgres"

INCLUDE_BLOCK = f"""
# Custom OpenShift configuration:
include '../{CUSTOM_CONFIG_NAME}'
"""

HBA_BLOCK = """
#
# Custom OpenShift configuration starting at this point.
#

# Allow connections from all hosts.
host all all all md5
"""


class ServerLayout:
    """
    The files and directories that the entrypoint reads and writes.

    Attributes:
        home (str): The home directory of the user running PostgreSQL.
        data_dir (str): The cluster's data directory (`PGDATA`).
        config_path (str): The rendered custom configuration file.
        template_path (str): The template the custom configuration is rendered from.

    Methods:
        get_main_config_path: Path to `postgresql.conf` inside the data directory.
        get_hba_config_path: Path to `pg_hba.conf` inside the data directory.
        is_initialized: Check for the first-run marker.
    """

    def __init__(self, home: str = None):
        """
        Args:
            home: The home directory to lay the server out in. Defaults to `$HOME`.
        """
        if home is None:
            home = os.environ.get("HOME", os.path.expanduser("~"))
        self.home: str = home
        self.data_dir: str = os.path.join(home, DATA_SUBDIR)
        self.config_path: str = os.path.join(home, CUSTOM_CONFIG_NAME)
        self.template_path: str = self.config_path + TEMPLATE_SUFFIX

    def __repr__(self) -> str:
        return f"ServerLayout(home={self.home!r})"

    def get_main_config_path(self) -> str:
        """Path to the main configuration file, which doubles as the first-run marker."""
        return os.path.join(self.data_dir, MAIN_CONFIG_NAME)

    def get_hba_config_path(self) -> str:
        """Path to the host-based access control file."""
        return os.path.join(self.data_dir, HBA_CONFIG_NAME)

    def is_initialized(self) -> bool:
        """
        Check whether the data directory has already been initialized.

        Returns:
            True if `postgresql.conf` exists in the data directory.
        """
        return os.path.isfile(self.get_main_config_path())


def append_to_file(filename: str, contents: str):
    """
    Append `contents` to the end of `filename`.

    Args:
        filename: The file to append to. It must already exist.
        contents: The text to append.
    """
    if not os.path.exists(filename):
        raise FileNotFoundError(f"Unable to find {filename} to append to")
    with open(filename, "a") as f:  # pylint: disable=C0103
        f.write(contents)


class PostgresConfig:
    """
    `PostgresConfig` is an interface for reading a `postgresql.conf` style file.

    Lines have the form `name = value`, optionally followed by a `#` comment.
    Blank lines and lines starting with `#` are kept as comments attached to the
    entry that follows them.

    Attributes:
        filename (str): The path to the configuration file.
        entry_order (List): The order of configuration entries as they appear in the file.
        entries (Dict): Configuration keys and their corresponding values.
        comments (Dict): Comments that come before each configuration entry.
        trailing_comments (str): Any comments that appear at the end of the file.

    Methods:
        parse: Reads the configuration file and populates the attributes above.
        get_config_value: Retrieves the value of a given configuration key.
        get_max_connections: Retrieves the `max_connections` setting.
        get_shared_buffers: Retrieves the `shared_buffers` setting.
    """

    def __init__(self, filename: str):
        self.filename: str = filename
        self.entry_order: List[str] = []
        self.entries: Dict[str, str] = {}
        self.comments: Dict[str, str] = {}
        self.trailing_comments: str = ""
        self.parse()

    def parse(self):
        """
        Parses the configuration file.

        Example:
            Given a file containing:
            ```
            # Custom settings
            max_connections = 42
            shared_buffers = 64MB  # memory
            ```

            We'd see the following:
            ```python
            >>> config = PostgresConfig("custom.conf")
            >>> config.entries
            {'max_connections': '42', 'shared_buffers': '64MB'}
            >>> config.entry_order
            ['max_connections', 'shared_buffers']
            ```
        """
        self.entry_order = []
        self.entries = {}
        self.comments = {}
        with open(self.filename, "r") as f:  # pylint: disable=C0103
            file_lines = f.read().split("\n")
        comments = ""
        for line in file_lines:
            stripped = line.strip()
            if stripped and not stripped.startswith("#"):
                key, _, value = stripped.partition("=")
                if not value:
                    # `include 'file'` and friends don't need an `=`
                    key, _, value = stripped.partition(" ")
                key = key.strip()
                value = value.split("#", 1)[0].strip()
                if key not in self.entries:
                    self.entry_order.append(key)
                self.entries[key] = value
                self.comments[key] = comments
                comments = ""
            else:
                comments += line + "\n"
        self.trailing_comments = comments[:-1]

    def get_config_value(self, key: str) -> str:
        """
        Retrieves the value of a specific configuration key.

        Args:
            key: The configuration key to retrieve the value for.

        Returns:
            The value associated with `key`, or None if it isn't set.
        """
        return self.entries.get(key)

    def get_max_connections(self) -> str:
        """Retrieves the `max_connections` setting."""
        return self.get_config_value("max_connections")

    def get_shared_buffers(self) -> str:
        """Retrieves the `shared_buffers` setting."""
        return self.get_config_value("shared_buffers")


class CommandConfig:
    """
    A class for holding the command line templates used to drive the engine.

    Each template is a string with `{placeholder}` fields. Formatting a template
    and splitting it on whitespace gives the argv of the command. Values that
    may contain whitespace, like SQL statements, are appended as their own
    argument instead of being formatted into the template.

    Attributes:
        initdb_command (str): Creates the cluster.
        start_command (str): Starts the engine and waits until it is ready.
        stop_command (str): Stops the engine.
        createuser_command (str): Creates a role. Formatted with `{username}`.
        createdb_command (str): Creates a database. Formatted with `{owner}` and `{database}`.
        psql_command (str): Runs one SQL statement, which is appended as the final argument.
    """

    REQUIRED_KEYS = [
        "initdb_command",
        "start_command",
        "stop_command",
        "createuser_command",
        "createdb_command",
        "psql_command",
    ]

    def __init__(self, data: Dict):
        self.initdb_command: str = data["initdb_command"]
        self.start_command: str = data["start_command"]
        self.stop_command: str = data["stop_command"]
        self.createuser_command: str = data["createuser_command"]
        self.createdb_command: str = data["createdb_command"]
        self.psql_command: str = data["psql_command"]

    def __eq__(self, other: "CommandConfig") -> bool:
        if not isinstance(other, CommandConfig):
            return NotImplemented
        return all(getattr(self, key) == getattr(other, key) for key in self.REQUIRED_KEYS)

    def __repr__(self) -> str:
        return f"CommandConfig({ {key: getattr(self, key) for key in self.REQUIRED_KEYS} })"

    def get_initdb_command(self) -> List[str]:
        """Argv for creating the cluster."""
        return self.initdb_command.split()

    def get_start_command(self) -> List[str]:
        """Argv for starting the engine."""
        return self.start_command.split()

    def get_stop_command(self) -> List[str]:
        """Argv for stopping the engine."""
        return self.stop_command.split()

    def get_createuser_command(self, username: str) -> List[str]:
        """Argv for creating the role `username`."""
        return self.createuser_command.format(username=username).split()

    def get_createdb_command(self, database: str, owner: str) -> List[str]:
        """Argv for creating `database` owned by `owner`."""
        return self.createdb_command.format(database=database, owner=owner).split()

    def get_psql_command(self, statement: str) -> List[str]:
        """Argv for running `statement` through psql."""
        return self.psql_command.split() + [statement]


class ServerConfig:  # pylint: disable=R0903
    """
    Everything the entrypoint needs to know about the server it manages.

    Attributes:
        layout (ServerLayout): Where the server's files live.
        commands (CommandConfig): How to run the engine's tools.
    """

    def __init__(self, data: Dict, layout: ServerLayout = None):
        self.layout: ServerLayout = layout if layout is not None else ServerLayout()
        self.commands: CommandConfig = CommandConfig(data["commands"])

    def __repr__(self) -> str:
        return f"ServerConfig(layout={self.layout!r}, commands={self.commands!r})"
