##############################################################################
# Copyright (c) the pgcontainer Project developers. See top-level LICENSE
# file for details. No copyright assignment is required to contribute to
# pgcontainer.
##############################################################################

"""Main functions for initializing PostgreSQL and handing control over to it."""

import logging
import os
import subprocess
from typing import Callable, Dict, List, MutableMapping, Tuple

from pgcontainer.exceptions import InitializationError
from pgcontainer.server.server_config import DataDirStatus, get_data_dir_status, pull_server_config, render_config
from pgcontainer.server.server_util import (
    ADMIN_ROLE,
    CREDENTIAL_VARS,
    DEFAULT_LANG,
    ENGINE_COMMAND,
    HBA_BLOCK,
    INCLUDE_BLOCK,
    ServerConfig,
    append_to_file,
)
from pgcontainer.server.validation import Credentials, check_env_vars


LOG = logging.getLogger("pgcontainer")


def run_step_command(step: str, command: List[str], env: Dict[str, str] = None):
    """
    Runs one command of the initialization pipeline.

    Args:
        step: The name of the step running this command.
        command: The argv of the command to run.
        env: The environment to run the command with. Defaults to the current environment.

    Raises:
        InitializationError: If the command can't be found or exits with a non-zero code.
    """
    LOG.debug(f"Running '{command[0]}' for step '{step}'")
    try:
        subprocess.run(command, env=env, check=True)
    except FileNotFoundError as exc:
        raise InitializationError(step, command) from exc
    except subprocess.CalledProcessError as exc:
        raise InitializationError(step, command, exc.returncode) from exc


def alter_password_statement(role: str, password: str) -> str:
    """
    Build the statement that sets the password of `role`.

    The password is put in the string literal as is. Only the validation
    patterns keep it from breaking out of the quotes.

    Args:
        role: The role to change.
        password: The new password.

    Returns:
        The `ALTER USER` statement.
    """
    return f"ALTER USER \"{role}\" WITH ENCRYPTED PASSWORD '{password}';"


def create_cluster(server_config: ServerConfig, credentials: Credentials):  # pylint: disable=W0613
    """Initialize the cluster with a UTF-8 locale unless `LANG` says otherwise."""
    env = dict(os.environ)
    env["LANG"] = os.environ.get("LANG") or DEFAULT_LANG
    run_step_command("initdb", server_config.commands.get_initdb_command(), env=env)


def include_custom_config(server_config: ServerConfig, credentials: Credentials):  # pylint: disable=W0613
    """Make the main configuration include the rendered custom configuration."""
    append_to_file(server_config.layout.get_main_config_path(), INCLUDE_BLOCK)


def allow_remote_connections(server_config: ServerConfig, credentials: Credentials):  # pylint: disable=W0613
    """Allow md5 password authentication from any host."""
    append_to_file(server_config.layout.get_hba_config_path(), HBA_BLOCK)


def start_engine(server_config: ServerConfig, credentials: Credentials):  # pylint: disable=W0613
    run_step_command("start", server_config.commands.get_start_command())


def create_role(server_config: ServerConfig, credentials: Credentials):
    run_step_command("createuser", server_config.commands.get_createuser_command(credentials.username))


def create_database(server_config: ServerConfig, credentials: Credentials):
    run_step_command(
        "createdb", server_config.commands.get_createdb_command(credentials.database, owner=credentials.username)
    )


def set_role_password(server_config: ServerConfig, credentials: Credentials):
    statement = alter_password_statement(credentials.username, credentials.password)
    run_step_command("password", server_config.commands.get_psql_command(statement))


def set_admin_password(server_config: ServerConfig, credentials: Credentials):
    """Set the superuser's password, but only if one was given."""
    if credentials.admin_password is None:
        LOG.info(f"No admin password given, leaving the '{ADMIN_ROLE}' role without one.")
        return
    statement = alter_password_statement(ADMIN_ROLE, credentials.admin_password)
    run_step_command("admin_password", server_config.commands.get_psql_command(statement))


def stop_engine(server_config: ServerConfig, credentials: Credentials):  # pylint: disable=W0613
    run_step_command("stop", server_config.commands.get_stop_command())


# Each step depends on every step before it succeeding.
INIT_STEPS: List[Tuple[str, Callable[[ServerConfig, Credentials], None]]] = [
    ("initdb", create_cluster),
    ("include_config", include_custom_config),
    ("access_control", allow_remote_connections),
    ("start", start_engine),
    ("createuser", create_role),
    ("createdb", create_database),
    ("password", set_role_password),
    ("admin_password", set_admin_password),
    ("stop", stop_engine),
]


def initialize_database(server_config: ServerConfig, credentials: Credentials = None) -> Credentials:
    """
    Performs first-run initialization of the database cluster.

    Runs every step in `INIT_STEPS` in order. The first failure stops the
    pipeline; nothing is retried and nothing already done is undone.

    Args:
        server_config (server.server_util.ServerConfig): The layout and commands of the server.
        credentials: Already validated credentials. If not given, they're read
            from the environment and validated here.

    Returns:
        The credentials the cluster was initialized with.

    Raises:
        ValidationError: If `credentials` weren't given and the environment is invalid.
        InitializationError: If any step fails.
    """
    if credentials is None:
        credentials = check_env_vars()

    LOG.info(f"Initializing database cluster in {server_config.layout.data_dir}")
    for step, func in INIT_STEPS:
        LOG.info(f"Running initialization step '{step}'")
        try:
            func(server_config, credentials)
        except OSError as exc:
            raise InitializationError(step) from exc

    LOG.info(f"Database '{credentials.database}' owned by '{credentials.username}' is ready.")
    return credentials


def unset_env_vars(environ: MutableMapping[str, str] = None):
    """
    Removes the credential variables so the server process never sees them.

    Args:
        environ: The environment to scrub. Defaults to `os.environ`.
    """
    if environ is None:
        environ = os.environ
    for var in CREDENTIAL_VARS:
        environ.pop(var, None)


def exec_command(command: List[str]):
    """
    Replaces the current process with `command`. This function never returns.

    Args:
        command: The argv of the command to run.
    """
    LOG.info(f"Handing off to '{command[0]}'")
    os.execvp(command[0], command)


def run_entrypoint(command: List[str], server_config: ServerConfig = None):
    """
    The entrypoint of the container.

    Renders the custom configuration, initializes the cluster if `command` is
    the engine's start command and the data directory is empty, scrubs the
    credentials from the environment and execs `command`.

    Args:
        command: The argv of the command to run. Defaults to starting the engine.
        server_config (server.server_util.ServerConfig): The layout and commands
            of the server. Defaults to the packaged command table rooted at `$HOME`.
    """
    if not command:
        command = [ENGINE_COMMAND]
    if server_config is None:
        server_config = pull_server_config()

    layout = server_config.layout
    os.environ["PGDATA"] = layout.data_dir

    needs_init = command[0] == ENGINE_COMMAND and get_data_dir_status(layout) == DataDirStatus.NOT_INITIALIZED

    # Validate before rendering so a bad environment leaves nothing behind
    credentials = check_env_vars() if needs_init else None

    render_config(layout)

    if needs_init:
        initialize_database(server_config, credentials)
    elif command[0] == ENGINE_COMMAND:
        LOG.info(f"Data directory {layout.data_dir} is already initialized, skipping initialization.")

    unset_env_vars()
    exec_command(command)
