##############################################################################
# Copyright (c) the pgcontainer Project developers. See top-level LICENSE
# file for details. No copyright assignment is required to contribute to
# pgcontainer.
##############################################################################

"""This module represents everything that goes into server configuration"""

import enum
import logging
import os
from importlib import resources
from typing import Dict, MutableMapping

import yaml

from pgcontainer.exceptions import ServerConfigError
from pgcontainer.server.server_util import (
    CUSTOM_CONFIG_NAME,
    SERVER_COMMANDS_CONFIG,
    SETTING_DEFAULTS,
    TEMPLATE_SUFFIX,
    CommandConfig,
    PostgresConfig,
    ServerConfig,
    ServerLayout,
)


LOG = logging.getLogger("pgcontainer")


class DataDirStatus(enum.Enum):
    """
    Represents the states that the data directory can be in.

    Attributes:
        NOT_INITIALIZED (int): No `postgresql.conf` in the data directory, first-run
            initialization is needed. Numeric value: 0.
        INITIALIZED (int): The cluster already exists. Numeric value: 1.
    """

    NOT_INITIALIZED = 0
    INITIALIZED = 1


def get_data_dir_status(layout: ServerLayout) -> DataDirStatus:
    """
    Determines whether the data directory has been initialized.

    Args:
        layout: The layout of the server's files.

    Returns:
        `DataDirStatus.INITIALIZED` if the marker file exists, `DataDirStatus.NOT_INITIALIZED` otherwise.
    """
    if layout.is_initialized():
        return DataDirStatus.INITIALIZED
    return DataDirStatus.NOT_INITIALIZED


def apply_setting_defaults(environ: MutableMapping[str, str] = None) -> Dict[str, str]:
    """
    Fill in the default for every setting that isn't set in `environ`.

    The defaults are written back into `environ` so that they're visible to the
    template and to the process we eventually hand off to.

    Args:
        environ: The environment to update. Defaults to `os.environ`.

    Returns:
        The value of every setting after defaults were applied.
    """
    if environ is None:
        environ = os.environ
    settings = {}
    for var, default in SETTING_DEFAULTS.items():
        environ.setdefault(var, default)
        settings[var] = environ[var]
    return settings


def copy_default_template(layout: ServerLayout) -> bool:
    """
    Copies the packaged configuration template into place if there isn't one already.

    Args:
        layout: The layout of the server's files.

    Returns:
        True if the template exists or was copied. False if the destination isn't writable.
    """
    if os.path.exists(layout.template_path):
        LOG.debug(f"Using configuration template at {layout.template_path}.")
        return True

    LOG.info(f"Copying default configuration template to {layout.template_path}.")
    try:
        template_data = resources.files("pgcontainer.server").joinpath(CUSTOM_CONFIG_NAME + TEMPLATE_SUFFIX).read_text()
        with open(layout.template_path, "w") as outfile:
            outfile.write(template_data)
    except OSError as exc:
        LOG.error(f"Destination location {layout.home} is not writable. Raised from:\n{exc}")
        return False
    return True


def render_config(layout: ServerLayout) -> PostgresConfig:
    """
    Renders the custom configuration file from its template.

    This happens on every container start so that settings can change across
    restarts without re-running first-run initialization. `$VAR` and `${VAR}`
    references in the template are replaced with values from the environment
    after setting defaults have been applied. References to variables that aren't
    set are left in the rendered file as written, unlike `envsubst` which
    replaces them with an empty string.

    Args:
        layout: The layout of the server's files.

    Returns:
        The rendered configuration, read back from disk.

    Raises:
        ServerConfigError: If no template is available.
    """
    settings = apply_setting_defaults()

    if not copy_default_template(layout):
        raise ServerConfigError(f"Unable to find a configuration template at {layout.template_path}")

    with open(layout.template_path, "r") as infile:
        rendered = os.path.expandvars(infile.read())

    with open(layout.config_path, "w") as outfile:
        outfile.write(rendered)

    LOG.debug(f"Rendered {layout.config_path} with settings {settings}")

    custom_config = PostgresConfig(layout.config_path)
    LOG.info(
        f"Custom configuration written to {layout.config_path} "
        f"(max_connections={custom_config.get_max_connections()}, shared_buffers={custom_config.get_shared_buffers()})."
    )
    return custom_config


def load_server_config(server_config: Dict, layout: ServerLayout = None) -> ServerConfig:
    """
    Given a dictionary containing the engine command table, load it into a
    [`ServerConfig`][server.server_util.ServerConfig] instance.

    Args:
        server_config: A dictionary with a 'commands' entry.
        layout: The layout of the server's files. Defaults to one rooted at `$HOME`.

    Returns:
        A `ServerConfig` object containing the loaded configuration.

    Raises:
        ServerConfigError: If the 'commands' entry or any of the required commands are missing.
    """
    if not server_config or "commands" not in server_config:
        raise ServerConfigError('Unable to find "commands" in server configuration.')

    for key in CommandConfig.REQUIRED_KEYS:
        if key not in server_config["commands"]:
            raise ServerConfigError(f'Unable to find necessary "{key}" value in server configuration.')

    return ServerConfig(server_config, layout=layout)


def pull_server_config(layout: ServerLayout = None, config_file: str = None) -> ServerConfig:
    """
    Reads the engine command table and builds the server configuration.

    Args:
        layout: The layout of the server's files. Defaults to one rooted at `$HOME`.
        config_file: A YAML command table to use instead of the packaged `postgresql.yaml`.

    Returns:
        An instance of [`ServerConfig`][server.server_util.ServerConfig].
    """
    if config_file is not None:
        with open(config_file, "r") as f:  # pylint: disable=C0103
            data = yaml.load(f, yaml.Loader)
    else:
        data = yaml.load(resources.files("pgcontainer.server").joinpath(SERVER_COMMANDS_CONFIG).read_text(), yaml.Loader)
    return load_server_config(data, layout=layout)
