##############################################################################
# Copyright (c) the pgcontainer Project developers. See top-level LICENSE
# file for details. No copyright assignment is required to contribute to
# pgcontainer.
##############################################################################

"""
This module contains pytest fixtures to be used throughout the entire test suite.
"""
import os
import sys
from glob import glob

import pytest
from _pytest.tmpdir import TempPathFactory

from pgcontainer.server.server_util import CREDENTIAL_VARS, SETTING_DEFAULTS
from tests.fixture_types import FixtureCallable, FixtureModification, FixtureStr


# pylint: disable=redefined-outer-name


#######################################
# Loading in Module Specific Fixtures #
#######################################

fixture_glob = os.path.join(os.path.dirname(__file__), "fixtures", "**", "*.py")
pytest_plugins = [
    "tests." + os.path.relpath(fixture_file, os.path.dirname(__file__)).replace(os.sep, ".")[: -len(".py")]
    for fixture_file in glob(fixture_glob, recursive=True)
    if not fixture_file.endswith("__init__.py")
]


#######################################
######### Fixture Definitions #########
#######################################


@pytest.fixture(scope="session")
def create_testing_dir() -> FixtureCallable:
    """
    Fixture to create a temporary testing directory.

    Returns:
        A function that creates the testing directory.
    """

    def _create_testing_dir(base_dir: str, sub_dir: str) -> str:
        """
        Helper function to create a temporary testing directory.

        Args:
            base_dir: The base directory where the testing directory will be created.
            sub_dir: The name of the subdirectory to create.

        Returns:
            The path to the created testing directory.
        """
        testing_dir = os.path.join(base_dir, sub_dir)
        if not os.path.exists(testing_dir):
            os.makedirs(testing_dir)
        return testing_dir

    return _create_testing_dir


@pytest.fixture(scope="session")
def temp_output_dir(tmp_path_factory: TempPathFactory) -> FixtureStr:
    """
    This fixture will create a temporary directory to store output files of tests.
    There can be at most 3 temp directories in this location so upon the 4th test
    run, the 1st temp directory will be removed.

    :param tmp_path_factory: A built in factory with pytest to help create temp paths for testing
    :returns: The path to the temp output directory we'll use for this test run
    """
    return str(
        tmp_path_factory.mktemp(f"python_{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}_")
    )


@pytest.fixture
def clean_environment(monkeypatch: pytest.MonkeyPatch) -> FixtureModification:
    """
    Remove every variable the entrypoint reads so tests start from a known state.
    `monkeypatch` restores the original environment once the test finishes.

    :param monkeypatch: A built-in fixture from the pytest library to modify the environment
    """
    for var in CREDENTIAL_VARS + list(SETTING_DEFAULTS) + ["PGDATA"]:
        # setting first makes monkeypatch remove the variable again if a test adds it
        monkeypatch.setenv(var, "")
        monkeypatch.delenv(var)
