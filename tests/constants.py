##############################################################################
# Copyright (c) the pgcontainer Project developers. See top-level LICENSE
# file for details. No copyright assignment is required to contribute to
# pgcontainer.
##############################################################################

"""
This module will store constants that will be used throughout our test suite.
"""

TEST_USERNAME = "user"
TEST_PASSWORD = "pass"
TEST_DATABASE = "db"
TEST_ADMIN_PASSWORD = "r00t"

VALID_ENV = {
    "POSTGRESQL_USERNAME": TEST_USERNAME,
    "POSTGRESQL_PASSWORD": TEST_PASSWORD,
    "POSTGRESQL_DATABASE": TEST_DATABASE,
}

# Name of the environment variable that holds the image the integration tests run
IMAGE_ENV_VAR = "PGCONTAINER_IMAGE"

# Polling settings for waiting on a container to accept connections
CONNECTION_ATTEMPTS = 60
CONNECTION_SLEEP = 1

# Time a container with an invalid environment gets to exit before it's considered hung
INVALID_ENV_TIMEOUT = 30
