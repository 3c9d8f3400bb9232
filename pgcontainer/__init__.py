##############################################################################
# Copyright (c) the pgcontainer Project developers. See top-level LICENSE
# file for details. No copyright assignment is required to contribute to
# pgcontainer.
##############################################################################

"""
pgcontainer: entrypoint and test harness for a PostgreSQL container image.
"""

import os


__version__ = "1.0.0"
VERSION = __version__
PATH_TO_PROJ = os.path.join(os.path.dirname(__file__), "")
