"""Locate the instance files used by examples and tests."""

#  Copyright (c) 2025 AIRBUS and its affiliates.
#  This source code is licensed under the MIT license found in the
#  LICENSE file in the root directory of this source tree.

import os
from typing import Optional

AC_DEFAULT_DATAHOME = "~/affinity_coloring_data"
AC_DEFAULT_DATAHOME_ENVVARNAME = "AFFINITY_COLORING_DATA"


def get_data_home(data_home: Optional[str] = None) -> str:
    """Return the path of the affinity-coloring data directory.

    By default the data dir is set to a folder named 'affinity_coloring_data' in the
    user home folder.
    Alternatively, it can be set by the 'AFFINITY_COLORING_DATA' environment
    variable or programmatically by giving an explicit folder path. The '~'
    symbol is expanded to the user home folder.
    If the folder does not already exist, it is automatically created.

    Params:
        data_home : The path to affinity-coloring data directory. If `None`, the default path
        is `~/affinity_coloring_data`.

    """
    if data_home is None:
        data_home = os.environ.get(AC_DEFAULT_DATAHOME_ENVVARNAME, AC_DEFAULT_DATAHOME)
    data_home = os.path.expanduser(data_home)
    os.makedirs(data_home, exist_ok=True)
    return data_home
