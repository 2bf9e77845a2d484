#  Copyright (c) 2025 The affinity-coloring authors.
#  This source code is licensed under the MIT license found in the
#  LICENSE file in the root directory of this source tree.

from affinity_coloring.affinity.problem import AffinityColoringProblem
from affinity_coloring.generic_tools.do_solver import SolverDO


class AffinityColoringSolver(SolverDO):
    """Base class for solvers of the coloring problem with affinities."""

    problem: AffinityColoringProblem
