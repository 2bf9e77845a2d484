"""Utility module to launch different solvers on the coloring problem with affinities."""

#  Copyright (c) 2025 The affinity-coloring authors.
#  This source code is licensed under the MIT license found in the
#  LICENSE file in the root directory of this source tree.

from typing import Any

from affinity_coloring.affinity.problem import AffinityColoringProblem
from affinity_coloring.affinity.solvers import AffinityColoringSolver
from affinity_coloring.affinity.solvers.lp import LpAffinityColoringSolver
from affinity_coloring.affinity.solvers.nsga import NsgaAffinityColoringSolver
from affinity_coloring.generic_tools.result_storage.result_storage import (
    ResultStorage,
)

solvers: dict[str, list[tuple[type[AffinityColoringSolver], dict[str, Any]]]] = {
    "lp": [(LpAffinityColoringSolver, {"time_limit": 30})],
    "nsga": [
        (
            NsgaAffinityColoringSolver,
            {"pop_size": 100, "max_evals": 10000},
        )
    ],
}

solvers_map = {}
for key in solvers:
    for solver, param in solvers[key]:
        solvers_map[solver] = (key, param)

solvers_compatibility: dict[type[AffinityColoringSolver], list[type]] = {}
for x in solvers:
    for y in solvers[x]:
        solvers_compatibility[y[0]] = [AffinityColoringProblem]


def look_for_solver(
    domain: AffinityColoringProblem,
) -> list[type[AffinityColoringSolver]]:
    """Given an instance of AffinityColoringProblem, return a list of class of solvers."""
    class_domain = domain.__class__
    return [
        solver
        for solver, domains in solvers_compatibility.items()
        if class_domain in domains
    ]


def solve(
    method: type[AffinityColoringSolver],
    problem: AffinityColoringProblem,
    **kwargs: Any,
) -> ResultStorage:
    """Solve an instance with a given class of solver.

    Args:
        method: class of the solver to use
        problem: problem instance
        **kwargs: specific options of the solver, default ones from `solvers_map` being used otherwise

    Returns: a ResultStorage obtained by the solver.

    """
    params = dict(solvers_map.get(method, (None, {}))[1])
    params.update(kwargs)
    solver_ = method(problem, **params)
    return solver_.solve(**params)
