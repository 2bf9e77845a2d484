#  Copyright (c) 2025 The affinity-coloring authors.
#  This source code is licensed under the MIT license found in the
#  LICENSE file in the root directory of this source tree.

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np

from affinity_coloring.affinity.problem import (
    AffinityColoringProblem,
    AffinityColoringSolution,
)
from affinity_coloring.generic_tools.do_problem import ModeOptim
from affinity_coloring.generic_tools.result_storage.multiobj_utils import (
    TupleFitness,
)
from affinity_coloring.generic_tools.result_storage.result_storage import (
    ResultStorage,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AffinityColoringResult:
    """Canonical result: number of colors, satisfied affinity edges and 1-based colors per vertex."""

    coloring_objective: int
    affinity_objective: int
    assignment: tuple[int, ...]

    @staticmethod
    def from_solution(solution: AffinityColoringSolution) -> AffinityColoringResult:
        """Recompute both objectives from the colors of the solution."""
        problem: AffinityColoringProblem = solution.problem
        assignment = solution.assignment
        return AffinityColoringResult(
            coloring_objective=assignment.nb_colors_used,
            affinity_objective=assignment.count_satisfied(problem.graph),
            assignment=tuple(assignment.to_genes()),
        )

    @property
    def fitness(self) -> TupleFitness:
        """Pareto fitness, greater is better: (-colors, satisfied affinity edges)."""
        return TupleFitness(
            np.array([-self.coloring_objective, self.affinity_objective]), 2
        )


def extract_lp_result(result_storage: ResultStorage) -> AffinityColoringResult:
    """Result of the best solution found by the two-phase solver."""
    sol = result_storage.get_best_solution()
    if sol is None:
        raise ValueError("No solution in result storage.")
    return AffinityColoringResult.from_solution(sol)


def extract_pareto_front(
    result_storage: ResultStorage, problem: Optional[AffinityColoringProblem] = None
) -> list[AffinityColoringResult]:
    """Feasible non dominated results, one per objective pair.

    Sorted by increasing number of colors, then decreasing number of satisfied affinity edges.

    Args:
        result_storage: solutions to filter, typically the last population of the evolutionary solver
        problem: problem used to check feasibility, default to the problem of the first solution

    """
    if len(result_storage) == 0:
        return []
    if problem is None:
        problem = result_storage[0][0].problem
    # rescored on the canonical objectives, whatever the fitness used by the solver
    rescored = ResultStorage(
        mode_optim=ModeOptim.MAXIMIZATION,
        list_solution_fits=[
            (sol, AffinityColoringResult.from_solution(sol).fitness)
            for sol, _ in result_storage
        ],
    )
    front = [
        AffinityColoringResult.from_solution(sol)
        for sol, _ in rescored.get_pareto_front(satisfying=problem)
    ]
    logger.debug(f"{len(front)} pareto solutions out of {len(result_storage)}")
    return sorted(front, key=lambda r: (r.coloring_objective, -r.affinity_objective))
