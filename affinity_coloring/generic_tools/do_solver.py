"""Minimal API for a solver of the library."""

#  Copyright (c) 2025 AIRBUS and its affiliates.
#  This source code is licensed under the MIT license found in the
#  LICENSE file in the root directory of this source tree.
from __future__ import annotations  # see annotations as str

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Optional

from affinity_coloring.generic_tools.callbacks.callback import Callback
from affinity_coloring.generic_tools.do_problem import (
    ParamsObjectiveFunction,
    Problem,
    Solution,
    build_aggreg_function_and_params_objective,
)
from affinity_coloring.generic_tools.result_storage.result_storage import (
    ResultStorage,
    fitness_class,
)


class StatusSolver(Enum):
    SATISFIED = "SATISFIED"
    UNSATISFIABLE = "UNSATISFIABLE"
    OPTIMAL = "OPTIMAL"
    UNKNOWN = "UNKNOWN"
    ERROR = "FAILED"


class SolverDO(ABC):
    """Base class for a solver."""

    problem: Problem
    status_solver: StatusSolver = StatusSolver.UNKNOWN

    def __init__(
        self,
        problem: Problem,
        params_objective_function: Optional[ParamsObjectiveFunction] = None,
        **kwargs: Any,
    ):
        self.problem = problem
        (
            self.aggreg_from_sol,
            self.aggreg_from_dict,
            self.params_objective_function,
        ) = build_aggreg_function_and_params_objective(
            problem=self.problem,
            params_objective_function=params_objective_function,
        )

    @abstractmethod
    def solve(
        self, callbacks: Optional[list[Callback]] = None, **kwargs: Any
    ) -> ResultStorage:
        """Generic solving function.

        Args:
            callbacks: list of callbacks used to hook into the various stage of the solve
            **kwargs: any argument specific to the solver

        Returns (ResultStorage): a result object containing potentially a pool of solutions

        """
        ...

    def create_result_storage(
        self, list_solution_fits: Optional[list[tuple[Solution, fitness_class]]] = None
    ) -> ResultStorage:
        """Create a result storage with the proper mode_optim."""
        if list_solution_fits is None:
            list_solution_fits = []
        return ResultStorage(
            list_solution_fits=list_solution_fits,
            mode_optim=self.params_objective_function.sense_function,
        )

    def init_model(self, **kwargs: Any) -> None:
        """Initialize internal model used to solve."""
        ...

    def is_optimal(self) -> Optional[bool]:
        """Tell if found solution is supposed to be optimal.

        To be called after a solve.

        Returns:
            optimality of the solution. If information missing, returns None instead.

        """
        if self.status_solver == StatusSolver.UNKNOWN:
            return None
        else:
            return self.status_solver == StatusSolver.OPTIMAL
