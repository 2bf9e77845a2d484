#  Copyright (c) 2025 AIRBUS and its affiliates.
#  This source code is licensed under the MIT license found in the
#  LICENSE file in the root directory of this source tree.
from __future__ import annotations

import copy
import datetime
import logging
from abc import abstractmethod
from collections.abc import Callable, Iterable
from enum import Enum
from typing import Any, Optional

from ortools.math_opt.python import mathopt

from affinity_coloring.generic_tools.do_problem import Solution
from affinity_coloring.generic_tools.do_solver import SolverDO, StatusSolver
from affinity_coloring.generic_tools.result_storage.result_storage import (
    ResultStorage,
)

logger = logging.getLogger(__name__)


class ParametersMilp:
    def __init__(
        self,
        pool_solutions: int,
        mip_gap_abs: float,
        mip_gap: float,
        retrieve_all_solution: bool,
    ):
        self.pool_solutions = pool_solutions
        self.mip_gap_abs = mip_gap_abs
        self.mip_gap = mip_gap
        self.retrieve_all_solution = retrieve_all_solution

    @staticmethod
    def default() -> "ParametersMilp":
        return ParametersMilp(
            pool_solutions=10000,
            mip_gap_abs=0.0000001,
            mip_gap=0.000001,
            retrieve_all_solution=False,
        )


class InequalitySense(Enum):
    """Sense of an inequality/equality."""

    LOWER_OR_EQUAL = "<="
    GREATER_OR_EQUAL = ">="
    EQUAL = "=="


class MilpSolver(SolverDO):
    model: Optional[Any] = None

    @abstractmethod
    def init_model(self, **kwargs: Any) -> None:
        ...

    @abstractmethod
    def retrieve_current_solution(
        self,
        get_var_value_for_current_solution: Callable[[Any], float],
        get_obj_value_for_current_solution: Callable[[], float],
    ) -> Solution:
        """Convert an internal milp solution into a Solution of the library.

        Args:
            get_var_value_for_current_solution: function extracting the value of the given variable
                for the current solution
            get_obj_value_for_current_solution: function extracting the value of the objective
                for the current solution.

        """
        ...

    @staticmethod
    @abstractmethod
    def create_empty_model(name: str = "") -> Any:
        ...

    @abstractmethod
    def add_linear_constraint(self, expr: Any, name: str = "") -> Any:
        ...

    @abstractmethod
    def add_binary_variable(self, name: str = "") -> Any:
        ...

    @abstractmethod
    def set_model_objective(self, expr: Any, minimize: bool) -> None:
        ...

    @staticmethod
    @abstractmethod
    def construct_linear_sum(expr: Iterable) -> Any:
        """Generate a linear sum (with variables) ready for the internal model."""
        ...

    def add_linear_constraint_from_terms(
        self,
        terms: Iterable[tuple[float, Any]],
        sense: InequalitySense,
        rhs: float,
        name: str = "",
    ) -> Any:
        """Add the constraint `sum(coeff * var) <sense> rhs` to the model."""
        lhs = self.construct_linear_sum(coeff * var for coeff, var in terms)
        if sense == InequalitySense.LOWER_OR_EQUAL:
            return self.add_linear_constraint(lhs <= rhs, name=name)
        elif sense == InequalitySense.GREATER_OR_EQUAL:
            return self.add_linear_constraint(lhs >= rhs, name=name)
        else:
            return self.add_linear_constraint(lhs == rhs, name=name)


map_mathopt_status_to_do_status: dict[mathopt.TerminationReason, StatusSolver] = {
    mathopt.TerminationReason.OPTIMAL: StatusSolver.OPTIMAL,
    mathopt.TerminationReason.INFEASIBLE: StatusSolver.UNSATISFIABLE,
    mathopt.TerminationReason.INFEASIBLE_OR_UNBOUNDED: StatusSolver.UNKNOWN,
    mathopt.TerminationReason.UNBOUNDED: StatusSolver.UNKNOWN,
    mathopt.TerminationReason.FEASIBLE: StatusSolver.SATISFIED,
    mathopt.TerminationReason.NO_SOLUTION_FOUND: StatusSolver.UNSATISFIABLE,
    mathopt.TerminationReason.IMPRECISE: StatusSolver.UNKNOWN,
    mathopt.TerminationReason.NUMERICAL_ERROR: StatusSolver.ERROR,
    mathopt.TerminationReason.OTHER_ERROR: StatusSolver.ERROR,
}


class OrtoolsMathOptMilpSolver(MilpSolver):
    """Milp solver wrapping a solver available through OR-Tools MathOpt."""

    model: Optional[mathopt.Model] = None
    termination: mathopt.Termination

    def optimize_model(
        self,
        parameters_milp: Optional[ParametersMilp] = None,
        mathopt_solver_type: mathopt.SolverType = mathopt.SolverType.CP_SAT,
        time_limit: Optional[float] = 30.0,
        mathopt_enable_output: bool = False,
        mathopt_additional_solve_parameters: Optional[mathopt.SolveParameters] = None,
        **kwargs: Any,
    ) -> mathopt.SolveResult:
        """Run the underlying solver on the current model.

        Args:
            parameters_milp: parameters for the milp solver
            mathopt_solver_type: underlying solver type to use.
                Passed as `solver_type` to `mathopt.solve()`
            time_limit: the solve process stops after this time limit (in seconds).
                If None, no time limit is applied.
            mathopt_enable_output: turn on mathopt logging
            mathopt_additional_solve_parameters: passed to `mathopt.solve()` as `params`,
                except that parameters defined by above `time_limit`, `parameters_milp`, and `mathopt_enable_output`
                will be overriden by them.
            **kwargs: passed to init_model() if model not yet existing

        """
        if self.model is None:
            self.init_model(**kwargs)
            if self.model is None:
                raise RuntimeError(
                    "self.model must not be None after self.init_model()."
                )

        if parameters_milp is None:
            parameters_milp = ParametersMilp.default()

        if mathopt_additional_solve_parameters is None:
            params = mathopt.SolveParameters()
        else:
            params = copy.deepcopy(mathopt_additional_solve_parameters)
        if time_limit is not None:
            params.time_limit = datetime.timedelta(seconds=time_limit)
        params.absolute_gap_tolerance = parameters_milp.mip_gap_abs
        params.relative_gap_tolerance = parameters_milp.mip_gap
        params.enable_output = mathopt_enable_output
        if (
            parameters_milp.retrieve_all_solution
            and mathopt_solver_type != mathopt.SolverType.HIGHS
        ):
            # solution_pool_size not supported for HIGHS solver
            params.solution_pool_size = parameters_milp.pool_solutions

        mathopt_res = mathopt.solve(
            self.model,
            solver_type=mathopt_solver_type,
            params=params,
        )
        self.termination = mathopt_res.termination
        self.status_solver = map_mathopt_status_to_do_status.get(
            self.termination.reason, StatusSolver.UNKNOWN
        )

        logger.info(f"Solver found {len(mathopt_res.solutions)} solutions")
        if self.status_solver in [StatusSolver.OPTIMAL, StatusSolver.SATISFIED]:
            logger.info(f"Objective : {mathopt_res.objective_value()}")
        return mathopt_res

    @staticmethod
    def create_empty_model(name: str = "") -> mathopt.Model:
        return mathopt.Model(name=name)

    def add_linear_constraint(
        self, expr: Any, name: str = ""
    ) -> mathopt.LinearConstraint:
        return self.model.add_linear_constraint(expr, name=name)

    def add_binary_variable(self, name: str = "") -> mathopt.Variable:
        return self.model.add_binary_variable(name=name)

    def set_model_objective(self, expr: Any, minimize: bool) -> None:
        self.model.set_objective(expr, is_maximize=not minimize)

    @staticmethod
    def construct_linear_sum(expr: Iterable) -> Any:
        return mathopt.LinearSum(expr)

    def extract_result_storage(
        self, mathopt_res: mathopt.SolveResult, parameters_milp: ParametersMilp
    ) -> ResultStorage:
        """Convert the solutions of a mathopt result, best one first."""
        internal_solutions = [
            internal_sol
            for internal_sol in mathopt_res.solutions
            if internal_sol.primal_solution is not None
        ]
        if not parameters_milp.retrieve_all_solution:
            internal_solutions = internal_solutions[:1]
        list_solution_fits = []
        for internal_sol in internal_solutions:
            primal_solution = internal_sol.primal_solution
            sol = self.retrieve_current_solution(
                get_var_value_for_current_solution=lambda var: primal_solution.variable_values[
                    var
                ],
                get_obj_value_for_current_solution=lambda: primal_solution.objective_value,
            )
            list_solution_fits.append((sol, self.aggreg_from_sol(sol)))
        return self.create_result_storage(list_solution_fits)
