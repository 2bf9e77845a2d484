"""Two-phase linear programming model for the coloring problem with affinities.

Phase STANDARD computes the chromatic number of the interference graph.
Phase AFFINITY maximizes the number of satisfied affinity edges using exactly that many colors.
"""

#  Copyright (c) 2025 The affinity-coloring authors.
#  This source code is licensed under the MIT license found in the
#  LICENSE file in the root directory of this source tree.

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

import numpy as np
from ortools.math_opt.python import mathopt

from affinity_coloring.affinity.assignment import ColorAssignment
from affinity_coloring.affinity.problem import (
    AffinityColoringProblem,
    AffinityColoringSolution,
    AffinityGraph,
)
from affinity_coloring.affinity.solvers import AffinityColoringSolver
from affinity_coloring.generic_tools.callbacks.callback import (
    Callback,
    CallbackList,
)
from affinity_coloring.generic_tools.do_problem import ParamsObjectiveFunction
from affinity_coloring.generic_tools.do_solver import StatusSolver
from affinity_coloring.generic_tools.exceptions import (
    ConfigurationError,
    SolverInvocationError,
)
from affinity_coloring.generic_tools.lp_tools import (
    InequalitySense,
    OrtoolsMathOptMilpSolver,
    ParametersMilp,
)
from affinity_coloring.generic_tools.result_storage.result_storage import (
    ResultStorage,
)

logger = logging.getLogger(__name__)

VariableKey = tuple  # ("x", vertex, color), ("used", color) or ("aff", vertex1, vertex2, color)

FEASIBILITY_TOLERANCE = 1e-6


class ColoringPhase(Enum):
    STANDARD = "standard"
    AFFINITY = "affinity"


def color_key(vertex: int, color: int) -> VariableKey:
    return "x", vertex, color


def used_key(color: int) -> VariableKey:
    return "used", color


def affinity_key(vertex1: int, vertex2: int, color: int) -> VariableKey:
    if vertex1 > vertex2:
        vertex1, vertex2 = vertex2, vertex1
    return "aff", vertex1, vertex2, color


@dataclass(frozen=True)
class LinearRow:
    """Linear constraint `sum(coeff * variable) <sense> rhs`."""

    name: str
    terms: tuple[tuple[float, VariableKey], ...]
    sense: InequalitySense
    rhs: float

    def lhs_value(self, values: Mapping[VariableKey, float]) -> float:
        return sum(coeff * values.get(key, 0.0) for coeff, key in self.terms)

    def is_satisfied(
        self, values: Mapping[VariableKey, float], tolerance: float = FEASIBILITY_TOLERANCE
    ) -> bool:
        lhs = self.lhs_value(values)
        if self.sense == InequalitySense.LOWER_OR_EQUAL:
            return lhs <= self.rhs + tolerance
        elif self.sense == InequalitySense.GREATER_OR_EQUAL:
            return lhs >= self.rhs - tolerance
        else:
            return abs(lhs - self.rhs) <= tolerance


class AffinityLpFormulation:
    """Solver independent description of the binary program of one phase.

    Variables:
        x[v][c] = 1 iff vertex v takes color c
        used[c] = 1 if color c may be used. Only the direction "x[v][c] = 1 => used[c] = 1"
            is enforced, and only through interference edges.
        aff[v1][v2][c] (phase AFFINITY) = 1 only if v1 and v2 both take color c

    Attributes:
        graph (AffinityGraph): graph to color
        phase (ColoringPhase): phase modelled
        max_colors (int): number of colors available
        variables (list[VariableKey]): all binary variables
        rows (list[LinearRow]): all constraints
        objective (list[tuple[float, VariableKey]]): linear objective
        minimize (bool): sense of the objective

    """

    def __init__(self, graph: AffinityGraph, phase: ColoringPhase, max_colors: int):
        if max_colors < 1:
            raise ConfigurationError(f"max_colors must be at least 1, got {max_colors}.")
        self.graph = graph
        self.phase = phase
        self.max_colors = max_colors
        self.variables: list[VariableKey] = []
        self.rows: list[LinearRow] = []
        self.objective: list[tuple[float, VariableKey]] = []
        self.minimize = True
        self._build()
        logger.debug(
            f"Phase {phase.value}: {len(self.variables)} variables, {len(self.rows)} constraints"
        )

    def _add_row(self, name, terms, sense, rhs) -> None:
        self.rows.append(LinearRow(name=name, terms=tuple(terms), sense=sense, rhs=rhs))

    def _build(self) -> None:
        n = self.graph.vertex_count
        range_color = range(self.max_colors)
        self.variables.extend(color_key(v, c) for v in range(n) for c in range_color)
        self.variables.extend(used_key(c) for c in range_color)
        for v in range(n):
            self._add_row(
                f"one_color_{v}",
                [(1, color_key(v, c)) for c in range_color],
                InequalitySense.EQUAL,
                1,
            )
        for v1, v2 in self.graph.interference_edges():
            for c in range_color:
                self._add_row(
                    f"interference_{v1}_{v2}_{c}",
                    [(1, color_key(v1, c)), (1, color_key(v2, c)), (-1, used_key(c))],
                    InequalitySense.LOWER_OR_EQUAL,
                    0,
                )
        for c in range(1, self.max_colors):
            self._add_row(
                f"consecutive_{c}",
                [(1, used_key(c)), (-1, used_key(c - 1))],
                InequalitySense.LOWER_OR_EQUAL,
                0,
            )
        # at least one color, even without any interference edge
        self._add_row("first_color", [(1, used_key(0))], InequalitySense.EQUAL, 1)

        if self.phase == ColoringPhase.STANDARD:
            self.set_objective([(1, used_key(c)) for c in range_color], minimize=True)
        else:
            for v1 in range(n):
                for v2 in range(v1 + 1, n):
                    for c in range_color:
                        key = affinity_key(v1, v2, c)
                        self.variables.append(key)
                        if self.graph.is_affinity(v1, v2):
                            self._add_row(
                                f"affinity_{v1}_{v2}_{c}",
                                [(2, key), (-1, color_key(v1, c)), (-1, color_key(v2, c))],
                                InequalitySense.LOWER_OR_EQUAL,
                                0,
                            )
                        else:
                            self._add_row(
                                f"no_affinity_{v1}_{v2}_{c}",
                                [(1, key)],
                                InequalitySense.EQUAL,
                                0,
                            )
            self.set_objective(
                [
                    (1, affinity_key(v1, v2, c))
                    for v1, v2 in self.graph.affinity_edges()
                    for c in range_color
                ],
                minimize=False,
            )

    def set_objective(
        self, terms: list[tuple[float, VariableKey]], minimize: bool
    ) -> None:
        """Replace the objective.

        used[c] flags are only bounded from below by the constraints,
        so they mean "color c is used" only when pushed down by a minimized objective.

        """
        self.objective = list(terms)
        self.minimize = minimize
        used_coeffs = [coeff for coeff, key in self.objective if key[0] == "used"]
        if any((coeff > 0) != minimize for coeff in used_coeffs):
            logger.warning(
                "used[c] flags are only bounded from below, "
                "pushing them up makes every color look used."
            )

    def evaluate_objective(self, values: Mapping[VariableKey, float]) -> float:
        return sum(coeff * values.get(key, 0.0) for coeff, key in self.objective)

    def evaluate_rows(
        self, values: Mapping[VariableKey, float], tolerance: float = FEASIBILITY_TOLERANCE
    ) -> list[LinearRow]:
        """Rows violated by the given variable values (missing variables count as 0)."""
        return [row for row in self.rows if not row.is_satisfied(values, tolerance)]

    def values_from_assignment(
        self, assignment: ColorAssignment
    ) -> dict[VariableKey, float]:
        """Variable values encoding a color assignment in this formulation."""
        if assignment.vertex_count != self.graph.vertex_count:
            raise ValueError(
                f"Assignment of {assignment.vertex_count} vertices for a graph of {self.graph.vertex_count}."
            )
        if assignment.max_color > self.max_colors:
            raise ValueError(
                f"Assignment uses color {assignment.max_color}, only {self.max_colors} available."
            )
        one_hot = assignment.to_one_hot(self.max_colors)
        values: dict[VariableKey, float] = {}
        for v in range(self.graph.vertex_count):
            for c in range(self.max_colors):
                values[color_key(v, c)] = float(one_hot[v, c])
        colors_used = set(assignment.colors_used)
        for c in range(self.max_colors):
            values[used_key(c)] = 1.0 if c in colors_used else 0.0
        if self.phase == ColoringPhase.AFFINITY:
            for key in self.variables:
                if key[0] == "aff":
                    _, v1, v2, c = key
                    values[key] = (
                        1.0
                        if self.graph.is_affinity(v1, v2)
                        and assignment[v1] == c
                        and assignment[v2] == c
                        else 0.0
                    )
        return values

    def assignment_from_values(
        self, get_value: Callable[[VariableKey], float]
    ) -> ColorAssignment:
        """Decode the x variables, first color above 0.5 for each vertex."""
        matrix = np.array(
            [
                [get_value(color_key(v, c)) for c in range(self.max_colors)]
                for v in range(self.graph.vertex_count)
            ]
        )
        return ColorAssignment.from_one_hot(matrix, nb_colors=self.max_colors)


class LpAffinityColoringSolver(OrtoolsMathOptMilpSolver, AffinityColoringSolver):
    """Two-phase MathOpt solver for the coloring problem with affinities.

    The solver is a state machine: it starts in phase STANDARD,
    and moves once to phase AFFINITY, carrying the chromatic number found.

    Attributes:
        problem (AffinityColoringProblem): problem instance to solve
        params_objective_function (ParamsObjectiveFunction): objective function parameters
            (however this is just used for the ResultStorage creation, not in the optimisation)
        phase (ColoringPhase): current phase
        chromatic_number (Optional[int]): result of phase STANDARD, once solved

    """

    problem: AffinityColoringProblem

    def __init__(
        self,
        problem: AffinityColoringProblem,
        params_objective_function: Optional[ParamsObjectiveFunction] = None,
        **kwargs: Any,
    ):
        super().__init__(
            problem=problem, params_objective_function=params_objective_function
        )
        self.phase = ColoringPhase.STANDARD
        self.chromatic_number: Optional[int] = None
        self.formulation: Optional[AffinityLpFormulation] = None
        self.variables: dict[VariableKey, mathopt.Variable] = {}

    def transition_to_affinity(self, chromatic_number: int) -> None:
        if self.phase != ColoringPhase.STANDARD:
            raise RuntimeError("The solver already moved to the affinity phase.")
        self.phase = ColoringPhase.AFFINITY
        self.chromatic_number = chromatic_number
        self.model = None
        self.formulation = None

    def init_model(self, **kwargs: Any) -> None:
        """Build the mathopt model of the current phase.

        Keyword Args:
            max_colors (int): number of colors available.
                Default to problem.max_colors in phase STANDARD, to the chromatic number in phase AFFINITY.

        """
        max_colors = kwargs.get("max_colors", None)
        if max_colors is None:
            if self.phase == ColoringPhase.STANDARD:
                max_colors = self.problem.max_colors
            else:
                if self.chromatic_number is None:
                    raise RuntimeError(
                        "The affinity phase needs the chromatic number of the standard phase."
                    )
                max_colors = self.chromatic_number
        self.formulation = AffinityLpFormulation(
            graph=self.problem.graph, phase=self.phase, max_colors=max_colors
        )
        prefix = self.phase.value
        self.model = self.create_empty_model(f"{prefix}_coloring")
        self.variables = {
            key: self.add_binary_variable(name=prefix + "_" + "_".join(map(str, key)))
            for key in self.formulation.variables
        }
        for row in self.formulation.rows:
            self.add_linear_constraint_from_terms(
                terms=((coeff, self.variables[key]) for coeff, key in row.terms),
                sense=row.sense,
                rhs=row.rhs,
                name=f"{prefix}_{row.name}",
            )
        self.set_model_objective(
            self.construct_linear_sum(
                coeff * self.variables[key] for coeff, key in self.formulation.objective
            ),
            minimize=self.formulation.minimize,
        )

    def retrieve_current_solution(
        self,
        get_var_value_for_current_solution: Callable[[Any], float],
        get_obj_value_for_current_solution: Callable[[], float],
    ) -> AffinityColoringSolution:
        assignment = self.formulation.assignment_from_values(
            lambda key: get_var_value_for_current_solution(self.variables[key])
        )
        return AffinityColoringSolution.from_assignment(self.problem, assignment)

    def _solve_current_phase(
        self, parameters_milp: ParametersMilp, **kwargs: Any
    ) -> mathopt.SolveResult:
        self.init_model(**kwargs)
        logger.info(f"Solving phase {self.phase.value}")
        mathopt_res = self.optimize_model(parameters_milp=parameters_milp, **kwargs)
        if (
            self.status_solver not in (StatusSolver.OPTIMAL, StatusSolver.SATISFIED)
            or len(mathopt_res.solutions) == 0
        ):
            raise SolverInvocationError(
                phase=self.phase.value, status=self.termination.reason
            )
        if self.status_solver != StatusSolver.OPTIMAL:
            logger.warning(f"Phase {self.phase.value} solution not proven optimal.")
        return mathopt_res

    def solve(
        self,
        callbacks: Optional[list[Callback]] = None,
        parameters_milp: Optional[ParametersMilp] = None,
        **kwargs: Any,
    ) -> ResultStorage:
        """Run both phases.

        Args:
            callbacks: called after each phase (step 0 and 1).
                If one returns True after phase STANDARD, phase AFFINITY is skipped.
            parameters_milp: parameters for the milp solver
            **kwargs: passed to `optimize_model()`, e.g. `time_limit` or `mathopt_solver_type`.

        Returns:
            the solutions of the last phase solved, best first.

        Raises:
            SolverInvocationError: if a phase ends without a feasible solution.

        """
        if self.phase != ColoringPhase.STANDARD:
            raise RuntimeError("This solver has already been used, create a new one.")
        if parameters_milp is None:
            parameters_milp = ParametersMilp.default()
        kwargs.pop("max_colors", None)
        callbacks_list = CallbackList(callbacks=callbacks)
        callbacks_list.on_solve_start(solver=self)

        mathopt_res = self._solve_current_phase(parameters_milp, **kwargs)
        chromatic_number = int(round(mathopt_res.objective_value()))
        logger.info(f"Chromatic number: {chromatic_number}")
        res = self.extract_result_storage(mathopt_res, parameters_milp)
        if callbacks_list.on_step_end(step=0, res=res, solver=self):
            logger.info("Affinity phase skipped on callback request.")
            self.chromatic_number = chromatic_number
            callbacks_list.on_solve_end(res=res, solver=self)
            return res

        self.transition_to_affinity(chromatic_number)
        mathopt_res = self._solve_current_phase(parameters_milp, **kwargs)
        logger.info(
            f"Affinity edges satisfied: {int(round(mathopt_res.objective_value()))}"
        )
        res = self.extract_result_storage(mathopt_res, parameters_milp)
        callbacks_list.on_step_end(step=1, res=res, solver=self)
        callbacks_list.on_solve_end(res=res, solver=self)
        return res
