#  Copyright (c) 2025 The affinity-coloring authors.
#  This source code is licensed under the MIT license found in the
#  LICENSE file in the root directory of this source tree.

import logging

import pytest

from affinity_coloring.affinity.affinity_solvers import (
    look_for_solver,
    solve,
    solvers_map,
)
from affinity_coloring.affinity.assignment import ColorAssignment
from affinity_coloring.affinity.parser import parse
from affinity_coloring.affinity.problem import AffinityColoringProblem
from affinity_coloring.affinity.result import extract_lp_result
from affinity_coloring.affinity.solvers.lp import (
    AffinityLpFormulation,
    ColoringPhase,
    LpAffinityColoringSolver,
    affinity_key,
    color_key,
    used_key,
)
from affinity_coloring.affinity.solvers.nsga import NsgaAffinityColoringSolver
from affinity_coloring.generic_tools.callbacks.early_stoppers import (
    NbIterationStopper,
)
from affinity_coloring.generic_tools.callbacks.loggers import (
    NbIterationTracker,
    ObjectiveLogger,
)
from affinity_coloring.generic_tools.exceptions import (
    ConfigurationError,
    SolverInvocationError,
)
from affinity_coloring.generic_tools.lp_tools import InequalitySense

logging.basicConfig(level=logging.INFO)


def test_standard_formulation_structure(two_pairs_graph):
    formulation = AffinityLpFormulation(
        graph=two_pairs_graph, phase=ColoringPhase.STANDARD, max_colors=4
    )
    assert len(formulation.variables) == 4 * 4 + 4
    # one color per vertex, interference per edge and color, consecutive use, first color
    assert len(formulation.rows) == 4 + 2 * 4 + 3 + 1
    assert formulation.minimize
    assert formulation.objective == [(1, used_key(c)) for c in range(4)]
    interference_row = next(
        row for row in formulation.rows if row.name == "interference_0_1_2"
    )
    assert interference_row.terms == (
        (1, color_key(0, 2)),
        (1, color_key(1, 2)),
        (-1, used_key(2)),
    )
    assert interference_row.sense == InequalitySense.LOWER_OR_EQUAL
    assert interference_row.rhs == 0
    assert not any(key[0] == "aff" for key in formulation.variables)


def test_affinity_formulation_structure(two_pairs_graph):
    formulation = AffinityLpFormulation(
        graph=two_pairs_graph, phase=ColoringPhase.AFFINITY, max_colors=2
    )
    # x, used, and one aff variable per unordered pair and color
    assert len(formulation.variables) == 4 * 2 + 2 + 6 * 2
    assert len(formulation.rows) == 4 + 2 * 2 + 1 + 1 + 6 * 2
    assert not formulation.minimize
    assert formulation.objective == [(1, affinity_key(0, 2, 0)), (1, affinity_key(0, 2, 1))]
    linkage = next(row for row in formulation.rows if row.name == "affinity_0_2_1")
    assert linkage.terms == (
        (2, affinity_key(0, 2, 1)),
        (-1, color_key(0, 1)),
        (-1, color_key(2, 1)),
    )
    pinned = next(row for row in formulation.rows if row.name == "no_affinity_1_3_0")
    assert pinned.sense == InequalitySense.EQUAL
    assert pinned.rhs == 0
    assert affinity_key(2, 0, 1) == affinity_key(0, 2, 1)


def test_invalid_max_colors(two_pairs_graph):
    with pytest.raises(ConfigurationError):
        AffinityLpFormulation(
            graph=two_pairs_graph, phase=ColoringPhase.STANDARD, max_colors=0
        )


def test_evaluate_rows(two_pairs_graph):
    formulation = AffinityLpFormulation(
        graph=two_pairs_graph, phase=ColoringPhase.AFFINITY, max_colors=3
    )
    good = formulation.values_from_assignment(ColorAssignment.from_genes([1, 2, 1, 2]))
    assert formulation.evaluate_rows(good) == []
    assert formulation.evaluate_objective(good) == 1

    clash = formulation.values_from_assignment(ColorAssignment.from_genes([1, 1, 2, 2]))
    violated = {row.name for row in formulation.evaluate_rows(clash)}
    assert "interference_0_1_0" in violated
    assert "interference_2_3_1" in violated

    gap = formulation.values_from_assignment(ColorAssignment.from_genes([1, 3, 1, 3]))
    violated = {row.name for row in formulation.evaluate_rows(gap)}
    assert violated == {"consecutive_2"}

    with pytest.raises(ValueError):
        formulation.values_from_assignment(ColorAssignment.from_genes([1, 4, 1, 2]))


def test_used_flags_under_maximization_flagged(two_pairs_graph, caplog):
    formulation = AffinityLpFormulation(
        graph=two_pairs_graph, phase=ColoringPhase.STANDARD, max_colors=2
    )
    with caplog.at_level(logging.WARNING):
        formulation.set_objective([(1, used_key(0)), (1, used_key(1))], minimize=False)
    assert "only bounded from below" in caplog.text


def test_two_pairs_scenario(two_pairs_problem):
    solver = LpAffinityColoringSolver(two_pairs_problem)
    res = solver.solve(time_limit=20)
    assert solver.phase == ColoringPhase.AFFINITY
    assert solver.chromatic_number == 2
    # phase 2 is bounded by the chromatic number, not by the number of vertices
    assert solver.formulation.max_colors == 2
    assert solver.is_optimal()
    result = extract_lp_result(res)
    assert result.coloring_objective == 2
    assert result.affinity_objective == 1
    colors = result.assignment
    assert colors[0] == colors[2]
    assert colors[1] == colors[3]
    assert colors[0] != colors[1]
    assert set(colors) == {1, 2}
    sol = res.get_best_solution()
    assert two_pairs_problem.satisfy(sol)


def test_triangle_scenario(triangle_problem):
    solver = LpAffinityColoringSolver(triangle_problem)
    result = extract_lp_result(solver.solve(time_limit=20))
    assert solver.chromatic_number == 3
    assert result.coloring_objective == 3
    assert result.affinity_objective == 0
    assert sorted(result.assignment) == [1, 2, 3]


def test_single_vertex_scenario(single_vertex_problem):
    solver = LpAffinityColoringSolver(single_vertex_problem)
    result = extract_lp_result(solver.solve(time_limit=20))
    assert solver.chromatic_number == 1
    assert result.coloring_objective == 1
    assert result.affinity_objective == 0
    assert result.assignment == (1,)


def test_no_interference_means_one_color():
    problem = parse("3 0 2\n1 2\n2 3\n")
    solver = LpAffinityColoringSolver(problem)
    result = extract_lp_result(solver.solve(time_limit=20))
    assert solver.chromatic_number == 1
    assert result.affinity_objective == 2
    assert result.assignment == (1, 1, 1)


def test_sample_instance(sample_instance):
    problem = parse(sample_instance)
    solver = LpAffinityColoringSolver(problem)
    res = solver.solve(
        callbacks=[NbIterationTracker(), ObjectiveLogger()], time_limit=60
    )
    result = extract_lp_result(res)
    assert solver.chromatic_number == 3
    assert result.coloring_objective == 3
    # at most 2 of the 4 affinity edges around the triangle 1 2 3, both of 6-7 and 5-8
    assert result.affinity_objective == 4
    sol = res.get_best_solution()
    assert problem.satisfy(sol)
    assert problem.evaluate(sol)["nb_affinity_satisfied"] == result.affinity_objective
    # the two phase optimum is at least as good as any 3-coloring found by the evolutionary solver
    nsga_res = NsgaAffinityColoringSolver(problem).solve(
        pop_size=40, max_evals=2000, random_seed=0
    )
    for nsga_sol, _ in nsga_res:
        if problem.satisfy(nsga_sol) and max(nsga_sol.colors) == 3:
            assert (
                problem.evaluate(nsga_sol)["nb_affinity_satisfied"]
                <= result.affinity_objective
            )


def test_stop_after_standard_phase(two_pairs_problem):
    solver = LpAffinityColoringSolver(two_pairs_problem)
    tracker = NbIterationTracker()
    res = solver.solve(
        callbacks=[tracker, NbIterationStopper(nb_iteration_max=1)], time_limit=20
    )
    assert tracker.nb_iteration == 1
    assert solver.phase == ColoringPhase.STANDARD
    assert solver.chromatic_number == 2
    sol = res.get_best_solution()
    assert sol is not None
    assert two_pairs_problem.evaluate(sol)["nb_violations"] == 0


def test_infeasible_standard_phase(triangle_graph):
    problem = AffinityColoringProblem(triangle_graph, max_colors=2)
    solver = LpAffinityColoringSolver(problem)
    with pytest.raises(SolverInvocationError) as exc_info:
        solver.solve(time_limit=20)
    assert exc_info.value.phase == ColoringPhase.STANDARD.value


def test_state_machine(two_pairs_problem):
    solver = LpAffinityColoringSolver(two_pairs_problem)
    solver.phase = ColoringPhase.AFFINITY
    with pytest.raises(RuntimeError):
        solver.init_model()

    solver = LpAffinityColoringSolver(two_pairs_problem)
    solver.transition_to_affinity(2)
    with pytest.raises(RuntimeError):
        solver.transition_to_affinity(2)
    solver.init_model()
    assert solver.formulation.max_colors == 2
    assert all(
        name.startswith("affinity_")
        for name in (var.name for var in solver.variables.values())
    )

    solver = LpAffinityColoringSolver(two_pairs_problem)
    solver.solve(time_limit=20)
    with pytest.raises(RuntimeError):
        solver.solve(time_limit=20)


def test_solver_registry(two_pairs_problem):
    assert LpAffinityColoringSolver in look_for_solver(two_pairs_problem)
    assert NsgaAffinityColoringSolver in look_for_solver(two_pairs_problem)
    assert solvers_map[LpAffinityColoringSolver][0] == "lp"
    res = solve(method=LpAffinityColoringSolver, problem=two_pairs_problem, time_limit=20)
    assert extract_lp_result(res).affinity_objective == 1
