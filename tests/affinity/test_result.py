#  Copyright (c) 2025 The affinity-coloring authors.
#  This source code is licensed under the MIT license found in the
#  LICENSE file in the root directory of this source tree.

import numpy as np
import pytest

from affinity_coloring.affinity.problem import AffinityColoringSolution
from affinity_coloring.affinity.report import (
    format_lp_result,
    format_pareto_front,
    pareto_report_lines,
    write_lp_report,
    write_pareto_report,
)
from affinity_coloring.affinity.result import (
    AffinityColoringResult,
    extract_lp_result,
    extract_pareto_front,
)
from affinity_coloring.generic_tools.do_problem import ModeOptim
from affinity_coloring.generic_tools.result_storage.multiobj_utils import (
    TupleFitness,
)
from affinity_coloring.generic_tools.result_storage.result_storage import (
    ResultStorage,
)


@pytest.fixture
def path_storage(path_problem) -> ResultStorage:
    colors_list = [
        [1, 2, 1, 2],  # 2 colors, affinity 0
        [1, 2, 3, 1],  # 3 colors, affinity 1
        [2, 1, 2, 1],  # same objectives as the first one
        [1, 2, 1, 3],  # 3 colors, affinity 0: dominated
        [1, 1, 2, 1],  # interference violated
        [1, 3, 1, 3],  # color 2 skipped
    ]
    return ResultStorage(
        mode_optim=ModeOptim.MAXIMIZATION,
        list_solution_fits=[
            (AffinityColoringSolution(problem=path_problem, colors=colors), 0.0)
            for colors in colors_list
        ],
    )


def test_from_solution_recomputes_objectives(path_problem):
    sol = AffinityColoringSolution(problem=path_problem, colors=[1, 2, 3, 1])
    result = AffinityColoringResult.from_solution(sol)
    assert result == AffinityColoringResult(
        coloring_objective=3, affinity_objective=1, assignment=(1, 2, 3, 1)
    )


def test_fitness_orders_results():
    a = AffinityColoringResult(2, 1, (1, 2))
    b = AffinityColoringResult(3, 1, (1, 3))
    c = AffinityColoringResult(3, 2, (1, 3))
    assert a.fitness.vector_fitness.tolist() == [-2, 1]
    assert a.fitness.dominates(b.fitness)
    assert not b.fitness.dominates(a.fitness)
    assert not a.fitness.dominates(c.fitness)
    assert not c.fitness.dominates(a.fitness)
    assert not a.fitness.dominates(a.fitness)


def test_extract_pareto_front(path_storage, path_problem):
    front = extract_pareto_front(path_storage)
    assert front == [
        AffinityColoringResult(2, 0, (1, 2, 1, 2)),
        AffinityColoringResult(3, 1, (1, 2, 3, 1)),
    ]
    assert extract_pareto_front(path_storage, problem=path_problem) == front


def test_extract_pareto_front_without_feasible(path_problem):
    storage = ResultStorage(
        mode_optim=ModeOptim.MAXIMIZATION,
        list_solution_fits=[
            (AffinityColoringSolution(problem=path_problem, colors=[1, 1, 1, 1]), 0.0)
        ],
    )
    assert extract_pareto_front(storage) == []
    assert extract_pareto_front(ResultStorage(mode_optim=ModeOptim.MAXIMIZATION)) == []


def test_extract_pareto_front_ignores_solver_fitness(path_storage):
    # a front on the number of colors alone would drop the 3 colors solution
    storage = ResultStorage(
        mode_optim=ModeOptim.MINIMIZATION,
        list_solution_fits=[
            (sol, TupleFitness(np.array([len(set(sol.colors)), 0]), 2))
            for sol, _ in path_storage
        ],
    )
    assert storage.get_pareto_front() != []
    assert extract_pareto_front(storage) == extract_pareto_front(path_storage)


def test_extract_lp_result(path_problem):
    storage = ResultStorage(
        mode_optim=ModeOptim.MAXIMIZATION,
        list_solution_fits=[
            (AffinityColoringSolution(problem=path_problem, colors=[1, 2, 1, 3]), 1.0),
            (AffinityColoringSolution(problem=path_problem, colors=[1, 2, 3, 1]), 2.0),
        ],
    )
    assert extract_lp_result(storage) == AffinityColoringResult(3, 1, (1, 2, 3, 1))
    with pytest.raises(ValueError):
        extract_lp_result(ResultStorage(mode_optim=ModeOptim.MAXIMIZATION))


def test_write_lp_report(tmp_path):
    path = tmp_path / "lp.txt"
    write_lp_report(AffinityColoringResult(2, 1, (1, 2, 1, 2)), str(path))
    assert path.read_text().splitlines() == ["2", "1", "1", "2", "1", "2"]


def test_write_pareto_report(tmp_path):
    front = [
        AffinityColoringResult(2, 0, (1, 2, 1, 2)),
        AffinityColoringResult(3, 1, (1, 2, 3, 1)),
    ]
    path = tmp_path / "pareto.txt"
    write_pareto_report(front, str(path))
    assert path.read_text().splitlines() == [
        "2",
        "",
        "2 0",
        "3 1",
        "",
        "1",
        "2",
        "1",
        "2",
        "",
        "1",
        "2",
        "3",
        "1",
        "",
    ]
    assert pareto_report_lines([]) == ["0", ""]


def test_console_formats():
    front = [AffinityColoringResult(2, 1, (1, 2, 1, 2))]
    text = format_pareto_front(front)
    assert text.startswith("Pareto Front size: 1")
    assert "Colors used:  2   Affinity Edges Satisfied:  1" in text
    assert " V1  V2  V3  V4" in text
    assert "  1   2   1   2" in text
    lp_text = format_lp_result(front[0])
    assert "Chromatic Number: 2" in lp_text
    assert "Affinity Edges Satisfied: 1" in lp_text
    assert "V4: 2" in lp_text
