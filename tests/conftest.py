#  Copyright (c) 2025 The affinity-coloring authors.
#  This source code is licensed under the MIT license found in the
#  LICENSE file in the root directory of this source tree.

from pytest import fixture

from affinity_coloring.affinity.problem import AffinityColoringProblem, AffinityGraph
from affinity_coloring.datasets import AC_DEFAULT_DATAHOME_ENVVARNAME

SAMPLE_INSTANCE = """8 10 6
1 2
1 3
2 3
2 4
3 5
4 5
4 6
5 7
6 8
7 8
1 4
1 5
2 5
3 4
6 7
5 8
"""


@fixture
def fake_data_home(monkeypatch, tmp_path):
    data_home = str(tmp_path / "affinity_coloring_data_not_existing")
    monkeypatch.setenv(AC_DEFAULT_DATAHOME_ENVVARNAME, data_home)
    return data_home


@fixture
def two_pairs_graph() -> AffinityGraph:
    """Interference (1,2) and (3,4), affinity (1,3)."""
    return AffinityGraph.from_edge_records(
        vertex_count=4,
        interference_edge_count=2,
        affinity_edge_count=1,
        records=[(1, 2), (3, 4), (1, 3)],
    )


@fixture
def triangle_graph() -> AffinityGraph:
    return AffinityGraph.from_edge_records(
        vertex_count=3,
        interference_edge_count=3,
        affinity_edge_count=0,
        records=[(1, 2), (2, 3), (1, 3)],
    )


@fixture
def single_vertex_graph() -> AffinityGraph:
    return AffinityGraph(vertex_count=1)


@fixture
def path_graph() -> AffinityGraph:
    """Interference path 1-2-3-4, affinity (1,4): satisfying it needs a third color."""
    return AffinityGraph.from_edge_records(
        vertex_count=4,
        interference_edge_count=3,
        affinity_edge_count=1,
        records=[(1, 2), (2, 3), (3, 4), (1, 4)],
    )


@fixture
def two_pairs_problem(two_pairs_graph) -> AffinityColoringProblem:
    return AffinityColoringProblem(two_pairs_graph)


@fixture
def triangle_problem(triangle_graph) -> AffinityColoringProblem:
    return AffinityColoringProblem(triangle_graph)


@fixture
def single_vertex_problem(single_vertex_graph) -> AffinityColoringProblem:
    return AffinityColoringProblem(single_vertex_graph)


@fixture
def path_problem(path_graph) -> AffinityColoringProblem:
    return AffinityColoringProblem(path_graph)


@fixture
def sample_instance() -> str:
    return SAMPLE_INSTANCE
