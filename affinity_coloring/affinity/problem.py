"""Graph coloring with interference and affinity edges.

Vertices linked by an interference edge must receive different colors.
Vertices linked by an affinity edge would rather receive the same color.
The aim is to use as few colors as possible while satisfying as many affinity edges as possible.
"""

#  Copyright (c) 2025 The affinity-coloring authors.
#  This source code is licensed under the MIT license found in the
#  LICENSE file in the root directory of this source tree.

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from enum import IntEnum
from typing import Optional, Union

import networkx as nx
import numpy as np

from affinity_coloring.affinity.assignment import ColorAssignment
from affinity_coloring.generic_tools.do_problem import (
    ModeOptim,
    ObjectiveDoc,
    ObjectiveHandling,
    ObjectiveRegister,
    Problem,
    Solution,
    TypeObjective,
)
from affinity_coloring.generic_tools.encoding_register import (
    EncodingRegister,
    ListInteger,
)
from affinity_coloring.generic_tools.exceptions import (
    ConfigurationError,
    GraphDataIntegrityError,
)

logger = logging.getLogger(__name__)


class EdgeType(IntEnum):
    NONE = 0
    INTERFERENCE = 1
    AFFINITY = 2


class AffinityGraph:
    """Undirected graph whose edges are either interference or affinity edges.

    Vertices are indexed from 0 to vertex_count - 1.
    The graph is immutable once built: `edge_type` is a read-only symmetric matrix.

    Attributes:
        vertex_count (int): number of vertices
        edge_type (np.ndarray): edge_type[i, j] is the EdgeType value of the pair (i, j)
        interference_edge_count (int): number of distinct interference edges
        affinity_edge_count (int): number of distinct affinity edges

    """

    def __init__(
        self,
        vertex_count: int,
        interference_edges: Iterable[tuple[int, int]] = (),
        affinity_edges: Iterable[tuple[int, int]] = (),
    ):
        if vertex_count < 1:
            raise ConfigurationError(
                f"A graph needs a positive number of vertices, got {vertex_count}."
            )
        self.vertex_count = vertex_count
        matrix = np.full((vertex_count, vertex_count), EdgeType.NONE, dtype=np.int8)
        for i, j in interference_edges:
            self._add_edge(matrix, i, j, EdgeType.INTERFERENCE)
        for i, j in affinity_edges:
            self._add_edge(matrix, i, j, EdgeType.AFFINITY)
        matrix.setflags(write=False)
        self.edge_type = matrix
        self._interference_edges = self._edges_of_type(EdgeType.INTERFERENCE)
        self._affinity_edges = self._edges_of_type(EdgeType.AFFINITY)
        self.interference_edge_count = len(self._interference_edges)
        self.affinity_edge_count = len(self._affinity_edges)
        logger.debug(
            f"Graph with {vertex_count} vertices, {self.interference_edge_count} interference edges "
            f"and {self.affinity_edge_count} affinity edges"
        )

    def _add_edge(self, matrix: np.ndarray, i: int, j: int, edge_type: EdgeType) -> None:
        if not (0 <= i < self.vertex_count and 0 <= j < self.vertex_count):
            raise GraphDataIntegrityError(
                f"Edge ({i}, {j}) refers to a vertex outside [0, {self.vertex_count - 1}]."
            )
        if i == j:
            raise GraphDataIntegrityError(f"Self loop on vertex {i} is not allowed.")
        current = matrix[i, j]
        if current == edge_type:
            logger.debug(f"Duplicate {edge_type.name} edge ({i}, {j}) ignored.")
            return
        if current != EdgeType.NONE:
            raise GraphDataIntegrityError(
                f"Pair ({i}, {j}) declared both as {EdgeType(int(current)).name} and {edge_type.name} edge."
            )
        matrix[i, j] = edge_type
        matrix[j, i] = edge_type

    def _edges_of_type(self, edge_type: EdgeType) -> list[tuple[int, int]]:
        rows, cols = np.nonzero(np.triu(self.edge_type == edge_type, k=1))
        return [(int(i), int(j)) for i, j in zip(rows, cols)]

    @staticmethod
    def from_edge_records(
        vertex_count: int,
        interference_edge_count: int,
        affinity_edge_count: int,
        records: Iterable[Sequence[int]],
    ) -> AffinityGraph:
        """Build a graph from 1-based edge records.

        The first `interference_edge_count` records are interference edges, the remaining ones affinity edges.

        Raises:
            ConfigurationError: if a declared count is negative or vertex_count is not positive
            GraphDataIntegrityError: if the records do not match the declared counts,
                or describe an invalid edge

        """
        if interference_edge_count < 0 or affinity_edge_count < 0:
            raise ConfigurationError("Declared edge counts must be non negative.")
        if vertex_count < 1:
            raise ConfigurationError(
                f"A graph needs a positive number of vertices, got {vertex_count}."
            )
        edges = []
        for record in records:
            if len(record) != 2:
                raise GraphDataIntegrityError(
                    f"An edge record holds 2 vertices, got {list(record)}."
                )
            i, j = int(record[0]), int(record[1])
            if not (1 <= i <= vertex_count and 1 <= j <= vertex_count):
                raise GraphDataIntegrityError(
                    f"Edge ({i}, {j}) refers to a vertex outside [1, {vertex_count}]."
                )
            edges.append((i - 1, j - 1))
        if len(edges) < interference_edge_count:
            raise GraphDataIntegrityError(
                f"{interference_edge_count} interference edges announced, "
                f"only {len(edges)} edges read."
            )
        nb_affinity_read = len(edges) - interference_edge_count
        if nb_affinity_read != affinity_edge_count:
            raise GraphDataIntegrityError(
                f"{affinity_edge_count} affinity edges announced, {nb_affinity_read} read."
            )
        return AffinityGraph(
            vertex_count=vertex_count,
            interference_edges=edges[:interference_edge_count],
            affinity_edges=edges[interference_edge_count:],
        )

    def interference_edges(self) -> list[tuple[int, int]]:
        """Sorted interference edges (i, j) with i < j."""
        return list(self._interference_edges)

    def affinity_edges(self) -> list[tuple[int, int]]:
        """Sorted affinity edges (i, j) with i < j."""
        return list(self._affinity_edges)

    def is_interference(self, i: int, j: int) -> bool:
        return self.edge_type[i, j] == EdgeType.INTERFERENCE

    def is_affinity(self, i: int, j: int) -> bool:
        return self.edge_type[i, j] == EdgeType.AFFINITY

    def to_networkx(self, edge_type: EdgeType = EdgeType.INTERFERENCE) -> nx.Graph:
        """Export the subgraph made of the edges of the given type (all vertices kept)."""
        graph_nx = nx.Graph()
        graph_nx.add_nodes_from(range(self.vertex_count))
        graph_nx.add_edges_from(self._edges_of_type(edge_type))
        return graph_nx


class AffinityColoringSolution(Solution):
    """Solution of the coloring problem with affinities.

    Attributes:
        problem (AffinityColoringProblem): instance of the problem
        colors (list[int]): 1-based color of each vertex

    """

    def __init__(
        self,
        problem: Problem,
        colors: Union[list[int], np.ndarray, tuple[int, ...]],
    ):
        super().__init__(problem=problem)
        self.colors = [int(c) for c in colors]

    @staticmethod
    def from_assignment(
        problem: AffinityColoringProblem, assignment: ColorAssignment
    ) -> AffinityColoringSolution:
        return AffinityColoringSolution(problem=problem, colors=assignment.to_genes())

    @property
    def assignment(self) -> ColorAssignment:
        return ColorAssignment.from_genes(self.colors)

    def copy(self) -> AffinityColoringSolution:
        return AffinityColoringSolution(problem=self.problem, colors=list(self.colors))

    def lazy_copy(self) -> AffinityColoringSolution:
        solution = AffinityColoringSolution(problem=self.problem, colors=())
        solution.colors = self.colors
        return solution

    def __str__(self) -> str:
        return f"colors={self.colors}"


class AffinityColoringProblem(Problem):
    """Coloring problem with interference and affinity edges.

    Attributes:
        graph (AffinityGraph): the graph to color
        max_colors (int): number of colors available, default to the number of vertices

    """

    def __init__(self, graph: AffinityGraph, max_colors: Optional[int] = None):
        self.graph = graph
        if max_colors is None:
            max_colors = graph.vertex_count
        if max_colors < 1:
            raise ConfigurationError(f"max_colors must be at least 1, got {max_colors}.")
        self.max_colors = max_colors

    @property
    def vertex_count(self) -> int:
        return self.graph.vertex_count

    def evaluate(self, variable: AffinityColoringSolution) -> dict[str, float]:  # type: ignore # avoid isinstance checks for efficiency
        assignment = variable.assignment
        return {
            "nb_colors": assignment.nb_colors_used,
            "nb_affinity_satisfied": assignment.count_satisfied(self.graph),
            "nb_violations": assignment.interference_violations(self.graph),
        }

    def satisfy(self, variable: AffinityColoringSolution) -> bool:  # type: ignore
        """Check bounds, interference edges and consecutive use of colors from color 1."""
        if len(variable.colors) != self.vertex_count:
            return False
        if any(c < 1 or c > self.max_colors for c in variable.colors):
            return False
        assignment = variable.assignment
        return (
            assignment.interference_violations(self.graph) == 0
            and assignment.is_consecutive()
        )

    def get_attribute_register(self) -> EncodingRegister:
        return EncodingRegister(
            {
                "colors": ListInteger.uniform(
                    length=self.vertex_count, low=1, up=self.max_colors
                )
            }
        )

    def get_solution_type(self) -> type[Solution]:
        return AffinityColoringSolution

    def get_objective_register(self) -> ObjectiveRegister:
        dict_objective = {
            "nb_colors": ObjectiveDoc(type=TypeObjective.OBJECTIVE, default_weight=-1.0),
            "nb_affinity_satisfied": ObjectiveDoc(
                type=TypeObjective.OBJECTIVE, default_weight=1.0
            ),
            "nb_violations": ObjectiveDoc(
                type=TypeObjective.PENALTY, default_weight=-100.0
            ),
        }
        return ObjectiveRegister(
            objective_sense=ModeOptim.MAXIMIZATION,
            objective_handling=ObjectiveHandling.AGGREGATE,
            dict_objective_to_doc=dict_objective,
        )

    def get_dummy_solution(self) -> AffinityColoringSolution:
        """One color per vertex, feasible whenever max_colors >= number of vertices."""
        colors = [min(i + 1, self.max_colors) for i in range(self.vertex_count)]
        return AffinityColoringSolution(problem=self, colors=colors)
