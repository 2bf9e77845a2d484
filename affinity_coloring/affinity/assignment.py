"""Color assignment shared by the integer and the one-hot encodings."""

#  Copyright (c) 2025 The affinity-coloring authors.
#  This source code is licensed under the MIT license found in the
#  LICENSE file in the root directory of this source tree.

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Union

import numpy as np

if TYPE_CHECKING:  # avoid cycling imports due solely to annotations
    from affinity_coloring.affinity.problem import AffinityGraph

ONE_HOT_THRESHOLD = 0.5


@dataclass(frozen=True)
class ColorAssignment:
    """Function from vertices to colors.

    Colors are stored 0-based, vertex i having color `colors[i]`.
    Integer genes (as used by evolutionary algorithms and in every file) are 1-based.

    """

    colors: tuple[int, ...]

    def __post_init__(self):
        if any(c < 0 for c in self.colors):
            raise ValueError("Colors must be non negative indices.")

    @property
    def vertex_count(self) -> int:
        return len(self.colors)

    def __len__(self) -> int:
        return len(self.colors)

    def __getitem__(self, vertex: int) -> int:
        return self.colors[vertex]

    @staticmethod
    def from_genes(genes: Sequence[int]) -> ColorAssignment:
        """Build from a vector of 1-based colors."""
        if any(int(g) < 1 for g in genes):
            raise ValueError(f"Genes must be 1-based colors, got {list(genes)}.")
        return ColorAssignment(tuple(int(g) - 1 for g in genes))

    def to_genes(self) -> list[int]:
        return [c + 1 for c in self.colors]

    @staticmethod
    def from_one_hot(
        values: Union[np.ndarray, Sequence[Sequence[float]]],
        nb_colors: Optional[int] = None,
    ) -> ColorAssignment:
        """Decode a one-hot matrix (vertices x colors) as returned by a milp solver.

        For each vertex, colors are scanned in index order
        and the first one whose value exceeds 0.5 is kept.

        Args:
            values: matrix of (possibly fractional) values
            nb_colors: number of columns to scan. All of them if None.

        """
        matrix = np.asarray(values, dtype=float)
        if matrix.ndim != 2:
            raise ValueError("values must be a 2-dimensional matrix.")
        if nb_colors is not None:
            matrix = matrix[:, :nb_colors]
        colors = []
        for vertex, row in enumerate(matrix):
            positives = np.nonzero(row > ONE_HOT_THRESHOLD)[0]
            if len(positives) == 0:
                raise ValueError(f"No color assigned to vertex {vertex}.")
            colors.append(int(positives[0]))
        return ColorAssignment(tuple(colors))

    def to_one_hot(self, nb_colors: Optional[int] = None) -> np.ndarray:
        if nb_colors is None:
            nb_colors = self.max_color
        if nb_colors < self.max_color:
            raise ValueError(
                f"{nb_colors} colors cannot encode an assignment using color {self.max_color}."
            )
        matrix = np.zeros((self.vertex_count, nb_colors), dtype=int)
        matrix[np.arange(self.vertex_count), np.array(self.colors, dtype=int)] = 1
        return matrix

    @property
    def colors_used(self) -> tuple[int, ...]:
        """Sorted 0-based colors appearing in the assignment."""
        return tuple(sorted(set(self.colors)))

    @property
    def nb_colors_used(self) -> int:
        return len(set(self.colors))

    @property
    def max_color(self) -> int:
        """Highest 1-based color of the assignment (0 if no vertex)."""
        if len(self.colors) == 0:
            return 0
        return max(self.colors) + 1

    def is_consecutive(self) -> bool:
        """True if the colors used are exactly the first `nb_colors_used` colors."""
        return self.colors_used == tuple(range(self.nb_colors_used))

    def count_satisfied(self, graph: AffinityGraph) -> int:
        """Number of affinity edges whose endpoints share a color."""
        return sum(
            1 for i, j in graph.affinity_edges() if self.colors[i] == self.colors[j]
        )

    def interference_violations(self, graph: AffinityGraph) -> int:
        """Number of interference edges whose endpoints share a color."""
        return sum(
            1 for i, j in graph.interference_edges() if self.colors[i] == self.colors[j]
        )
