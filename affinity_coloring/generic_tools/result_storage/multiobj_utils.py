#  Copyright (c) 2025 AIRBUS and its affiliates.
#  This source code is licensed under the MIT license found in the
#  LICENSE file in the root directory of this source tree.

import numpy as np


class TupleFitness:
    """Vector of weighted kpis, compared with the pareto dominance (greater is better).

    Two fitnesses are "equal" when none of them dominates the other one.

    """

    vector_fitness: np.ndarray
    size: int

    def __init__(self, vector_fitness: np.ndarray, size: int):
        self.vector_fitness = vector_fitness
        self.size = size

    def dominates(self, other: "TupleFitness") -> bool:
        return self > other

    def same_values(self, other: "TupleFitness") -> bool:
        return bool((self.vector_fitness == other.vector_fitness).all())

    def __eq__(self, other: object) -> bool:
        return (
            isinstance(other, TupleFitness)
            and not (self < other)
            and not (self > other)
        )

    def __le__(self, other: "TupleFitness") -> bool:
        return self < other or self == other

    def __ge__(self, other: "TupleFitness") -> bool:
        return self > other or self == other

    def __lt__(self, other: "TupleFitness") -> bool:
        return bool(
            (self.vector_fitness <= other.vector_fitness).all()
            and (self.vector_fitness < other.vector_fitness).any()
        )

    def __gt__(self, other: "TupleFitness") -> bool:
        return other < self

    def __str__(self) -> str:
        return str(self.vector_fitness)

    def __repr__(self) -> str:
        return f"TupleFitness({self.vector_fitness.tolist()})"

    def __mul__(self, other: float) -> "TupleFitness":
        return TupleFitness(other * self.vector_fitness, self.size)
