#  Copyright (c) 2025 AIRBUS and its affiliates.
#  This source code is licensed under the MIT license found in the
#  LICENSE file in the root directory of this source tree.

from __future__ import annotations

from collections.abc import MutableSequence
from typing import Optional, Union

from affinity_coloring.generic_tools.do_problem import (
    ModeOptim,
    Problem,
    Solution,
)
from affinity_coloring.generic_tools.result_storage.multiobj_utils import (
    TupleFitness,
)

fitness_class = Union[float, TupleFitness]


class ResultStorage(MutableSequence):
    """Storage for solver results.

    ResultStorage inherits from MutableSequence so you can
    - iterate over it (will iterate over tuples (sol, fit)
    - append directly to it (a tuple (sol, fit))
    - pop, extend, ...

    """

    list_solution_fits: list[tuple[Solution, fitness_class]]

    def __init__(
        self,
        mode_optim: ModeOptim,
        list_solution_fits: Optional[list[tuple[Solution, fitness_class]]] = None,
    ):
        if list_solution_fits is None:
            self.list_solution_fits = []
        else:
            self.list_solution_fits = list_solution_fits
        self.mode_optim = mode_optim
        self.maximize = mode_optim == ModeOptim.MAXIMIZATION

    def __getitem__(self, index) -> tuple[Solution, fitness_class]:
        return self.list_solution_fits[index]

    def __len__(self) -> int:
        return len(self.list_solution_fits)

    def __setitem__(self, index: int, value: tuple[Solution, fitness_class]):
        self.list_solution_fits[index] = value

    def __delitem__(self, index: int) -> None:
        del self.list_solution_fits[index]

    def insert(self, index, value: tuple[Solution, fitness_class]) -> None:
        self.list_solution_fits.insert(index, value)

    def get_best_solution_fit(
        self, satisfying: Optional[Problem] = None
    ) -> Union[tuple[Solution, fitness_class], tuple[None, None]]:
        """Best (solution, fitness), optionally restricted to solutions satisfying the given problem."""
        candidates = self.list_solution_fits
        if satisfying is not None:
            candidates = [(sol, fit) for sol, fit in candidates if satisfying.satisfy(sol)]
        if len(candidates) == 0:
            return None, None
        f = max if self.maximize else min
        return f(candidates, key=lambda x: x[1])

    def get_best_solution(self) -> Optional[Solution]:
        return self.get_best_solution_fit()[0]

    def get_pareto_front(
        self, satisfying: Optional[Problem] = None
    ) -> list[tuple[Solution, TupleFitness]]:
        """Non-dominated (solution, fitness) couples of the storage.

        Only one couple is kept per fitness vector, the first one found.
        Fitnesses must be TupleFitness, read according to `self.maximize`.

        """
        candidates: list[tuple[Solution, TupleFitness]] = []
        for sol, fit in self.list_solution_fits:
            if not isinstance(fit, TupleFitness):
                raise RuntimeError(
                    "self.list_solution_fits must be a list of tuple[Solution, TupleFitness] "
                    "to extract a Pareto front."
                )
            if satisfying is None or satisfying.satisfy(sol):
                candidates.append((sol, fit if self.maximize else fit * -1.0))
        front: list[tuple[Solution, TupleFitness]] = []
        for sol, fit in candidates:
            if any(other.dominates(fit) for _, other in candidates):
                continue
            if any(kept.same_values(fit) for _, kept in front):
                continue
            front.append((sol, fit))
        if not self.maximize:
            front = [(sol, fit * -1.0) for sol, fit in front]
        return front

