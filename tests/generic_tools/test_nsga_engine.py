#  Copyright (c) 2025 The affinity-coloring authors.
#  This source code is licensed under the MIT license found in the
#  LICENSE file in the root directory of this source tree.

import warnings
from collections.abc import Sequence
from types import SimpleNamespace

import pytest

from affinity_coloring.generic_tools.ea.nsga import (
    EvolutionaryModel,
    Nsga,
    get_individual_class,
    sel_constrained_nsga2,
)


class KnapsackLikeModel(EvolutionaryModel):
    """Pick integers in [0, 3]: minimize their sum and maximize the first one, sum at least 2."""

    @property
    def nb_variables(self) -> int:
        return 3

    @property
    def lower_bounds(self) -> list[int]:
        return [0, 0, 0]

    @property
    def upper_bounds(self) -> list[int]:
        return [3, 3, 3]

    @property
    def nb_objectives(self) -> int:
        return 2

    @property
    def nb_constraints(self) -> int:
        return 1

    def evaluate_objectives(self, genes: Sequence[int]) -> tuple[float, ...]:
        return float(sum(genes)), -float(genes[0])

    def evaluate_constraints(self, genes: Sequence[int]) -> list[float]:
        return [min(0.0, float(sum(genes) - 2))]


def test_infeasible_ranked_by_violation():
    individuals = [
        SimpleNamespace(name="bad", violation=3.0),
        SimpleNamespace(name="ok", violation=0.0),
        SimpleNamespace(name="worse", violation=5.0),
        SimpleNamespace(name="almost", violation=1.0),
    ]
    selected = sel_constrained_nsga2(individuals, 3)
    assert [ind.name for ind in selected] == ["ok", "almost", "bad"]


def test_nsga_run():
    model = KnapsackLikeModel()
    nsga = Nsga(model=model, pop_size=30, max_evals=1500, random_seed=0)
    assert nsga.nb_generations == 50
    population = nsga.run()
    assert len(population) == 30
    assert all(ind.violation == 0 for ind in population)
    assert all(sum(ind) >= 2 for ind in population)
    # best trade-offs have a sum of exactly 2 or pick a large first gene
    assert min(sum(ind) for ind in population) == 2


def test_nsga_parameters():
    with pytest.raises(ValueError):
        Nsga(model=KnapsackLikeModel(), pop_size=0)
    with pytest.raises(ValueError):
        Nsga(model=KnapsackLikeModel(), max_evals=0)


def test_individual_class_created_once():
    Nsga(model=KnapsackLikeModel(), pop_size=10, max_evals=100)
    with warnings.catch_warnings():
        warnings.simplefilter("error", RuntimeWarning)
        Nsga(model=KnapsackLikeModel(), pop_size=10, max_evals=100)
        assert get_individual_class(2) is get_individual_class(2)
    assert get_individual_class(3)().fitness.weights == (-1.0, -1.0, -1.0)
