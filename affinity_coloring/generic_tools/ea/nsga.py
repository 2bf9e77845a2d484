#  Copyright (c) 2025 AIRBUS and its affiliates.
#  This source code is licensed under the MIT license found in the
#  LICENSE file in the root directory of this source tree.

"""Constrained NSGA-II on integer vectors, on top of DEAP.

The problem is seen through an `EvolutionaryModel`: a fixed number of integer variables
with bounds, a list of objectives to minimize and a list of constraints.
A constraint value of 0 means satisfied, a negative value measures the violation.

"""

from __future__ import annotations

import logging
import random
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Sequence
from enum import Enum
from typing import Any, Optional

import numpy as np
from deap import algorithms, base, creator, tools

logger = logging.getLogger(__name__)


class DeapMutation(Enum):
    MUT_SHUFFLE_INDEXES = 1  # perm, int
    MUT_UNIFORM_INT = 2  # int


class DeapCrossover(Enum):
    CX_UNIFORM = 0  # bit, int
    CX_ONE_POINT = 3  # bit, int
    CX_TWO_POINT = 4  # bit, int


class EvolutionaryModel(ABC):
    """Integer encoding of a multi-objective constrained problem."""

    @property
    @abstractmethod
    def nb_variables(self) -> int:
        ...

    @property
    @abstractmethod
    def lower_bounds(self) -> list[int]:
        ...

    @property
    @abstractmethod
    def upper_bounds(self) -> list[int]:
        ...

    @property
    @abstractmethod
    def nb_objectives(self) -> int:
        ...

    @property
    @abstractmethod
    def nb_constraints(self) -> int:
        ...

    @abstractmethod
    def evaluate_objectives(self, genes: Sequence[int]) -> tuple[float, ...]:
        """Objective values of a candidate, all to be minimized."""
        ...

    @abstractmethod
    def evaluate_constraints(self, genes: Sequence[int]) -> list[float]:
        """Constraint values of a candidate: 0 if satisfied, negative if violated."""
        ...

    def new_candidate(self, rng: Any = random) -> list[int]:
        """Draw a random candidate within the bounds.

        Args:
            rng: source of randomness exposing `randint()`,
                the `random` module or a `random.Random` instance.

        """
        return [
            rng.randint(low, up) for low, up in zip(self.lower_bounds, self.upper_bounds)
        ]

    def total_violation(self, genes: Sequence[int]) -> float:
        return -sum(min(0.0, value) for value in self.evaluate_constraints(genes))


def sel_constrained_nsga2(individuals: list, k: int) -> list:
    """Constrained tournament-free NSGA-II survival.

    Feasible individuals always survive before infeasible ones.
    Feasible ones are ranked by non dominated sorting and crowding distance (`tools.selNSGA2`),
    infeasible ones by increasing total violation.

    """
    feasible = [ind for ind in individuals if ind.violation == 0]
    infeasible = [ind for ind in individuals if ind.violation > 0]
    if len(feasible) >= k:
        return tools.selNSGA2(feasible, k)
    infeasible.sort(key=lambda ind: ind.violation)
    return feasible + infeasible[: k - len(feasible)]


def evaluate_individual(
    model: EvolutionaryModel, genes: Sequence[int]
) -> tuple[tuple[float, ...], float]:
    """Objectives and total constraint violation of a candidate."""
    return model.evaluate_objectives(genes), model.total_violation(genes)


def get_individual_class(nb_objectives: int) -> type:
    """DEAP individual class minimizing `nb_objectives` objectives, created once per objective count."""
    fitness_name = f"ConstrainedFitnessMin{nb_objectives}"
    individual_name = f"ConstrainedIndividual{nb_objectives}"
    if not hasattr(creator, individual_name):
        creator.create(
            fitness_name, base.Fitness, weights=(-1.0,) * nb_objectives
        )
        creator.create(
            individual_name,
            list,
            fitness=getattr(creator, fitness_name),
            violation=0.0,
        )
    return getattr(creator, individual_name)


class Nsga:
    """NSGA-II with constraint domination.

    Args:
        model: the evolutionary model to optimize
        pop_size: size of the population
        max_evals: evaluation budget, the number of generations is max_evals // pop_size
        mut_rate: probability of mutating an offspring, also the per gene mutation probability
        crossover_rate: probability of mating two parents
        crossover: deap crossover operator to use
        mutation: deap mutation operator to use
        map_function: replacement of builtin `map` used for evaluations, e.g. `multiprocessing.Pool.map`.
            The model must then be picklable.
        random_seed: seed of the `random` module used by deap operators

    """

    def __init__(
        self,
        model: EvolutionaryModel,
        pop_size: int = 100,
        max_evals: Optional[int] = None,
        mut_rate: float = 0.1,
        crossover_rate: float = 0.9,
        crossover: Optional[DeapCrossover] = None,
        mutation: Optional[DeapMutation] = None,
        map_function: Optional[Callable[..., Iterable]] = None,
        random_seed: Optional[int] = None,
    ):
        self.model = model
        if pop_size < 1:
            raise ValueError("pop_size must be positive.")
        self._pop_size = pop_size
        if max_evals is not None:
            if max_evals < 1:
                raise ValueError("max_evals must be positive.")
            self._max_evals = max_evals
        else:
            self._max_evals = 100 * self._pop_size
            logger.warning(
                "No value specified for max_evals. Using the default 100*pop_size - This should really be set carefully"
            )
        self._mut_rate = mut_rate
        self._crossover_rate = crossover_rate
        self._random_seed = random_seed

        # DEAP toolbox setup
        self._toolbox = base.Toolbox()
        individual_class = get_individual_class(model.nb_objectives)
        self._toolbox.register(
            "individual",
            tools.initIterate,
            individual_class,
            lambda: self.model.new_candidate(random),
        )
        self._toolbox.register(
            "population",
            tools.initRepeat,
            list,
            self._toolbox.individual,
            n=self._pop_size,
        )
        self._toolbox.register("evaluate", evaluate_individual, self.model)
        if map_function is not None:
            self._toolbox.register("map", map_function)

        # Define crossover
        if crossover is None:
            crossover = DeapCrossover.CX_ONE_POINT
        if (
            crossover in (DeapCrossover.CX_ONE_POINT, DeapCrossover.CX_TWO_POINT)
            and model.nb_variables < 2
        ):
            logger.warning(
                f"{crossover} needs at least 2 variables, falling back to {DeapCrossover.CX_UNIFORM}."
            )
            crossover = DeapCrossover.CX_UNIFORM
        self._crossover = crossover
        if self._crossover == DeapCrossover.CX_UNIFORM:
            self._toolbox.register("mate", tools.cxUniform, indpb=0.5)
        elif self._crossover == DeapCrossover.CX_ONE_POINT:
            self._toolbox.register("mate", tools.cxOnePoint)
        else:
            self._toolbox.register("mate", tools.cxTwoPoint)

        # Define mutation
        if mutation is None:
            mutation = DeapMutation.MUT_UNIFORM_INT
        self._mutation = mutation
        if self._mutation == DeapMutation.MUT_SHUFFLE_INDEXES:
            self._toolbox.register(
                "mutate", tools.mutShuffleIndexes, indpb=self._mut_rate
            )
        else:
            self._toolbox.register(
                "mutate",
                tools.mutUniformInt,
                low=list(model.lower_bounds),
                up=list(model.upper_bounds),
                indpb=self._mut_rate,
            )

        self._toolbox.register("select", sel_constrained_nsga2)

    @property
    def nb_generations(self) -> int:
        return max(1, self._max_evals // self._pop_size)

    def _evaluate(self, individuals: list) -> int:
        invalid_ind = [ind for ind in individuals if not ind.fitness.valid]
        results = self._toolbox.map(self._toolbox.evaluate, invalid_ind)
        for ind, (fit, violation) in zip(invalid_ind, results):
            ind.fitness.values = fit
            ind.violation = violation
        return len(invalid_ind)

    def run(
        self,
        on_generation: Optional[Callable[[int, list], Optional[bool]]] = None,
    ) -> list:
        """Evolve the population and return the final one.

        Args:
            on_generation: called with (generation index, population) after each generation.
                If it returns True, the evolution is stopped.

        Returns:
            the last population, as a list of deap individuals (lists of integers)
            with `fitness.values` and `violation` attributes.

        """
        if self._random_seed is not None:
            random.seed(self._random_seed)

        #  Define the statistics to collect at each generation
        stats = tools.Statistics(lambda ind: ind.fitness.values)
        stats.register("avg", np.mean, axis=0)
        stats.register("min", np.min, axis=0)
        stats.register("max", np.max, axis=0)

        logbook = tools.Logbook()
        logbook.header = "gen", "evals", "feasible", "min", "avg", "max"

        # Initialise the population (here at random)
        pop = self._toolbox.population()
        nb_evals = self._evaluate(pop)
        record = stats.compile(pop)
        logbook.record(
            gen=0,
            evals=nb_evals,
            feasible=sum(ind.violation == 0 for ind in pop),
            **record,
        )
        logger.debug(logbook.stream)
        if on_generation is not None and on_generation(0, pop):
            return pop

        # Begin the generational process
        ngen = self.nb_generations
        logger.debug(f"ngen: {ngen}")
        for gen in range(1, ngen):
            offspring = algorithms.varAnd(
                pop, self._toolbox, self._crossover_rate, self._mut_rate
            )
            nb_evals = self._evaluate(offspring)

            # Select the next generation population from parents and offspring
            pop = self._toolbox.select(pop + offspring, self._pop_size)

            record = stats.compile(pop)
            logbook.record(
                gen=gen,
                evals=nb_evals,
                feasible=sum(ind.violation == 0 for ind in pop),
                **record,
            )
            logger.debug(logbook.stream)
            if on_generation is not None and on_generation(gen, pop):
                logger.info(f"Evolution stopped by user at generation {gen}.")
                break
        return pop
