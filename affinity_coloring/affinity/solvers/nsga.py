"""Evolutionary (NSGA-II) model for the coloring problem with affinities.

Each vertex carries one integer gene, its 1-based color.
Two objectives are minimized: the highest color used and the opposite of the number of satisfied affinity edges.
"""

#  Copyright (c) 2025 The affinity-coloring authors.
#  This source code is licensed under the MIT license found in the
#  LICENSE file in the root directory of this source tree.

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from typing import Any, Optional

from affinity_coloring.affinity.problem import (
    AffinityColoringProblem,
    AffinityGraph,
)
from affinity_coloring.affinity.solvers import AffinityColoringSolver
from affinity_coloring.generic_tools.callbacks.callback import (
    Callback,
    CallbackList,
)
from affinity_coloring.generic_tools.do_problem import (
    ModeOptim,
    ObjectiveHandling,
    ParamsObjectiveFunction,
)
from affinity_coloring.generic_tools.ea.nsga import (
    DeapCrossover,
    DeapMutation,
    EvolutionaryModel,
    Nsga,
)
from affinity_coloring.generic_tools.encoding_register import ListInteger
from affinity_coloring.generic_tools.exceptions import ConfigurationError
from affinity_coloring.generic_tools.result_storage.result_storage import (
    ResultStorage,
)

logger = logging.getLogger(__name__)


class AffinityEvolutionaryModel(EvolutionaryModel):
    """Integer encoding of the coloring problem with affinities.

    Constraints, in this order:
        - one per interference edge: -1 if both ends share a color
        - one per gap between consecutive sorted genes: -(gap - 1) if the gap exceeds 1
        - one anchoring the lowest color to 1: -(min - 1)
    Together they force the colors used to be exactly {1, ..., max(genes)}.

    Gene bounds come from `encoding` when given, else every gene ranges over [1, max_colors].

    """

    def __init__(
        self,
        graph: AffinityGraph,
        max_colors: Optional[int] = None,
        encoding: Optional[ListInteger] = None,
    ):
        if encoding is None:
            if max_colors is None:
                max_colors = graph.vertex_count
            if max_colors < 1:
                raise ConfigurationError(
                    f"max_colors must be at least 1, got {max_colors}."
                )
            encoding = ListInteger.uniform(
                length=graph.vertex_count, low=1, up=max_colors
            )
        if encoding.length != graph.vertex_count:
            raise ConfigurationError(
                f"Encoding of {encoding.length} genes for {graph.vertex_count} vertices."
            )
        if min(encoding.lows) < 1:
            raise ConfigurationError("Colors are 1-based, lower bounds must be at least 1.")
        self.graph = graph
        self.encoding = encoding
        self.max_colors = max(encoding.ups)
        self._interference_edges = graph.interference_edges()
        self._affinity_edges = graph.affinity_edges()

    @property
    def nb_variables(self) -> int:
        return self.graph.vertex_count

    @property
    def lower_bounds(self) -> list[int]:
        return list(self.encoding.lows)

    @property
    def upper_bounds(self) -> list[int]:
        return list(self.encoding.ups)

    @property
    def nb_objectives(self) -> int:
        return 2

    @property
    def nb_constraints(self) -> int:
        return len(self._interference_edges) + self.graph.vertex_count

    def count_satisfied(self, genes: Sequence[int]) -> int:
        return sum(1 for i, j in self._affinity_edges if genes[i] == genes[j])

    def evaluate_objectives(self, genes: Sequence[int]) -> tuple[float, ...]:
        return float(max(genes)), -float(self.count_satisfied(genes))

    def evaluate_constraints(self, genes: Sequence[int]) -> list[float]:
        constraints = [
            -1.0 if genes[i] == genes[j] else 0.0 for i, j in self._interference_edges
        ]
        sorted_genes = sorted(genes)
        for lower, upper in zip(sorted_genes[:-1], sorted_genes[1:]):
            gap = upper - lower
            constraints.append(-float(gap - 1) if gap > 1 else 0.0)
        constraints.append(-float(sorted_genes[0] - 1))
        return constraints


class NsgaAffinityColoringSolver(AffinityColoringSolver):
    """NSGA-II solver, returning the last population.

    Attributes:
        problem (AffinityColoringProblem): problem instance to solve
        params_objective_function (ParamsObjectiveFunction): objective function parameters,
            by default the pareto optimisation of (-nb_colors, nb_affinity_satisfied)

    """

    problem: AffinityColoringProblem

    def __init__(
        self,
        problem: AffinityColoringProblem,
        params_objective_function: Optional[ParamsObjectiveFunction] = None,
        **kwargs: Any,
    ):
        if params_objective_function is None:
            params_objective_function = ParamsObjectiveFunction(
                objective_handling=ObjectiveHandling.MULTI_OBJ,
                objectives=["nb_colors", "nb_affinity_satisfied"],
                weights=[-1.0, 1.0],
                sense_function=ModeOptim.MAXIMIZATION,
            )
        super().__init__(
            problem=problem, params_objective_function=params_objective_function
        )
        self.model: Optional[AffinityEvolutionaryModel] = None
        self.encoding_name = "colors"

    def init_model(self, **kwargs: Any) -> None:
        """Build the evolutionary model from the integer encoding registered by the problem."""
        first_encoding = self.problem.get_attribute_register().get_first_integer_encoding()
        if first_encoding is None:
            raise ConfigurationError("The problem registers no integer encoding.")
        self.encoding_name, encoding = first_encoding
        self.model = AffinityEvolutionaryModel(graph=self.problem.graph, encoding=encoding)

    def _build_result_storage(self, population: Iterable[Sequence[int]]) -> ResultStorage:
        list_solution_fits = []
        for individual in population:
            sol = self.problem.build_solution_from_encoding(
                list(individual), self.encoding_name
            )
            list_solution_fits.append((sol, self.aggreg_from_sol(sol)))
        return self.create_result_storage(list_solution_fits)

    def solve(
        self,
        callbacks: Optional[list[Callback]] = None,
        pop_size: int = 100,
        max_evals: Optional[int] = 10000,
        mut_rate: float = 0.1,
        crossover_rate: float = 0.9,
        crossover: Optional[DeapCrossover] = None,
        mutation: Optional[DeapMutation] = None,
        map_function: Optional[Callable[..., Iterable]] = None,
        random_seed: Optional[int] = None,
        **kwargs: Any,
    ) -> ResultStorage:
        """Run NSGA-II.

        Args:
            callbacks: called after each generation, step being the generation index.
            pop_size: size of the population
            max_evals: evaluation budget
            mut_rate: mutation probability
            crossover_rate: crossover probability
            crossover: deap crossover operator, one point crossover by default
            mutation: deap mutation operator, uniform integer mutation by default
            map_function: parallel map used for evaluations
            random_seed: seed for reproducibility

        Returns:
            the last population, feasible or not.
            Use `extract_pareto_front()` to get the feasible non dominated solutions.

        """
        if pop_size < 1:
            raise ConfigurationError(f"pop_size must be positive, got {pop_size}.")
        if max_evals is not None and max_evals < 1:
            raise ConfigurationError(f"max_evals must be positive, got {max_evals}.")
        if self.model is None:
            self.init_model(**kwargs)
        callbacks_list = CallbackList(callbacks=callbacks)
        callbacks_list.on_solve_start(solver=self)
        nsga = Nsga(
            model=self.model,
            pop_size=pop_size,
            max_evals=max_evals,
            mut_rate=mut_rate,
            crossover_rate=crossover_rate,
            crossover=crossover,
            mutation=mutation,
            map_function=map_function,
            random_seed=random_seed,
        )

        def on_generation(gen: int, population: list) -> bool:
            return callbacks_list.on_step_end(
                step=gen, res=self._build_result_storage(population), solver=self
            )

        population = nsga.run(
            on_generation=on_generation if len(callbacks_list.callbacks) > 0 else None
        )
        res = self._build_result_storage(population)
        logger.info(
            f"{sum(self.problem.satisfy(sol) for sol, _ in res)} feasible solutions "
            f"in final population of {len(res)}"
        )
        callbacks_list.on_solve_end(res=res, solver=self)
        return res
