"""Base classes for problems and solutions, and objective bookkeeping."""

#  Copyright (c) 2025 AIRBUS and its affiliates.
#  This source code is licensed under the MIT license found in the
#  LICENSE file in the root directory of this source tree.

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

import numpy as np

from affinity_coloring.generic_tools.encoding_register import EncodingRegister
from affinity_coloring.generic_tools.result_storage.multiobj_utils import (
    TupleFitness,
)

logger = logging.getLogger(__name__)


class ModeOptim(Enum):
    """Enum class to specify minimization or maximization problems."""

    MAXIMIZATION = 0
    MINIMIZATION = 1


class ObjectiveHandling(Enum):
    """Enum class specifying how should be built the objective criteria.

    When SINGLE, only the first kpi is used.
    When AGGREGATE, the kpis are combined with their weights into a scalar.
    When MULTI_OBJ, the weighted kpis are kept apart in a TupleFitness (pareto optimisation).
    """

    SINGLE = 0
    AGGREGATE = 1
    MULTI_OBJ = 2


class TypeObjective(Enum):
    """Enum class to specify what should each KPI be."""

    OBJECTIVE = 0
    PENALTY = 1


@dataclass(frozen=True)
class ObjectiveDoc:
    type: TypeObjective
    default_weight: float


class ObjectiveRegister:
    """Store the specification of the objective criteria of a problem.

    The keys of `dict_objective_to_doc` are the same as the keys returned by `problem.evaluate(sol)`.
    The weights should be coherent with the chosen ModeOptim.

    Attributes
        objective_sense (ModeOptim): min or max problem
        objective_handling (ObjectiveHandling): how the kpis are transformed into an optimization criteria
        dict_objective_to_doc: for each kpi, its default weight and its TypeObjective.

    """

    def __init__(
        self,
        objective_sense: ModeOptim,
        objective_handling: ObjectiveHandling,
        dict_objective_to_doc: dict[str, ObjectiveDoc],
    ):
        self.objective_sense = objective_sense
        self.objective_handling = objective_handling
        self.dict_objective_to_doc = dict_objective_to_doc

    def get_objective_names(self) -> list[str]:
        return sorted(self.dict_objective_to_doc)

    def get_list_objective_and_default_weight(self) -> tuple[list[str], list[float]]:
        names = self.get_objective_names()
        return names, [self.dict_objective_to_doc[k].default_weight for k in names]

    def __str__(self) -> str:
        return (
            f"Objective Register :\nObj sense : {self.objective_sense}\n"
            f"Obj handling : {self.objective_handling}\ndetail : {self.dict_objective_to_doc}"
        )


class Solution(ABC):
    """Base class for a solution to a Problem."""

    def __init__(self, problem: Problem):
        self.problem = problem

    @abstractmethod
    def copy(self) -> Solution:
        """Deep copy of the solution.

        In-place changes of the copy must not affect the original object.
        """
        ...

    def lazy_copy(self) -> Solution:
        """Copy sharing the mutable attributes of the original object."""
        return self.copy()


class Problem(ABC):
    """Base class for a discrete optimization problem."""

    @abstractmethod
    def evaluate(self, variable: Solution) -> dict[str, float]:
        """Evaluate a given solution object for the given problem.

        Returns: dictionnary of float kpi for the solution.

        """
        ...

    def build_solution_from_encoding(
        self, genes: list[int], encoding_name: str
    ) -> Solution:
        """Solution whose attribute `encoding_name` holds the given genes."""
        return self.get_solution_type()(problem=self, **{encoding_name: genes})

    @abstractmethod
    def satisfy(self, variable: Solution) -> bool:
        """Computes if a solution satisfies or not the constraints of the problem."""
        ...

    def get_attribute_register(self) -> EncodingRegister:
        """Returns how the Solution should be encoded.

        Needs only to be implemented when genetic algorithms are to be used.

        """
        raise NotImplementedError()

    @abstractmethod
    def get_solution_type(self) -> type[Solution]:
        ...

    @abstractmethod
    def get_objective_register(self) -> ObjectiveRegister:
        ...

    def get_objective_names(self) -> list[str]:
        return self.get_objective_register().get_objective_names()

    def get_dummy_solution(self) -> Solution:
        """Create a trivial solution for the problem, ideally satisfying it."""
        raise NotImplementedError()


class ParamsObjectiveFunction:
    """Objective handling, ponderation and sense of optimization chosen for a solve.

    Built by default from the ObjectiveRegister of the problem, see `get_default_objective_setup()`.
    """

    def __init__(
        self,
        objective_handling: ObjectiveHandling,
        objectives: list[str],
        weights: list[float],
        sense_function: ModeOptim,
    ):
        self.objective_handling = objective_handling
        self.objectives = objectives
        self.weights = weights
        self.sense_function = sense_function

    def __str__(self) -> str:
        return (
            f"Params objective function :  \nSense : {self.sense_function}\n"
            f"Objective handling {self.objective_handling}\n"
            f"Objectives {self.objectives}\nweights : {self.weights}"
        )


def get_default_objective_setup(problem: Problem) -> ParamsObjectiveFunction:
    """Build ParamsObjectiveFunction from the ObjectiveRegister returned by the problem."""
    register_objective = problem.get_objective_register()
    objs, weights = register_objective.get_list_objective_and_default_weight()
    logger.debug(
        (
            register_objective.objective_sense,
            register_objective.objective_handling,
            objs,
            weights,
        )
    )
    return ParamsObjectiveFunction(
        objective_handling=register_objective.objective_handling,
        objectives=objs,
        weights=weights,
        sense_function=register_objective.objective_sense,
    )


AggregFromDict = Callable[[dict[str, float]], Union[float, TupleFitness]]
AggregFromSol = Callable[[Solution], Union[float, TupleFitness]]


def build_aggreg_function_from_dict(
    params_objective_function: ParamsObjectiveFunction,
) -> AggregFromDict:
    """Build the function turning a kpi dictionnary into a fitness (scalar or TupleFitness)."""
    objectives = params_objective_function.objectives
    weights = params_objective_function.weights
    objective_handling = params_objective_function.objective_handling

    if objective_handling == ObjectiveHandling.SINGLE:

        def aggreg(dict_values: dict[str, float]) -> float:
            return dict_values[objectives[0]] * weights[0]

    elif objective_handling == ObjectiveHandling.AGGREGATE:

        def aggreg(dict_values: dict[str, float]) -> float:
            return sum(dict_values[obj] * w for obj, w in zip(objectives, weights))

    else:

        def aggreg(dict_values: dict[str, float]) -> TupleFitness:
            return TupleFitness(
                np.array([dict_values[obj] * w for obj, w in zip(objectives, weights)]),
                len(objectives),
            )

    return aggreg


def build_aggreg_function_and_params_objective(
    problem: Problem,
    params_objective_function: Optional[ParamsObjectiveFunction] = None,
) -> tuple[AggregFromSol, AggregFromDict, ParamsObjectiveFunction]:
    """Build evaluation functions from the problem and the params of objective function.

    If params_objective_function is None, the default one of the problem is used.

    Returns: a 3-uple
        - function Solution -> fitness
        - function dict[str, float] -> fitness
        - the params_objective_function actually used

    """
    if params_objective_function is None:
        params_objective_function = get_default_objective_setup(problem)
    aggreg_from_dict = build_aggreg_function_from_dict(params_objective_function)

    def aggreg_from_sol(solution: Solution) -> Union[float, TupleFitness]:
        return aggreg_from_dict(problem.evaluate(solution))

    return aggreg_from_sol, aggreg_from_dict, params_objective_function
