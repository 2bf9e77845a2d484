#  Copyright (c) 2025 AIRBUS and its affiliates.
#  This source code is licensed under the MIT license found in the
#  LICENSE file in the root directory of this source tree.

import logging
import time
from typing import Optional

from affinity_coloring.generic_tools.callbacks.callback import Callback
from affinity_coloring.generic_tools.do_solver import SolverDO
from affinity_coloring.generic_tools.result_storage.result_storage import (
    ResultStorage,
)

logger = logging.getLogger(__name__)


class TimerStopper(Callback):
    """Stop the optimization once `total_seconds` have elapsed.

    The time is checked every `check_nb_steps` steps.

    """

    def __init__(self, total_seconds: float, check_nb_steps: int = 1):
        self.total_seconds = total_seconds
        self.check_nb_steps = check_nb_steps
        self.initial_time = time.perf_counter()

    def on_solve_start(self, solver: SolverDO):
        self.initial_time = time.perf_counter()

    def on_step_end(
        self, step: int, res: ResultStorage, solver: SolverDO
    ) -> Optional[bool]:
        if step % self.check_nb_steps == 0:
            elapsed = time.perf_counter() - self.initial_time
            logger.debug(f"{elapsed} seconds elapsed since solve start.")
            if elapsed >= self.total_seconds:
                logger.info(f"{self.__class__.__name__} callback met its criteria")
                return True
        return False


class NbIterationStopper(Callback):
    """Stop the optimization after a given number of steps."""

    def __init__(self, nb_iteration_max: int):
        self.nb_iteration_max = nb_iteration_max
        self.nb_iteration = 0

    def on_solve_start(self, solver: SolverDO):
        self.nb_iteration = 0

    def on_step_end(
        self, step: int, res: ResultStorage, solver: SolverDO
    ) -> Optional[bool]:
        self.nb_iteration += 1
        if self.nb_iteration >= self.nb_iteration_max:
            logger.info(
                f"{self.__class__.__name__} callback met its criteria: max number of iterations reached"
            )
            return True
        return False
