#  Copyright (c) 2025 AIRBUS and its affiliates.
#  This source code is licensed under the MIT license found in the
#  LICENSE file in the root directory of this source tree.

from __future__ import annotations  # making annotations strings

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:  # avoid cycling imports due solely to annotations
    from affinity_coloring.generic_tools.do_solver import SolverDO
    from affinity_coloring.generic_tools.result_storage.result_storage import (
        ResultStorage,
    )


class Callback:
    """Base class used to build new callbacks.

    Callbacks can be passed to solvers `solve()` in order to hook into the various stages of the solve.
    A step is a generation for the NSGA solver, and a solving phase for the two-phase LP solver.

    """

    def on_step_end(
        self, step: int, res: ResultStorage, solver: SolverDO
    ) -> Optional[bool]:
        """Called at the end of an optimization step.

        Args:
            step: index of step
            res: current result storage
            solver: solvers using the callback

        Returns:
            If `True`, the optimization process is stopped, else it goes on.

        """

    def on_solve_start(self, solver: SolverDO):
        """Called at the start of solve."""

    def on_solve_end(self, res: ResultStorage, solver: SolverDO):
        """Called at the end of solve."""


class CallbackList(Callback):
    """Container abstracting a list of callbacks."""

    def __init__(self, callbacks=None):
        if callbacks:
            if isinstance(callbacks, Callback):
                self.callbacks = [callbacks]
            else:
                self.callbacks = list(callbacks)
        else:
            self.callbacks = []

    def append(self, callback):
        self.callbacks.append(callback)

    def on_step_end(
        self, step: int, res: ResultStorage, solver: SolverDO
    ) -> Optional[bool]:
        stopping = False
        for callback in self.callbacks:
            decision = callback.on_step_end(step=step, res=res, solver=solver)
            stopping = stopping or bool(decision)
        return stopping

    def on_solve_start(self, solver: SolverDO):
        for callback in self.callbacks:
            callback.on_solve_start(solver=solver)

    def on_solve_end(self, res: ResultStorage, solver: SolverDO):
        for callback in self.callbacks:
            callback.on_solve_end(res=res, solver=solver)
