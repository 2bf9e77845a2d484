#  Copyright (c) 2025 AIRBUS and its affiliates.
#  This source code is licensed under the MIT license found in the
#  LICENSE file in the root directory of this source tree.

from typing import Any, Optional


class GraphDataIntegrityError(ValueError):
    """Raised when graph data is inconsistent with its declared header.

    For instance when the number of affinity edges actually read
    does not match the number announced.

    """

    ...


class ConfigurationError(ValueError):
    """Raised when a problem or solver is configured with malformed bounds.

    e.g. a non-positive number of vertices or a maximum number of colors below 1.
    Always raised before any model is built.

    """

    ...


class SolverInvocationError(RuntimeError):
    """Raised when the underlying solver fails to return a usable solution.

    Attributes:
        phase: label of the solving phase that failed
        status: status reported by the underlying solver

    """

    def __init__(self, phase: str, status: Optional[Any] = None, message: str = ""):
        self.phase = phase
        self.status = status
        if not message:
            message = f"Solver failed during phase {phase} (status: {status})."
        super().__init__(message)
