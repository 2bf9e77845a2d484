"""Integer encodings of solutions, read by the evolutionary solvers to size and bound their genes."""

#  Copyright (c) 2025 AIRBUS and its affiliates.
#  This source code is licensed under the MIT license found in the
#  LICENSE file in the root directory of this source tree.

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ListInteger:
    """Fixed length list of integers, gene i ranging over [lows[i], ups[i]]."""

    lows: tuple[int, ...]
    ups: tuple[int, ...]

    def __post_init__(self):
        if len(self.lows) != len(self.ups):
            raise ValueError(
                f"{len(self.lows)} lower bounds for {len(self.ups)} upper bounds."
            )
        for i, (low, up) in enumerate(zip(self.lows, self.ups)):
            if low > up:
                raise ValueError(f"Empty range [{low}, {up}] for gene {i}.")

    @staticmethod
    def uniform(length: int, low: int, up: int) -> ListInteger:
        return ListInteger(lows=(low,) * length, ups=(up,) * length)

    @property
    def length(self) -> int:
        return len(self.lows)


class EncodingRegister(Mapping):
    """Maps attribute names of a solution to their integer encoding.

    Each name must be an attribute of the solution and a keyword of its constructor,
    so that `Problem.build_solution_from_encoding` can rebuild a solution from genes.

    """

    def __init__(self, encodings: dict[str, ListInteger]):
        self.encodings = encodings

    def __getitem__(self, key: str) -> ListInteger:
        return self.encodings[key]

    def __len__(self) -> int:
        return len(self.encodings)

    def __iter__(self):
        return iter(self.encodings)

    def get_first_integer_encoding(self) -> Optional[tuple[str, ListInteger]]:
        return next(iter(self.encodings.items()), None)
