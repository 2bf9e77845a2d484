"""Text outputs of the results, in files or for the console."""

#  Copyright (c) 2025 The affinity-coloring authors.
#  This source code is licensed under the MIT license found in the
#  LICENSE file in the root directory of this source tree.

import logging
from collections.abc import Sequence

from affinity_coloring.affinity.result import AffinityColoringResult

logger = logging.getLogger(__name__)


def lp_report_lines(result: AffinityColoringResult) -> list[str]:
    return [
        str(result.coloring_objective),
        str(result.affinity_objective),
        *(str(color) for color in result.assignment),
    ]


def write_lp_report(result: AffinityColoringResult, path: str) -> None:
    """Write chromatic number, satisfied affinity edges and one color per vertex, one value per line."""
    with open(path, "w", encoding="utf-8") as f:
        f.write("\n".join(lp_report_lines(result)) + "\n")
    logger.info(f"Result written in {path}")


def pareto_report_lines(front: Sequence[AffinityColoringResult]) -> list[str]:
    lines = [str(len(front)), ""]
    if len(front) == 0:
        return lines
    lines.extend(f"{r.coloring_objective} {r.affinity_objective}" for r in front)
    lines.append("")
    for r in front:
        lines.extend(str(color) for color in r.assignment)
        lines.append("")
    return lines


def write_pareto_report(front: Sequence[AffinityColoringResult], path: str) -> None:
    """Write a pareto front.

    Format:
        - number N of solutions, then a blank line
        - N lines "nb_colors nb_affinity_satisfied", then a blank line
        - for each solution, one color per vertex line, then a blank line

    """
    with open(path, "w", encoding="utf-8") as f:
        f.write("\n".join(pareto_report_lines(front)) + "\n")
    logger.info(f"Pareto front of {len(front)} solutions written in {path}")


def format_lp_result(result: AffinityColoringResult) -> str:
    return "\n".join(
        [
            f"Chromatic Number: {result.coloring_objective}",
            f"Affinity Edges Satisfied: {result.affinity_objective}",
            " ".join(
                f"V{i + 1}: {color}" for i, color in enumerate(result.assignment)
            ),
        ]
    )


def format_pareto_front(front: Sequence[AffinityColoringResult]) -> str:
    """Console table of a pareto front."""
    blocks = [f"Pareto Front size: {len(front)}"]
    for r in front:
        blocks.append(
            "\n".join(
                [
                    f"Colors used:{r.coloring_objective:3d}   "
                    f"Affinity Edges Satisfied:{r.affinity_objective:3d}",
                    " ".join(f"{'V' + str(i + 1):>3s}" for i in range(len(r.assignment))),
                    " ".join(f"{color:>3d}" for color in r.assignment),
                ]
            )
        )
    return "\n\n".join(blocks)
