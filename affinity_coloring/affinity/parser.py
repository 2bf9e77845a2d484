#  Copyright (c) 2025 The affinity-coloring authors.
#  This source code is licensed under the MIT license found in the
#  LICENSE file in the root directory of this source tree.

import os
from typing import Optional

from affinity_coloring.affinity.problem import AffinityColoringProblem, AffinityGraph
from affinity_coloring.datasets import get_data_home
from affinity_coloring.generic_tools.exceptions import GraphDataIntegrityError


def get_data_available(
    data_folder: Optional[str] = None, data_home: Optional[str] = None
) -> list[str]:
    """Get datasets available for coloring with affinities.

    Params:
        data_folder: folder where datasets should be found.
            If None, we look in "affinity" subdirectory of `data_home`.
        data_home: root directory for all datasets. Is None, set by
            default to "~/affinity_coloring_data"

    """
    if data_folder is None:
        data_home = get_data_home(data_home=data_home)
        data_folder = f"{data_home}/affinity"

    try:
        datasets = sorted(
            os.path.abspath(os.path.join(data_folder, f))
            for f in os.listdir(data_folder)
        )
    except FileNotFoundError:
        datasets = []
    return datasets


def parse(input_data: str) -> AffinityColoringProblem:
    """From a text input, initialise a coloring problem with affinities.

    The expected format is
        - a header line "nb_vertices nb_interference_edges nb_affinity_edges"
        - one line "v1 v2" per interference edge
        - one line "v1 v2" per affinity edge
    with 1-based vertices. Blank lines are ignored.

    Args:
        input_data: text input

    Returns: an AffinityColoringProblem instance
    """
    lines = [line.split() for line in input_data.split("\n") if line.strip()]
    if len(lines) == 0:
        raise GraphDataIntegrityError("Empty input, a header line is expected.")
    header = lines[0]
    if len(header) < 3:
        raise GraphDataIntegrityError(
            f"Header should hold 3 integers, got '{' '.join(header)}'."
        )
    try:
        vertex_count, interference_edge_count, affinity_edge_count = (
            int(x) for x in header[:3]
        )
        records = [tuple(int(x) for x in parts) for parts in lines[1:]]
    except ValueError as e:
        raise GraphDataIntegrityError(f"Non integer value in input: {e}") from e
    graph = AffinityGraph.from_edge_records(
        vertex_count=vertex_count,
        interference_edge_count=interference_edge_count,
        affinity_edge_count=affinity_edge_count,
        records=records,
    )
    return AffinityColoringProblem(graph)


def parse_file(file_path: str) -> AffinityColoringProblem:
    """From an absolute path to a text file, return the corresponding problem instance.

    Args:
        file_path (str): absolute path to the file

    Returns: an AffinityColoringProblem instance

    """
    with open(file_path, "r", encoding="utf-8") as input_data_file:
        input_data = input_data_file.read()
        return parse(input_data)
