#  Copyright (c) 2025 The affinity-coloring authors.
#  This source code is licensed under the MIT license found in the
#  LICENSE file in the root directory of this source tree.

import logging
import os

from affinity_coloring.affinity.parser import get_data_available, parse_file
from affinity_coloring.affinity.report import format_lp_result, write_lp_report
from affinity_coloring.affinity.result import extract_lp_result
from affinity_coloring.affinity.solvers.lp import LpAffinityColoringSolver
from affinity_coloring.generic_tools.callbacks.loggers import NbIterationTracker

this_folder = os.path.dirname(os.path.abspath(__file__))


def get_instance_file() -> str:
    files = get_data_available()
    if len(files) > 0:
        return files[0]
    return os.path.join(this_folder, "data", "sample_1.txt")


def run_lp():
    logging.basicConfig(level=logging.INFO)
    problem = parse_file(get_instance_file())
    solver = LpAffinityColoringSolver(problem)
    res = solver.solve(callbacks=[NbIterationTracker()], time_limit=30)
    result = extract_lp_result(res)
    print(format_lp_result(result))
    write_lp_report(result, "affinity_lp_output.txt")


if __name__ == "__main__":
    run_lp()
