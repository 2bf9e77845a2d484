#  Copyright (c) 2025 The affinity-coloring authors.
#  This source code is licensed under the MIT license found in the
#  LICENSE file in the root directory of this source tree.

import logging
import os

from affinity_coloring.affinity.parser import get_data_available, parse_file
from affinity_coloring.affinity.report import format_pareto_front, write_pareto_report
from affinity_coloring.affinity.result import extract_pareto_front
from affinity_coloring.affinity.solvers.nsga import NsgaAffinityColoringSolver
from affinity_coloring.generic_tools.callbacks.early_stoppers import TimerStopper

this_folder = os.path.dirname(os.path.abspath(__file__))


def run_nsga():
    logging.basicConfig(level=logging.INFO)
    files = get_data_available()
    file = files[0] if len(files) > 0 else os.path.join(this_folder, "data", "sample_1.txt")
    problem = parse_file(file)
    solver = NsgaAffinityColoringSolver(problem)
    res = solver.solve(
        callbacks=[TimerStopper(total_seconds=60)],
        pop_size=100,
        max_evals=10000,
        random_seed=0,
    )
    front = extract_pareto_front(res)
    print(format_pareto_front(front))
    write_pareto_report(front, "affinity_nsga_output.txt")


if __name__ == "__main__":
    run_nsga()
