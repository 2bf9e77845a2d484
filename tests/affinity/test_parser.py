#  Copyright (c) 2025 The affinity-coloring authors.
#  This source code is licensed under the MIT license found in the
#  LICENSE file in the root directory of this source tree.

import pytest

from affinity_coloring.affinity.parser import get_data_available, parse, parse_file
from affinity_coloring.generic_tools.exceptions import GraphDataIntegrityError


def test_parse(sample_instance):
    problem = parse(sample_instance)
    assert problem.vertex_count == 8
    assert problem.max_colors == 8
    assert problem.graph.interference_edge_count == 10
    assert problem.graph.affinity_edge_count == 6
    assert problem.graph.is_interference(0, 1)
    assert problem.graph.is_affinity(0, 3)
    assert problem.satisfy(problem.get_dummy_solution())


def test_parse_ignores_blank_lines():
    problem = parse("\n3 1 1\n\n1 2\n\n2 3\n\n")
    assert problem.graph.interference_edges() == [(0, 1)]
    assert problem.graph.affinity_edges() == [(1, 2)]


def test_parse_errors():
    with pytest.raises(GraphDataIntegrityError):
        parse("")
    with pytest.raises(GraphDataIntegrityError):
        parse("3 1\n1 2\n")
    with pytest.raises(GraphDataIntegrityError):
        parse("3 1 1\n1 2\n2 x\n")
    with pytest.raises(GraphDataIntegrityError):
        parse("3 1 2\n1 2\n2 3\n")


def test_parse_file(tmp_path, sample_instance):
    file = tmp_path / "sample_1.txt"
    file.write_text(sample_instance)
    problem = parse_file(str(file))
    assert problem.vertex_count == 8


def test_get_data_available(fake_data_home, tmp_path, sample_instance):
    assert get_data_available() == []
    folder = tmp_path / "instances"
    folder.mkdir()
    (folder / "b.txt").write_text(sample_instance)
    (folder / "a.txt").write_text(sample_instance)
    files = get_data_available(data_folder=str(folder))
    assert [f.split("/")[-1] for f in files] == ["a.txt", "b.txt"]
