# ──────────────────────────────────────────────────────────────────────
# Petri Inherit — Net Structure Tests
# CopyRight: (c) 1998-2026 Miroslav Sotek. All rights reserved.
# Contact: www.anulum.li | protoscience@anulum.li
# ORCID: https://orcid.org/0009-0009-3560-0851
# License: GNU AGPL v3 | Commercial licensing available
# ──────────────────────────────────────────────────────────────────────
"""Unit tests for the PetriNet builder.

Tests cover:
  - Node registration and duplicate detection
  - Arc validation (bipartite, kinds, multiplicities, ids)
  - Per-transition arc lookups and initial marking
  - Sparse W_in / W_out compilation and incidence matrix
  - Topology diagnostics and summary
"""

from __future__ import annotations

import numpy as np
import pytest

from petri_inherit.errors import NetValidationError
from petri_inherit.net.arcs import Arc, ArcKind
from petri_inherit.net.marking import Marking
from petri_inherit.net.structure import PetriNet


def _build_line_net() -> PetriNet:
    """p_in --> t_move --(2)--> p_out"""
    net = PetriNet("line", title="Line")
    net.add_place("p_in", tokens=1)
    net.add_place("p_out")
    net.add_transition("t_move", title="Move")
    net.add_arc("p_in", "t_move")
    net.add_arc("t_move", "p_out", multiplicity=2)
    return net


@pytest.fixture
def line_net() -> PetriNet:
    return _build_line_net()


class TestNodes:
    def test_counts_and_order(self, line_net):
        assert line_net.place_ids == ["p_in", "p_out"]
        assert line_net.transition_ids == ["t_move"]
        assert line_net.n_places == 2
        assert line_net.n_transitions == 1
        assert line_net.node_ids == {"p_in", "p_out", "t_move"}

    def test_duplicate_place_rejected(self, line_net):
        with pytest.raises(ValueError, match="already exists"):
            line_net.add_place("p_in")

    def test_place_and_transition_share_id_space(self, line_net):
        with pytest.raises(ValueError, match="already exists"):
            line_net.add_transition("p_out")

    @pytest.mark.parametrize("tokens", [-1, 1.5])
    def test_invalid_tokens_rejected(self, tokens):
        net = PetriNet()
        with pytest.raises(ValueError, match="non-negative integer"):
            net.add_place("p", tokens=tokens)

    def test_kind_queries(self, line_net):
        assert line_net.is_place("p_in")
        assert not line_net.is_place("t_move")
        assert line_net.is_transition("t_move")
        assert not line_net.is_transition("missing")

    def test_initial_marking(self, line_net):
        m0 = line_net.initial_marking()
        assert m0 == Marking({"p_in": 1})
        assert m0.places == ("p_in", "p_out")

    def test_opaque_elements(self):
        net = PetriNet()
        net.add_role("clerk", {"title": "Clerk"})
        net.add_data_field("amount", {"type": "number"})
        net.add_function("fn1", {"name": "calc"})
        assert net.roles == {"clerk": {"title": "Clerk"}}
        assert net.data_fields == {"amount": {"type": "number"}}
        assert net.functions == {"fn1": {"name": "calc"}}
        with pytest.raises(ValueError):
            net.add_role("clerk")


class TestArcs:
    def test_auto_ids(self, line_net):
        ids = [a.id for a in line_net.iter_arcs()]
        assert ids == ["p_in->t_move", "t_move->p_out"]

    def test_parallel_arc_gets_suffix(self, line_net):
        arc = line_net.add_arc("p_in", "t_move")
        assert arc.id == "p_in->t_move#2"

    def test_explicit_duplicate_id_in_bucket_rejected(self, line_net):
        with pytest.raises(NetValidationError, match="already exists"):
            line_net.add_arc("p_in", "t_move", arc_id="p_in->t_move")

    def test_same_id_allowed_in_other_bucket(self, line_net):
        line_net.add_arc("p_out", "t_move", kind="read", arc_id="p_in->t_move")
        assert len(line_net.arcs["p_out"]) == 1

    def test_place_to_place_rejected(self, line_net):
        with pytest.raises(NetValidationError, match="Place<->Transition"):
            line_net.add_arc("p_in", "p_out")

    def test_unknown_node_rejected(self, line_net):
        with pytest.raises(NetValidationError, match="unknown node 'ghost'"):
            line_net.add_arc("ghost", "t_move")

    @pytest.mark.parametrize("kind", ["read", "inhibitor", "reset"])
    def test_special_arcs_only_as_input(self, line_net, kind):
        with pytest.raises(NetValidationError, match="only supported"):
            line_net.add_arc("t_move", "p_in", kind=kind)

    def test_zero_multiplicity_rejected(self, line_net):
        with pytest.raises(NetValidationError, match="multiplicity"):
            line_net.add_arc("p_out", "t_move", multiplicity=0)

    def test_unknown_kind_rejected(self, line_net):
        with pytest.raises(ValueError, match="Unknown arc kind"):
            line_net.add_arc("p_out", "t_move", kind="variable")

    def test_arcs_by_transition(self, line_net):
        line_net.add_arc("p_out", "t_move", kind=ArcKind.INHIBITOR)
        inputs, outputs = line_net.arcs_by_transition()
        assert [a.source for a in inputs["t_move"]] == ["p_in", "p_out"]
        assert [a.destination for a in outputs["t_move"]] == ["p_out"]
        assert line_net.input_arcs("t_move") == inputs["t_move"]
        assert line_net.output_arcs("t_move") == outputs["t_move"]

    def test_arcs_property_is_a_copy(self, line_net):
        line_net.arcs["p_in"].clear()
        assert len(line_net.arcs["p_in"]) == 1

    def test_validate_detects_dangling_bucket(self, line_net):
        line_net._arcs["ghost"] = [Arc("g", "ghost", "t_move")]
        with pytest.raises(NetValidationError, match="unknown node 'ghost'"):
            line_net.validate()

    def test_validate_detects_misindexed_arc(self, line_net):
        line_net._arcs["p_out"] = [Arc("x", "p_in", "t_move")]
        with pytest.raises(NetValidationError, match="indexed under"):
            line_net.validate()


class TestCompile:
    def test_matrix_shapes(self, line_net):
        line_net.compile()
        assert line_net.is_compiled
        assert line_net.W_in.shape == (1, 2)
        assert line_net.W_out.shape == (2, 1)

    def test_incidence_matrix(self, line_net):
        incidence = line_net.incidence_matrix()
        np.testing.assert_array_equal(incidence, np.array([[-1], [2]]))

    def test_special_arcs_excluded(self, line_net):
        line_net.add_arc("p_out", "t_move", kind="read")
        line_net.compile()
        assert line_net.W_in.nnz == 1

    def test_mutation_invalidates_compile(self, line_net):
        line_net.compile()
        line_net.add_place("p_extra")
        assert not line_net.is_compiled

    def test_demand_matrix_does_not_compile(self, line_net):
        np.testing.assert_array_equal(line_net.demand_matrix(), np.array([[1, 0]]))
        assert not line_net.is_compiled

    def test_demand_matrix_sums_parallel_arcs(self, line_net):
        line_net.add_arc("p_in", "t_move", multiplicity=2)
        line_net.add_arc("p_out", "t_move", kind="reset")
        np.testing.assert_array_equal(line_net.demand_matrix(), np.array([[3, 0]]))
        line_net.compile()
        np.testing.assert_array_equal(line_net.incidence_matrix(), np.array([[-3], [2]]))


class TestDiagnostics:
    def test_topology_report(self, line_net):
        line_net.add_place("p_orphan")
        line_net.add_transition("t_orphan")
        line_net.add_transition("t_source")
        line_net.add_arc("t_source", "p_in")
        report = line_net.validate_topology()
        assert report["dead_places"] == ["p_orphan"]
        assert report["dead_transitions"] == ["t_orphan"]
        assert report["source_transitions"] == ["t_orphan", "t_source"]

    def test_summary_mentions_nodes(self, line_net):
        line_net.compile()
        text = line_net.summary()
        assert "PetriNet 'line'" in text
        assert "p_in" in text
        assert "t_move" in text
        assert "W_in" in text

    def test_copy_is_independent(self, line_net):
        clone = line_net.copy()
        clone.add_place("p_new")
        assert "p_new" not in line_net.node_ids
        assert clone.iter_arcs() == line_net.iter_arcs()
