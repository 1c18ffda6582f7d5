"""Unit tests for the graph session: scope transitions, ticking and output."""

from unittest.mock import MagicMock

import pytest

from cfmap.catalog.source import DataUnavailable, JsonCatalogSource
from cfmap.core.configuration import GraphConfiguration
from cfmap.core.hierarchy import HierarchyIndex, MalformedHierarchy
from cfmap.core.result import Err, Ok
from cfmap.core.types import CanvasProperties, GraphProperties, GroupingMode, HierarchicalNode, ZoomTier
from cfmap.layout.engine import LayoutParameters, LayoutState
from cfmap.layout.viewport import GestureDelta
from cfmap.session import GraphSession


@pytest.fixture
def session():
    return GraphSession()


class TestScopeTransitions:
    def test_drill_down_and_reset(self, session, small_tree):
        result = session.open(small_tree)
        assert result.is_ok()
        assert session.scope.graph.node_ids() == {"A", "B", "C", "D"}

        session.on_node_activated("B")
        assert session.scope.graph.node_ids() == {"B", "D"}
        assert session.scope.graph.edge_keys() == {("B", "D")}

        session.reset_to_root()
        assert session.scope.graph.node_ids() == {"A", "B", "C", "D"}
        assert session.scope.root is small_tree

    def test_set_scope_is_idempotent(self, session, small_tree):
        session.open(small_tree)
        first = session.scope
        session.set_scope(small_tree)
        second = session.scope

        assert first.graph.node_ids() == second.graph.node_ids()
        assert first.graph.edge_keys() == second.graph.edge_keys()
        assert second.generation == first.generation + 1

    def test_drill_down_restricts_to_descendants(self, session, wide_tree):
        session.open(wide_tree)
        index = HierarchyIndex(wide_tree)

        for node in wide_tree.descendants():
            session.on_node_activated(node)
            assert session.scope.graph.node_ids() == index.descendant_ids(node.id)

    def test_tier_follows_scope_depth(self, session, small_tree):
        session.open(small_tree)
        assert session.scope.tier == ZoomTier.OVERVIEW

        session.on_node_activated("B")
        assert session.scope.tier == ZoomTier.DETAIL

        session.on_node_activated("D")
        assert session.scope.tier == ZoomTier.FOCUS

    def test_activation_accepts_projected_nodes(self, session, small_tree):
        session.open(small_tree)
        projected = session.scope.graph.get("B")

        session.on_node_activated(projected)

        assert session.scope.root is projected.node

    def test_unknown_id_is_noop(self, session, small_tree):
        session.open(small_tree)
        scope = session.scope

        result = session.on_node_activated("nope")

        assert result == Ok(scope)
        assert session.scope is scope

    def test_malformed_subtree_keeps_previous_scope(self, session, small_tree):
        session.open(small_tree)
        scope = session.scope
        bad = HierarchicalNode(id="X", name="X")
        bad.children.append(bad)

        result = session.set_scope(bad)

        assert result.is_err()
        assert isinstance(result.error, MalformedHierarchy)
        assert session.scope is scope
        assert session.last_error is result.error

    def test_reset_without_tree(self, session):
        assert session.reset_to_root().unwrap().graph.is_empty


class TestLoading:
    def test_load_from_catalog(self, units_file):
        session = GraphSession(source=JsonCatalogSource(units_file))

        result = session.load(GroupingMode.FACULTY)

        assert result.is_ok()
        assert session.original_root.id == "catalog"
        assert "faculty:FIT" in session.scope.graph.node_ids()

    def test_data_unavailable_gives_empty_scope(self):
        source = MagicMock()
        source.get_hierarchical_data.side_effect = DataUnavailable("level", "not published")
        session = GraphSession(source=source)

        result = session.load(GroupingMode.LEVEL)

        assert isinstance(result, Err)
        assert isinstance(result.error, DataUnavailable)
        assert session.scope.graph.is_empty
        assert session.layout_state == LayoutState.IDLE
        assert session.frame().nodes == []
        source.get_hierarchical_data.assert_called_once_with(GroupingMode.LEVEL)

    def test_failed_load_cancels_previous_run(self, small_tree):
        source = MagicMock()
        source.get_hierarchical_data.side_effect = [small_tree, DataUnavailable("level", "gone")]
        session = GraphSession(source=source)
        session.load(GroupingMode.FACULTY)
        run = session.scope.run

        session.load(GroupingMode.LEVEL)

        assert run.state == LayoutState.STOPPED
        assert session.original_root is None

    def test_undecodable_catalog_gives_empty_scope(self, tmp_path):
        path = tmp_path / "units.json"
        path.write_bytes(b'[{"code": "FIT1045", "title": "Alg\xff"}]')
        session = GraphSession(source=JsonCatalogSource(path))

        result = session.load(GroupingMode.FACULTY)

        assert isinstance(result.error, DataUnavailable)
        assert session.scope.graph.is_empty

    def test_each_load_reads_properties(self, units_file):
        configuration = MagicMock(wraps=GraphConfiguration())
        session = GraphSession(source=JsonCatalogSource(units_file), configuration=configuration)

        session.load(GroupingMode.FACULTY)
        session.load(GroupingMode.LEVEL)

        assert configuration.get_graph_base_properties.call_count == 3

    def test_reload_uses_new_properties(self, small_tree):
        configuration = MagicMock(wraps=GraphConfiguration())
        configuration.get_graph_base_properties.side_effect = [
            GraphProperties(),
            GraphProperties(),
            GraphProperties(canvas=CanvasProperties(width=400)),
        ]
        session = GraphSession(configuration=configuration)

        session.open(small_tree)
        assert session.frame().canvas.width == 960

        session.open(small_tree)
        assert session.frame().canvas.width == 400
        assert session.transform.translate_x == 200

    def test_no_source(self, session):
        result = session.load(GroupingMode.FACULTY)
        assert result.is_err()
        assert "no data source" in str(result.error)

    def test_malformed_tree_is_rejected(self, session):
        shared = HierarchicalNode(id="s", name="s")
        root = HierarchicalNode(id="r", name="r", children=[shared, shared])

        result = session.open(root)

        assert result.is_err()
        assert session.scope.graph.is_empty


class TestTicking:
    def test_at_most_one_active_run(self, session, small_tree):
        session.open(small_tree)
        old_run = session.scope.run

        session.on_node_activated("B")
        new_run = session.scope.run

        assert old_run.state == LayoutState.STOPPED
        assert session.engine.active_run is new_run
        assert session.scheduler.pending == 2

    def test_stale_ticks_do_not_move_nodes(self, session, small_tree):
        session.open(small_tree)
        old_run = session.scope.run
        old_nodes = session.scope.graph.nodes
        session.on_node_activated("B")
        positions = [(n.x, n.y) for n in old_nodes]

        session.scheduler.run_pending()

        assert old_run.tick_count == 0
        assert [(n.x, n.y) for n in old_nodes] == positions
        assert session.scope.run.tick_count == 1

    def test_run_until_settled(self, session, wide_tree):
        session.open(wide_tree)

        state = session.run_until_settled()

        assert state == LayoutState.CONVERGED
        assert session.scheduler.pending == 0

    def test_tick_cap_leaves_run_stopped(self, small_tree):
        session = GraphSession(parameters=LayoutParameters(max_ticks=4))
        session.open(small_tree)

        assert session.run_until_settled() == LayoutState.STOPPED
        assert session.frame().tick == 4


class TestViewportAndFrame:
    def test_drill_down_zooms_in(self, session, wide_tree):
        session.open(wide_tree)
        overview = session.transform.scale

        session.on_node_activated("b0")

        assert session.transform.scale > overview

    def test_gesture_updates_transform(self, session, small_tree):
        session.open(small_tree)
        before = session.transform

        after = session.handle_gesture(GestureDelta(dx=12, dy=-4))

        assert after.translate_x == before.translate_x + 12
        assert after.translate_y == before.translate_y - 4
        assert session.transform is after

    def test_frame_matches_scope(self, session, small_tree):
        session.open(small_tree)
        session.run_until_settled()

        frame = session.frame()
        positions = {n.id: (n.x, n.y) for n in frame.nodes}

        assert frame.state == "converged"
        assert frame.tier == ZoomTier.OVERVIEW
        assert {n.id for n in frame.nodes} == {"A", "B", "C", "D"}
        assert len(frame.edges) == 3
        for edge in frame.edges:
            assert (edge.x1, edge.y1) == positions[edge.source]
            assert (edge.x2, edge.y2) == positions[edge.target]
        assert frame.generation == session.scope.generation


class TestDispose:
    def test_dispose_stops_everything(self, session, small_tree):
        session.open(small_tree)
        run = session.scope.run

        session.dispose()

        assert run.state == LayoutState.STOPPED
        assert session.scheduler.pending == 0
        assert session.scope.graph.is_empty
        assert session.set_scope(small_tree).is_err()


class TestResult:
    def test_ok(self):
        assert Ok(3).unwrap() == 3
        assert Ok(3).unwrap_or(0) == 3

    def test_err(self):
        error = DataUnavailable("faculty", "gone")
        err = Err(error)

        assert err.unwrap_or(7) == 7
        with pytest.raises(DataUnavailable):
            err.unwrap()
