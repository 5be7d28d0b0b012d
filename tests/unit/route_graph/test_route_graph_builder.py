"""Unit tests for RouteGraphBuilder."""

import threading
import time

import pytest

from src.route_graph_bc.graph_node.domain.entities.graph_node import GraphNode
from src.route_graph_bc.matching.domain.exceptions import (
    InvalidRouteGeometryError,
    LinkWriteError,
)
from src.route_graph_bc.matching.infrastructure.services.route_graph_builder import RouteGraphBuilder
from src.route_graph_bc.matching.infrastructure.services.route_lock_registry import RouteLockRegistry
from src.route_graph_bc.route.domain.entities.route import Route
from src.route_graph_bc.route_graph_node.domain.entities.route_graph_link import RouteGraphLink

NODES = [
    GraphNode(id="N2", lat=1.5, lng=0.0001),
    GraphNode(id="N1", lat=0.5, lng=-0.0002),
    GraphNode(id="FAR", lat=1.0, lng=0.01),
]


class TestRouteGraphBuilder:

    def test_build_writes_ordered_links(self, store, toy_route):
        result = RouteGraphBuilder(store).build(toy_route, NODES)

        assert result.written
        assert result.count == 2
        stored = store.get_links("R1")
        assert [link.graph_node_id for link in stored] == ["N1", "N2"]
        assert [link.order_index for link in stored] == [1, 2]

    def test_rebuild_replaces_previous_links(self, store, toy_route):
        store.links["R1"] = [RouteGraphLink("R1", "OLD", 1, 0)]

        RouteGraphBuilder(store).build(toy_route, NODES)

        assert "OLD" not in [link.graph_node_id for link in store.get_links("R1")]

    def test_rebuild_is_idempotent(self, store, toy_route):
        builder = RouteGraphBuilder(store)
        builder.build(toy_route, NODES)
        first = store.get_links("R1")
        builder.build(toy_route, NODES)

        assert store.get_links("R1") == first

    def test_empty_node_universe_writes_zero_links(self, store, toy_route):
        store.links["R1"] = [RouteGraphLink("R1", "OLD", 1, 0)]

        result = RouteGraphBuilder(store).build(toy_route, [])

        assert result.count == 0
        assert result.written
        assert store.get_links("R1") == []

    def test_dry_run_does_not_write(self, store, toy_route):
        result = RouteGraphBuilder(store).build(toy_route, NODES, dry_run=True)

        assert result.count == 2
        assert not result.written
        assert store.write_count == 0

    def test_invalid_geometry_leaves_links_untouched(self, store):
        previous = [RouteGraphLink("BAD", "N1", 1, 10)]
        store.links["BAD"] = previous
        route = Route(id="BAD", geometry={"type": "Point", "coordinates": [0, 0]})

        with pytest.raises(InvalidRouteGeometryError):
            RouteGraphBuilder(store).build(route, NODES)

        assert store.get_links("BAD") == previous
        assert store.write_count == 0

    def test_store_lock_is_taken_before_replace(self, store, toy_route):
        RouteGraphBuilder(store).build(toy_route, NODES)

        assert store.calls == [("lock", "R1"), ("replace", "R1")]

    def test_dry_run_takes_no_store_lock(self, store, toy_route):
        RouteGraphBuilder(store).build(toy_route, NODES, dry_run=True)

        assert store.calls == []

    def test_threshold_is_configurable(self, store, toy_route):
        result = RouteGraphBuilder(store, threshold_meters=2000).build(toy_route, NODES)
        assert result.count == 3

    def test_write_failure_propagates(self, store, toy_route):
        store.fail_writes_for.add("R1")
        with pytest.raises(LinkWriteError):
            RouteGraphBuilder(store).build(toy_route, NODES)

    def test_same_route_builds_do_not_overlap(self, make_store, toy_route):
        """Concurrent builds of one route run their writes one at a time."""
        active = {"now": 0, "max": 0}
        guard = threading.Lock()

        class SlowStore(make_store):
            def replace_links(self, route_id, links):
                with guard:
                    active["now"] += 1
                    active["max"] = max(active["max"], active["now"])
                time.sleep(0.02)
                written = super().replace_links(route_id, links)
                with guard:
                    active["now"] -= 1
                return written

        slow_store = SlowStore(routes=[toy_route])
        builder = RouteGraphBuilder(slow_store, lock_registry=RouteLockRegistry())

        threads = [threading.Thread(target=builder.build, args=(toy_route, NODES)) for _ in range(5)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert active["max"] == 1
        assert slow_store.write_count == 5
        assert len(slow_store.get_links("R1")) == 2


class TestRouteLockRegistry:

    def test_different_routes_do_not_block(self):
        registry = RouteLockRegistry()
        entered = threading.Event()

        def hold_other():
            with registry.hold("B"):
                entered.set()

        with registry.hold("A"):
            thread = threading.Thread(target=hold_other)
            thread.start()
            assert entered.wait(timeout=1)
            thread.join()

    def test_same_route_blocks_other_threads(self):
        registry = RouteLockRegistry()
        entered = threading.Event()

        def hold_same():
            with registry.hold("A"):
                entered.set()

        with registry.hold("A"):
            thread = threading.Thread(target=hold_same)
            thread.start()
            assert not entered.wait(timeout=0.1)
        thread.join(timeout=1)
        assert entered.is_set()

    def test_reentrant_in_same_thread(self):
        registry = RouteLockRegistry()
        with registry.hold("A"):
            with registry.hold("A"):
                pass

    def test_entry_is_dropped_after_release(self):
        registry = RouteLockRegistry()
        with registry.hold("A"):
            with registry.hold("A"):
                assert len(registry) == 1
            assert len(registry) == 1
        assert len(registry) == 0

    def test_entry_is_dropped_when_body_raises(self):
        registry = RouteLockRegistry()
        with pytest.raises(RuntimeError):
            with registry.hold("A"):
                raise RuntimeError("boom")
        assert len(registry) == 0

    def test_waiting_thread_keeps_entry_alive(self):
        registry = RouteLockRegistry()
        entered = threading.Event()

        def hold_same():
            with registry.hold("A"):
                entered.set()

        with registry.hold("A"):
            thread = threading.Thread(target=hold_same)
            thread.start()
            time.sleep(0.05)
        thread.join(timeout=1)

        assert entered.is_set()
        assert len(registry) == 0
