"""Shared fixtures: small catalog trees and unit feeds."""

import json

import pytest

from cfmap.core.types import HierarchicalNode


def node(node_id: str, *children: HierarchicalNode, group: str = "") -> HierarchicalNode:
    return HierarchicalNode(id=node_id, name=node_id, group=group, children=list(children))


@pytest.fixture
def small_tree():
    """A -> [B -> [D], C]"""
    return node("A", node("B", node("D"), group="faculty"), node("C"), group="catalog")


@pytest.fixture
def wide_tree():
    """Root with three branches of four leaves each (16 nodes)."""
    branches = [
        node(f"b{i}", *[node(f"b{i}.l{j}", group="unit") for j in range(4)], group="faculty")
        for i in range(3)
    ]
    return node("root", *branches, group="catalog")


@pytest.fixture
def units_file(tmp_path):
    units = [
        {"id": {"$oid": "1"}, "code": "FIT1045", "title": "Algorithms and programming", "description": "Intro"},
        {"id": {"$oid": "2"}, "code": "FIT2004", "title": "Algorithms and data structures",
         "constraints": [{"type": "prerequisite", "units": ["FIT1045"]}]},
        {"id": {"$oid": "3"}, "code": "MTH1030", "title": "Techniques for modelling"},
        {"id": {"$oid": "4"}, "code": "FIT3171", "title": "Databases"},
    ]
    path = tmp_path / "units.json"
    path.write_text(json.dumps(units))
    return path
