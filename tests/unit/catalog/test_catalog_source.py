"""Unit tests for the JSON catalog source."""

import json

import pytest

from cfmap.catalog.models import UnitRecord
from cfmap.catalog.source import DataUnavailable, JsonCatalogSource
from cfmap.core.hierarchy import MalformedHierarchy
from cfmap.core.types import GroupingMode


class TestUnitRecord:
    def test_faculty_from_code_prefix(self):
        assert UnitRecord(code="fit1045", title="x").faculty_label == "FIT"

    def test_explicit_faculty_wins(self):
        assert UnitRecord(code="FIT1045", title="x", faculty="Engineering").faculty_label == "Engineering"

    def test_code_without_prefix(self):
        assert UnitRecord(code="1045", title="x").faculty_label == "Other"

    def test_level(self):
        assert UnitRecord(code="MTH2010", title="x").level == 2
        assert UnitRecord(code="ELEC", title="x").level is None

    def test_code_is_stripped(self):
        assert UnitRecord(code="  FIT1045 ", title="x").code == "FIT1045"

    def test_blank_code_is_rejected(self):
        with pytest.raises(ValueError):
            UnitRecord(code="   ", title="x")


class TestJsonCatalogSource:
    def test_group_by_faculty(self, units_file):
        root = JsonCatalogSource(units_file).get_hierarchical_data(GroupingMode.FACULTY)

        assert root.id == "catalog"
        assert root.group == "catalog"
        assert [g.id for g in root.children] == ["faculty:FIT", "faculty:MTH"]
        fit = root.children[0]
        assert fit.name == "FIT"
        assert fit.group == "faculty"
        assert [u.id for u in fit.children] == ["FIT1045", "FIT2004", "FIT3171"]
        assert fit.children[0].name == "Algorithms and programming"
        assert fit.children[0].group == "unit"

    def test_group_by_level(self, tmp_path):
        path = tmp_path / "units.json"
        path.write_text(json.dumps([
            {"code": "FIT2004", "title": "b"},
            {"code": "FIT1045", "title": "a"},
            {"code": "ELEC", "title": "elective"},
            {"code": "MTH1030", "title": "c"},
        ]))

        root = JsonCatalogSource(path).get_hierarchical_data("level")

        assert [g.name for g in root.children] == ["Level 1", "Level 2", "Unassigned"]
        assert [u.id for u in root.children[0].children] == ["FIT1045", "MTH1030"]
        assert root.children[2].id == "level:unassigned"
        assert root.description == "4 units grouped by level"

    def test_units_wrapper_object(self, tmp_path):
        path = tmp_path / "units.json"
        path.write_text(json.dumps({"units": [{"code": "FIT1045", "title": "a"}]}))

        root = JsonCatalogSource(path, catalog_name="Monash").get_hierarchical_data(GroupingMode.FACULTY)

        assert root.name == "Monash"
        assert root.count() == 3

    def test_units_are_cached(self, units_file):
        source = JsonCatalogSource(units_file)
        first = source.load_units()
        units_file.write_text("[]")

        assert source.load_units() is first

    def test_unknown_grouping_mode(self, units_file):
        with pytest.raises(DataUnavailable) as exc:
            JsonCatalogSource(units_file).get_hierarchical_data("campus")
        assert exc.value.grouping_mode == "campus"

    def test_missing_file(self, tmp_path):
        with pytest.raises(DataUnavailable, match="not found"):
            JsonCatalogSource(tmp_path / "nope.json").get_hierarchical_data(GroupingMode.FACULTY)

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "units.json"
        path.write_text("{not json")

        with pytest.raises(DataUnavailable, match="failed to read"):
            JsonCatalogSource(path).get_hierarchical_data(GroupingMode.FACULTY)

    def test_non_utf8_file(self, tmp_path):
        path = tmp_path / "units.json"
        path.write_bytes(b'[{"code": "FIT1045", "title": "Alg\xff"}]')

        with pytest.raises(DataUnavailable, match="failed to read"):
            JsonCatalogSource(path).get_hierarchical_data(GroupingMode.FACULTY)

    def test_payload_not_a_list(self, tmp_path):
        path = tmp_path / "units.json"
        path.write_text(json.dumps({"units": "everything"}))

        with pytest.raises(DataUnavailable, match="expected a list"):
            JsonCatalogSource(path).get_hierarchical_data(GroupingMode.FACULTY)

    def test_invalid_record(self, tmp_path):
        path = tmp_path / "units.json"
        path.write_text(json.dumps([{"title": "no code"}]))

        with pytest.raises(DataUnavailable, match="invalid unit record"):
            JsonCatalogSource(path).get_hierarchical_data(GroupingMode.FACULTY)

    def test_duplicate_codes(self, tmp_path):
        path = tmp_path / "units.json"
        path.write_text(json.dumps([
            {"code": "FIT1045", "title": "a"},
            {"code": "FIT1045", "title": "a again"},
        ]))

        with pytest.raises(MalformedHierarchy) as exc:
            JsonCatalogSource(path).get_hierarchical_data(GroupingMode.FACULTY)
        assert exc.value.node_id == "FIT1045"
