"""
Unit Tests for partial update helpers
"""
from types import SimpleNamespace

from alumni_api.models.user import UserRole
from alumni_api.utils.updates import flatten_update, merge_dict, apply_updates


EVENT_MAP = {
    "date.start": "start_date",
    "date.end": "end_date",
    "location.type": "location_type",
}


class TestFlattenUpdate:

    def test_mapped_paths_renamed(self):
        flat = flatten_update(
            {"title": "Gala", "date": {"start": "s"}, "location": {"type": "virtual", "venue": "Hall"}},
            EVENT_MAP,
        )

        assert flat == {"title": "Gala", "start_date": "s", "location_type": "virtual", "location.venue": "Hall"}

    def test_none_values_dropped(self):
        flat = flatten_update({"title": None, "date": {"start": None, "end": "e"}}, EVENT_MAP)

        assert flat == {"end_date": "e"}

    def test_enum_lists_converted_to_values(self):
        flat = flatten_update(
            {"target_audience": {"roles": [UserRole.ALUMNI, UserRole.ADMIN]}},
            {"target_audience.roles": "target_roles"},
        )

        assert flat == {"target_roles": ["alumni", "admin"]}


class TestMergeDict:

    def test_nested_merge_keeps_unspecified_keys(self):
        current = {"linkedin": "in/a", "twitter": "@a", "location": {"city": "Hargeisa", "country": "Somaliland"}}
        merged = merge_dict(current, {"twitter": "@b", "location": {"city": "Berbera"}})

        assert merged == {"linkedin": "in/a", "twitter": "@b", "location": {"city": "Berbera", "country": "Somaliland"}}

    def test_none_in_patch_keeps_current(self):
        assert merge_dict({"a": 1}, {"a": None, "b": 2}) == {"a": 1, "b": 2}

    def test_empty_current(self):
        assert merge_dict(None, {"a": 1}) == {"a": 1}

    def test_current_not_mutated(self):
        current = {"a": {"b": 1}}
        merge_dict(current, {"a": {"b": 2}})

        assert current == {"a": {"b": 1}}


class TestApplyUpdates:

    def test_returns_changed_attributes(self):
        obj = SimpleNamespace(title="Old", capacity=10)

        changed = apply_updates(obj, {"title": "New", "capacity": 10})

        assert changed == ["title"]
        assert obj.title == "New"
        assert obj.capacity == 10
