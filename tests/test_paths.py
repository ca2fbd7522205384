"""Unit tests for materialized-path generation and the Resource path helpers."""

from __future__ import annotations

import re
import threading
import uuid

import pytest

from src.atrium.resources.paths import (
    LabelSequence,
    generate_path,
    is_descendant_path,
    is_root_sentinel,
    is_valid_label,
    is_valid_path,
    parent_path_of,
    path_depth,
)
from src.atrium.resources.schemas import Resource, ResourceType, ResourceVisibility


def _fixed_clock(value: int):
    return lambda: value


# ── Label generation ─────────────────────────────────────────────────────────


class TestLabelSequence:
    def test_label_uses_prefix_and_clock(self):
        seq = LabelSequence(clock=_fixed_clock(1700000000123))
        assert seq.next_label() == "r1700000000123"

    def test_same_millisecond_still_increases(self):
        seq = LabelSequence(clock=_fixed_clock(5000))
        assert [seq.next_value() for _ in range(3)] == [5000, 5001, 5002]

    def test_clock_stepping_backwards_never_repeats(self):
        ticks = iter([9000, 8000, 9500])
        seq = LabelSequence(clock=lambda: next(ticks))
        assert [seq.next_value() for _ in range(3)] == [9000, 9001, 9500]

    def test_concurrent_callers_get_distinct_labels(self):
        seq = LabelSequence(clock=_fixed_clock(1))
        labels: list[str] = []
        lock = threading.Lock()

        def worker():
            for _ in range(200):
                label = seq.next_label()
                with lock:
                    labels.append(label)

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(labels) == 800
        assert len(set(labels)) == 800


# ── generate_path ────────────────────────────────────────────────────────────


class TestGeneratePath:
    @pytest.mark.parametrize("parent", [None, "", "/"])
    def test_root_sentinels_produce_single_label(self, parent):
        path = generate_path(parent, LabelSequence(clock=_fixed_clock(42)))
        assert path == "r42"
        assert is_root_sentinel(parent)

    def test_default_sequence_matches_label_shape(self):
        assert re.fullmatch(r"r\d+", generate_path())

    def test_child_appends_to_parent(self):
        path = generate_path("root.team", LabelSequence(clock=_fixed_clock(7)))
        assert path == "root.team.r7"
        assert re.fullmatch(r"root\.team\.r\d+", path)

    def test_parent_is_used_verbatim(self):
        # Ancestor syntax is the caller's responsibility
        path = generate_path("not valid", LabelSequence(clock=_fixed_clock(1)))
        assert path == "not valid.r1"

    def test_generated_labels_are_valid(self):
        path = generate_path("a.b_c")
        assert is_valid_path(path)


# ── Inspection helpers ───────────────────────────────────────────────────────


class TestPathHelpers:
    @pytest.mark.parametrize(
        "label, valid",
        [("r123", True), ("root", True), ("a_b9", True), ("1abc", False), ("", False), ("a-b", False),
         ("r1\n", False)],
    )
    def test_is_valid_label(self, label, valid):
        assert is_valid_label(label) is valid

    def test_is_valid_path_rejects_empty_segments(self):
        assert is_valid_path("a.b.c")
        assert not is_valid_path("a..b")
        assert not is_valid_path("")

    def test_depth_and_parent(self):
        assert path_depth("r1") == 1
        assert path_depth("root.team.r1") == 3
        assert parent_path_of("root.team.r1") == "root.team"
        assert parent_path_of("r1") is None

    def test_descendant_requires_separator_boundary(self):
        assert is_descendant_path("a.b.c", "a.b")
        assert is_descendant_path("a.b.c", "a")
        assert not is_descendant_path("a.bc", "a.b")
        assert not is_descendant_path("a.b", "a.b")


class TestResourceHelpers:
    def _resource(self, **overrides) -> Resource:
        defaults = {
            "id": uuid.uuid4(),
            "workspace_id": uuid.uuid4(),
            "owner_id": uuid.uuid4(),
            "type": ResourceType.MEETING,
            "title": "Weekly sync",
            "path": "root.team.r1",
        }
        defaults.update(overrides)
        return Resource(**defaults)

    def test_defaults_to_public(self):
        resource = self._resource()
        assert resource.visibility == ResourceVisibility.PUBLIC
        assert not resource.is_private()

    def test_hierarchy_accessors(self):
        resource = self._resource()
        assert resource.get_parent_path() == "root.team"
        assert resource.get_depth() == 3
        assert resource.is_child_of("root")
        assert not resource.is_child_of("root.team.r1")

    def test_type_and_owner_predicates(self):
        owner = uuid.uuid4()
        resource = self._resource(type=ResourceType.SPACE, owner_id=owner)
        assert resource.is_space()
        assert not resource.is_meeting()
        assert resource.is_owned_by(owner)
        assert not resource.is_owned_by(uuid.uuid4())
