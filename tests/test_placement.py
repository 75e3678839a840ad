"""Tests for the placement store and its drag/resize state machine."""

import random

import pytest

from config import PlacementSettings
from errors import GestureInProgress, UnknownPlacement
from placement import Interaction, PlacementStore


@pytest.fixture
def store():
    return PlacementStore()


def assert_height_follows_width(sig):
    assert sig.height == pytest.approx(sig.width / sig.aspect_ratio)


# ---------------------------------------------------------------------------
# Placement
# ---------------------------------------------------------------------------

class TestPlace:
    def test_reference_placement(self, store):
        sig = store.place(page=2, pointer=(100, 100), displayed_width=800, aspect_ratio=3.0)
        assert sig.page == 2
        assert sig.width == pytest.approx(120)
        assert sig.height == pytest.approx(40)
        # Centred on the pointer
        assert sig.position == (pytest.approx(40), pytest.approx(80))
        assert sig.position[0] + sig.width / 2 == pytest.approx(100)
        assert sig.position[1] + sig.height / 2 == pytest.approx(100)

    def test_configured_fraction(self):
        store = PlacementStore(PlacementSettings(default_width_fraction=0.25))
        sig = store.place(1, (0, 0), 800, 2.0)
        assert sig.width == pytest.approx(200)
        assert sig.height == pytest.approx(100)

    def test_ids_unique_and_order_kept(self, store):
        sigs = [store.place(p, (10 * p, 10), 600, 2.0) for p in (3, 1, 2, 1)]
        assert len({s.id for s in sigs}) == 4
        assert [s.id for s in store] == [s.id for s in sigs]
        assert [s.page for s in store.by_page(1)] == [1, 1]

    @pytest.mark.parametrize("page", [0, -1])
    def test_rejects_bad_page(self, store, page):
        with pytest.raises(ValueError):
            store.place(page, (0, 0), 800, 1.0)

    def test_rejects_bad_aspect_ratio(self, store):
        with pytest.raises(ValueError):
            store.place(1, (0, 0), 800, 0)


# ---------------------------------------------------------------------------
# Drag / resize
# ---------------------------------------------------------------------------

class TestDrag:
    def test_position_follows_pointer_delta(self, store):
        sig = store.place(1, (100, 100), 800, 3.0)
        store.begin_drag(sig.id, (105, 95))
        assert store.interaction is Interaction.DRAGGING
        moved = store.move((125, 60))
        assert moved.position == (pytest.approx(60), pytest.approx(45))
        assert moved.width == sig.width and moved.height == sig.height

    def test_delta_measured_from_gesture_start(self, store):
        sig = store.place(1, (100, 100), 800, 3.0)
        store.begin_drag(sig.id, (0, 0))
        store.move((50, 50))
        moved = store.move((10, -10))
        assert moved.position == (pytest.approx(50), pytest.approx(70))

    def test_end_returns_to_idle(self, store):
        sig = store.place(1, (100, 100), 800, 3.0)
        store.begin_drag(sig.id, (0, 0))
        store.move((5, 5))
        ended = store.end()
        assert ended.id == sig.id
        assert store.interaction is Interaction.IDLE
        # Further moves are ignored
        assert store.move((500, 500)) is None
        assert store.get(sig.id).position == ended.position

    def test_other_instances_untouched(self, store):
        a = store.place(1, (100, 100), 800, 3.0)
        b = store.place(1, (300, 300), 800, 3.0)
        store.begin_drag(a.id, (0, 0))
        store.move((40, 40))
        assert store.get(b.id) == b


class TestResize:
    def test_width_follows_horizontal_delta(self, store):
        sig = store.place(1, (100, 100), 800, 3.0)
        store.begin_resize(sig.id, (160, 120))
        assert store.interaction is Interaction.RESIZING
        resized = store.move((190, 500))
        assert resized.width == pytest.approx(150)
        assert resized.height == pytest.approx(50)
        assert resized.position == sig.position

    def test_never_below_min_width(self, store):
        sig = store.place(1, (100, 100), 800, 3.0)
        store.begin_resize(sig.id, (0, 0))
        resized = store.move((-10_000, 0))
        assert resized.width == PlacementSettings().min_width
        assert_height_follows_width(resized)

    def test_custom_min_width(self):
        store = PlacementStore(PlacementSettings(min_width=50))
        sig = store.place(1, (100, 100), 800, 3.0)
        store.begin_resize(sig.id, (0, 0))
        assert store.move((-100, 0)).width == 50


class TestSingleInteraction:
    def test_second_drag_rejected(self, store):
        a = store.place(1, (100, 100), 800, 3.0)
        b = store.place(1, (300, 300), 800, 3.0)
        store.begin_drag(a.id, (0, 0))
        with pytest.raises(GestureInProgress):
            store.begin_drag(b.id, (0, 0))
        with pytest.raises(GestureInProgress):
            store.begin_resize(a.id, (0, 0))
        assert store.active_id == a.id

    def test_new_gesture_after_release(self, store):
        a = store.place(1, (100, 100), 800, 3.0)
        store.begin_drag(a.id, (0, 0))
        store.end()
        store.begin_resize(a.id, (0, 0))
        assert store.interaction is Interaction.RESIZING

    def test_unknown_id(self, store):
        with pytest.raises(UnknownPlacement):
            store.begin_drag("nope", (0, 0))
        assert store.interaction is Interaction.IDLE

    def test_end_when_idle(self, store):
        assert store.end() is None


# ---------------------------------------------------------------------------
# Mask replacement, delete
# ---------------------------------------------------------------------------

class TestReplaceAspectRatio:
    def test_updates_every_instance_keeping_position_and_width(self, store):
        before = [store.place(p, (50 * p, 80), 800, 3.0) for p in (1, 2, 2)]
        store.replace_aspect_ratio(1.5)
        for old in before:
            new = store.get(old.id)
            assert new.aspect_ratio == 1.5
            assert new.width == old.width
            assert new.position == old.position
            assert new.height == pytest.approx(old.width / 1.5)

    def test_rejects_bad_ratio(self, store):
        with pytest.raises(ValueError):
            store.replace_aspect_ratio(-1)


class TestDelete:
    def test_delete_one(self, store):
        a = store.place(1, (100, 100), 800, 3.0)
        b = store.place(1, (200, 100), 800, 3.0)
        store.delete(a.id)
        assert a.id not in store
        assert [s.id for s in store] == [b.id]

    def test_delete_unknown(self, store):
        with pytest.raises(UnknownPlacement):
            store.delete("missing")

    def test_delete_active_instance_ends_gesture(self, store):
        a = store.place(1, (100, 100), 800, 3.0)
        store.begin_drag(a.id, (0, 0))
        store.delete(a.id)
        assert store.interaction is Interaction.IDLE
        assert store.move((10, 10)) is None

    def test_clear(self, store):
        a = store.place(1, (100, 100), 800, 3.0)
        store.place(2, (100, 100), 800, 3.0)
        store.begin_resize(a.id, (0, 0))
        store.clear()
        assert len(store) == 0
        assert store.interaction is Interaction.IDLE


# ---------------------------------------------------------------------------
# Random gesture sequences
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("seed", range(20))
def test_random_gestures_keep_invariants(seed):
    rng = random.Random(seed)
    settings = PlacementSettings()
    store = PlacementStore(settings)
    aspect = rng.uniform(0.5, 5)
    for _ in range(5):
        store.place(rng.randint(1, 4), (rng.uniform(0, 900), rng.uniform(0, 1200)),
                    rng.uniform(200, 1000), aspect)

    for _ in range(300):
        op = rng.random()
        ids = [s.id for s in store]
        if store.interaction is Interaction.IDLE and op < 0.3 and ids:
            target = rng.choice(ids)
            pointer = (rng.uniform(-100, 1000), rng.uniform(-100, 1300))
            if rng.random() < 0.5:
                store.begin_drag(target, pointer)
            else:
                store.begin_resize(target, pointer)
        elif op < 0.75:
            store.move((rng.uniform(-2000, 2000), rng.uniform(-2000, 2000)))
        elif op < 0.9:
            store.end()
        else:
            store.end()
            aspect = rng.uniform(0.2, 6)
            store.replace_aspect_ratio(aspect)

        for sig in store:
            assert sig.aspect_ratio == aspect
            assert_height_follows_width(sig)

        if store.interaction is Interaction.RESIZING:
            assert store.get(store.active_id).width >= settings.min_width
