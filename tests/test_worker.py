import pygame

from colorbook.engine.fill import Outcome
from colorbook.engine.pixel import EXACT_WHITE, Pixel
from colorbook.engine.worker import ColoringSession

RED = Pixel(255, 0, 0, 255)
BLUE = Pixel(0, 0, 255, 255)


def _ring_surface(size=5):
    surface = pygame.Surface((size, size), pygame.SRCALPHA)
    surface.fill((0, 0, 0, 255))
    surface.fill((255, 255, 255, 255), pygame.Rect(1, 1, size - 2, size - 2))
    return surface


def _pixel(session, x, y):
    return tuple(session.bitmap.get_at((x, y)))


def test_load_then_fill_runs_in_order():
    with ColoringSession() as session:
        session.load(_ring_surface())
        session.fill(2, 2, RED)
        results = session.drain(timeout=5)

        assert [result.kind for result in results] == ["load", "fill"]
        assert results[0].outcome is Outcome.LOADED
        assert results[1].changed == 9
        assert results[1].position == (2, 2)
        assert session.size() == (5, 5)
        assert _pixel(session, 2, 2) == (255, 0, 0, 255)
        assert session.can_undo


def test_undo_and_redo_through_the_worker():
    with ColoringSession() as session:
        session.load(_ring_surface())
        session.fill(2, 2, RED)
        session.undo()
        results = session.drain(timeout=5)

        assert results[-1].kind == "undo"
        assert results[-1].outcome is Outcome.APPLIED
        assert _pixel(session, 2, 2) == tuple(EXACT_WHITE)
        assert session.can_redo and not session.can_undo

        session.redo()
        session.drain(timeout=5)
        assert _pixel(session, 2, 2) == (255, 0, 0, 255)
        assert session.can_undo and not session.can_redo


def test_undo_with_empty_history_reports_it():
    with ColoringSession() as session:
        session.load(_ring_surface())
        session.undo()
        results = session.drain(timeout=5)
        assert results[-1].outcome is Outcome.EMPTY_HISTORY
        assert results[-1].bitmap is None


def test_new_fill_discards_redo():
    with ColoringSession() as session:
        session.load(_ring_surface())
        session.fill(2, 2, RED)
        session.undo()
        session.drain(timeout=5)
        assert session.can_redo

        session.fill(2, 2, BLUE)
        session.drain(timeout=5)
        assert not session.can_redo


def test_failed_fill_does_not_touch_history():
    with ColoringSession() as session:
        session.load(_ring_surface())
        session.fill(9, 9, RED)
        results = session.drain(timeout=5)
        assert results[-1].outcome is Outcome.OUT_OF_BOUNDS
        assert results[-1].changed == 0
        assert not session.can_undo


def test_fill_before_load_is_a_no_op():
    with ColoringSession() as session:
        session.fill(0, 0, RED)
        results = session.drain(timeout=5)
        assert results[0].outcome is Outcome.UNLOADED
        assert session.bitmap is None


def test_reset_drops_in_flight_results_and_history():
    with ColoringSession() as session:
        session.load(_ring_surface())
        session.drain(timeout=5)
        generation = session.generation

        session.fill(2, 2, RED)
        session.reset()
        results = session.drain(timeout=5)

        assert results == []
        assert session.generation == generation + 1
        assert session.bitmap is None
        assert not session.can_undo


def test_reload_starts_a_new_generation():
    with ColoringSession() as session:
        session.load(_ring_surface())
        session.fill(2, 2, RED)
        session.load(_ring_surface(7))
        results = session.drain(timeout=5)

        assert [result.kind for result in results] == ["load"]
        assert session.size() == (7, 7)
        assert _pixel(session, 3, 3) == tuple(EXACT_WHITE)
        assert not session.can_undo


def test_history_limits_are_configurable():
    with ColoringSession(undo_limit=2, redo_limit=1) as session:
        assert session.history.undo_limit == 2
        assert session.history.redo_limit == 1


def test_failed_job_is_logged_and_skipped(caplog):
    with ColoringSession() as session:
        session.load(pygame.Surface((0, 0), pygame.SRCALPHA))
        with caplog.at_level("ERROR", logger="colorbook.engine.worker"):
            results = session.drain(timeout=5)

        assert results == []
        assert session.bitmap is None
        assert "Engine job failed" in caplog.text

        session.load(_ring_surface())
        results = session.drain(timeout=5)
        assert [result.kind for result in results] == ["load"]
        assert session.bitmap is not None
