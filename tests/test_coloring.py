import pygame

from colorbook.coloring.app import NearMissTracker, TapMapper, _palette_from_config, demo_picture
from colorbook.engine.buffer import PixelBuffer
from colorbook.engine.fill import Outcome
from colorbook.engine.pixel import Pixel
from colorbook.ui.common import Button, is_primary_pointer_event


def test_tap_mapper_letterboxes_and_maps_to_pixels():
    mapper = TapMapper.freeze(pygame.Rect(0, 0, 200, 100), (100, 100))
    assert mapper.image_rect == pygame.Rect(50, 0, 100, 100)
    assert mapper.to_pixel((50, 0)) == (0, 0)
    assert mapper.to_pixel((149, 99)) == (99, 99)
    assert mapper.to_pixel((10, 10)) is None


def test_tap_mapper_scales_up():
    mapper = TapMapper.freeze(pygame.Rect(0, 0, 400, 200), (100, 100))
    assert mapper.image_rect == pygame.Rect(100, 0, 200, 200)
    assert mapper.to_pixel((101, 1)) == (0, 0)
    assert mapper.to_pixel((299, 199)) == (99, 99)


def test_near_miss_hint_after_repeated_misses():
    tracker = NearMissTracker(radius=5, taps=3, cooldown=4.0, hint_duration=2.0)
    assert not tracker.record((10, 10), 0, now=0.0)
    assert not tracker.record((12, 11), 0, now=0.5)
    assert tracker.record((11, 13), 0, now=1.0)
    assert tracker.hint_visible(2.5)
    assert not tracker.hint_visible(3.0)


def test_near_miss_respects_cooldown():
    tracker = NearMissTracker(radius=5, taps=2, cooldown=4.0)
    tracker.record((0, 0), 0, now=0.0)
    assert tracker.record((1, 1), 0, now=0.1)
    tracker.record((1, 1), 0, now=0.2)
    assert not tracker.record((1, 1), 0, now=0.3)
    assert tracker.record((1, 1), 0, now=5.0)


def test_near_miss_streak_resets_on_success_or_distance():
    tracker = NearMissTracker(radius=5, taps=3)
    tracker.record((0, 0), 0, now=0.0)
    tracker.record((1, 0), 0, now=0.1)
    tracker.record((1, 0), 40, now=0.2)
    assert tracker.streak == 0

    tracker.record((0, 0), 0, now=0.3)
    tracker.record((50, 50), 0, now=0.4)
    assert tracker.streak == 1


def test_palette_from_config_skips_bad_entries():
    assert _palette_from_config([[255, 0, 0], "bad", [1, 2, 3, 4]]) == [Pixel(255, 0, 0, 255), Pixel(1, 2, 3, 4)]
    assert _palette_from_config([]) == [Pixel(255, 0, 0, 255)]


def test_demo_picture_is_colorable():
    buffer = PixelBuffer()
    buffer.load(demo_picture())
    width, _height = buffer.size()

    assert buffer.fill(1, 1, Pixel(0, 0, 255)).outcome is Outcome.NO_ELIGIBLE_SEED
    assert buffer.fill(width // 2, 20, Pixel(0, 0, 255)).changed > 0


def test_disabled_button_ignores_hits():
    button = Button(rect=pygame.Rect(0, 0, 10, 10), enabled=False)
    assert not button.hit((5, 5))
    button.enabled = True
    assert button.hit((5, 5))


def test_primary_pointer_event_accepts_touch_emulated_button_zero():
    event = pygame.event.Event(pygame.MOUSEBUTTONDOWN, button=0, pos=(10, 10), touch=True)
    assert is_primary_pointer_event(event, is_down=True)


def test_primary_pointer_event_rejects_right_button():
    event = pygame.event.Event(pygame.MOUSEBUTTONDOWN, button=3, pos=(10, 10))
    assert not is_primary_pointer_event(event, is_down=True)


def test_button_draws_fill_and_label_only():
    surface = pygame.Surface((40, 40))
    surface.fill((0, 0, 0))
    Button(rect=pygame.Rect(0, 0, 40, 40), fill=(10, 20, 30)).draw(surface)
    assert tuple(surface.get_at((20, 20)))[:3] == (10, 20, 30)
    assert not hasattr(Button(rect=pygame.Rect(0, 0, 1, 1)), "image")
