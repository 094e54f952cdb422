from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

import pygame
from PIL import Image

from colorbook.config import engine_limits, load_config
from colorbook.engine.pixel import Pixel, coerce_pixel
from colorbook.engine.worker import ColoringSession, SessionResult
from colorbook.paths import ensure_directories, get_data_root
from colorbook.pictures import find_picture, list_pictures, load_picture, picture_surface, save_snapshot
from colorbook.ui.common import (
    Button,
    create_fullscreen_window,
    draw_hint,
    draw_home_button,
    is_primary_pointer_event,
    pointer_event_pos,
)

logger = logging.getLogger(__name__)

Point = Tuple[int, int]
Picture = Union[pygame.Surface, Image.Image]

# --- Tuning constants ---
FRAME_RATE = 60
SWATCH_COLUMNS = 2
PICKER_THUMB_SIZE = 140
PICKER_PADDING = 16
HINT_TEXT = "Tap inside a white space!"
DEMO_PICTURE_SIZE = (640, 480)


@dataclass
class TapMapper:
    """Screen-to-image mapping captured once when a picture is opened.

    The rect is frozen so later layout changes cannot shift where taps land.
    """

    image_rect: pygame.Rect
    image_size: Tuple[int, int]

    @classmethod
    def freeze(cls, area: pygame.Rect, image_size: Tuple[int, int]) -> TapMapper:
        image_w, image_h = image_size
        scale = min(area.width / image_w, area.height / image_h)
        rect = pygame.Rect(0, 0, max(1, int(image_w * scale)), max(1, int(image_h * scale)))
        rect.center = area.center
        return cls(image_rect=rect, image_size=image_size)

    def to_pixel(self, pos: Point) -> Optional[Point]:
        if not self.image_rect.collidepoint(pos):
            return None
        image_w, image_h = self.image_size
        local_x = pos[0] - self.image_rect.left
        local_y = pos[1] - self.image_rect.top
        px = min(image_w - 1, int(local_x * image_w / self.image_rect.width))
        py = min(image_h - 1, int(local_y * image_h / self.image_rect.height))
        return px, py


@dataclass
class NearMissTracker:
    """Counts taps that filled nothing and decides when to show a hint.

    A streak is consecutive misses, each within ``radius`` image pixels
    of the one before. A hint fires when the streak reaches ``taps``, but
    at most once per ``cooldown`` seconds.
    """

    radius: float = 12.0
    taps: int = 3
    cooldown: float = 4.0
    hint_duration: float = 2.0
    streak: int = field(default=0, init=False)
    _last_miss: Optional[Point] = field(default=None, init=False)
    _last_hint_at: Optional[float] = field(default=None, init=False)
    _hint_until: float = field(default=0.0, init=False)

    def record(self, pos: Point, changed: int, now: float) -> bool:
        if changed > 0:
            self.streak = 0
            self._last_miss = None
            return False

        if self._last_miss is not None and math.dist(pos, self._last_miss) <= self.radius:
            self.streak += 1
        else:
            self.streak = 1
        self._last_miss = pos

        if self.streak < self.taps:
            return False
        if self._last_hint_at is not None and now - self._last_hint_at < self.cooldown:
            return False
        self._last_hint_at = now
        self._hint_until = now + self.hint_duration
        self.streak = 0
        return True

    def hint_visible(self, now: float) -> bool:
        return now < self._hint_until

    def reset(self) -> None:
        self.streak = 0
        self._last_miss = None
        self._hint_until = 0.0


@dataclass
class PickerItem:
    thumb: pygame.Surface
    rect: pygame.Rect
    path: Optional[Path]


def _palette_from_config(colors: object) -> List[Pixel]:
    palette: List[Pixel] = []
    for value in colors or []:  # type: ignore[union-attr]
        try:
            palette.append(coerce_pixel(value))
        except (TypeError, ValueError):
            logger.warning("Ignoring palette entry %r", value)
    return palette or [Pixel(255, 0, 0)]


def _near_miss_from_config(settings: Dict[str, object]) -> NearMissTracker:
    return NearMissTracker(
        radius=float(settings.get("radius", 12)),  # type: ignore[arg-type]
        taps=max(1, int(settings.get("taps", 3))),  # type: ignore[arg-type]
        cooldown=float(settings.get("cooldown_seconds", 4.0)),  # type: ignore[arg-type]
        hint_duration=float(settings.get("hint_seconds", 2.0)),  # type: ignore[arg-type]
    )


def demo_picture(size: Tuple[int, int] = DEMO_PICTURE_SIZE) -> pygame.Surface:
    """Simple line art used when the picture folder is empty."""
    width, height = size
    surface = pygame.Surface(size, pygame.SRCALPHA)
    surface.fill((255, 255, 255, 255))
    ink = (0, 0, 0, 255)
    line = max(2, min(width, height) // 80)
    pygame.draw.rect(surface, ink, surface.get_rect(), width=line)
    house = pygame.Rect(width // 8, height // 2, width // 3, height // 3)
    pygame.draw.rect(surface, ink, house, width=line)
    pygame.draw.polygon(
        surface,
        ink,
        [(house.left, house.top), (house.centerx, house.top - house.height // 2), (house.right, house.top)],
        width=line,
    )
    door = pygame.Rect(0, 0, house.width // 4, house.height // 2)
    door.midbottom = house.midbottom
    pygame.draw.rect(surface, ink, door, width=line)
    pygame.draw.circle(surface, ink, (width * 3 // 4, height // 4), min(width, height) // 8, width=line)
    pygame.draw.line(surface, ink, (0, height * 5 // 6), (width, height * 5 // 6), line)
    return surface


class ColoringApp:
    def __init__(
        self,
        *,
        screen: Optional[pygame.Surface] = None,
        screen_rect: Optional[pygame.Rect] = None,
        clock: Optional[pygame.time.Clock] = None,
    ) -> None:
        self.config = load_config()
        self.data_root = get_data_root(self.config)
        dirs = ensure_directories(self.data_root)
        self.pictures_dir = dirs["pictures"]
        self.snapshots_dir = dirs["snapshots"]

        if screen is None:
            self.screen, self.screen_rect = create_fullscreen_window()
        else:
            self.screen = screen
            self.screen_rect = screen_rect or screen.get_rect()
        self.clock = clock or pygame.time.Clock()

        coloring = self.config.get("coloring", {})
        undo_limit, redo_limit = engine_limits(self.config)
        self.session = ColoringSession(undo_limit=undo_limit, redo_limit=redo_limit)
        self.palette = _palette_from_config(coloring.get("palette"))
        self.current_color = self.palette[min(1, len(self.palette) - 1)]
        self.near_miss = _near_miss_from_config(coloring.get("near_miss", {}))

        self.margin = 16
        self.menu_pad = 10
        self.menu_gap = 10
        self.menu_bg = (238, 234, 226)
        self.button_size = max(44, min(56, int(self.screen_rect.height * 0.06)))
        panel_width = self.button_size * 2 + self.menu_gap + self.menu_pad * 2
        self.controls_rect = pygame.Rect(
            self.margin,
            self.margin,
            panel_width,
            self.screen_rect.height - 2 * self.margin,
        )
        self.canvas_rect = pygame.Rect(
            self.controls_rect.right + self.margin,
            self.margin,
            self.screen_rect.width - panel_width - 3 * self.margin,
            self.screen_rect.height - 2 * self.margin,
        )

        self.font = pygame.font.SysFont("sans", 18)
        self.action_buttons: Dict[str, Button] = {}
        self.palette_buttons: List[Button] = []
        self._build_ui()

        self.picture_path: Optional[Path] = None
        self.picture: Optional[Picture] = None
        self.mapper: Optional[TapMapper] = None
        self.display: Optional[pygame.Surface] = None
        self.hint_anchor: Optional[Point] = None
        self.last_tap: Optional[Point] = None

        self.picker_open = False
        self.picker_items: List[PickerItem] = []
        self.picker_strip_rect = pygame.Rect(0, 0, 0, 0)
        self._picker_overlay = pygame.Surface(self.screen_rect.size, pygame.SRCALPHA)
        self._picker_overlay.fill((0, 0, 0, 140))

        start = find_picture(self.pictures_dir, str(coloring.get("start_picture", "")))
        if start is None:
            pictures = list_pictures(self.pictures_dir)
            start = pictures[0] if pictures else None
        self._open_picture(start)

    def _build_ui(self) -> None:
        self.action_buttons.clear()
        self.palette_buttons.clear()

        pad = self.menu_pad
        gap = self.menu_gap
        left = self.controls_rect.left + pad
        inner_w = self.controls_rect.width - pad * 2
        half_w = (inner_w - gap) // 2

        home_size = max(40, int(self.button_size * 0.85))
        home_rect = pygame.Rect(self.screen_rect.right - self.margin - home_size, self.margin, home_size, home_size)
        self.action_buttons["home"] = Button(rect=home_rect, fill=self.menu_bg)

        action_h = self.font.get_height() + 16
        bottom = self.controls_rect.bottom - pad
        undo_top = bottom - action_h
        self.action_buttons["undo"] = Button(
            rect=pygame.Rect(left, undo_top, half_w, action_h), label="Undo", fill=(245, 245, 245)
        )
        self.action_buttons["redo"] = Button(
            rect=pygame.Rect(left + half_w + gap, undo_top, half_w, action_h), label="Redo", fill=(245, 245, 245)
        )
        reset_top = undo_top - gap - action_h
        self.action_buttons["reset"] = Button(
            rect=pygame.Rect(left, reset_top, half_w, action_h), label="Reset", fill=(245, 245, 245)
        )
        self.action_buttons["save"] = Button(
            rect=pygame.Rect(left + half_w + gap, reset_top, half_w, action_h), label="Save", fill=(245, 245, 245)
        )
        pictures_top = reset_top - gap - action_h
        self.action_buttons["pictures"] = Button(
            rect=pygame.Rect(left, pictures_top, inner_w, action_h), label="Pictures", fill=(245, 245, 245)
        )

        palette_top = self.controls_rect.top + pad
        palette_bottom = pictures_top - gap
        rows = max(1, math.ceil(len(self.palette) / SWATCH_COLUMNS))
        swatch_gap = 8
        swatch_h = max(14, (palette_bottom - palette_top - swatch_gap * (rows - 1)) // rows)
        swatch_h = min(swatch_h, half_w)
        for idx, color in enumerate(self.palette):
            row, col = divmod(idx, SWATCH_COLUMNS)
            rect = pygame.Rect(
                left + col * (half_w + gap),
                palette_top + row * (swatch_h + swatch_gap),
                half_w,
                swatch_h,
            )
            self.palette_buttons.append(Button(rect=rect, fill=(color.r, color.g, color.b)))

    # --- Pictures ---

    def _open_picture(self, path: Optional[Path]) -> None:
        picture: Optional[Picture] = load_picture(path) if path is not None else None
        if picture is None:
            path = None
            picture = demo_picture()
        self.picture_path = path
        self.picture = picture
        size = picture.get_size() if isinstance(picture, pygame.Surface) else picture.size
        # Frozen for the rest of this picture's session.
        self.mapper = TapMapper.freeze(self.canvas_rect, size)
        self.near_miss.reset()
        self.hint_anchor = None
        self.display = None
        self.session.load(picture)
        logger.info("Opened picture %s", path or "<demo>")

    def _restart_picture(self) -> None:
        if self.picture is None:
            return
        self.near_miss.reset()
        self.session.load(self.picture)

    def _save_current(self) -> None:
        bitmap = self.session.bitmap
        if bitmap is None:
            return
        stem = self.picture_path.stem if self.picture_path is not None else "demo"
        save_snapshot(bitmap, self.snapshots_dir, stem)

    def _open_picker(self) -> None:
        thumb = PICKER_THUMB_SIZE
        padding = PICKER_PADDING
        strip_height = thumb + padding * 2
        self.picker_strip_rect = pygame.Rect(
            0, (self.screen_rect.height - strip_height) // 2, self.screen_rect.width, strip_height
        )
        self.picker_items = []
        x = padding
        for path in list_pictures(self.pictures_dir):
            image = load_picture(path)
            if image is None:
                continue
            rect = pygame.Rect(x, self.picker_strip_rect.top + padding, thumb, thumb)
            self.picker_items.append(PickerItem(picture_surface(image, (thumb, thumb)), rect, path))
            x += thumb + padding
        if not self.picker_items:
            rect = pygame.Rect(x, self.picker_strip_rect.top + padding, thumb, thumb)
            demo = pygame.transform.smoothscale(demo_picture(), (thumb, thumb * 3 // 4))
            self.picker_items.append(PickerItem(demo, rect, None))
        self.picker_open = True

    def _handle_picker_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
            self.picker_open = False
            return
        if not is_primary_pointer_event(event, is_down=True):
            return
        pos = pointer_event_pos(event, self.screen_rect)
        if pos is None:
            return
        self.picker_open = False
        for item in self.picker_items:
            if item.rect.collidepoint(pos):
                self._open_picture(item.path)
                return

    # --- Input ---

    def _handle_pointer_down(self, pos: Point) -> bool:
        if self.action_buttons["home"].hit(pos):
            return True

        if self.canvas_rect.collidepoint(pos):
            pixel = self.mapper.to_pixel(pos) if self.mapper is not None else None
            if pixel is not None:
                self.last_tap = pos
                self.session.fill(pixel[0], pixel[1], self.current_color)
            return False

        for idx, button in enumerate(self.palette_buttons):
            if button.hit(pos):
                self.current_color = self.palette[idx]
                return False

        if self.action_buttons["undo"].hit(pos):
            self.session.undo()
        elif self.action_buttons["redo"].hit(pos):
            self.session.redo()
        elif self.action_buttons["reset"].hit(pos):
            self._restart_picture()
        elif self.action_buttons["save"].hit(pos):
            self._save_current()
        elif self.action_buttons["pictures"].hit(pos):
            self._open_picker()
        return False

    def _apply_results(self, results: List[SessionResult], now: float) -> None:
        for result in results:
            if result.bitmap is not None and self.mapper is not None:
                self.display = pygame.transform.smoothscale(result.bitmap, self.mapper.image_rect.size)
            if result.kind == "fill" and result.position is not None:
                if self.near_miss.record(result.position, result.changed, now):
                    self.hint_anchor = self.last_tap

    # --- Drawing ---

    def _render(self, now: float) -> None:
        self.screen.fill((252, 248, 240))
        pygame.draw.rect(self.screen, self.menu_bg, self.controls_rect)
        pygame.draw.rect(self.screen, (255, 255, 255), self.canvas_rect)
        if self.display is not None and self.mapper is not None:
            self.screen.blit(self.display, self.mapper.image_rect.topleft)
        pygame.draw.rect(self.screen, (200, 200, 200), self.canvas_rect, width=2)

        for idx, button in enumerate(self.palette_buttons):
            button.draw(self.screen)
            if self.palette[idx] == self.current_color:
                pygame.draw.rect(self.screen, (200, 60, 60), button.rect, width=3, border_radius=12)

        self.action_buttons["undo"].enabled = self.session.can_undo
        self.action_buttons["redo"].enabled = self.session.can_redo
        for key, button in self.action_buttons.items():
            if key == "home":
                draw_home_button(self.screen, button.rect)
            else:
                button.draw(self.screen, self.font)

        if self.hint_anchor is not None and self.near_miss.hint_visible(now):
            draw_hint(self.screen, self.hint_anchor, HINT_TEXT, self.font)

        if self.picker_open:
            self.screen.blit(self._picker_overlay, (0, 0))
            pygame.draw.rect(self.screen, (230, 230, 230), self.picker_strip_rect)
            for item in self.picker_items:
                self.screen.blit(item.thumb, item.thumb.get_rect(center=item.rect.center))

        pygame.display.flip()

    def run(self, *, quit_on_exit: bool = True) -> None:
        running = True
        try:
            while running:
                for event in pygame.event.get():
                    if event.type == pygame.QUIT:
                        running = False
                    if self.picker_open:
                        self._handle_picker_event(event)
                        continue
                    if event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                        running = False
                    elif is_primary_pointer_event(event, is_down=True):
                        pos = pointer_event_pos(event, self.screen_rect)
                        if pos is not None and self._handle_pointer_down(pos):
                            running = False

                now = time.monotonic()
                self._apply_results(self.session.poll(), now)
                self._render(now)
                self.clock.tick(FRAME_RATE)
        finally:
            self.session.close()
            if quit_on_exit:
                pygame.quit()


def main() -> None:
    config = load_config()
    logging.basicConfig(
        level=str(config.get("log_level", "INFO")).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        ColoringApp().run(quit_on_exit=True)
    except Exception:
        logger.exception("Coloring app crashed")
        pygame.quit()


if __name__ == "__main__":
    main()
