from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

import pygame


Color = Tuple[int, int, int]
Point = Tuple[int, int]

FINGERDOWN = getattr(pygame, "FINGERDOWN", None)
FINGERUP = getattr(pygame, "FINGERUP", None)
FINGER_EVENTS = {event for event in (FINGERDOWN, FINGERUP) if event is not None}

DISABLED_TEXT = (150, 150, 150)
ENABLED_TEXT = (20, 20, 20)


@dataclass
class Button:
    rect: pygame.Rect
    label: str = ""
    fill: Optional[Color] = None
    enabled: bool = True

    def draw(self, surface: pygame.Surface, font: Optional[pygame.font.Font] = None) -> None:
        if self.fill is not None:
            pygame.draw.rect(surface, self.fill, self.rect, border_radius=12)
        if self.label and font is not None:
            text = font.render(self.label, True, ENABLED_TEXT if self.enabled else DISABLED_TEXT)
            surface.blit(text, text.get_rect(center=self.rect.center))

    def hit(self, pos: Point) -> bool:
        return self.enabled and self.rect.collidepoint(pos)


def create_fullscreen_window() -> Tuple[pygame.Surface, pygame.Rect]:
    pygame.init()
    screen = pygame.display.set_mode((0, 0), pygame.FULLSCREEN)
    pygame.mouse.set_visible(True)
    return screen, screen.get_rect()


def draw_home_button(surface: pygame.Surface, rect: pygame.Rect) -> None:
    pygame.draw.rect(surface, (240, 240, 240), rect, border_radius=10)
    roof = [
        (rect.centerx, rect.top + 8),
        (rect.left + 8, rect.centery),
        (rect.right - 8, rect.centery),
    ]
    pygame.draw.polygon(surface, (50, 50, 50), roof)
    body = pygame.Rect(rect.left + 12, rect.centery, rect.width - 24, rect.height - 16)
    pygame.draw.rect(surface, (50, 50, 50), body, width=2)


def draw_hint(surface: pygame.Surface, anchor: Point, text: str, font: pygame.font.Font) -> pygame.Rect:
    label = font.render(text, True, (255, 255, 255))
    bubble = label.get_rect().inflate(28, 16)
    bubble.midbottom = (anchor[0], anchor[1] - 12)
    bubble.clamp_ip(surface.get_rect())
    pygame.draw.rect(surface, (40, 40, 40), bubble, border_radius=14)
    surface.blit(label, label.get_rect(center=bubble.center))
    return bubble


def is_primary_pointer_event(event: pygame.event.Event, *, is_down: bool) -> bool:
    expected_type = pygame.MOUSEBUTTONDOWN if is_down else pygame.MOUSEBUTTONUP
    if event.type == expected_type:
        # Touch stacks can emit emulated mouse events with button 0.
        if getattr(event, "button", 1) in {0, 1}:
            return True
        return bool(getattr(event, "touch", False))
    finger_type = FINGERDOWN if is_down else FINGERUP
    return finger_type is not None and event.type == finger_type


def pointer_event_pos(event: pygame.event.Event, screen_rect: pygame.Rect) -> Optional[Point]:
    if hasattr(event, "pos"):
        return event.pos
    if event.type in FINGER_EVENTS:
        return (int(event.x * screen_rect.width), int(event.y * screen_rect.height))
    return None
