from __future__ import annotations

import logging
import os
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Tuple

import pygame
from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)

PICTURE_SUFFIXES = {".png", ".jpg", ".jpeg", ".bmp", ".gif"}


def is_picture(path: Path) -> bool:
    return path.is_file() and path.suffix.lower() in PICTURE_SUFFIXES


def list_pictures(directory: Path) -> List[Path]:
    if not directory.is_dir():
        return []
    return sorted((path for path in directory.iterdir() if is_picture(path)), key=lambda path: path.name.lower())


def find_picture(directory: Path, name: str) -> Optional[Path]:
    for path in list_pictures(directory):
        if path.stem == name or path.name == name:
            return path
    return None


def load_picture(path: Path) -> Optional[Image.Image]:
    try:
        with Image.open(path) as image:
            return image.convert("RGBA")
    except (OSError, UnidentifiedImageError) as exc:
        logger.warning("Could not read picture %s: %s", path, exc)
        return None


def picture_surface(image: Image.Image, size: Optional[Tuple[int, int]] = None) -> pygame.Surface:
    rgba = image if image.mode == "RGBA" else image.convert("RGBA")
    surface = pygame.image.frombytes(rgba.tobytes(), rgba.size, "RGBA")
    if size is None:
        return surface
    max_w, max_h = size
    scale = min(max_w / rgba.width, max_h / rgba.height)
    target = (max(1, int(rgba.width * scale)), max(1, int(rgba.height * scale)))
    return pygame.transform.smoothscale(surface, target)


def save_snapshot(surface: pygame.Surface, directory: Path, stem: str, now: Optional[datetime] = None) -> Path:
    stamp = (now or datetime.now()).strftime("%Y-%m-%d_%H%M%S")
    path = directory / f"{stem}_{stamp}.png"
    counter = 1
    while path.exists():
        path = directory / f"{stem}_{stamp}_{counter}.png"
        counter += 1
    # Keep a .png suffix so pygame writes a PNG-encoded file.
    tmp_path = path.with_name(f".{path.stem}.tmp{path.suffix}")
    pygame.image.save(surface, str(tmp_path))
    os.replace(tmp_path, path)
    logger.info("Saved coloring to %s", path)
    return path
