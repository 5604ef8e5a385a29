"""Shared pytest fixtures for view tests.

pygame is forced into a headless configuration with the SDL ``dummy`` video
and audio drivers before it is imported.
"""

from __future__ import annotations

import os

import pytest


os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")


@pytest.fixture(scope="session")
def pygame_module():
    pygame = pytest.importorskip("pygame")
    pygame.display.init()
    pygame.font.init()
    try:
        yield pygame
    finally:
        pygame.quit()
