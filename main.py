"""Interactive window for the lightpath puzzle."""

from __future__ import annotations

import argparse
from typing import Optional, Sequence

import pygame

from lightpath.catalog import LevelCatalog, resolve_directories
from lightpath.logging_config import setup_logging
from lightpath.session import GameSession, LossPolicy
from lightpath.ui import SessionView, compute_geometry
from lightpath.ui import layout


def draw_status(surface: pygame.Surface, view: SessionView, status_rect: pygame.Rect, font: pygame.font.Font) -> None:
    """Render the session status line below the board."""

    pygame.draw.rect(surface, layout.BACKGROUND_COLOR, status_rect)
    text_surface = font.render(view.status_text, True, layout.TEXT_COLOR)
    text_rect = text_surface.get_rect()
    text_rect.midleft = (status_rect.left, status_rect.centery)
    surface.blit(text_surface, text_rect)

    hint = f"mirror: {view.orientation.value}   [Tab] switch  [U] undo  [R] redo  [Backspace] restart"
    hint_surface = font.render(hint, True, layout.WALL_COLOR)
    surface.blit(hint_surface, (status_rect.left, status_rect.bottom - hint_surface.get_height()))


def offset_event(event: pygame.event.Event, origin: Sequence[int]) -> pygame.event.Event:
    """Translate mouse events from window coordinates into board coordinates."""

    if event.type != pygame.MOUSEBUTTONDOWN:
        return event
    pos = (event.pos[0] - origin[0], event.pos[1] - origin[1])
    if pos[0] < 0 or pos[1] < 0:
        pos = (-1, -1)
    return pygame.event.Event(event.type, button=event.button, pos=pos)


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Lightpath puzzle window")
    parser.add_argument("--level", help="Level to open (defaults to the first one).")
    parser.add_argument(
        "--loss-policy",
        choices=[policy.value for policy in LossPolicy],
        default=LossPolicy.NEVER.value,
    )
    parser.add_argument("--log-level", default="info")
    args = parser.parse_args(argv)

    setup_logging(args.log_level)
    directories = resolve_directories()
    catalog = LevelCatalog(directories.level_root)
    level = catalog.load(args.level or catalog.names()[0])
    session = GameSession(level, loss_policy=LossPolicy(args.loss_policy))

    pygame.init()
    pygame.font.init()

    geometry = compute_geometry(level.width, level.height)
    screen = pygame.display.set_mode(geometry.window)
    pygame.display.set_caption(f"Lightpath - {level.name}")

    board_rect = pygame.Rect(*geometry.board)
    status_rect = pygame.Rect(*geometry.status)
    view = SessionView(session, cell_size=layout.TILE_SIZE)
    font = pygame.font.Font(None, 22)

    clock = pygame.time.Clock()
    running = True

    while running:
        events = []
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            elif event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                running = False
            else:
                events.append(offset_event(event, board_rect.topleft))
        view.process_events(events)

        screen.fill(layout.BACKGROUND_COLOR)
        screen.blit(view.render(), board_rect.topleft)
        draw_status(screen, view, status_rect, font)

        pygame.display.flip()
        clock.tick(30)

    view.close()
    pygame.quit()


if __name__ == "__main__":
    main()
