"""
Human Play Mode
================

Play Floppy Bike interactively. The window is only a host: it feeds flap
intents and frame deltas to CoreGame and draws the state it pulls back.

Controls:
    - Space/Click: Start, flap, or restart after a crash
    - R: Restart game
    - ESC: Quit

Usage:
    python -m tools.play_human [--seed SEED] [--width WIDTH] [--height HEIGHT]
"""

from __future__ import annotations

import argparse
import math
import sys
from typing import Optional

import pygame

from floppy_bike.core.config_loader import load_config, GameConfig
from floppy_bike.core.game import CoreGame
from floppy_bike.core.state_snapshot import GameSnapshot, GameState


class FloppyRenderer:
    """
    Renderer for human play mode.
    Sky, ground, capped pipes, a tilting bike and a small HUD.
    """

    def __init__(self, window_width: int, window_height: int):
        """Initialize renderer."""
        self._window_width = window_width
        self._window_height = window_height

        # Colors
        self._sky = (135, 206, 235)
        self._ground = (85, 51, 17)
        self._pipe = (46, 125, 50)
        self._pipe_cap = (27, 94, 32)
        self._bike = (255, 193, 7)
        self._seat = (255, 171, 64)
        self._wheel = (0, 0, 0)
        self._text = (255, 255, 255)
        self._text_shadow = (0, 0, 0)
        self._panel = (20, 20, 20)
        self._panel_border = (80, 80, 80)

        # Fonts
        pygame.font.init()
        self._font_huge = pygame.font.Font(None, 56)
        self._font_large = pygame.font.Font(None, 40)
        self._font_medium = pygame.font.Font(None, 28)
        self._font_small = pygame.font.Font(None, 20)

    def render(self, screen: pygame.Surface, snapshot: GameSnapshot) -> None:
        """Render the complete game scene."""
        screen.fill(self._sky)

        # Ground
        ground_y = int(snapshot.ground_y)
        pygame.draw.rect(
            screen, self._ground,
            (0, ground_y, self._window_width, self._window_height - ground_y)
        )

        self._draw_obstacles(screen, snapshot)
        self._draw_bike(screen, snapshot)
        self._draw_hud(screen, snapshot)

        if snapshot.state == GameState.IDLE:
            self._draw_title(screen)
        elif snapshot.state == GameState.GAME_OVER:
            self._draw_game_over(screen, snapshot.score)

    def _draw_obstacles(self, screen: pygame.Surface, snapshot: GameSnapshot) -> None:
        """Draw pipes and their caps."""
        height = self._window_height
        for o in snapshot.obstacles:
            x = int(o.x)
            w = int(o.width)
            top = int(o.gap_top)
            bottom = int(o.gap_bottom)
            pygame.draw.rect(screen, self._pipe, (x, 0, w, top))
            pygame.draw.rect(screen, self._pipe, (x, bottom, w, height - bottom))
            pygame.draw.rect(screen, self._pipe_cap, (x - 6, top - 16, w + 12, 16))
            pygame.draw.rect(screen, self._pipe_cap, (x - 6, bottom, w + 12, 16))

    def _draw_bike(self, screen: pygame.Surface, snapshot: GameSnapshot) -> None:
        """Draw the bike rotated by its cosmetic tilt."""
        v = snapshot.vehicle
        w = int(v.width)
        h = int(v.height)

        surf = pygame.Surface((w, h), pygame.SRCALPHA)
        pygame.draw.rect(surf, self._bike, (0, 0, w, h), border_radius=8)
        pygame.draw.rect(surf, self._seat, (8, 8, 28, 10), border_radius=4)
        pygame.draw.circle(surf, self._wheel, (14, h - 6), 8)
        pygame.draw.circle(surf, self._wheel, (w - 12, h - 6), 8)

        # Screen y grows down, so a positive tilt turns clockwise
        rotated = pygame.transform.rotate(surf, -math.degrees(v.tilt))
        center = (int(v.x + v.width / 2), int(v.y + v.height / 2))
        screen.blit(rotated, rotated.get_rect(center=center))

    def _blit_text(
        self,
        screen: pygame.Surface,
        font: pygame.font.Font,
        text: str,
        center: tuple
    ) -> None:
        """Draw text with a drop shadow."""
        shadow = font.render(text, True, self._text_shadow)
        label = font.render(text, True, self._text)
        screen.blit(shadow, shadow.get_rect(center=(center[0] + 1, center[1] + 2)))
        screen.blit(label, label.get_rect(center=center))

    def _draw_hud(self, screen: pygame.Surface, snapshot: GameSnapshot) -> None:
        """Score at the top, hint at the bottom."""
        cx = self._window_width // 2
        self._blit_text(screen, self._font_large, f"Score: {snapshot.score}", (cx, 28))

        if snapshot.state == GameState.RUNNING:
            hint = "Space or click to flap"
        elif snapshot.state == GameState.GAME_OVER:
            hint = "Space or R to try again"
        else:
            hint = "Space or click to start"
        self._blit_text(screen, self._font_small, hint, (cx, self._window_height - 10))

    def _draw_title(self, screen: pygame.Surface) -> None:
        cx = self._window_width // 2
        cy = self._window_height // 2
        self._blit_text(screen, self._font_huge, "Floppy Bike", (cx, cy - 20))
        self._blit_text(screen, self._font_medium, "Flap and avoid obstacles", (cx, cy + 20))

    def _draw_game_over(self, screen: pygame.Surface, score: int) -> None:
        """Game over panel."""
        box_w, box_h = 260, 150
        box_x = (self._window_width - box_w) // 2
        box_y = (self._window_height - box_h) // 2
        pygame.draw.rect(screen, self._panel, (box_x, box_y, box_w, box_h), border_radius=12)
        pygame.draw.rect(screen, self._panel_border, (box_x, box_y, box_w, box_h), 2, border_radius=12)

        cx = self._window_width // 2
        self._blit_text(screen, self._font_huge, "Game Over", (cx, box_y + 40))
        self._blit_text(screen, self._font_medium, f"Score: {score}", (cx, box_y + 85))
        self._blit_text(screen, self._font_small, "Press R to restart", (cx, box_y + 120))


class HumanPlayer:
    """
    Human-playable Floppy Bike.

    Input is applied between frames on the loop's thread, so the game is
    only ever touched by one caller at a time.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        seed: Optional[int] = None,
        window_width: int = 400,
        window_height: int = 700,
        target_fps: int = 60
    ):
        if config is None:
            config = load_config()

        self._config = config
        self._window_width = window_width
        self._window_height = window_height
        self._target_fps = target_fps

        # Game starts IDLE; the first flap starts it
        self._game = CoreGame(
            config=config,
            seed=seed,
            playfield_width=window_width,
            playfield_height=window_height
        )

        pygame.init()
        self._screen = pygame.display.set_mode((window_width, window_height))
        pygame.display.set_caption("Floppy Bike")
        self._clock = pygame.time.Clock()

        self._renderer = FloppyRenderer(window_width, window_height)
        self._running = True
        self._best_score = 0

    def run(self) -> int:
        """Run the game loop. Returns best score."""
        print("=== Floppy Bike ===")
        print("Space or click to flap, R to restart, ESC to quit")
        print()

        # Discard the first tick so the opening frame has no giant dt
        self._clock.tick(self._target_fps)

        while self._running:
            dt = self._clock.tick(self._target_fps) / 1000.0
            self._handle_events()

            was_over = self._game.is_over
            self._game.update(dt)
            if self._game.is_over and not was_over:
                self._best_score = max(self._best_score, self._game.score)
                print(f"GAME OVER ({self._game.termination_reason}) - Score: {self._game.score}")

            self._renderer.render(self._screen, self._game.snapshot())
            pygame.display.flip()

        pygame.quit()
        return self._best_score

    def _handle_events(self) -> None:
        """Process pygame events."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self._running = False

            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    self._running = False
                elif event.key == pygame.K_r:
                    self._restart()
                elif event.key == pygame.K_SPACE:
                    self._tap()

            elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                self._tap()

    def _tap(self) -> None:
        """Start, flap, or restart depending on state."""
        state = self._game.state
        if state == GameState.GAME_OVER:
            self._restart()
            return
        if state == GameState.IDLE:
            self._game.restart()
        self._game.flap()

    def _restart(self) -> None:
        """Restart the game."""
        self._game.restart()
        print("\n=== Game Restarted ===\n")


def main():
    parser = argparse.ArgumentParser(description="Play Floppy Bike interactively")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--width", type=int, default=400, help="Window width (default: 400)")
    parser.add_argument("--height", type=int, default=700, help="Window height (default: 700)")
    parser.add_argument("--fps", type=int, default=60, help="Target FPS")

    args = parser.parse_args()

    config = load_config()
    player = HumanPlayer(
        config=config,
        seed=args.seed,
        window_width=args.width,
        window_height=args.height,
        target_fps=args.fps
    )
    score = player.run()
    print(f"\nBest Score: {score}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
