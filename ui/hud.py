#!/usr/bin/env python3
"""HUD panel with score, drone state, command and channel counters (mixin)."""

from __future__ import annotations

import pygame

from sim.world import WorldSnapshot


class HudRenderer:
    """Mixin that draws the top HUD strip."""

    def draw_hud(self, surface: pygame.Surface, snap: WorldSnapshot) -> None:
        if self.font_small is None or self.font_tiny is None:
            return

        panel_rect = pygame.Rect(8, 6, self.width - 16, self.HUD_HEIGHT - 10)
        pygame.draw.rect(surface, self.HUD_BG_COLOR, panel_rect, border_radius=6)
        pygame.draw.rect(surface, self.HUD_BORDER_COLOR, panel_rect, width=1, border_radius=6)

        d, c = snap.drone, snap.command
        rx, ry = snap.repulsion
        line1 = (
            f"SCORE {snap.score}    "
            f"pos ({d.x:6.2f}, {d.y:6.2f})    vel ({d.vx:6.2f}, {d.vy:6.2f})    "
            f"obstacles {snap.num_obstacles}  targets {snap.num_targets}"
        )
        line2 = (
            f"force ({c.fx:6.2f}, {c.fy:6.2f})  repulsion ({rx:6.2f}, {ry:6.2f})  "
            f"brake {c.brake} reset {c.reset}"
        )
        records_in = snap.metrics.get("records_in", {})
        line3 = "  ".join(f"{k} {v}" for k, v in sorted(records_in.items()))
        line3 = f"tick {snap.metrics.get('ticks', 0)}  {line3}"

        x = panel_rect.x + 10
        y = panel_rect.y + 4
        surface.blit(self.font_small.render(line1, True, self.TEXT_COLOR), (x, y))
        surface.blit(self.font_tiny.render(line2, True, self.TEXT_COLOR), (x, y + 20))
        surface.blit(self.font_tiny.render(line3, True, self.DIM_TEXT_COLOR), (x, y + 36))
