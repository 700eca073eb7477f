# wayfind/app/viewer.py
#!/usr/bin/env python3
"""
Pathfinding Viewer: step through a grid search on a JSON map

- Keyboard:
    [1]..[9]     -> switch map (wayfind/maps/*.json, sorted)
    [A]/[D]      -> select algorithm (grid A* / uniform cost on the bridged graph)
    [C]          -> cycle corner policy (NONE, WALK, CUT, PHASE)
    [SPACE]      -> run/pause
    [N]          -> single step
    [R]          -> reset
    [+]/[-]      -> steps/sec
    [Q]/[ESC]    -> quit

Config:
- ENV: WAYFIND_MAP=<map key>, WAYFIND_CORNERS=<policy>
- CLI: --map=<map key>, --corners=<policy>

Run with `python -m wayfind.app.viewer` or the `wayfind-viewer` script.
"""

import logging
import os
import sys
import time
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple, Union

import pygame

from wayfind.core.grid_astar import GridAStarSearch
from wayfind.core.maps import MAP_DIR, GridMap, list_maps, load_map
from wayfind.core.types import Corners, Position, StepResult
from wayfind.core.uniform_cost import UniformCostSearch

logger = logging.getLogger(__name__)

# ---------- Config ----------
PANEL_W = 360            # right band: metrics + buttons
GRID_MARGIN = 16
CELL_SIZE_DEFAULT = 32
FONT_NAME = None  # default pygame font

ALGOS = ("A*", "Uniform cost")

# Colors
WHITE       = (255,255,255)
BLACK       = (  0,  0,  0)
BLUE        = ( 70,130,180)
RED         = (220, 50, 47)
ASPHALT_GRAY= (200,200,200)
MUD_BROWN   = (120, 84, 48)
NEON_CYAN_A = (0,150,255,110)
NEON_MAG_A  = (255,0,120,90)
NEON_MINT   = (0,255,200)

CARD_BG     = (24,28,36,220)
CARD_HI     = (255,255,255,18)
TEXT_LIGHT  = (230,235,240)
ACCENT_GOLD = (255,210,0)


def resolve_option(name: str, default: Optional[str] = None, argv: Optional[List[str]] = None) -> Optional[str]:
    """--name=value beats WAYFIND_<NAME> beats default."""
    value = os.getenv(f"WAYFIND_{name.upper()}", default)
    for arg in sys.argv[1:] if argv is None else argv:
        if arg.startswith(f"--{name}="):
            value = arg.split("=", 1)[1]
    return value


# ---------- Search factory ----------
SearchImpl = Union[GridAStarSearch, UniformCostSearch]


def make_search(label: str, gmap: GridMap, corners: Corners) -> Tuple[SearchImpl, Callable[[int], Position]]:
    """Build a search for `gmap` plus a function mapping its node ids to (x, y)."""
    grid = gmap.grid
    origin = grid.position_to_index(*gmap.start)
    target = grid.position_to_index(*gmap.goal)

    if label == "A*":
        algo = GridAStarSearch(name=f"A* ({corners.name})")
        algo.init(grid, origin, target, corners)
        return algo, grid.index_to_position

    # uniform cost runs on the 4-connected bridge; blocked cells are disabled there
    graph, nodes = grid.to_graph()
    for index, cost in enumerate(grid.costs):
        if cost == 0:
            graph.disable(nodes[index])
    node_to_index = {node: index for index, node in enumerate(nodes)}
    algo = UniformCostSearch(name="Uniform cost (graph)")
    algo.init(graph, nodes[origin], nodes[target])
    return algo, lambda node: grid.index_to_position(node_to_index[node])


def _cell_color(cost: float, max_cost: float) -> Tuple[int, int, int]:
    if cost == 0:
        return BLACK
    if max_cost <= 1:
        return ASPHALT_GRAY
    t = min(1.0, max(0.0, (cost - 1) / (max_cost - 1)))
    return tuple(int(a + (b - a) * t) for a, b in zip(ASPHALT_GRAY, MUD_BROWN))


# ---------- Simple UI Button ----------
class UIButton:
    """Clickable panel button; `hint` names its keyboard shortcut."""

    def __init__(self, label: str, rect: pygame.Rect, callback, *, hint: str = "", togglable: bool = False):
        self.label = label
        self.hint = hint
        self.rect = rect
        self.callback = callback
        self.hover = False
        self.togglable = togglable
        self.active = False

    def set_active(self, value: bool):
        self.active = bool(value)

    def draw(self, screen: pygame.Surface, font: pygame.font.Font, hint_font: Optional[pygame.font.Font] = None):
        lit = self.active and self.togglable
        bg = (58, 86, 160, 235) if lit else (46, 50, 60, 230) if self.hover else (36, 40, 48, 220)
        base = pygame.Surface(self.rect.size, pygame.SRCALPHA)
        pygame.draw.rect(base, bg, base.get_rect(), border_radius=8)
        screen.blit(base, self.rect.topleft)
        if lit:
            pygame.draw.rect(screen, (120, 170, 255, 255), self.rect, width=2, border_radius=8)

        text = font.render(self.label, True, TEXT_LIGHT)
        if self.hint and hint_font is not None:
            # label left, shortcut right
            screen.blit(text, text.get_rect(midleft=(self.rect.x + 10, self.rect.centery)))
            tag = hint_font.render(self.hint, True, (150, 158, 170))
            screen.blit(tag, tag.get_rect(midright=(self.rect.right - 10, self.rect.centery)))
        else:
            screen.blit(text, text.get_rect(center=self.rect.center))

    def handle_mouse(self, event: pygame.event.Event):
        if event.type == pygame.MOUSEMOTION:
            self.hover = self.rect.collidepoint(event.pos)
        elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1 and self.rect.collidepoint(event.pos):
            self.callback()


# ---------- Viewer ----------
class Viewer:
    def __init__(self, gmap: GridMap, map_files: Optional[Dict[str, Path]] = None,
                 corners: Optional[Corners] = None, map_key: Optional[str] = None):
        pygame.init()

        self.gmap = gmap
        self.map_files = dict(map_files or {})
        self.selected_map_key = map_key or gmap.name
        self.corners_override = corners
        self.corners = corners if corners is not None else gmap.corners

        self.font_small = pygame.font.Font(FONT_NAME, 14)
        self.font = pygame.font.Font(FONT_NAME, 18)
        self.font_big = pygame.font.Font(FONT_NAME, 22)

        cs = self._auto_cell_size()
        win_w = GRID_MARGIN*2 + gmap.grid.width * cs + PANEL_W
        win_h = max(GRID_MARGIN*2 + gmap.grid.height * cs, 560)
        self.screen = pygame.display.set_mode((win_w, win_h), pygame.RESIZABLE)
        pygame.display.set_caption(f"Pathfinding - {gmap.name}")

        self._buttons: List[UIButton] = []
        self._layout(win_w, win_h)

        self.open_set: set = set()
        self.closed_set: set = set()
        self.path: List[Position] = []

        self.running = False
        self.clock = pygame.time.Clock()
        self.steps_per_sec = 8
        self._last_step_t = 0.0
        self.state = "Idle"
        self.selected_algo = ALGOS[0]

        self.algo, self._to_cell = make_search(self.selected_algo, self.gmap, self.corners)
        self._reset_overlays()

    # ---------- layout ----------
    def _auto_cell_size(self) -> int:
        target_h = 720 - GRID_MARGIN*2
        return max(14, min(CELL_SIZE_DEFAULT, target_h // self.gmap.grid.height))

    def _layout(self, win_w: int, win_h: int):
        """Compute integer cell_size that fits window and place the grid."""
        grid = self.gmap.grid
        avail_w = max(1, win_w - PANEL_W - 2 * GRID_MARGIN)
        avail_h = max(1, win_h - 2 * GRID_MARGIN)
        self.cell_size = max(8, min(avail_w // grid.width, avail_h // grid.height))

        plate_w = grid.width * self.cell_size + 2 * GRID_MARGIN
        plate_h = grid.height * self.cell_size + 2 * GRID_MARGIN
        top_y = max(0, (win_h - plate_h) // 2)
        self._grid_origin = (GRID_MARGIN, top_y + GRID_MARGIN)
        self._right_band = pygame.Rect(plate_w, 0, max(PANEL_W, win_w - plate_w), win_h)
        self._build_buttons()

    # ---------- loop ----------
    def run(self):
        while True:
            self._handle_events()
            if self.running:
                self._tick_algorithm()
            self._draw()
            self.clock.tick(60)

    def _tick_algorithm(self):
        t0 = time.time()
        if t0 - self._last_step_t >= 1.0 / max(1, self.steps_per_sec):
            self._last_step_t = t0
            self._do_step()

    def _do_step(self) -> StepResult:
        res = self.algo.step()
        for c in res.opened: self.open_set.add(self._to_cell(c))
        for c in res.closed:
            cell = self._to_cell(c)
            self.open_set.discard(cell)
            self.closed_set.add(cell)
        if res.path is not None: self.path = [self._to_cell(c) for c in res.path]
        if res.status == "done":
            self.state = "Done"; self.running = False
        elif res.status == "no_path":
            self.state = "No path"; self.running = False
        elif res.status in ("running","idle"):
            self.state = "Running" if self.running else "Idle"
        if res.metrics:
            self._last_metrics = res.metrics
        self._refresh_active_states()
        return res

    def _handle_events(self):
        for e in pygame.event.get():
            if e.type == pygame.QUIT:
                pygame.quit(); sys.exit(0)
            elif e.type == pygame.KEYDOWN:
                if e.key in (pygame.K_ESCAPE, pygame.K_q):
                    pygame.quit(); sys.exit(0)
                elif e.key == pygame.K_SPACE:
                    self._toggle_run()
                elif e.key == pygame.K_r:
                    self._reset()
                elif e.key == pygame.K_n:
                    self._do_step()
                elif e.key in (pygame.K_PLUS, pygame.K_EQUALS):
                    self._bump_speed(+1)
                elif e.key in (pygame.K_MINUS, pygame.K_UNDERSCORE):
                    self._bump_speed(-1)
                elif pygame.K_1 <= e.key <= pygame.K_9:
                    keys = list(self.map_files)
                    i = e.key - pygame.K_1
                    if i < len(keys):
                        self._switch_map(keys[i])
                elif e.key == pygame.K_a:
                    self._switch_algo("A*")
                elif e.key == pygame.K_d:
                    self._switch_algo("Uniform cost")
                elif e.key == pygame.K_c:
                    self._cycle_corners()
            elif e.type == pygame.VIDEORESIZE:
                self.screen = pygame.display.set_mode((e.w, e.h), pygame.RESIZABLE)
                self._layout(e.w, e.h)
            elif e.type in (pygame.MOUSEMOTION, pygame.MOUSEBUTTONDOWN):
                # a click may rebuild the panel
                for b in list(self._buttons):
                    b.handle_mouse(e)

    # ---------- switching ----------
    def _rebuild_algo(self):
        self.running = False
        self.state = "Idle"
        self.algo, self._to_cell = make_search(self.selected_algo, self.gmap, self.corners)
        self._reset_overlays()
        self._refresh_active_states()

    def _switch_map(self, key: str):
        if key not in self.map_files: return
        try:
            gmap = load_map(self.map_files[key])
        except (OSError, ValueError) as ex:
            logger.warning("Failed to load map %s: %s", key, ex)
            return
        self.gmap = gmap
        self.selected_map_key = key
        self.corners = self.corners_override if self.corners_override is not None else gmap.corners
        pygame.display.set_caption(f"Pathfinding - {gmap.name}")
        self._layout(*self.screen.get_size())
        self._rebuild_algo()

    def _switch_algo(self, label: str):
        self.selected_algo = label
        self._rebuild_algo()

    def _cycle_corners(self):
        self.corners = Corners((self.corners + 1) % len(Corners))
        self.corners_override = self.corners
        self._rebuild_algo()

    def _reset_overlays(self):
        self.open_set.clear()
        self.closed_set.clear()
        self.path = []
        self._last_metrics = {
            "algo": self.algo.name,
            "popped": 0,
            "open_size": 0,
            "closed_count": 0,
            "path_len": 0,
            "total_cost": None,
        }

    def _reset(self):
        self.running = False
        self.state = "Idle"
        self.algo.reset()
        self._reset_overlays()
        self._refresh_active_states()

    def _toggle_run(self):
        if self.state in ("Done", "No path"):
            return
        self.running = not self.running
        self.state = "Running" if self.running else "Paused"
        self._refresh_active_states()

    def _bump_speed(self, dv: int):
        self.steps_per_sec = int(max(1, min(60, self.steps_per_sec + dv)))

    # ---------- drawing ----------
    def _draw(self):
        self._draw_backdrop()
        self._draw_grid()
        self._draw_metrics_and_buttons()
        pygame.display.flip()

    def _draw_backdrop(self):
        w, h = self.screen.get_size()
        top = (24, 26, 32); bot = (36, 40, 48)
        for y in range(h):
            t = y / max(1, h-1)
            c = tuple(int(a + (b - a) * t) for a, b in zip(top, bot))
            pygame.draw.line(self.screen, c, (0, y), (w, y))

    def _cell_rect(self, cell: Position) -> pygame.Rect:
        cs = self.cell_size
        ox, oy = self._grid_origin
        col, row = cell
        return pygame.Rect(ox + col*cs, oy + row*cs, cs, cs)

    def _draw_grid(self):
        grid = self.gmap.grid
        cs = self.cell_size
        max_cost = max(grid.costs) if grid.costs else 1

        for row in range(grid.height):
            for col in range(grid.width):
                rect = self._cell_rect((col, row))
                pygame.draw.rect(self.screen, _cell_color(grid.cost_of((col, row)), max_cost), rect)
                pygame.draw.rect(self.screen, BLACK, rect, 1)

        for cells, color in ((self.closed_set, NEON_MAG_A), (self.open_set, NEON_CYAN_A)):
            for c in cells:
                s = pygame.Surface((cs, cs), pygame.SRCALPHA); s.fill(color)
                self.screen.blit(s, self._cell_rect(c).topleft)

        if len(self.path) >= 2:
            pts = [self._cell_rect(c).center for c in self.path]
            pygame.draw.lines(self.screen, NEON_MINT, False, pts, 5)

        self._draw_badge(self.gmap.start, BLUE, "S")
        self._draw_badge(self.gmap.goal, RED, "G")

    def _draw_badge(self, cell: Position, color: Tuple[int,int,int], label: str):
        center = self._cell_rect(cell).center
        pygame.draw.circle(self.screen, color, center, max(6, self.cell_size//2 - 2))
        txt = self.font_small.render(label, True, WHITE)
        self.screen.blit(txt, txt.get_rect(center=center))

    # ---------- buttons + metrics ----------
    def _build_buttons(self):
        self._buttons.clear()
        self.map_buttons: Dict[str, UIButton] = {}
        rb = self._right_band
        x = rb.x + 16
        y = rb.y + 248  # below the metrics card
        w = max(160, rb.width - 32)
        h = 30
        gap = 6

        def add(label, cb, rect, *, hint="", togglable=False, store_as: Optional[str] = None):
            btn = UIButton(label, rect, cb, hint=hint, togglable=togglable)
            self._buttons.append(btn)
            if store_as:
                setattr(self, store_as, btn)
            return btn

        def row(specs):
            """Lay out (label, callback, kwargs) specs side by side on one row."""
            nonlocal y
            bw = (w - gap * (len(specs) - 1)) // len(specs)
            made = [add(label, cb, pygame.Rect(x + i * (bw + gap), y, bw, h), **kw)
                    for i, (label, cb, kw) in enumerate(specs)]
            y += h + gap
            return made

        row([("Run / Pause", self._toggle_run, dict(hint="SPACE", togglable=True, store_as="btn_run"))])
        row([("Step Once", self._do_step, dict(hint="N"))])
        row([("Reset", self._reset, dict(hint="R"))])
        row([("Algo: A*", lambda: self._switch_algo("A*"),
              dict(hint="A", togglable=True, store_as="btn_algo_a"))])
        row([("Algo: Uniform cost", lambda: self._switch_algo("Uniform cost"),
              dict(hint="D", togglable=True, store_as="btn_algo_u"))])
        row([("Corners: cycle", self._cycle_corners, dict(hint="C"))])
        row([("Slower", lambda: self._bump_speed(-1), dict(hint="-")),
             ("Faster", lambda: self._bump_speed(+1), dict(hint="+"))])

        # one toggle per map reachable from the number keys
        keys = list(self.map_files)[:9]
        if keys:
            made = row([(str(i + 1), (lambda k=key: self._switch_map(k)), dict(togglable=True))
                        for i, key in enumerate(keys)])
            self.map_buttons = dict(zip(keys, made))
        self._refresh_active_states()

    def _refresh_active_states(self):
        if hasattr(self, "btn_run"):
            self.btn_run.set_active(getattr(self, "running", False))
        selected = getattr(self, "selected_algo", ALGOS[0])
        if hasattr(self, "btn_algo_a"):
            self.btn_algo_a.set_active(selected == "A*")
        if hasattr(self, "btn_algo_u"):
            self.btn_algo_u.set_active(selected == "Uniform cost")
        for key, btn in getattr(self, "map_buttons", {}).items():
            btn.set_active(key == self.selected_map_key)

    def _draw_metrics_and_buttons(self):
        rb = self._right_band
        card = pygame.Surface((rb.width - 20, 230), pygame.SRCALPHA)
        pygame.draw.rect(card, CARD_BG, card.get_rect(), border_radius=14)
        hi = pygame.Surface((card.get_width(), 24), pygame.SRCALPHA)
        pygame.draw.rect(hi, CARD_HI, hi.get_rect(), border_radius=14)
        card.blit(hi, (0,0))
        self.screen.blit(card, (rb.x + 10, rb.y + 10))

        x0 = rb.x + 24
        y0 = rb.y + 18

        def line(text, big=False, color=TEXT_LIGHT):
            nonlocal y0
            f = self.font_big if big else self.font
            surf = f.render(text, True, color)
            self.screen.blit(surf, (x0, y0))
            y0 += surf.get_height() + 6

        m = self._last_metrics
        line("Metrics", big=True, color=ACCENT_GOLD)
        line(f"Popped: {m.get('popped', 0)}")
        line(f"Open: {m.get('open_size', 0)}")
        line(f"Closed: {m.get('closed_count', 0)}")
        line(f"Path Len: {m.get('path_len', 0)}")
        if m.get("total_cost") is not None:
            line(f"Total Cost: {m['total_cost']:.1f}")
        line("-" * 26)
        line(f"Map: {self.gmap.name}")
        line(f"Algo: {m.get('algo', self.selected_algo)}  [{self.state}]")
        line(f"Speed: {self.steps_per_sec} steps/s")

        for b in self._buttons:
            b.draw(self.screen, self.font, self.font_small)


# ---------- main ----------
def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    map_files = list_maps(MAP_DIR)
    if not map_files:
        logger.error("No maps found in %s", MAP_DIR)
        sys.exit(1)

    key = resolve_option("map", next(iter(map_files)))
    corners = resolve_option("corners")
    try:
        gmap = load_map(map_files[key])
        override = Corners.parse(corners) if corners else None
    except (KeyError, OSError, ValueError) as ex:
        logger.error("Failed to load map %s: %s", key, ex)
        sys.exit(1)
    Viewer(gmap, map_files, override, map_key=key).run()

if __name__ == "__main__":
    main()
