"""Pygame window for the Fallgrain simulation.

Handles mouse painting and keyboard selection of material and brush,
runs one engine frame per display frame, draws every cell as a filled
square and plays contact sounds through ``pygame.mixer``.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

import pygame

if TYPE_CHECKING:
    from fallgrain.simulation.engine import SimulationEngine
    from fallgrain.simulation.movement import Contact
    from fallgrain.world.grid import Grid

from fallgrain.simulation.brush import InputState

logger = logging.getLogger(__name__)

# Colour palette
_BG = (0, 0, 0)
_PANEL_BG = (25, 25, 30)
_TEXT = (200, 200, 200)

_NUMBER_KEYS = (
    pygame.K_1,
    pygame.K_2,
    pygame.K_3,
    pygame.K_4,
    pygame.K_5,
    pygame.K_6,
    pygame.K_7,
    pygame.K_8,
    pygame.K_9,
)


def pixel_to_cell(
    px: int,
    py: int,
    cell_size: int,
    width: int,
    height: int,
) -> tuple[int, int]:
    """Convert window pixels to grid coordinates, clamped to the grid."""
    x = max(0, min(px // cell_size, width - 1))
    y = max(0, min(py // cell_size, height - 1))
    return x, y


class SoundBank:
    """Lazily loaded contact sounds.

    A sound that fails to load is reported once and then stays silent.
    """

    def __init__(self, root: Path | None = None) -> None:
        self.root = root
        self.enabled = False
        self._cache: dict[str, pygame.mixer.Sound | None] = {}

    def init(self) -> None:
        try:
            if not pygame.mixer.get_init():
                pygame.mixer.init()
        except pygame.error as exc:
            logger.warning("Audio disabled: %s", exc)
            return
        self.enabled = True

    def play(self, resource: str) -> None:
        if not self.enabled:
            return
        if resource not in self._cache:
            path = Path(resource)
            if self.root is not None and not path.is_absolute():
                path = self.root / path
            try:
                self._cache[resource] = pygame.mixer.Sound(str(path))
            except (pygame.error, FileNotFoundError) as exc:
                logger.warning("Cannot load sound %s: %s", path, exc)
                self._cache[resource] = None
        sound = self._cache[resource]
        if sound is not None:
            sound.play()


class PygameRenderer:
    """Renders a SimulationEngine into a Pygame window.

    Attributes:
        engine: The simulation engine to visualise.
        cell_size: Pixel size of each grid cell.
        screen: The Pygame display surface.
        state: Brush input forwarded to the engine every frame.
    """

    def __init__(
        self,
        engine: SimulationEngine,
        sound_root: Path | None = None,
    ) -> None:
        """Initialise the renderer.

        Args:
            engine: The simulation engine to render.
            sound_root: Directory relative sound resources resolve against.
        """
        self.engine = engine
        self.cell_size = engine.config.cell_size
        self._materials = engine.selectable_materials()
        self._material_index = 1 if len(self._materials) > 1 else 0
        self.state = InputState(material=self._materials[self._material_index])

        w = engine.grid.width * self.cell_size
        h = engine.grid.height * self.cell_size
        self._panel_width = 220
        self._win_w = w + self._panel_width
        self._win_h = h

        pygame.init()
        self.screen = pygame.display.set_mode((self._win_w, self._win_h))
        pygame.display.set_caption("Fallgrain")
        self.clock = pygame.time.Clock()
        self.font = pygame.font.SysFont("monospace", 14)
        self.sounds = SoundBank(sound_root)
        self.sounds.init()
        self.running = True
        self.paused = False
        self._button_held = False

    def run(self, fps: int = 60) -> None:
        """Main loop: handle events, step sim, render.

        Args:
            fps: Target frames per second.
        """
        while self.running:
            self.clock.tick(fps)
            self._handle_events()
            self._update_cursor()
            if self.paused:
                self.engine.apply_input(self.state)
                self._draw(self.engine.grid)
            else:
                contacts = self.engine.frame(self.state, on_render=self._draw)
                self._play_contacts(contacts)

        pygame.quit()

    def _select_material(self, index: int) -> None:
        if 0 <= index < len(self._materials):
            self._material_index = index
            self.state.material = self._materials[index]

    def _handle_events(self) -> None:
        """Process Pygame input events."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False
            elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                self._button_held = True
            elif event.type == pygame.MOUSEBUTTONUP and event.button == 1:
                self._button_held = False
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    self.running = False
                elif event.key == pygame.K_SPACE:
                    self.paused = not self.paused
                elif event.key == pygame.K_c:
                    self.engine.clear()
                elif event.key == pygame.K_b:
                    self.state.brush = self.state.brush.next()
                elif event.key == pygame.K_TAB:
                    self._select_material(
                        (self._material_index + 1) % len(self._materials),
                    )
                elif event.key in _NUMBER_KEYS:
                    self._select_material(_NUMBER_KEYS.index(event.key))

    def _update_cursor(self) -> None:
        px, py = pygame.mouse.get_pos()
        grid = self.engine.grid
        over_grid = px < grid.width * self.cell_size
        # Paint resumes when a held button drags back from the info panel
        self.state.painting = self._button_held and over_grid
        if not over_grid:
            return
        self.state.cursor_x, self.state.cursor_y = pixel_to_cell(
            px,
            py,
            self.cell_size,
            grid.width,
            grid.height,
        )

    def _play_contacts(self, contacts: list[Contact]) -> None:
        played: set[str] = set()
        for contact in contacts:
            if contact.sound is not None and contact.sound not in played:
                played.add(contact.sound)
                self.sounds.play(contact.sound)

    def _draw(self, grid: Grid) -> None:
        """Render one frame."""
        self.screen.fill(_BG)
        self._draw_cells(grid)
        self._draw_info_panel()
        pygame.display.flip()

    def _draw_cells(self, grid: Grid) -> None:
        """Draw every occupied cell as a filled square."""
        cs = self.cell_size
        for x, y, cell in grid.cells_of():
            if cell.is_empty:
                continue
            pygame.draw.rect(self.screen, cell.color, (x * cs, y * cs, cs, cs))

    def _draw_info_panel(self) -> None:
        """Draw a stats panel on the right side of the window."""
        panel_x = self.engine.grid.width * self.cell_size
        pygame.draw.rect(
            self.screen,
            _PANEL_BG,
            (panel_x, 0, self._panel_width, self._win_h),
        )
        x = panel_x + 10
        y = 10

        lines = [
            f"Tick: {self.engine.tick}",
            f"FPS: {self.clock.get_fps():.0f}",
            f"{'PAUSED' if self.paused else 'RUNNING'}",
            "",
            f"Brush: {self.state.brush.label}",
            "",
            "--- Materials ---",
        ]
        for i, name in enumerate(self._materials):
            marker = ">" if i == self._material_index else " "
            key = str(i + 1) if i < len(_NUMBER_KEYS) else " "
            lines.append(f"{marker}{key} {name}")

        counts = self.engine.grid.counts()
        lines += ["", "--- Particles ---"]
        for name, count in sorted(counts.items()):
            lines.append(f"  {name}: {count}")

        lines += [
            "",
            "--- Controls ---",
            "LMB: paint",
            "1-9/TAB: material",
            "B: brush size",
            "C: clear",
            "SPACE: pause",
            "ESC: quit",
        ]

        for line in lines:
            surf = self.font.render(line, True, _TEXT)
            self.screen.blit(surf, (x, y))
            y += 18

