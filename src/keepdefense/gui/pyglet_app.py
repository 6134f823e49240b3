from __future__ import annotations

import logging
from typing import Callable

import pyglet
from pyglet.window import key

from .ui_layout import MenuButton, SidebarLayout
from ..core.config_loader import GameConfig
from ..core.engine import Engine
from ..core.model.enemies import EnemyType
from ..core.model.map import SlotState, Tile
from ..core.model.towers import get_tower_def, list_tower_defs
from ..core.rules.placement import upgrade_cost
from ..core.snapshot import Snapshot


logger = logging.getLogger(__name__)

SIDEBAR_WIDTH = 220
MENU_BUTTONS = len(list_tower_defs())
ENEMY_RADIUS = 10
HP_BAR_WIDTH = 20
PROJECTILE_RADIUS = 3

SPEED_OPTIONS: tuple[tuple[str, float], ...] = (
    ("0.5x", 0.5),
    ("1x", 1.0),
    ("2x", 2.0),
    ("4x", 4.0),
    ("8x", 8.0),
)

TILE_COLORS: dict[Tile, tuple[int, int, int]] = {
    Tile.GRASS: (58, 110, 50),
    Tile.PATH: (140, 110, 70),
    Tile.KEEP: (120, 120, 120),
    Tile.WALL: (70, 70, 70),
}
ENEMY_COLORS: dict[int, tuple[int, int, int]] = {
    EnemyType.GOBLIN: (90, 170, 60),
    EnemyType.ORC: (50, 100, 40),
    EnemyType.SKELETON: (225, 225, 210),
    EnemyType.WOLF: (130, 100, 70),
}
KEEP_COLOR = (179, 57, 57)
GOLD_COLOR = (212, 175, 55)


def hex_to_rgb(color: str) -> tuple[int, int, int]:
    value = color.lstrip("#")
    if len(value) == 3:
        value = "".join(ch * 2 for ch in value)
    if len(value) != 6:
        raise ValueError(f"Invalid color: {color!r}")
    return int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16)


class KeepDefenseGui:
    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        self.map_data = engine.state.map
        self._world_width, self._world_height = self.map_data.world_size()
        self._sidebar_x = self._world_width
        self._tile = self.map_data.tile_size

        self.window = pyglet.window.Window(
            width=self._world_width + SIDEBAR_WIDTH,
            height=self._world_height,
            caption="Keep Defense",
        )
        self.map_batch = pyglet.graphics.Batch()
        self.batch = pyglet.graphics.Batch()
        self.ui_batch = pyglet.graphics.Batch()

        self._tile_shapes: list[pyglet.shapes.Rectangle] = []
        self._slot_shapes: dict[int, pyglet.shapes.BorderedRectangle] = {}
        self._tower_shapes: dict[int, tuple[pyglet.shapes.Rectangle, pyglet.text.Label]] = {}
        self._enemy_shapes: dict[int, tuple[pyglet.shapes.Circle, pyglet.shapes.Rectangle, pyglet.shapes.Rectangle]] = {}
        self._projectile_shapes: dict[int, pyglet.shapes.Circle] = {}
        self._keep_shape: pyglet.shapes.BorderedRectangle | None = None
        self._keep_label: pyglet.text.Label | None = None
        self._build_map()

        self._speed_index = 1
        self._menu: tuple[str, int] | None = None
        self._menu_actions: list[Callable[[], None] | None] = [None] * MENU_BUTTONS
        self._build_sidebar_ui()

        self.window.push_handlers(
            on_draw=self.on_draw,
            on_mouse_press=self.on_mouse_press,
            on_key_press=self.on_key_press,
        )
        pyglet.clock.schedule_interval(self.update, 1 / 60.0)
        self._sync(self.engine.observe())

    def _to_screen(self, x: float, y: float) -> tuple[float, float]:
        return x, self._world_height - y

    def _cell_rect(self, col: int, row: int, inset: float = 0.0) -> tuple[float, float, float, float]:
        x = col * self._tile + inset
        y = self._world_height - (row + 1) * self._tile + inset
        size = self._tile - 2 * inset
        return x, y, size, size

    def _build_map(self) -> None:
        for shape in self._tile_shapes:
            shape.delete()
        self._tile_shapes = []
        for row in range(self.map_data.rows):
            for col in range(self.map_data.cols):
                x, y, w, h = self._cell_rect(col, row)
                color = TILE_COLORS[self.map_data.tile(col, row)]
                self._tile_shapes.append(pyglet.shapes.Rectangle(x, y, w, h, color=color, batch=self.map_batch))

        if self._keep_shape is not None:
            self._keep_shape.delete()
            self._keep_label.delete()
        keep_col, keep_row = self.map_data.keep_cell
        left = keep_col * self._tile - self._tile / 2
        top = keep_row * self._tile - self._tile / 2
        size = self._tile * 2
        self._keep_shape = pyglet.shapes.BorderedRectangle(
            left,
            self._world_height - top - size,
            size,
            size,
            border=2,
            color=KEEP_COLOR,
            border_color=(255, 255, 255),
            batch=self.map_batch,
        )
        self._keep_label = pyglet.text.Label(
            "KEEP",
            x=left + size / 2,
            y=self._world_height - top - size / 2,
            anchor_x="center",
            anchor_y="center",
            font_size=10,
            color=(255, 255, 255, 255),
            batch=self.map_batch,
        )

        for shape in self._slot_shapes.values():
            shape.delete()
        self._slot_shapes = {}
        for slot in self.engine.state.slots:
            x, y, w, h = self._cell_rect(slot.col, slot.row, inset=2)
            self._slot_shapes[slot.slot_id] = pyglet.shapes.BorderedRectangle(
                x,
                y,
                w,
                h,
                border=1,
                color=(0, 0, 0),
                border_color=(85, 85, 85),
                batch=self.batch,
            )

    def _build_sidebar_ui(self) -> None:
        self._sidebar_bg = pyglet.shapes.Rectangle(
            self._sidebar_x,
            0,
            SIDEBAR_WIDTH,
            self._world_height,
            color=(34, 36, 40),
            batch=self.ui_batch,
        )
        layout = SidebarLayout(
            x=self._sidebar_x,
            y_top=self._world_height,
            width=SIDEBAR_WIDTH,
            spacing=12,
        )
        text_color = (240, 240, 240, 255)
        self._gold_label = layout.add_label("", font_size=14, color=text_color, batch=self.ui_batch)
        self._lives_label = layout.add_label("", font_size=14, color=text_color, batch=self.ui_batch)
        self._wave_label = layout.add_label("", font_size=14, color=text_color, batch=self.ui_batch)
        self._speed_label = layout.add_label("", font_size=10, color=(200, 200, 200, 255), batch=self.ui_batch)
        layout.add_spacer(8)
        self._menu_title = layout.add_label("", font_size=12, color=(200, 200, 200, 255), batch=self.ui_batch)
        self._menu_buttons: list[MenuButton] = [
            layout.add_button("", batch=self.ui_batch) for _ in range(MENU_BUTTONS)
        ]
        info_x, info_y, info_w, info_h = layout.add_box(90)
        self._info_label = pyglet.text.Label(
            "",
            x=info_x,
            y=info_y + info_h,
            width=int(info_w),
            multiline=True,
            anchor_x="left",
            anchor_y="top",
            font_size=10,
            color=(220, 220, 220, 255),
            batch=self.ui_batch,
        )
        self._help_label = layout.add_label(
            "R: new game   Esc: close menu   +/-: speed",
            font_size=8,
            color=(150, 150, 150, 255),
            batch=self.ui_batch,
        )

        self._game_over_overlay = pyglet.shapes.Rectangle(
            0,
            0,
            self._world_width,
            self._world_height,
            color=(0, 0, 0),
            batch=self.ui_batch,
        )
        self._game_over_overlay.opacity = 0
        self._game_over_label = pyglet.text.Label(
            "GAME OVER - press R",
            x=self._world_width / 2,
            y=self._world_height / 2,
            anchor_x="center",
            anchor_y="center",
            font_size=36,
            color=(220, 30, 30, 0),
            batch=self.ui_batch,
        )
        self._refresh_speed_label()
        self._refresh_menu()

    def update(self, dt: float) -> None:
        speed = SPEED_OPTIONS[self._speed_index][1]
        outcome = self.engine.step(max(0.0, dt) * speed)
        if outcome is not None:
            logger.info("game over at wave %s", self.engine.state.wave)
        snapshot = self.engine.observe()
        self._sync(snapshot)
        self._refresh_menu()

    def _sync(self, snapshot: Snapshot) -> None:
        self._gold_label.text = f"Gold: {snapshot.gold}"
        self._lives_label.text = f"Lives: {snapshot.lives}"
        self._wave_label.text = f"Wave: {snapshot.wave}   Time: {snapshot.time:.0f}s"
        self._sync_slots(snapshot)
        self._sync_towers(snapshot)
        self._sync_enemies(snapshot)
        self._sync_projectiles(snapshot)
        self._set_game_over_overlay(not snapshot.running)

    def _sync_slots(self, snapshot: Snapshot) -> None:
        for view in snapshot.slots:
            shape = self._slot_shapes.get(view.slot_id)
            if shape is None:
                continue
            if view.state == SlotState.LOCKED.value:
                shape.color = (0, 0, 0)
                shape.border_color = (85, 85, 85)
                shape.opacity = 128
            elif view.state == SlotState.EMPTY.value:
                shape.color = GOLD_COLOR
                shape.border_color = GOLD_COLOR
                shape.opacity = 70
            else:
                shape.opacity = 0

    def _sync_towers(self, snapshot: Snapshot) -> None:
        seen: set[int] = set()
        for view in snapshot.towers:
            seen.add(view.tower_id)
            shapes = self._tower_shapes.get(view.tower_id)
            if shapes is None:
                x, y, w, h = self._cell_rect(view.col, view.row, inset=4)
                rect = pyglet.shapes.Rectangle(
                    x, y, w, h, color=hex_to_rgb(get_tower_def(view.kind).color), batch=self.batch
                )
                label = pyglet.text.Label(
                    "",
                    x=x - 2,
                    y=y - 2,
                    anchor_x="left",
                    anchor_y="bottom",
                    font_size=7,
                    color=(255, 255, 255, 255),
                    batch=self.batch,
                )
                shapes = (rect, label)
                self._tower_shapes[view.tower_id] = shapes
            shapes[1].text = f"Lv{view.level}"
        for tower_id in [t for t in self._tower_shapes if t not in seen]:
            for shape in self._tower_shapes.pop(tower_id):
                shape.delete()

    def _sync_enemies(self, snapshot: Snapshot) -> None:
        seen: set[int] = set()
        for view in snapshot.enemies:
            seen.add(view.enemy_id)
            x, y = self._to_screen(view.x, view.y)
            shapes = self._enemy_shapes.get(view.enemy_id)
            if shapes is None:
                body = pyglet.shapes.Circle(
                    x, y, ENEMY_RADIUS, color=ENEMY_COLORS.get(view.type_id, (200, 0, 0)), batch=self.batch
                )
                bar_bg = pyglet.shapes.Rectangle(0, 0, HP_BAR_WIDTH, 4, color=(255, 0, 0), batch=self.batch)
                bar_fg = pyglet.shapes.Rectangle(0, 0, HP_BAR_WIDTH, 4, color=(0, 255, 0), batch=self.batch)
                shapes = (body, bar_bg, bar_fg)
                self._enemy_shapes[view.enemy_id] = shapes
            body, bar_bg, bar_fg = shapes
            body.x, body.y = x, y
            bar_x = x - HP_BAR_WIDTH / 2
            bar_y = y + ENEMY_RADIUS + 6
            bar_bg.x, bar_bg.y = bar_x, bar_y
            bar_fg.x, bar_fg.y = bar_x, bar_y
            ratio = max(0.0, view.hp) / view.max_hp if view.max_hp > 0 else 0.0
            bar_fg.width = HP_BAR_WIDTH * min(1.0, ratio)
        for enemy_id in [e for e in self._enemy_shapes if e not in seen]:
            for shape in self._enemy_shapes.pop(enemy_id):
                shape.delete()

    def _sync_projectiles(self, snapshot: Snapshot) -> None:
        seen: set[int] = set()
        for view in snapshot.projectiles:
            seen.add(view.projectile_id)
            x, y = self._to_screen(view.x, view.y)
            shape = self._projectile_shapes.get(view.projectile_id)
            if shape is None:
                shape = pyglet.shapes.Circle(
                    x, y, PROJECTILE_RADIUS, color=hex_to_rgb(view.color), batch=self.batch
                )
                self._projectile_shapes[view.projectile_id] = shape
            shape.x, shape.y = x, y
        for projectile_id in [p for p in self._projectile_shapes if p not in seen]:
            self._projectile_shapes.pop(projectile_id).delete()

    def _clear_entities(self) -> None:
        for shapes in self._tower_shapes.values():
            for shape in shapes:
                shape.delete()
        for shapes in self._enemy_shapes.values():
            for shape in shapes:
                shape.delete()
        for shape in self._projectile_shapes.values():
            shape.delete()
        self._tower_shapes = {}
        self._enemy_shapes = {}
        self._projectile_shapes = {}

    def on_draw(self) -> None:
        self.window.clear()
        self.map_batch.draw()
        self.batch.draw()
        self.ui_batch.draw()

    def on_mouse_press(self, x: int, y: int, button: int, modifiers: int) -> None:
        for idx, menu_button in enumerate(self._menu_buttons):
            if menu_button.contains(x, y):
                callback = self._menu_actions[idx]
                if menu_button.enabled and callback is not None:
                    callback()
                    self._sync(self.engine.observe())
                    self._refresh_menu()
                return
        if x >= self._sidebar_x:
            return

        self._menu = None
        if self.engine.state.game_over:
            self._refresh_menu()
            return
        cell = self.map_data.cell_at(*self._to_screen(x, y))
        if cell is not None:
            self._open_menu_at(*cell)
        self._refresh_menu()

    def on_key_press(self, symbol: int, modifiers: int):
        if symbol == key.ESCAPE:
            self._menu = None
            self._refresh_menu()
            return pyglet.event.EVENT_HANDLED
        if symbol == key.R:
            self._restart()
            return pyglet.event.EVENT_HANDLED
        if symbol in (key.PLUS, key.EQUAL, key.NUM_ADD):
            self._set_speed_index(self._speed_index + 1)
            return pyglet.event.EVENT_HANDLED
        if symbol in (key.MINUS, key.NUM_SUBTRACT):
            self._set_speed_index(self._speed_index - 1)
            return pyglet.event.EVENT_HANDLED
        return None

    def _restart(self) -> None:
        seed = self.engine.new_game()
        logger.info("restarted with seed=%s", seed)
        self.map_data = self.engine.state.map
        self._menu = None
        self._clear_entities()
        self._build_map()
        self._sync(self.engine.observe())
        self._refresh_menu()

    def _set_speed_index(self, index: int) -> None:
        clamped = max(0, min(index, len(SPEED_OPTIONS) - 1))
        if clamped == self._speed_index:
            return
        self._speed_index = clamped
        self._refresh_speed_label()

    def _refresh_speed_label(self) -> None:
        self._speed_label.text = f"Speed: {SPEED_OPTIONS[self._speed_index][0]}"

    def _open_menu_at(self, col: int, row: int) -> None:
        state = self.engine.state
        for slot in state.slots:
            if slot.col != col or slot.row != row:
                continue
            if slot.tower_id is not None:
                self._menu = ("tower", slot.tower_id)
            elif slot.state == SlotState.LOCKED:
                self._menu = ("locked", slot.slot_id)
            elif slot.state == SlotState.EMPTY:
                self._menu = ("build", slot.slot_id)
            return

    def _menu_target_valid(self) -> bool:
        if self._menu is None:
            return False
        state = self.engine.state
        kind, target = self._menu
        if kind == "tower":
            return target in state.towers
        slot = state.slots[target] if 0 <= target < len(state.slots) else None
        if slot is None:
            return False
        if kind == "locked":
            return slot.state == SlotState.LOCKED
        return slot.state == SlotState.EMPTY

    def _refresh_menu(self) -> None:
        if not self._menu_target_valid():
            self._menu = None
        self._menu_actions = [None] * MENU_BUTTONS
        for menu_button in self._menu_buttons:
            menu_button.set_state(visible=False)
        self._info_label.text = ""

        if self._menu is None:
            self._menu_title.text = "Click a slot"
            return

        engine = self.engine
        kind, target = self._menu
        if kind == "locked":
            self._menu_title.text = "Locked slot"
            self._menu_buttons[0].set_state(
                text=f"Unlock slot ({engine.config.slot_unlock_cost}g)",
                enabled=engine.can_unlock(target) is None,
                visible=True,
            )
            self._menu_actions[0] = lambda: self._run_command("unlock", engine.unlock_slot(target))
        elif kind == "build":
            self._menu_title.text = "Build tower"
            for idx, tower_def in enumerate(list_tower_defs()):
                self._menu_buttons[idx].set_state(
                    text=f"{tower_def.name} ({tower_def.cost}g)",
                    enabled=engine.can_build(target, tower_def.kind) is None,
                    visible=True,
                )
                self._menu_actions[idx] = (
                    lambda k=tower_def.kind: self._run_command("build", engine.build_tower(target, k))
                )
        else:
            tower = engine.state.towers.get(target)
            tower_def = get_tower_def(tower.kind)
            self._menu_title.text = f"{tower_def.name} Lv{tower.level}"
            self._menu_buttons[0].set_state(
                text=f"Upgrade ({upgrade_cost(tower)}g)",
                enabled=engine.can_upgrade(target) is None,
                visible=True,
            )
            self._menu_actions[0] = lambda: self._run_command("upgrade", engine.upgrade_tower(target))
            self._info_label.text = (
                f"Damage: {tower.damage:.1f}\nRange: {tower.range:.0f}\nShots/s: {tower.fire_rate:g}"
            )

    def _run_command(self, name: str, result) -> None:
        if result.ok:
            logger.info("%s ok gold=%s", name, result.gold)
        else:
            logger.info("%s rejected: %s", name, result.error.value)

    def _set_game_over_overlay(self, active: bool) -> None:
        if active:
            self._game_over_overlay.opacity = 150
            self._game_over_label.color = (220, 30, 30, 255)
        else:
            self._game_over_overlay.opacity = 0
            self._game_over_label.color = (220, 30, 30, 0)


def run(config: GameConfig | None = None, *, seed: int | None = None) -> None:
    _app = KeepDefenseGui(Engine(config, seed=seed))
    pyglet.app.run()
