from __future__ import annotations

from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table

from heromom.application.dtos import AdventureStatusView, TickResult
from heromom.application.services.equipment_service import effective_stats
from heromom.application.services.quest_service import describe_objective
from heromom.domain.models.game_state import GameState
from heromom.domain.models.materials import MaterialKey


_BORDER_SON = "yellow"
_BORDER_HOME = "green"
_BORDER_QUEST = "magenta"
_BORDER_ADVENTURE = "cyan"

_SHOWN_MATERIALS = (
    MaterialKey.GOLD,
    MaterialKey.WHEAT,
    MaterialKey.WOOD,
    MaterialKey.SEED,
    MaterialKey.REFINING_STONE,
    MaterialKey.ENHANCEMENT_STONES,
)


def _bar(value: float, maximum: float, width: int = 20) -> str:
    if maximum <= 0:
        return "-" * width
    filled = int(round(width * max(0.0, min(1.0, value / maximum))))
    return "#" * filled + "." * (width - filled)


def son_panel(state: GameState) -> Panel:
    son = state.son
    stats = son.stats
    table = Table.grid(padding=(0, 1))
    table.add_column(style="bold")
    table.add_column()
    table.add_row("Level", f"{stats.level}  exp {stats.exp}/{stats.max_exp}")
    table.add_row("HP", f"{_bar(stats.hp, stats.max_hp)} {int(stats.hp)}/{stats.max_hp}")
    table.add_row("Hunger", f"{_bar(stats.hunger, stats.max_hunger)} {stats.hunger:.1f}")
    table.add_row("Mood", str(son.dialogue_state.mood))
    table.add_row("Doing", f"{son.current_action.value.lower()} ({son.action_timer:.0f}s)")
    table.add_row("Stats", f"STR {stats.strength}  DEF {stats.defense}  AGI {stats.agility}  INT {stats.intellect}")
    for item in son.equipment.worn():
        bonus = ", ".join(f"{key} {value}" for key, value in effective_stats(item).items())
        table.add_row(item.slot.value.title(), f"{item.name} +{item.enhance_level} [{item.durability}/{item.max_durability}] {bonus}")
    if son.dialogue:
        table.add_row("Says", f"[italic]\"{son.dialogue}\"[/italic]")
    active = son.dialogue_state.active_dialogue
    if active is not None:
        choices = " / ".join(f"{choice.id}: {choice.text}" for choice in active.template.choices)
        table.add_row("Asks", f"{active.template.son_text}  [dim]{choices}[/dim]")
    return Panel(table, title="[bold yellow]Your Son[/bold yellow]", border_style=_BORDER_SON)


def home_panel(state: GameState) -> Panel:
    home = state.home
    table = Table(show_header=True, header_style="bold green", expand=True)
    table.add_column("Place")
    table.add_column("Items")
    table.add_row("Table", ", ".join(item.name for item in home.table) or "-")
    table.add_row("Potion shelf", ", ".join(item.name for item in home.potion_shelf) or "-")
    table.add_row("Desk", ", ".join(item.name for item in home.desk) or "-")
    table.add_row("Rack", ", ".join(item.name for item in home.equipment_rack) or "-")
    materials = "  ".join(f"{key.value} {state.inventory.count(key)}" for key in _SHOWN_MATERIALS)
    table.add_row("Materials", materials)
    return Panel(table, title="[bold green]Home[/bold green]", border_style=_BORDER_HOME)


def quest_panel(state: GameState) -> Panel:
    log = state.son.quest_state
    if not log.active_quests:
        body = "[dim]No promises right now.[/dim]"
        return Panel(body, title="[bold magenta]Quests[/bold magenta]", border_style=_BORDER_QUEST)
    table = Table(show_header=True, header_style="bold magenta", expand=True)
    table.add_column("Quest")
    table.add_column("Progress")
    table.add_column("Due in", justify="right")
    for quest in log.active_quests:
        progress = "; ".join(
            f"{describe_objective(objective)} {objective.current_amount}/{objective.target_amount}"
            for objective in quest.objectives
        )
        table.add_row(quest.request_text, progress, f"{max(0.0, quest.deadline - state.game_time):.0f}s")
    return Panel(table, title="[bold magenta]Quests[/bold magenta]", border_style=_BORDER_QUEST)


def adventure_panel(status: AdventureStatusView) -> Panel:
    if not status.active:
        return Panel("[dim]At home.[/dim]", title="[bold cyan]Adventure[/bold cyan]", border_style=_BORDER_ADVENTURE)
    lines = [
        f"{_bar(status.progress, 1.0)} {status.progress * 100:.0f}%  ({status.remaining_ms // 1000}s left)",
        f"Battles reported: {status.battles_reported}/{status.total_battles}",
    ]
    for letter in status.letters[-3:]:
        lines.append(f"[italic]✉ {letter.text}[/italic]")
    return Panel("\n".join(lines), title="[bold cyan]Adventure[/bold cyan]", border_style=_BORDER_ADVENTURE)


def render_status(console: Console, state: GameState, status: AdventureStatusView, tick: TickResult | None = None) -> None:
    title = f"Day clock {state.game_time:.0f}s"
    parts = [son_panel(state), home_panel(state), quest_panel(state), adventure_panel(status)]
    if tick is not None and tick.messages:
        parts.append(Panel("\n".join(tick.messages), title="[bold]News[/bold]"))
    console.print(Panel(Group(*parts), title=f"[bold yellow]{title}[/bold yellow]"))
