"""
plain.py

PURPOSE: Plain text output formatting for the CLI.
DEPENDENCIES: rich

ARCHITECTURE NOTES:
This module provides formatted console output using Rich.
It handles:
- Oracle answers and Dungeon Master narration
- Character sheets and dice rolls
- Save slot listings
- Messages, errors and the end-of-game banner

Player and oracle text can contain square brackets, so it is escaped
or wrapped in Text before it reaches the console; only the styling
added here is parsed as markup.
"""

from collections.abc import Sequence

from rich.console import Console
from rich.markdown import Markdown
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from oracle_games.models.character import Ability, CharacterSheet, Skill
from oracle_games.models.dice import DiceRoll
from oracle_games.models.questions import Answer
from oracle_games.storage.store import SaveSummary

# Global console instance
console = Console()

_ANSWER_STYLES = {
    Answer.YES: "bold green",
    Answer.NO: "bold red",
    Answer.UNKNOWN: "bold yellow",
}


def print_message(text: str) -> None:
    """Print a normal game message."""
    console.print(escape(text))


def print_error(text: str) -> None:
    """Print an error message."""
    console.print(f"[red]{escape(text)}[/red]")


def print_warning(text: str) -> None:
    console.print(f"[yellow]{escape(text)}[/yellow]")


def print_success(text: str) -> None:
    """Print a success message."""
    console.print(f"[green]{escape(text)}[/green]")


def print_prompt(label: str = "") -> str:
    """Print the input prompt and get user input."""
    return console.input(f"[bold cyan]{label}>[/bold cyan] ")


def print_title(title: str) -> None:
    """Print a game title in a panel."""
    panel = Panel(
        Text(title, justify="center", style="bold"),
        border_style="blue",
    )
    console.print(panel)


def print_help(text: str) -> None:
    """Print help text."""
    console.print(Markdown(text))


def print_narration(text: str) -> None:
    """Print the Dungeon Master's narration."""
    # Narration often comes back with markdown emphasis and lists
    console.print(Markdown(text))


def print_answer(answer: Answer, remaining: int) -> None:
    """Print the oracle's answer and the question budget left."""
    label = Text(answer.value.upper(), style=_ANSWER_STYLES[answer])
    label.append(f"  ({remaining} question{'s' if remaining != 1 else ''} left)", style="dim")
    console.print(label)


def print_dice_roll(roll: DiceRoll) -> None:
    """Print each die and the total."""
    if roll.count == 1:
        console.print(f"[bold]{roll.notation}[/bold]: {roll.total}")
        return
    results = ", ".join(str(value) for value in roll.rolls)
    console.print(f"[bold]{roll.notation}[/bold]: {results}  = [bold]{roll.total}[/bold]")


def print_character_sheet(character: CharacterSheet) -> None:
    """Print a character sheet as a panel of tables."""
    abilities = Table(show_header=True, header_style="bold", box=None)
    for ability in Ability:
        abilities.add_column(ability.abbreviation, justify="center")
    abilities.add_row(
        *(
            f"{character.abilities.score(ability)} ({character.abilities.modifier(ability):+d})"
            for ability in Ability
        )
    )

    skills = ", ".join(
        f"{skill.value} {character.skill_modifier(skill):+d}"
        for skill in sorted(character.proficiencies, key=lambda s: s.value)
    )

    body = Table.grid(padding=(0, 1))
    body.add_column(style="bold")
    body.add_column()
    body.add_row("Background", character.background.value)
    body.add_row("Hit Points", f"{character.hit_points}/{character.max_hit_points}")
    body.add_row("Armor Class", str(character.armor_class))
    body.add_row("Proficiency", f"{character.proficiency_bonus:+d}")
    body.add_row("Skills", skills or "(none)")
    body.add_row("Equipment", ", ".join(character.inventory) or "(none)")
    body.add_row("Gold", f"{character.gold} gp")

    outer = Table.grid()
    outer.add_row(abilities)
    outer.add_row("")
    outer.add_row(body)

    console.print(Panel(outer, title=escape(character.describe()), border_style="magenta"))


def print_skill_list(skills: Sequence[Skill]) -> None:
    for index, skill in enumerate(skills, start=1):
        console.print(f"  {index:2d}. {skill.value} [dim]({skill.ability.abbreviation})[/dim]")


def print_saves(saves: Sequence[SaveSummary]) -> None:
    """Print a table of save slots."""
    if not saves:
        print_message("No saved games.")
        return

    table = Table(title="Saved Games")
    table.add_column("Slot", style="bold cyan")
    table.add_column("Game")
    table.add_column("Saved")
    table.add_column("Details")
    for save in saves:
        if save.error:
            table.add_row(Text(save.slot), "?", "", Text(save.error, style="red"))
            continue
        game = "20 Questions" if save.kind == "questions" else "Adventure"
        saved = save.saved_at.strftime("%Y-%m-%d %H:%M") if save.saved_at else ""
        table.add_row(Text(save.slot), game, saved, Text(save.description))
    console.print(table)


def print_game_over(won: bool, message: str) -> None:
    """Print game over message."""
    if won:
        style = "bold green"
        border = "green"
    else:
        style = "bold red"
        border = "red"

    panel = Panel(
        Text(message, justify="center", style=style),
        title="Game Over",
        border_style=border,
    )
    console.print(panel)
