"""
cli.py

PURPOSE: Command-line interface for the oracle games.
DEPENDENCIES: typer, rich

ARCHITECTURE NOTES:
The CLI provides commands for:
- new questions / new adventure: Start a game in a save slot
- continue: Resume a saved game
- saves / delete: Manage save slots
- roll: Roll dice without starting a game
- config: Show the effective configuration

Interactive loops run on one asyncio.Runner so every oracle round-trip
shares an event loop (and the Anthropic client's connection pool).
GameError is caught at the loop boundary: the message is shown and the
player keeps playing.
"""

import asyncio
import random
from collections.abc import Callable, Coroutine, Sequence
from typing import Annotated, Any, TypeVar

import typer
from rich.console import Console
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.prompt import Confirm, IntPrompt, Prompt

from oracle_games import __version__
from oracle_games.config import Settings, get_settings
from oracle_games.engine.adventure import AdventureEngine
from oracle_games.engine.character_builder import (
    ScoreMethod,
    assign_scores,
    build_character,
    generate_scores,
    skill_choice_count,
    skill_options,
)
from oracle_games.engine.dice import parse_notation, roll_notation
from oracle_games.engine.questions import ExhaustionPolicy, QuestionsEngine
from oracle_games.errors import (
    GameError,
    InvalidInput,
    OracleRateLimited,
    OracleUnavailable,
    SaveError,
)
from oracle_games.llm.anthropic import create_anthropic_client
from oracle_games.models.adventure import AdventureSession
from oracle_games.models.character import (
    Ability,
    AbilityScores,
    Background,
    CharacterClass,
    CharacterSheet,
    Race,
    Skill,
)
from oracle_games.models.questions import Category, QuestionsSession, SessionStatus
from oracle_games.observability import configure_logging, init_telemetry, shutdown_telemetry
from oracle_games.oracle.llm_oracle import LLMOracle
from oracle_games.oracle.retry import RetryPolicy
from oracle_games.storage.store import SessionStore
from oracle_games.ui import plain

app = typer.Typer(
    name="oracle-games",
    help="Play 20 Questions and D&D adventures with an AI oracle.",
    add_completion=False,
)
new_app = typer.Typer(help="Start a new game.", no_args_is_help=True)
app.add_typer(new_app, name="new")

console = Console()

T = TypeVar("T")
E = TypeVar("E")

QUESTIONS_HELP = """
Ask yes/no questions to find the secret subject.

- `guess <answer>`: make your guess (right or wrong, the game ends)
- `roll NdM`: roll some dice
- `giveup`: reveal the answer and end the game
- `quit`: leave now and continue later
"""

ADVENTURE_HELP = """
Describe what your character does, in your own words.

- `check <skill>`: make a skill check (e.g. `check stealth`)
- `roll NdM`: roll some dice
- `sheet`: show your character sheet
- `save`: save now (the game also saves after every turn)
- `end`: end this adventure for good
- `quit`: leave now and continue later
"""


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        console.print(f"oracle-games version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    _version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
) -> None:
    """Oracle Games - 20 Questions and D&D adventures with an AI oracle."""
    pass


def _load_settings(require_api_key: bool = False) -> Settings:
    settings = get_settings()
    configure_logging("DEBUG" if settings.debug else settings.log_level)
    init_telemetry(settings.otel)

    if require_api_key and not settings.llm.anthropic_api_key:
        plain.print_error("ANTHROPIC_API_KEY environment variable not set.")
        plain.print_error("Please set it to consult the oracle.")
        raise typer.Exit(1)
    return settings


def _build_oracle(settings: Settings) -> LLMOracle:
    client = create_anthropic_client(
        api_key=settings.llm.anthropic_api_key,
        model=settings.llm.model,
        timeout=settings.llm.timeout_seconds,
    )
    return LLMOracle(
        client,
        timeout=settings.llm.timeout_seconds,
        retry=RetryPolicy.from_settings(settings.retry),
        temperature=settings.llm.temperature,
        max_tokens=settings.llm.max_tokens,
    )


def _await(runner: asyncio.Runner, coro: Coroutine[Any, Any, T], description: str) -> T:
    """Run one oracle round-trip behind a spinner."""
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
    ) as progress:
        progress.add_task(description, total=None)
        return runner.run(coro)


def _report(error: GameError) -> None:
    plain.print_error(str(error))
    if isinstance(error, OracleRateLimited):
        plain.print_warning("The oracle is busy. Wait a moment and try again.")
    elif isinstance(error, OracleUnavailable):
        plain.print_warning("Nothing was used up. Try again when the oracle is back.")


def _confirm_overwrite(store: SessionStore, slot: str) -> None:
    if store.exists(slot) and not Confirm.ask(
        f"Slot '{slot}' already holds a saved game. Overwrite it?", console=console
    ):
        raise typer.Exit(0)


# =============================================================================
# 20 Questions
# =============================================================================


def _play_questions(runner: asyncio.Runner, engine: QuestionsEngine) -> None:
    session = engine.session
    plain.print_title(f"20 Questions: {session.category.value}")
    plain.print_help(QUESTIONS_HELP)

    for record in session.questions:
        console.print(
            f"[dim]{record.number}. {escape(record.question)} -> {record.answer.value}[/dim]"
        )
    if session.awaiting_guess:
        plain.print_warning("No questions left. Make your guess with: guess <answer>")
    console.print()

    while not session.is_terminal:
        label = "guess" if session.awaiting_guess else f"Q{session.questions_asked + 1}"
        try:
            line = plain.print_prompt(label)
        except (EOFError, KeyboardInterrupt):
            console.print()
            plain.print_message(f"Game saved. Continue with: oracle-games continue {session.slot}")
            return

        text = line.strip()
        if not text:
            continue
        command, _, rest = text.partition(" ")
        command = command.lower()

        try:
            if command in ("quit", "exit"):
                plain.print_message(
                    f"Game saved. Continue with: oracle-games continue {session.slot}"
                )
                return
            if command == "help":
                plain.print_help(QUESTIONS_HELP)
                continue
            if command == "roll":
                plain.print_dice_roll(engine.roll_dice(*parse_notation(rest or "d20")))
                continue
            if command == "giveup":
                engine.abandon()
                plain.print_game_over(False, f"The answer was: {session.subject}")
                return
            if command == "guess":
                guess = _await(runner, engine.make_guess(rest), "The oracle weighs your guess...")
                if guess.correct:
                    plain.print_game_over(
                        True,
                        f"Yes! It was {guess.subject}. "
                        f"You got it in {guess.questions_used} questions.",
                    )
                else:
                    plain.print_game_over(False, f"No, it was {guess.subject}.")
                return

            result = _await(runner, engine.ask_question(text), "The oracle ponders...")
        except GameError as e:
            _report(e)
            continue

        plain.print_answer(result.answer, result.remaining)
        if result.degraded:
            plain.print_warning("The oracle's reply was garbled, so it counts as unknown.")
        if result.status is SessionStatus.LOST:
            plain.print_game_over(False, f"Out of questions! It was {session.subject}.")
            return
        if result.must_guess:
            plain.print_warning("That was your last question. Make your guess with: guess <answer>")


@new_app.command("questions")
def new_questions(
    category: Annotated[
        str | None,
        typer.Option(
            "--category",
            "-c",
            help="Person, Place or Thing (asked for when omitted)",
        ),
    ] = None,
    slot: Annotated[
        str,
        typer.Option("--slot", "-s", help="Save slot for this game"),
    ] = "questions",
) -> None:
    """Start a game of 20 Questions."""
    settings = _load_settings(require_api_key=True)
    store = SessionStore(settings.saves_dir())

    try:
        chosen = Category.lookup(category) if category else _choose("Category", list(Category))
        _confirm_overwrite(store, slot)
    except (ValueError, InvalidInput) as e:
        plain.print_error(str(e))
        raise typer.Exit(1) from None

    oracle = _build_oracle(settings)
    try:
        with asyncio.Runner() as runner:
            try:
                engine = _await(
                    runner,
                    QuestionsEngine.new_game(
                        chosen,
                        oracle,
                        store,
                        slot=slot,
                        max_questions=settings.max_questions,
                        exhaustion_policy=ExhaustionPolicy(settings.exhaustion_policy),
                    ),
                    "The oracle is thinking of something...",
                )
            except GameError as e:
                _report(e)
                raise typer.Exit(1) from None
            plain.print_success(f"The oracle has chosen a {chosen.value.lower()}.")
            _play_questions(runner, engine)
    finally:
        shutdown_telemetry()


# =============================================================================
# Adventure
# =============================================================================


def _choose(label: str, options: Sequence[E], describe: Callable[[E], str] | None = None) -> E:
    """Numbered menu; returns the picked option."""
    console.print(f"\n[bold]{label}[/bold]")
    for index, option in enumerate(options, start=1):
        text = describe(option) if describe else str(getattr(option, "value", option))
        console.print(f"  {index:2d}. {text}")
    picked = IntPrompt.ask(
        "Choice",
        console=console,
        choices=[str(i) for i in range(1, len(options) + 1)],
        show_choices=False,
    )
    return options[picked - 1]


def _assign_abilities(pool: list[int]) -> AbilityScores:
    console.print(f"\nYour scores: [bold]{', '.join(str(score) for score in pool)}[/bold]")
    remaining = sorted(pool, reverse=True)
    assignment: dict[Ability, int] = {}
    for ability in Ability:
        if len(remaining) == 1:
            score = remaining[0]
            console.print(f"{ability.value.title()}: {score}")
        else:
            score = IntPrompt.ask(
                f"{ability.value.title()} [dim]({', '.join(str(s) for s in remaining)})[/dim]",
                console=console,
                choices=[str(s) for s in dict.fromkeys(remaining)],
                show_choices=False,
            )
        remaining.remove(score)
        assignment[ability] = score
    return assign_scores(assignment, pool)


def _choose_skills(character_class: CharacterClass) -> list[Skill]:
    options = skill_options(character_class)
    count = skill_choice_count(character_class)
    console.print(f"\n[bold]Skills[/bold] (a {character_class.value} picks {count})")
    plain.print_skill_list(options)

    while True:
        raw = Prompt.ask(f"Choose {count} (numbers, separated by spaces)", console=console)
        try:
            numbers = [int(part) for part in raw.replace(",", " ").split()]
        except ValueError:
            plain.print_error("Enter the numbers of the skills you want.")
            continue
        if any(not 1 <= n <= len(options) for n in numbers):
            plain.print_error(f"Pick numbers between 1 and {len(options)}.")
            continue
        picks = list(dict.fromkeys(options[n - 1] for n in numbers))
        if len(picks) != count:
            plain.print_error(f"Pick exactly {count} different skills.")
            continue
        return picks


def _create_character(rng: random.Random | None = None) -> CharacterSheet:
    """Walk the player through building a level 1 character."""
    plain.print_title("Create Your Character")

    name = ""
    while not name:
        name = Prompt.ask("Character name", console=console).strip()

    race = _choose("Race", list(Race))
    character_class = _choose("Class", list(CharacterClass))
    background = _choose("Background", list(Background))

    method = _choose("Ability scores", list(ScoreMethod), describe=lambda m: m.label)
    pool = generate_scores(method, rng)
    while True:
        try:
            abilities = _assign_abilities(pool)
            break
        except InvalidInput as e:
            plain.print_error(str(e))

    skills = _choose_skills(character_class)
    character = build_character(name, race, character_class, background, abilities, skills)
    console.print()
    plain.print_character_sheet(character)
    return character


def _play_adventure(runner: asyncio.Runner, engine: AdventureEngine) -> None:
    session = engine.session
    plain.print_title(session.campaign)
    console.print(
        f"[italic]{escape(session.current_location)}[/italic] - "
        f"[bold]Quest:[/bold] {escape(session.current_quest)}"
    )
    plain.print_help(ADVENTURE_HELP)
    if session.last_narration:
        plain.print_narration(session.last_narration)
    console.print()

    while not session.is_terminal:
        try:
            line = plain.print_prompt()
        except (EOFError, KeyboardInterrupt):
            console.print()
            plain.print_message(
                f"Adventure saved. Continue with: oracle-games continue {session.slot}"
            )
            return

        text = line.strip()
        if not text:
            continue
        command, _, rest = text.partition(" ")
        command = command.lower()

        try:
            if command in ("quit", "exit"):
                plain.print_message(
                    f"Adventure saved. Continue with: oracle-games continue {session.slot}"
                )
                return
            if command == "help":
                plain.print_help(ADVENTURE_HELP)
                continue
            if command == "sheet":
                plain.print_character_sheet(engine.character)
                continue
            if command == "save":
                engine.save()
                plain.print_success(f"Saved to slot '{session.slot}'.")
                continue
            if command == "roll":
                plain.print_dice_roll(engine.roll(*parse_notation(rest or "d20")))
                continue
            if command == "end":
                if Confirm.ask("End this adventure for good?", console=console):
                    engine.abandon()
                    plain.print_game_over(False, f"{engine.character.name}'s story ends here.")
                    return
                continue
            if command == "check":
                check = _await(runner, engine.skill_check(rest), "The dice are rolling...")
                proficiency = f" {check.proficiency_bonus:+d}" if check.proficiency_bonus else ""
                console.print(
                    f"[bold]{check.skill.value} check:[/bold] d20 {check.natural} "
                    f"{check.ability_modifier:+d}{proficiency} = [bold]{check.total}[/bold]"
                )
                plain.print_narration(check.narration)
                console.print()
                continue

            result = _await(runner, engine.take_action(text), "The Dungeon Master considers...")
        except GameError as e:
            _report(e)
            continue

        plain.print_narration(result.narration)
        console.print()


@new_app.command("adventure")
def new_adventure(
    slot: Annotated[
        str,
        typer.Option("--slot", "-s", help="Save slot for this adventure"),
    ] = "adventure",
) -> None:
    """Create a character and start a D&D adventure."""
    settings = _load_settings(require_api_key=True)
    store = SessionStore(settings.saves_dir())

    try:
        _confirm_overwrite(store, slot)
    except InvalidInput as e:
        plain.print_error(str(e))
        raise typer.Exit(1) from None

    character = _create_character()
    oracle = _build_oracle(settings)
    try:
        with asyncio.Runner() as runner:
            try:
                engine = _await(
                    runner,
                    AdventureEngine.start_campaign(character, oracle, store, slot=slot),
                    "The Dungeon Master prepares your campaign...",
                )
            except GameError as e:
                _report(e)
                raise typer.Exit(1) from None
            _play_adventure(runner, engine)
    finally:
        shutdown_telemetry()


# =============================================================================
# Save slots
# =============================================================================


@app.command("continue")
def continue_game(
    slot: Annotated[
        str | None,
        typer.Argument(help="Save slot to resume (default: most recent unfinished game)"),
    ] = None,
) -> None:
    """Resume a saved game."""
    settings = _load_settings(require_api_key=True)
    store = SessionStore(settings.saves_dir())

    if slot is None:
        resumable = [s for s in store.list_saves() if s.resumable]
        if not resumable:
            plain.print_error("No saved games to continue.")
            raise typer.Exit(1)
        slot = resumable[0].slot

    try:
        session = store.load(slot)
    except (SaveError, InvalidInput) as e:
        plain.print_error(str(e))
        raise typer.Exit(1) from None

    if session.is_terminal:
        plain.print_message(
            f"The game in slot '{slot}' is over ({session.status.value}). Start a new one."
        )
        return

    oracle = _build_oracle(settings)
    try:
        with asyncio.Runner() as runner:
            if isinstance(session, QuestionsSession):
                engine = QuestionsEngine(
                    session, oracle, store, ExhaustionPolicy(settings.exhaustion_policy)
                )
                _play_questions(runner, engine)
            elif isinstance(session, AdventureSession):
                _play_adventure(runner, AdventureEngine(session, oracle, store))
    finally:
        shutdown_telemetry()


@app.command()
def saves() -> None:
    """List saved games."""
    settings = _load_settings()
    store = SessionStore(settings.saves_dir())
    plain.print_saves(store.list_saves())


@app.command()
def delete(
    slot: Annotated[str, typer.Argument(help="Save slot to delete")],
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Do not ask for confirmation"),
    ] = False,
) -> None:
    """Delete a saved game."""
    settings = _load_settings()
    store = SessionStore(settings.saves_dir())

    if not yes and not typer.confirm(f"Delete save slot '{slot}'?"):
        raise typer.Exit(0)
    try:
        store.delete(slot)
    except (SaveError, InvalidInput) as e:
        plain.print_error(str(e))
        raise typer.Exit(1) from None
    plain.print_success(f"Deleted slot '{slot}'.")


@app.command()
def roll(
    notation: Annotated[
        str,
        typer.Argument(help="Dice to roll, e.g. d20, 2d6, 4d100"),
    ] = "d20",
    seed: Annotated[
        int | None,
        typer.Option("--seed", help="Seed the dice for a repeatable roll"),
    ] = None,
) -> None:
    """Roll dice."""
    rng = random.Random(seed) if seed is not None else None
    try:
        result = roll_notation(notation, rng)
    except InvalidInput as e:
        plain.print_error(str(e))
        raise typer.Exit(1) from None
    plain.print_dice_roll(result)


@app.command("config")
def config_cmd() -> None:
    """Show the current configuration."""
    settings = get_settings()
    console.print("[bold]Current Configuration:[/bold]")
    console.print(f"  Data directory: {settings.data_dir}")
    console.print(f"  Log level: {settings.log_level}")
    console.print(f"  Debug: {settings.debug}")
    console.print(f"  Questions per game: {settings.max_questions}")
    console.print(f"  Out of questions: {settings.exhaustion_policy}")
    console.print()
    console.print("[bold]LLM Settings:[/bold]")
    console.print(f"  Model: {settings.llm.model}")
    console.print(f"  Temperature: {settings.llm.temperature}")
    console.print(f"  Timeout: {settings.llm.timeout_seconds}s")
    api_key_status = "set" if settings.llm.anthropic_api_key else "not set"
    console.print(f"  API Key: {api_key_status}")
    console.print(f"  Retries: {settings.retry.max_retries}")
    console.print()
    console.print("[bold]OpenTelemetry Settings:[/bold]")
    console.print(f"  Enabled: {settings.otel.enabled}")
    console.print(f"  Service name: {settings.otel.service_name}")
    endpoint_status = settings.otel.endpoint if settings.otel.endpoint else "(console only)"
    console.print(f"  Endpoint: {endpoint_status}")


if __name__ == "__main__":
    app()
