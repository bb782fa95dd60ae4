"""Rich-powered practice loop on top of :class:`TrainerEngine`.

The loop renders the current engine snapshot, reads one command from the
input provider and applies it, until the user quits or input runs out. All
state lives in the engine; this module only translates between console text
and engine commands.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Literal, Optional

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .engine import TrainerEngine, TrainerSnapshot

InputProvider = Callable[[], str]
ExitAction = Literal["quit", "interrupted"]
CommandType = Literal[
    "select",
    "next",
    "prev",
    "restart",
    "reset",
    "search",
    "topic",
    "difficulty",
    "pool",
    "shuffle",
    "exclude",
    "stats",
    "help",
    "quit",
]

_ALIASES: dict[str, CommandType] = {
    "n": "next",
    "next": "next",
    "p": "prev",
    "prev": "prev",
    "previous": "prev",
    "r": "restart",
    "restart": "restart",
    "reset": "reset",
    "search": "search",
    "/": "search",
    "topic": "topic",
    "difficulty": "difficulty",
    "level": "difficulty",
    "pool": "pool",
    "shuffle": "shuffle",
    "exclude": "exclude",
    "stats": "stats",
    "help": "help",
    "?": "help",
    "q": "quit",
    "quit": "quit",
    "exit": "quit",
}
_TAKES_ARGUMENT = {"search", "topic", "difficulty", "pool", "shuffle", "exclude"}
_ON = {"on", "yes", "true", "1"}
_OFF = {"off", "no", "false", "0"}

HELP_TEXT = (
    "a-d answer | n next | p prev | r restart | reset (clear progress)\n"
    "search <text> | topic <name|all> | difficulty <name|all> | pool <n>\n"
    "shuffle on|off | exclude on|off | stats | help | quit"
)


@dataclass(frozen=True)
class SessionCommand:
    """Normalized user command parsed from console input."""

    type: CommandType
    argument: Optional[str] = None


@dataclass(frozen=True)
class TrainerSessionResult:
    """Return value from ``run_trainer_session``."""

    answered_count: int
    correct_count: int
    accuracy: int
    exit_action: ExitAction


def parse_session_command(raw: Optional[str]) -> Optional[SessionCommand]:
    """Parse raw user input into a structured command."""

    if raw is None:
        return None
    text = raw.strip()
    if not text:
        return None
    head, _, rest = text.partition(" ")
    lowered = head.lower()
    if len(lowered) == 1 and lowered in "abcd":
        return SessionCommand("select", lowered.upper())
    command = _ALIASES.get(lowered)
    if command is None:
        return None
    if command in _TAKES_ARGUMENT:
        argument = rest.strip()
        if command != "search" and not argument:
            return None
        return SessionCommand(command, argument)
    return SessionCommand(command)


def run_trainer_session(
    engine: TrainerEngine,
    console: Console,
    input_provider: InputProvider,
) -> TrainerSessionResult:
    """Drive ``engine`` interactively until the user quits."""

    _render_errors(console, engine.snapshot())
    exit_action: ExitAction = "quit"
    while True:
        snapshot = engine.snapshot()
        render_snapshot(console, snapshot)
        try:
            raw = input_provider()
        except (EOFError, KeyboardInterrupt, StopIteration):
            console.print("\n[bold yellow]Session interrupted.[/]")
            exit_action = "interrupted"
            break
        command = parse_session_command(raw)
        if command is None:
            console.print("[red]Unrecognized command. Type 'help'.[/]")
            continue
        if command.type == "quit":
            break
        apply_command(command, engine, console)

    final = engine.snapshot()
    render_stats(console, final)
    return TrainerSessionResult(
        answered_count=final.answered_count,
        correct_count=final.correct_count,
        accuracy=final.accuracy,
        exit_action=exit_action,
    )


def apply_command(
    command: SessionCommand,
    engine: TrainerEngine,
    console: Console,
) -> None:
    if command.type == "stats":
        render_stats(console, engine.snapshot())
    elif command.type == "help":
        console.print(Panel(HELP_TEXT, title="Commands", border_style="cyan"))
    else:
        message = execute_command(command, engine)
        if message:
            console.print(message, style="yellow", markup=False)


def execute_command(
    command: SessionCommand, engine: TrainerEngine
) -> Optional[str]:
    """Apply an engine command and return a notice for the user, if any.

    ``stats``, ``help`` and ``quit`` are left to the adapter.
    """

    kind = command.type
    argument = command.argument or ""
    if kind == "select":
        snapshot = engine.snapshot()
        if snapshot.question is None:
            return "No question to answer."
        if snapshot.revealed:
            return "Already answered. Press n for next."
        engine.select_display(argument)
    elif kind == "next":
        engine.advance()
    elif kind == "prev":
        engine.retreat()
    elif kind == "restart":
        engine.restart_session()
        return "Session restarted."
    elif kind == "reset":
        engine.reset_progress()
        return "Progress cleared."
    elif kind == "search":
        engine.set_search_text(argument)
    elif kind == "topic":
        engine.set_topic_filter(argument)
    elif kind == "difficulty":
        engine.set_difficulty_filter(argument)
    elif kind == "pool":
        engine.set_pool_size(argument)
    elif kind in ("shuffle", "exclude"):
        flag = _parse_toggle(argument)
        if flag is None:
            return f"Use '{kind} on' or '{kind} off'."
        if kind == "shuffle":
            engine.set_shuffle(flag)
        else:
            engine.set_exclude_answered(flag)
    return None


def render_snapshot(console: Console, snapshot: TrainerSnapshot) -> None:
    if snapshot.loading:
        console.print("[dim]Loading questions...[/]")
        return
    question = snapshot.question
    if question is None or snapshot.position is None:
        console.print(
            Panel(
                "No question matches these settings. Relax the filters "
                "(search, topic, difficulty) or reset progress.",
                title="Practice",
                border_style="yellow",
            )
        )
        return

    header = Text.assemble(
        (f"Question {snapshot.position + 1}", "bold cyan"),
        (f" / {snapshot.session_length}", "dim"),
        (f"  {question.topic} · {question.difficulty}", "magenta"),
    )
    console.print()
    console.rule(header)
    console.print(Text(question.prompt, style="bold"))

    table = Table(show_header=False, box=box.SIMPLE, expand=True)
    table.add_column("Key", justify="center", style="cyan")
    table.add_column("Choice")
    for option in snapshot.options:
        text = Text(option.text)
        if option.correct:
            text.stylize("bold green")
        elif option.wrong:
            text.stylize("bold red")
        elif option.selected:
            text.stylize("bold")
        indicator = "•" if option.selected else " "
        table.add_row(option.label, Text(indicator + " ") + text)
    console.print(table)

    if snapshot.revealed:
        correct = next(
            (option for option in snapshot.options if option.correct), None
        )
        label = correct.label if correct else question.correct_slot.value
        is_right = question.is_correct(snapshot.selected_slot)
        verdict = "Correct!" if is_right else "Incorrect."
        console.print(
            Panel(
                f"{verdict} Answer: {label}\n{question.explanation}",
                border_style="green" if is_right else "red",
            )
        )

    console.print(
        Text(
            f"Answered {snapshot.answered_count} | Score "
            f"{snapshot.correct_count} | Accuracy {snapshot.accuracy}% | "
            f"Progress {snapshot.completion}% | type 'help' for commands",
            style="dim",
        )
    )


def render_stats(console: Console, snapshot: TrainerSnapshot) -> None:
    overview = Table(
        title="Progress",
        show_header=False,
        box=box.MINIMAL_DOUBLE_HEAD,
        expand=False,
    )
    overview.add_column("Metric", style="bold")
    overview.add_column("Value", justify="right")
    overview.add_row("Questions loaded", str(snapshot.corpus_size))
    overview.add_row("Topics", str(len(snapshot.topics)))
    overview.add_row("Answered", str(snapshot.answered_count))
    overview.add_row("Correct", str(snapshot.correct_count))
    overview.add_row("Accuracy", f"{snapshot.accuracy}%")
    overview.add_row("Progress", f"{snapshot.completion}%")
    overview.add_row("Unanswered", str(snapshot.unanswered_count))
    console.print(overview)
    render_difficulty_breakdown(console, snapshot)


def render_difficulty_breakdown(
    console: Console, snapshot: TrainerSnapshot
) -> None:
    if not snapshot.difficulty_counts:
        return
    breakdown = Table(title="Difficulty", box=box.SIMPLE, expand=False)
    breakdown.add_column("Level")
    breakdown.add_column("Questions", justify="right")
    for level, count in snapshot.difficulty_counts.items():
        breakdown.add_row(level, str(count))
    console.print(breakdown)


def _render_errors(console: Console, snapshot: TrainerSnapshot) -> None:
    for message in snapshot.load_errors:
        console.print(
            Panel(message, title="Source not loaded", border_style="red")
        )


def _parse_toggle(value: str) -> Optional[bool]:
    lowered = value.strip().lower()
    if lowered in _ON:
        return True
    if lowered in _OFF:
        return False
    return None
