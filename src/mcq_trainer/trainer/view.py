from typing import List, Optional

from textual.app import App, ComposeResult
from textual.containers import Container, Vertical
from textual.widget import Widget
from textual.widgets import Button, Input, Static

from .engine import TrainerEngine, TrainerSnapshot
from .session import HELP_TEXT, execute_command, parse_session_command

EMPTY_MESSAGE = (
    "No question matches these settings. Relax the filters or reset progress."
)
UNKNOWN_COMMAND = "Unrecognized command. Type 'help'."


class TrainerApp(App):
    CSS_PATH = None
    CSS = """
#options Button.correct { background: $success; color: black; }
#options Button.wrong { background: $error; }
#options Button.selected { text-style: bold; }
#status { color: $text-muted; }
#notice { color: $warning; }
"""
    BINDINGS = [
        ("a", "select_a", "Answer A"),
        ("b", "select_b", "Answer B"),
        ("c", "select_c", "Answer C"),
        ("d", "select_d", "Answer D"),
        ("n", "next", "Next"),
        ("p", "prev", "Prev"),
        ("r", "restart", "Restart"),
        ("x", "reset_progress", "Reset progress"),
        ("q", "quit", "Quit"),
    ]

    def __init__(self, engine: TrainerEngine):
        super().__init__()
        self.engine = engine

    def compose(self) -> ComposeResult:
        with Container(id="stage"):
            yield self._build_panel(self.engine.snapshot())
        with Container(id="footer"):
            yield Button("Prev", id="prev")
            yield Button("Next", id="next")
            yield Button("Restart", id="restart")
            yield Button("Reset progress", id="reset")
            yield Static(self.status_text(), id="status")
            yield Input(
                placeholder="topic SQL, search join, pool 5, help",
                id="command",
            )
            yield Static("", id="notice")

    def on_unmount(self) -> None:
        self.engine.close()

    # Pure helpers so navigation can be tested without running the App.
    def select_label(self, label: str) -> bool:
        event = self.engine.select_display(label)
        self._update_stage()
        return event is not None

    def next_question(self) -> Optional[int]:
        self.engine.advance()
        self._update_stage()
        return self.engine.cursor.position

    def prev_question(self) -> Optional[int]:
        self.engine.retreat()
        self._update_stage()
        return self.engine.cursor.position

    def status_text(self) -> str:
        snap = self.engine.snapshot()
        return (
            f"Answered {snap.answered_count} · Score {snap.correct_count} · "
            f"Accuracy {snap.accuracy}% · Progress {snap.completion}% · "
            f"Unanswered {snap.unanswered_count}/{snap.corpus_size}"
        )

    def run_command(self, raw: str) -> Optional[str]:
        """Apply a typed console command and return the notice shown."""

        command = parse_session_command(raw)
        if command is None:
            message: Optional[str] = UNKNOWN_COMMAND
        elif command.type == "quit":
            self.exit()
            return None
        elif command.type == "help":
            message = HELP_TEXT
        elif command.type == "stats":
            message = self.status_text()
        else:
            message = execute_command(command, self.engine)
            self._update_stage()
        try:
            self.query_one("#notice", Static).update(message or "")
        except Exception:
            pass
        return message

    def _build_panel(self, snapshot: TrainerSnapshot) -> Widget:
        if snapshot.question is None:
            return Static(EMPTY_MESSAGE, classes="empty")
        return QuestionPanel(snapshot)

    def _update_stage(self) -> None:
        try:
            stage = self.query_one("#stage", Container)
        except Exception:
            return
        stage.remove_children()
        stage.mount(self._build_panel(self.engine.snapshot()))
        try:
            self.query_one("#status", Static).update(self.status_text())
        except Exception:
            pass

    def action_select_a(self) -> None:
        self.select_label("A")

    def action_select_b(self) -> None:
        self.select_label("B")

    def action_select_c(self) -> None:
        self.select_label("C")

    def action_select_d(self) -> None:
        self.select_label("D")

    def action_next(self) -> None:
        self.next_question()

    def action_prev(self) -> None:
        self.prev_question()

    def action_restart(self) -> None:
        self.engine.restart_session()
        self._update_stage()

    def action_reset_progress(self) -> None:
        self.engine.reset_progress()
        self._update_stage()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        self.run_command(event.value)
        event.input.value = ""

    def on_button_pressed(self, event: Button.Pressed) -> None:
        bid = getattr(event.button, "id", "") or ""
        if bid.startswith("option-"):
            self.select_label(bid[-1])
        elif bid == "next":
            self.action_next()
        elif bid == "prev":
            self.action_prev()
        elif bid == "restart":
            self.action_restart()
        elif bid == "reset":
            self.action_reset_progress()


class QuestionPanel(Widget):
    """Renders one question of a snapshot with its options and feedback."""

    def __init__(self, snapshot: TrainerSnapshot) -> None:
        super().__init__()
        self.snapshot = snapshot

    def compose(self) -> ComposeResult:
        snap = self.snapshot
        question = snap.question
        if question is None:
            yield Static(EMPTY_MESSAGE, classes="empty")
            return
        position = (snap.position or 0) + 1
        yield Static(
            f"Question {position} / {snap.session_length} · {question.topic}"
            f" · {question.difficulty}",
            id="meta",
        )
        yield Static(question.prompt, id="prompt")
        with Vertical(id="options"):
            for option in snap.options:
                btn = Button(
                    f"{option.label}) {option.text}",
                    id=f"option-{option.label}",
                )
                for name in self.option_classes(option):
                    btn.add_class(name)
                yield btn
        yield Static(self.feedback_text(), id="feedback")

    def option_classes(self, option) -> List[str]:
        classes = []
        if option.selected:
            classes.append("selected")
        if option.correct:
            classes.append("correct")
        if option.wrong:
            classes.append("wrong")
        return classes

    def feedback_text(self) -> str:
        snap = self.snapshot
        question = snap.question
        if question is None or not snap.revealed:
            return ""
        label = next(
            (option.label for option in snap.options if option.correct),
            question.correct_slot.value,
        )
        verdict = (
            "Correct."
            if question.is_correct(snap.selected_slot)
            else "Incorrect."
        )
        return f"{verdict} Answer: {label}. {question.explanation}"
