#!/usr/bin/env python3
"""Habitify TUI — daily habit check-off in the terminal, powered by Textual."""

from __future__ import annotations

import logging
import sys
from datetime import date

from textual import on
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.logging import TextualHandler
from textual.reactive import reactive
from textual.widgets import Checkbox, DataTable, Footer, Header, Label, Static

from habitify import (
    ToggleNotAllowedError,
    can_toggle,
    configure_logging,
    describe_rule,
    habits_for_day,
    is_completed,
    is_scheduled,
    load_habits,
    save_habits,
    shift_days,
    streak_text,
    today_local,
    toggle_habit_completion,
    week_range,
    workspace_root,
)

logger = logging.getLogger("habitify.cli")


CSS = """
Screen {
    layout: vertical;
}

.section-title {
    text-style: bold;
    color: $accent;
    margin: 0 0 1 0;
}

#day-pane {
    padding: 1 2;
    height: 1fr;
}

.habit-row {
    height: auto;
}

.habit-row Checkbox {
    width: 1fr;
}

.habit-done Checkbox {
    text-style: strike;
}

.habit-locked {
    opacity: 50%;
}

.habit-streak {
    width: auto;
    color: $warning;
    padding: 1 1 0 1;
}

#week-table {
    height: 1fr;
}
"""


# ── Custom widgets ─────────────────────────────────────────────


class HabitRow(Horizontal):
    """One habit for the selected day: checkbox + streak label."""

    def __init__(self, habit_id: str, label: str, done: bool, locked: bool, streak: str, **kwargs) -> None:
        super().__init__(**kwargs)
        self.habit_id = habit_id
        self.habit_label = label
        self.habit_done = done
        self.habit_locked = locked
        self.habit_streak = streak

    def compose(self) -> ComposeResult:
        yield Checkbox(self.habit_label, value=self.habit_done, id=f"cb-{self.habit_id}")
        yield Label(self.habit_streak, classes="habit-streak")

    def on_mount(self) -> None:
        self.add_class("habit-row")
        if self.habit_done:
            self.add_class("habit-done")
        if self.habit_locked:
            self.add_class("habit-locked")
            self.query_one(Checkbox).disabled = True


# ── Screens ────────────────────────────────────────────────────


class WeekScreen(Vertical):
    """Week grid: one row per habit, one column per day (Mon-Sun)."""

    def __init__(self, day: date, today: date, **kwargs) -> None:
        super().__init__(**kwargs)
        self.day = day
        self.today = today

    def compose(self) -> ComposeResult:
        yield Label("Week", classes="section-title")
        yield DataTable(id="week-table")

    def on_mount(self) -> None:
        days = week_range(self.day)
        table: DataTable = self.query_one("#week-table", DataTable)
        table.add_columns("Habit", *[d.strftime("%a %d") for d in days], "Schedule")
        for h in load_habits().habits:
            cells = []
            for d in days:
                if not is_scheduled(h.rule, d):
                    cells.append("")
                elif is_completed(h.ledger, d):
                    cells.append("✔")
                else:
                    cells.append("·" if d > self.today else "✗")
            table.add_row(h.name, *cells, describe_rule(h.rule))


# ── Main app ───────────────────────────────────────────────────


class HabitifyApp(App):
    """Habitify — check off today's habits."""

    TITLE = "Habitify"
    CSS = CSS
    AUTO_FOCUS = None

    BINDINGS = [
        Binding("left", "previous_day", "Prev day"),
        Binding("right", "next_day", "Next day"),
        Binding("t", "go_today", "Today"),
        Binding("w", "toggle_week", "Week"),
        Binding("r", "reload", "Reload"),
        Binding("q", "quit", "Quit"),
    ]

    current_view: reactive[str] = reactive("day")

    def __init__(self) -> None:
        super().__init__()
        self.today = today_local()
        self.selected = self.today
        self._reverting = False

    def compose(self) -> ComposeResult:
        yield Header()
        yield VerticalScroll(
            Label("", id="day-title", classes="section-title"),
            Vertical(id="habit-list"),
            Static(id="day-summary"),
            id="day-pane",
        )
        yield Footer()

    def on_mount(self) -> None:
        self._load_data()

    def _load_data(self) -> None:
        habits = habits_for_day(load_habits().habits, self.selected)
        self.query_one("#day-title", Label).update(self.selected.strftime("%A, %d %B %Y"))

        listing = self.query_one("#habit-list", Vertical)
        listing.remove_children()
        done_count = 0
        for h in habits:
            done = is_completed(h.ledger, self.selected)
            done_count += int(done)
            listing.mount(
                HabitRow(
                    habit_id=h.id,
                    label=h.name,
                    done=done,
                    locked=not can_toggle(h.rule, self.selected, self.today),
                    streak=streak_text(h.rule, h.ledger, self.today),
                )
            )
        summary = f"{done_count}/{len(habits)} done" if habits else "Nothing scheduled."
        self.query_one("#day-summary", Static).update(summary)
        self.sub_title = describe_day(self.selected, self.today)

    @on(Checkbox.Changed)
    def _on_checkbox_toggle(self, event: Checkbox.Changed) -> None:
        if self._reverting:
            self._reverting = False
            return
        habit_id = (event.checkbox.id or "").removeprefix("cb-")
        habits_file = load_habits()
        habit = next((h for h in habits_file.habits if h.id == habit_id), None)
        if habit is None:
            self.notify(f"Habit not found: {habit_id}", severity="warning")
            return
        try:
            toggle_habit_completion(habit, self.selected, self.today)
        except ToggleNotAllowedError as e:
            self._reverting = True
            event.checkbox.value = not event.value
            self.notify(str(e), title="Not allowed", severity="warning")
            return
        save_habits(habits_file)
        self._load_data()

    # ── Navigation ─────────────────────────────────────────────

    def action_previous_day(self) -> None:
        self.selected = shift_days(self.selected, -1)
        self._refresh_view()

    def action_next_day(self) -> None:
        self.selected = shift_days(self.selected, 1)
        self._refresh_view()

    def action_go_today(self) -> None:
        self.today = today_local()
        self.selected = self.today
        self._refresh_view()

    def action_reload(self) -> None:
        self.today = today_local()
        self._refresh_view()

    def action_toggle_week(self) -> None:
        self.current_view = "day" if self.current_view == "week" else "week"
        self._refresh_view()

    def _refresh_view(self) -> None:
        for old in self.query(".overlay-screen"):
            old.remove()
        pane = self.query_one("#day-pane")
        if self.current_view == "week":
            pane.display = False
            self.mount(WeekScreen(self.selected, self.today, classes="overlay-screen"), before=self.query_one(Footer))
        else:
            pane.display = True
        self._load_data()


def describe_day(day: date, today: date) -> str:
    delta = (day - today).days
    if delta == 0:
        return "Today"
    if delta == -1:
        return "Yesterday"
    if delta == 1:
        return "Tomorrow"
    return f"{abs(delta)} days {'ago' if delta < 0 else 'ahead'}"


# ── Entry point ────────────────────────────────────────────────


def main() -> None:
    root = workspace_root()
    if not root.exists():
        print(f"Workspace not found: {root}")
        print("Set HABITIFY_ROOT or create the directory first.")
        sys.exit(1)

    # stderr would corrupt the screen; route records to the Textual console
    configure_logging(root, handlers=[TextualHandler()])
    logger.debug("starting TUI in %s", root)
    app = HabitifyApp()
    app.run()


if __name__ == "__main__":
    main()
