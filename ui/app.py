from __future__ import annotations

import logging
import os
import secrets
from datetime import date
from typing import Any

from fastapi import Body, Depends, FastAPI, HTTPException, Query, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from habitify import (
    StreakCache,
    ToggleNotAllowedError,
    configure_logging,
    create_habit as core_create_habit,
    delete_habit as core_delete_habit,
    find_habit,
    habits_for_day,
    habits_for_month,
    habits_for_week,
    is_completed,
    is_month_fully_completed,
    is_scheduled,
    is_week_fully_completed,
    load_habits,
    month_days,
    now_local,
    save_habits,
    summarize_habit,
    today_local,
    toggle_habit_completion,
    update_habit as core_update_habit,
    week_range,
    workspace_root as _workspace_root,
)
from habitify.habits import SCHEDULE_CONFIRMATION_ERROR

configure_logging()
logger = logging.getLogger("habitify.ui")

app = FastAPI(title="Habitify", version="0.1.0")
app.state.streak_cache = StreakCache()

security = HTTPBasic(auto_error=False)


# ── Dependencies ──────────────────────────────────────────────

def get_current_user(credentials: HTTPBasicCredentials | None = Depends(security)) -> str:
    expected_username = os.environ.get("HABITIFY_USERNAME", "")
    expected_password = os.environ.get("HABITIFY_PASSWORD", "")

    if not expected_username or not expected_password:
        return "guest"

    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Basic"},
        )

    correct_username = secrets.compare_digest(credentials.username.encode("utf-8"), expected_username.encode("utf-8"))
    correct_password = secrets.compare_digest(credentials.password.encode("utf-8"), expected_password.encode("utf-8"))

    if not (correct_username and correct_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Basic"},
        )

    return credentials.username


def get_today() -> date:
    """Clock source; overridden in tests."""
    return today_local()


def _parse_date(value: str | None, default: date) -> date:
    if not value:
        return default
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid date: {value}")


def _cache() -> StreakCache:
    return app.state.streak_cache


# ── Endpoints ─────────────────────────────────────────────────

@app.get("/healthz")
def healthz() -> dict[str, str]:
    return {"ok": "true"}


@app.get("/api/habits")
def api_list_habits(
    day: str | None = Query(None, alias="date"),
    period: str = "all",
    today: date = Depends(get_today),
    username: str = Depends(get_current_user),
) -> dict[str, Any]:
    """List habits with computed fields. period: all, day, week, month."""
    target = _parse_date(day, today)
    habits = load_habits(_workspace_root()).habits
    if period == "day":
        habits = habits_for_day(habits, target)
    elif period == "week":
        habits = habits_for_week(habits, target)
    elif period == "month":
        habits = habits_for_month(habits, target)
    elif period != "all":
        raise HTTPException(status_code=400, detail=f"Invalid period: {period}")
    return {
        "date": target.isoformat(),
        "habits": [summarize_habit(h, today, target, cache=_cache()) for h in habits],
    }


@app.post("/api/habits")
def api_create_habit(payload: dict[str, Any] = Body(...), username: str = Depends(get_current_user)) -> dict[str, Any]:
    """Create a new habit."""
    root = _workspace_root()
    habits_file = load_habits(root)
    habit, errors = core_create_habit(habits_file, payload, now=now_local(root).replace(microsecond=0))
    if errors:
        raise HTTPException(status_code=400, detail="; ".join(errors))
    save_habits(habits_file, root)
    return {"ok": True, "habit": habit.to_dict()}


@app.get("/api/habits/{habit_id}")
def api_get_habit(
    habit_id: str,
    today: date = Depends(get_today),
    username: str = Depends(get_current_user),
) -> dict[str, Any]:
    habit = find_habit(load_habits(_workspace_root()), habit_id)
    if not habit:
        raise HTTPException(status_code=404, detail=f"Habit not found: {habit_id}")
    return {"habit": summarize_habit(habit, today, cache=_cache())}


@app.put("/api/habits/{habit_id}")
def api_update_habit(habit_id: str, payload: dict[str, Any] = Body(...), username: str = Depends(get_current_user)) -> dict[str, Any]:
    """Update a habit. A schedule change needs "confirm": true in the body."""
    root = _workspace_root()
    habits_file = load_habits(root)
    confirm = bool(payload.pop("confirm", False))
    updated, errors, pruned = core_update_habit(habits_file, habit_id, payload, confirm_schedule_change=confirm)
    if errors:
        if updated is None and find_habit(habits_file, habit_id) is None:
            raise HTTPException(status_code=404, detail="; ".join(errors))
        if any(e.startswith(SCHEDULE_CONFIRMATION_ERROR) for e in errors):
            raise HTTPException(status_code=409, detail="; ".join(errors))
        raise HTTPException(status_code=400, detail="; ".join(errors))
    save_habits(habits_file, root)
    _cache().invalidate(habit_id)
    return {
        "ok": True,
        "habit": updated.to_dict() if updated else None,
        "pruned": [d.isoformat() for d in pruned],
    }


@app.delete("/api/habits/{habit_id}")
def api_delete_habit(habit_id: str, username: str = Depends(get_current_user)) -> dict[str, Any]:
    root = _workspace_root()
    habits_file = load_habits(root)
    if not core_delete_habit(habits_file, habit_id):
        raise HTTPException(status_code=404, detail=f"Habit not found: {habit_id}")
    save_habits(habits_file, root)
    _cache().invalidate(habit_id)
    return {"ok": True, "habit_id": habit_id}


@app.post("/api/habits/{habit_id}/toggle")
def api_toggle_habit(
    habit_id: str,
    payload: dict[str, Any] = Body(default={}),
    today: date = Depends(get_today),
    username: str = Depends(get_current_user),
) -> dict[str, Any]:
    """Toggle completion for a day (defaults to today)."""
    root = _workspace_root()
    habits_file = load_habits(root)
    habit = find_habit(habits_file, habit_id)
    if not habit:
        raise HTTPException(status_code=404, detail=f"Habit not found: {habit_id}")
    day = _parse_date(payload.get("date"), today)
    try:
        done = toggle_habit_completion(habit, day, today)
    except ToggleNotAllowedError as e:
        logger.info("refused toggle for %s: %s", habit_id, e)
        raise HTTPException(status_code=400, detail=str(e))
    save_habits(habits_file, root)
    _cache().invalidate(habit_id)
    return {"ok": True, "date": day.isoformat(), "completed": done, "habit": summarize_habit(habit, today, day, cache=_cache())}


@app.get("/api/habits/{habit_id}/streak")
def api_habit_streak(
    habit_id: str,
    today: date = Depends(get_today),
    username: str = Depends(get_current_user),
) -> dict[str, Any]:
    habit = find_habit(load_habits(_workspace_root()), habit_id)
    if not habit:
        raise HTTPException(status_code=404, detail=f"Habit not found: {habit_id}")
    return {"habit_id": habit_id, "today": today.isoformat(), **_cache().get(habit, today).to_dict()}


def _calendar(days: list[date], anchor: date, habit_id: str | None, today: date) -> list[dict[str, Any]]:
    habits = load_habits(_workspace_root()).habits
    if habit_id:
        habits = [h for h in habits if h.id == habit_id]
        if not habits:
            raise HTTPException(status_code=404, detail=f"Habit not found: {habit_id}")
    out = []
    for h in habits:
        out.append({
            "habit_id": h.id,
            "name": h.name,
            "days": [
                {
                    "date": d.isoformat(),
                    "scheduled": is_scheduled(h.rule, d),
                    "completed": is_completed(h.ledger, d),
                    "future": d > today,
                }
                for d in days
            ],
            "week_completed": is_week_fully_completed(h.rule, h.ledger, anchor),
            "month_completed": is_month_fully_completed(h.rule, h.ledger, anchor),
        })
    return out


@app.get("/api/calendar/week")
def api_calendar_week(
    day: str | None = Query(None, alias="date"),
    habit_id: str | None = None,
    today: date = Depends(get_today),
    username: str = Depends(get_current_user),
) -> dict[str, Any]:
    anchor = _parse_date(day, today)
    days = week_range(anchor)
    return {"days": [d.isoformat() for d in days], "habits": _calendar(days, anchor, habit_id, today)}


@app.get("/api/calendar/month")
def api_calendar_month(
    day: str | None = Query(None, alias="date"),
    habit_id: str | None = None,
    today: date = Depends(get_today),
    username: str = Depends(get_current_user),
) -> dict[str, Any]:
    anchor = _parse_date(day, today)
    days = month_days(anchor)
    return {"days": [d.isoformat() for d in days], "habits": _calendar(days, anchor, habit_id, today)}


def main() -> None:
    import uvicorn

    uvicorn.run(
        "ui.app:app",
        host=os.environ.get("HABITIFY_HOST", "127.0.0.1"),
        port=int(os.environ.get("HABITIFY_PORT", "8000")),
    )


if __name__ == "__main__":
    main()
