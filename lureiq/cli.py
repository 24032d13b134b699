"""
LureIQ — CLI entry point.

All commands follow this pattern:
  1. Load ``AppConfig`` via ``load_config()``.
  2. Configure logging.
  3. Validate inputs.
  4. Build a ``LureAdvisor`` and run one async action against it.
  5. Report result to stdout.

Install and run::

    pip install -e .
    lureiq --help
    lureiq validate-config
    lureiq conditions --lat 41.67 --lon -72.94
    lureiq recommend --clarity Stained --cover Wood --schedule
    lureiq feedback-status
    lureiq feedback-resolve --caught --count 2
    lureiq feedback-flush
    lureiq outcome-log --days 30
"""

from __future__ import annotations

import asyncio
import json
import random
from pathlib import Path
from typing import Optional

import typer

from lureiq.taxonomy.conditions import Clarity, Cover, Season, SpawnPhase, TimeOfDay

app = typer.Typer(
    name="lureiq",
    help="LureIQ — condition-driven bass lure picks with catch feedback.",
    add_completion=False,
)


# ── Helpers ───────────────────────────────────────────────────────────────────

def _load_config_or_exit(config_path: Optional[str] = None):
    """Load AppConfig, printing a friendly error and exiting on failure."""
    from lureiq.config import load_config

    try:
        cfg_path = Path(config_path) if config_path else None
        return load_config(cfg_path)
    except FileNotFoundError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    except Exception as exc:
        typer.echo(f"[ERROR] Config validation failed: {exc}", err=True)
        raise typer.Exit(code=1)


def _configure_logging(config):
    """Set up logging from config."""
    from lureiq.utils.logging import configure_logging
    configure_logging(config.logging)


def _location_or_exit(lat: Optional[float], lon: Optional[float]):
    """Build a static location provider from ``--lat/--lon``."""
    from lureiq.ingestion.location import StaticLocationProvider, no_location
    from lureiq.models.conditions import Coordinates

    if lat is None and lon is None:
        return no_location
    if lat is None or lon is None:
        typer.echo("[ERROR] --lat and --lon must be given together.", err=True)
        raise typer.Exit(code=1)
    try:
        return StaticLocationProvider(Coordinates(lat=lat, lon=lon))
    except ValueError as exc:
        typer.echo(f"[ERROR] Invalid coordinates: {exc}", err=True)
        raise typer.Exit(code=1)


# ── Commands ──────────────────────────────────────────────────────────────────

@app.command("validate-config")
def validate_config(
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
    show_full: bool = typer.Option(
        False,
        "--show-full",
        help="Print the full merged config as JSON.",
    ),
) -> None:
    """Load and validate the merged configuration."""
    config = _load_config_or_exit(config_path)

    typer.echo("Configuration validated successfully.")
    typer.echo("")
    typer.echo(f"  Store path:       {config.store.db_path}")
    typer.echo(f"  Weather API:      {config.weather.base_url}")
    typer.echo(f"  Weight overrides: {config.weights.override_url or '(none)'}")
    typer.echo(f"  Collector:        {config.feedback.collector_url or '(stub mode)'}")
    typer.echo(f"  Prompt delay:     {config.feedback.prompt_delay_minutes} min")
    typer.echo(f"  Scoring delay:    {config.session.scoring_delay_s}s")
    typer.echo(f"  Log level:        {config.logging.level}")
    typer.echo(f"  Debug mode:       {config.debug}")

    if show_full:
        typer.echo("")
        typer.echo("Full config (JSON):")
        typer.echo(json.dumps(config.model_dump(), indent=2, default=str))

    typer.echo("")
    typer.echo("[OK] Config valid.")


@app.command("conditions")
def conditions(
    lat: Optional[float] = typer.Option(None, "--lat", help="Latitude of the spot."),
    lon: Optional[float] = typer.Option(None, "--lon", help="Longitude of the spot."),
    zip_code: Optional[str] = typer.Option(
        None, "--zip", help="5-digit US ZIP used when --lat/--lon are not given."
    ),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Detect time of day, season, spawn phase and a clarity guess."""
    from lureiq.app import build_advisor

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    location = _location_or_exit(lat, lon)

    async def _run():
        advisor = build_advisor(config, location_provider=location)
        try:
            return await advisor.conditions_service.detect(zip_code)
        finally:
            await advisor.close()

    normalized = asyncio.run(_run())

    typer.echo(normalized.status)
    typer.echo("")
    typer.echo(f"  Time of day:   {normalized.time_of_day}")
    typer.echo(f"  Season:        {normalized.season}")
    typer.echo(f"  Spawn phase:   {normalized.spawn_phase}")
    typer.echo(f"  Clarity guess: {normalized.clarity_guess or '-'}")
    if normalized.coordinates is not None:
        typer.echo(f"  Location:      {normalized.coordinates.label()}")


@app.command("recommend")
def recommend(
    clarity: Clarity = typer.Option(
        ..., "--clarity", case_sensitive=False, help="Water clarity you see."
    ),
    cover: Cover = typer.Option(
        ..., "--cover", case_sensitive=False, help="Cover you are fishing."
    ),
    time_of_day: Optional[TimeOfDay] = typer.Option(
        None, "--time", case_sensitive=False, help="Override the detected time of day."
    ),
    season: Optional[Season] = typer.Option(
        None, "--season", case_sensitive=False, help="Override the detected season."
    ),
    spawn_phase: Optional[SpawnPhase] = typer.Option(
        None, "--spawn", case_sensitive=False, help="Override the detected spawn phase."
    ),
    lat: Optional[float] = typer.Option(None, "--lat", help="Latitude of the spot."),
    lon: Optional[float] = typer.Option(None, "--lon", help="Longitude of the spot."),
    zip_code: Optional[str] = typer.Option(None, "--zip", help="5-digit US ZIP fallback."),
    seed: Optional[int] = typer.Option(None, "--seed", help="Seed for the tie-break RNG."),
    no_jitter: bool = typer.Option(
        False, "--no-jitter", help="Resolve ties in catalog order."
    ),
    schedule: bool = typer.Option(
        False, "--schedule", help="Schedule a feedback prompt for this pick."
    ),
    delay_minutes: Optional[int] = typer.Option(
        None, "--delay-minutes", help="Prompt delay; defaults to feedback.prompt_delay_minutes."
    ),
    explain: bool = typer.Option(
        False, "--explain", help="Show the top scores and the rules behind the pick."
    ),
    worked: Optional[bool] = typer.Option(
        None, "--worked/--no-luck", help="Log whether this plan produced a fish."
    ),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Recommend one lure for the current conditions."""
    from lureiq.app import build_advisor
    from lureiq.recommendations.scorer import build_reasoning, compute_scores

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    location = _location_or_exit(lat, lon)

    session_cfg = config.session.model_copy(
        update={"scoring_delay_s": 0.0, "jitter": config.session.jitter and not no_jitter}
    )
    config = config.model_copy(update={"session": session_cfg})
    rng = random.Random(seed) if seed is not None else None

    async def _run():
        advisor = build_advisor(config, location_provider=location, rng=rng)
        try:
            normalized = await advisor.start(zip_code)
            overrides = {
                key: value
                for key, value in (
                    ("time_of_day", time_of_day),
                    ("season", season),
                    ("spawn_phase", spawn_phase),
                )
                if value is not None
            }
            if overrides:
                advisor.session.apply_autofill(normalized.model_copy(update=overrides))

            record = await advisor.recommend(clarity, cover, schedule_prompt=False)
            prompt = None
            if record is not None and schedule:
                minutes = (
                    delay_minutes
                    if delay_minutes is not None
                    else config.feedback.prompt_delay_minutes
                )
                prompt = await advisor.scheduler.schedule(record, delay_minutes=minutes)
            entry = None
            if record is not None and worked is not None:
                entry = advisor.record_outcome(worked)
            return advisor.session, record, prompt, entry
        finally:
            await advisor.close()

    session, record, prompt, entry = asyncio.run(_run())
    if record is None or session.result is None:
        typer.echo("[ERROR] Could not score: clarity and cover are both required.", err=True)
        raise typer.Exit(code=1)

    result = session.result
    cond = session.conditions
    typer.echo(
        f"Conditions: {cond.clarity} / {cond.cover} / {cond.time_of_day} / "
        f"{cond.season} / spawn {cond.spawn_phase}"
    )
    typer.echo("")
    typer.echo(f"  Lure:     {result.lure}")
    typer.echo(f"  Color:    {result.color}")
    typer.echo(f"  Retrieve: {result.retrieve}")
    typer.echo(f"  Depth:    {result.depth}")

    if explain:
        breakdown = compute_scores(cond, session.catalog, session.overrides)
        typer.echo("")
        typer.echo(f"  Why:      {build_reasoning(breakdown, result.lure)}")
        typer.echo("  Top scores:")
        for name, value in breakdown.ranked()[:5]:
            typer.echo(f"    {value:5.1f}  {name}")

    if prompt is not None:
        typer.echo("")
        typer.echo(f"[OK] Feedback prompt scheduled (id: {prompt.recommendation_id}).")

    if entry is not None:
        typer.echo(f"[OK] Outcome logged ({'worked' if entry.success else 'no luck'}).")


@app.command("feedback-status")
def feedback_status(
    days: float = typer.Option(7.0, "--days", help="Window for recent feedback records."),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Show the scheduled prompt and the local feedback queue."""
    from lureiq.feedback.queue import FeedbackQueue
    from lureiq.feedback.scheduler import KEY_SCHEDULED
    from lureiq.models.feedback import ScheduledPrompt
    from lureiq.storage.kv_store import SqliteKeyValueStore, read_json
    from lureiq.utils.time_utils import MS_PER_MINUTE, now_ms

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    store = SqliteKeyValueStore(
        config.store.db_path,
        wal_mode=config.store.wal_mode,
        busy_timeout_ms=config.store.busy_timeout_ms,
    )
    queue = FeedbackQueue(store)
    raw = read_json(store, KEY_SCHEDULED)
    now = now_ms()

    if raw is None:
        typer.echo("Scheduled prompt: none")
    else:
        try:
            prompt = ScheduledPrompt.model_validate(raw)
        except ValueError as exc:
            typer.echo(f"Scheduled prompt: unreadable ({exc})")
        else:
            if prompt.is_due(now):
                when = "due now"
            else:
                when = f"due in {(prompt.due_at - now) // MS_PER_MINUTE + 1} min"
            typer.echo(f"Scheduled prompt: {prompt.lure_name} ({when})")

    recent = queue.records_since(days, now=now)
    typer.echo(f"Pending uploads:  {queue.pending_count()}")
    typer.echo(f"Last {days:g} days:     {len(recent)} record(s)")
    for rec in recent:
        verdict = "caught" if rec.caught else "no fish"
        count = f" x{rec.count}" if rec.count is not None else ""
        typer.echo(f"  {rec.lure_name}: {verdict}{count}")


@app.command("feedback-resolve")
def feedback_resolve(
    caught: bool = typer.Option(
        ..., "--caught/--missed", help="Whether the recommended lure produced a fish."
    ),
    count: Optional[int] = typer.Option(None, "--count", min=0, help="Number of fish."),
    notes: Optional[str] = typer.Option(None, "--notes", help="Free-text notes."),
    lat: Optional[float] = typer.Option(None, "--lat", help="Latitude to attach."),
    lon: Optional[float] = typer.Option(None, "--lon", help="Longitude to attach."),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Answer the scheduled feedback prompt and try to upload."""
    from lureiq.app import build_advisor
    from lureiq.models.feedback import FeedbackOutcome

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    location = _location_or_exit(lat, lon)
    outcome = FeedbackOutcome(caught=caught, count=count, notes=notes)

    async def _run():
        advisor = build_advisor(config, location_provider=location)
        try:
            task = advisor.scheduler.resolve(outcome)
            record = await task if task is not None else None
            return record, advisor.queue.pending_count()
        finally:
            await advisor.close()

    record, pending = asyncio.run(_run())
    if record is None:
        typer.echo("No feedback prompt is scheduled; nothing recorded.")
        return

    typer.echo(f"Recorded: {record.lure_name} ({'caught' if record.caught else 'no fish'})")
    typer.echo(f"  Pending uploads: {pending}")
    typer.echo("[OK] Feedback saved.")


@app.command("feedback-dismiss")
def feedback_dismiss(
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Drop the scheduled prompt without recording anything."""
    from lureiq.app import build_advisor

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    async def _run():
        advisor = build_advisor(config)
        try:
            had_prompt = advisor.scheduler.load_slot() is not None
            await advisor.scheduler.dismiss()
            return had_prompt
        finally:
            await advisor.close()

    if asyncio.run(_run()):
        typer.echo("[OK] Feedback prompt dismissed.")
    else:
        typer.echo("No feedback prompt was scheduled.")


@app.command("feedback-flush")
def feedback_flush(
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Upload every queued feedback record in one batch."""
    from lureiq.app import build_advisor

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    async def _run():
        advisor = build_advisor(config)
        try:
            ok = await advisor.uploader.flush()
            return ok, advisor.queue.pending_count()
        finally:
            await advisor.close()

    ok, pending = asyncio.run(_run())
    if not ok:
        typer.echo(f"[WARN] Upload failed; {pending} record(s) kept for retry.", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"[OK] Queue flushed; {pending} record(s) pending.")


@app.command("outcome-log")
def outcome_log(
    days: float = typer.Option(30.0, "--days", help="Window of entries to show."),
    pop: bool = typer.Option(
        False, "--pop", help="Print every entry as JSON and empty the log."
    ),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Show or export the conditions-tagged outcome log."""
    from lureiq.feedback.outcome_log import OutcomeLog
    from lureiq.storage.kv_store import SqliteKeyValueStore

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    log = OutcomeLog(
        SqliteKeyValueStore(
            config.store.db_path,
            wal_mode=config.store.wal_mode,
            busy_timeout_ms=config.store.busy_timeout_ms,
        )
    )

    if pop:
        entries = log.pop_all()
        typer.echo(json.dumps([e.model_dump(mode="json") for e in entries], indent=2))
        return

    recent = log.since_days(days)
    typer.echo(f"Logged outcomes:  {log.pending_count()}")
    typer.echo(f"Last {days:g} days:    {len(recent)} entr{'y' if len(recent) == 1 else 'ies'}")
    for entry in recent:
        cond = entry.conditions
        verdict = "worked" if entry.success else "no luck"
        typer.echo(f"  {entry.plan.lure_name}: {verdict} ({cond.clarity} / {cond.cover})")


# ── Entry point ───────────────────────────────────────────────────────────────

if __name__ == "__main__":
    app()
