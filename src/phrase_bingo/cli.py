from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import typer
from rich.console import Console
from rich.table import Table

from . import caller as sequencer
from .config import compute_params_hash, resolve_parameters
from .core import BuildParams, PackBuilder
from .errors import BingoError
from .feasibility import check_pool_capacity
from .logging_setup import setup_logging
from .pool import DEFAULT_POOL, load_pool_file
from .rng import create_rng
from .scoring import score_pack, winners as rank_winners
from .serialize import (
    build_run_meta,
    emit_caller_state,
    emit_pack_json,
    emit_report_json,
    emit_roster_csv,
    emit_summary_csv,
    load_caller_pack_id,
    load_caller_state,
    load_pack_json,
)
from .share import decode_card, encode_card, envelope_for
from .verify import verify as verify_pack
from .version import __version__

logger = logging.getLogger(__name__)

app = typer.Typer(help="Phrase bingo: card pack generator and live caller")
call_app = typer.Typer(help="Run a live game: draw phrases in batches")
share_app = typer.Typer(help="Encode or decode single-card share tokens")
app.add_typer(call_app, name="call")
app.add_typer(share_app, name="share")

console = Console()

DEFAULT_STATE_FILE = "caller_state.json"


@app.callback(invoke_without_command=True)
def common_options(
    ctx: typer.Context,
    version: bool = typer.Option(
        False, "--version", help="Show application version and exit", is_eager=True
    ),
) -> None:
    if version:
        typer.echo(__version__)
        raise typer.Exit(0)
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(0)


def _resolve(config: Optional[str], overrides: Dict[str, Any]) -> tuple[Dict[str, Any], str]:
    cli_overrides = {k: v for k, v in overrides.items() if v is not None}
    resolved, params_hash, _cfg_path = resolve_parameters(
        config_path_str=config, cli_overrides=cli_overrides
    )
    setup_logging(
        level=str(resolved.get("log_level", "INFO")),
        log_file=resolved.get("log_file"),
        json_format=(str(resolved.get("log_format", "text")) == "json"),
        colors=str(resolved.get("colors", "auto")),
    )
    return resolved, params_hash


def _load_pool(resolved: Dict[str, Any]) -> List[str]:
    pool_file = resolved.get("pool_file")
    if pool_file:
        pool = load_pool_file(Path(pool_file))
        logger.info("Loaded %d label(s) from %s", len(pool), pool_file)
        return pool
    logger.info("No pool file given, using the built-in pool")
    return list(DEFAULT_POOL)


def _fail(exc: Exception) -> typer.Exit:
    logger.error("%s", exc)
    return typer.Exit(code=2)


def _state_path(resolved: Dict[str, Any]) -> Path:
    return Path(resolved.get("state_file") or DEFAULT_STATE_FILE)


def _load_state(path: Path) -> tuple[sequencer.CallerState, Optional[str]]:
    try:
        return load_caller_state(path), load_caller_pack_id(path)
    except (ValueError, KeyError, TypeError, AttributeError) as exc:
        raise _fail(ValueError(f"Unreadable caller state file {path}: {exc}"))


@app.command()
def generate(
    config: str = typer.Option(None, "--config", help="Path to config file (YAML/JSON)"),
    pool_file: str = typer.Option(None, "--pool", help="Newline-delimited pool file"),
    quantity: Optional[int] = typer.Option(None, "--quantity", "-q", help="Number of cards (1-500)"),
    grid_size: Optional[int] = typer.Option(None, "--grid-size", help="Grid size: 3, 4 or 5"),
    free_center: Optional[bool] = typer.Option(
        None, "--free-center/--no-free-center", help="Reserve the center cell on odd grids"
    ),
    free_label: str = typer.Option(None, "--free-label", help="Text printed in the free cell"),
    title: str = typer.Option(None, "--title", help="Pack title"),
    sponsor: str = typer.Option(None, "--sponsor", help="Sponsor name"),
    id_prefix: str = typer.Option(None, "--id-prefix", help="Card id prefix"),
    seed: Optional[int] = typer.Option(None, "--seed", help="Seed for reproducible packs"),
    rng_engine: str = typer.Option(None, "--rng-engine", help="system|py_random|numpy_pcg64"),
    out_pack: str = typer.Option(None, "--out-pack", help="pack.json output path"),
    out_roster: str = typer.Option(None, "--out-roster", help="roster.csv output path"),
    out_report: str = typer.Option(None, "--out-report", help="report.json output path"),
    summary_csv: str = typer.Option(None, "--summary-csv", help="Path to label summary CSV (optional)"),
    csv_by_position: bool = typer.Option(
        False, "--csv-by-position", help="Include per-position counts in CSV"
    ),
    log_file: str = typer.Option(None, "--log-file", help="Log file path"),
    log_level: str = typer.Option(None, "--log-level", help="DEBUG|INFO|WARN|ERROR"),
    colors: str = typer.Option(None, "--colors", help="auto|always|never"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Resolve params and exit"),
    force: bool = typer.Option(False, "--force", help="Overwrite outputs if they exist"),
    no_mkdirs: bool = typer.Option(False, "--no-mkdirs", help="Do not create parent directories"),
) -> None:
    """Generate a pack of cards and write pack, roster and report files."""
    overrides: Dict[str, Any] = {
        "pool_file": pool_file,
        "quantity": quantity,
        "grid_size": grid_size,
        "free_center": free_center,
        "free_label": free_label,
        "title": title,
        "sponsor_name": sponsor,
        "id_prefix": id_prefix,
        "seed.value": seed,
        "seed.engine": rng_engine or ("py_random" if seed is not None else None),
        "out_pack": out_pack,
        "out_roster": out_roster,
        "out_report": out_report,
        "summary_csv": summary_csv,
        "log_file": log_file,
        "log_level": log_level,
        "colors": colors,
    }
    resolved, _hash = _resolve(config, overrides)
    try:
        pool = _load_pool(resolved)
    except FileNotFoundError as exc:
        raise _fail(exc)
    params_hash = compute_params_hash(resolved, pool=pool)

    if dry_run:
        capacity = check_pool_capacity(
            pool_size=len(pool),
            grid_size=int(resolved.get("grid_size") or 5),
            free_center=bool(resolved.get("free_center")),
        )
        typer.echo(f"Pool size: {len(pool)}")
        typer.echo(f"Pool capacity: {'ok' if capacity.feasible else '; '.join(capacity.reasons)}")
        typer.echo(f"Params hash: {params_hash}")
        raise typer.Exit(0)

    seed_cfg = resolved.get("seed") or {}
    build_params = BuildParams(
        pool=pool,
        quantity=resolved.get("quantity"),
        grid_size=resolved.get("grid_size"),
        free_center=bool(resolved.get("free_center")),
        title=str(resolved.get("title") or ""),
        sponsor_name=str(resolved.get("sponsor_name") or ""),
        free_label=str(resolved.get("free_label") or "FREE"),
        id_prefix=str(resolved.get("id_prefix") or "CARD"),
        seed=seed_cfg.get("value"),
        rng_engine=str(seed_cfg.get("engine") or "system"),
        max_attempts_per_card=int(resolved.get("max_attempts_per_card") or 200),
    )

    try:
        result = PackBuilder().build(build_params)
    except BingoError as exc:
        raise _fail(exc)

    pack = result.pack
    report = verify_pack(pack)
    report["metrics"] = {
        "total_time": round(result.metrics.total_time, 6),
        "attempts_per_card": result.metrics.attempts_per_card,
        "duplicate_fallbacks": result.metrics.duplicate_fallbacks,
    }
    run_meta = build_run_meta(
        app_version=__version__,
        params_hash=params_hash,
        seed=build_params.seed,
        rng_engine=build_params.rng_engine,
    )

    out_pack_path = Path(resolved.get("out_pack") or "pack.json")
    out_roster_path = Path(resolved.get("out_roster") or "roster.csv")
    out_report_path = Path(resolved.get("out_report") or "report.json")
    mkdirs = not no_mkdirs

    try:
        emit_pack_json(out_pack_path, pack=pack, run_meta=run_meta, mkdirs=mkdirs, overwrite=force)
        emit_roster_csv(out_roster_path, cards=pack.cards, mkdirs=mkdirs, overwrite=force)
        emit_report_json(out_report_path, report=report, mkdirs=mkdirs, overwrite=force)
        if resolved.get("summary_csv"):
            freqs = report.get("frequencies", {})
            by_pos = report.get("position_frequencies", {}) if csv_by_position else None
            if not isinstance(freqs, dict):
                freqs = {}
            if by_pos is not None and not isinstance(by_pos, dict):
                by_pos = None
            emit_summary_csv(
                Path(resolved["summary_csv"]),
                freqs=freqs,
                by_position=by_pos,
                mkdirs=mkdirs,
                overwrite=force,
            )
    except FileExistsError as exc:
        raise _fail(exc)

    typer.echo(f"Generated {len(pack.cards)} cards in pack {pack.pack_id}")
    typer.echo(f"Output files: {out_pack_path}, {out_roster_path}, {out_report_path}")
    if result.metrics.duplicate_fallbacks:
        typer.echo(f"Warning: {result.metrics.duplicate_fallbacks} card(s) repeat an earlier layout")
    raise typer.Exit(code=0)


@app.command()
def verify(
    pack_file: str = typer.Option(..., "--pack", help="Path to pack.json"),
    out_report: str = typer.Option(None, "--out-report", help="Write report.json here"),
    force: bool = typer.Option(False, "--force", help="Overwrite report if it exists"),
    log_level: str = typer.Option(None, "--log-level", help="DEBUG|INFO|WARN|ERROR"),
) -> None:
    """Re-check a saved pack: shapes, free cells, duplicates, label usage."""
    _resolve(None, {"log_level": log_level})
    try:
        pack = load_pack_json(Path(pack_file))
    except (FileNotFoundError, ValueError, KeyError) as exc:
        raise _fail(exc)
    report = verify_pack(pack)
    if out_report:
        try:
            emit_report_json(Path(out_report), report=report, mkdirs=True, overwrite=force)
        except FileExistsError as exc:
            raise _fail(exc)
    checks = [
        "ok_grid_shapes",
        "ok_free_cells",
        "ok_no_duplicates_within_cards",
        "ok_no_identical_cards",
    ]
    for key in checks:
        typer.echo(f"{key}: {report[key]}")
    raise typer.Exit(code=0 if all(report[k] for k in checks) else 1)


@call_app.command("start")
def call_start(
    config: str = typer.Option(None, "--config", help="Path to config file (YAML/JSON)"),
    pool_file: str = typer.Option(None, "--pool", help="Newline-delimited pool file"),
    pack_file: str = typer.Option(None, "--pack", help="Use the pool of a saved pack.json"),
    deck_size: Optional[int] = typer.Option(None, "--deck-size", help="Labels in play (default: whole pool)"),
    seed: Optional[int] = typer.Option(None, "--seed", help="Seed for a reproducible deck"),
    state_file: str = typer.Option(None, "--state", help="Caller state file"),
    log_level: str = typer.Option(None, "--log-level", help="DEBUG|INFO|WARN|ERROR"),
) -> None:
    """Shuffle a new deck and clear previous calls."""
    resolved, _hash = _resolve(
        config,
        {"pool_file": pool_file, "deck_size": deck_size, "state_file": state_file, "log_level": log_level},
    )
    pack_id = None
    try:
        if pack_file:
            pack = load_pack_json(Path(pack_file))
            pool, pack_id = list(pack.pool), pack.pack_id
        else:
            pool = _load_pool(resolved)
    except (FileNotFoundError, ValueError) as exc:
        raise _fail(exc)

    size = resolved.get("deck_size")
    if size is None:
        size = len(pool)
    rng = create_rng("py_random", seed) if seed is not None else None
    try:
        state = sequencer.start(pool, size, rng=rng)
    except BingoError as exc:
        raise _fail(exc)
    emit_caller_state(_state_path(resolved), state=state, pack_id=pack_id)
    typer.echo(f"Game started: {len(state.deck)} labels in the deck")


@call_app.command("draw")
def call_draw(
    config: str = typer.Option(None, "--config", help="Path to config file (YAML/JSON)"),
    batch_size: Optional[int] = typer.Option(None, "--batch-size", "-n", help="Labels per draw"),
    state_file: str = typer.Option(None, "--state", help="Caller state file"),
    log_level: str = typer.Option(None, "--log-level", help="DEBUG|INFO|WARN|ERROR"),
) -> None:
    """Call the next batch."""
    resolved, _hash = _resolve(
        config, {"batch_size": batch_size, "state_file": state_file, "log_level": log_level}
    )
    path = _state_path(resolved)
    state, pack_id = _load_state(path)
    if state.status is sequencer.CallerStatus.NOT_STARTED:
        raise _fail(RuntimeError("No game in progress; run 'call start' first"))
    try:
        new_state, batch = sequencer.draw(state, resolved.get("batch_size"))
    except BingoError as exc:
        raise _fail(exc)
    if not batch:
        typer.echo("Deck exhausted; nothing left to call")
        raise typer.Exit(0)
    emit_caller_state(path, state=new_state, pack_id=pack_id)
    typer.echo(f"Round {new_state.round}:")
    for label in batch:
        typer.echo(f"  {label}")
    typer.echo(f"{len(new_state.remaining)} left")


@call_app.command("reset")
def call_reset(
    config: str = typer.Option(None, "--config", help="Path to config file (YAML/JSON)"),
    state_file: str = typer.Option(None, "--state", help="Caller state file"),
) -> None:
    """Forget the deck and every call."""
    resolved, _hash = _resolve(config, {"state_file": state_file})
    emit_caller_state(_state_path(resolved), state=sequencer.reset())
    typer.echo("Game reset")


@call_app.command("status")
def call_status(
    config: str = typer.Option(None, "--config", help="Path to config file (YAML/JSON)"),
    state_file: str = typer.Option(None, "--state", help="Caller state file"),
) -> None:
    resolved, _hash = _resolve(config, {"state_file": state_file})
    state, _pack_id = _load_state(_state_path(resolved))
    typer.echo(f"Status: {state.status.value}")
    typer.echo(f"Round: {state.round}")
    typer.echo(f"Called: {len(state.called)} / {len(state.deck)}")
    for label in state.called:
        typer.echo(f"  {label}")


@app.command()
def winners(
    config: str = typer.Option(None, "--config", help="Path to config file (YAML/JSON)"),
    pack_file: str = typer.Option(..., "--pack", help="Path to pack.json"),
    state_file: str = typer.Option(None, "--state", help="Caller state file"),
    show_all: bool = typer.Option(False, "--all", help="List incomplete cards too"),
) -> None:
    """Score every card of a pack against the calls so far."""
    resolved, _hash = _resolve(config, {"state_file": state_file})
    try:
        pack = load_pack_json(Path(pack_file))
    except (FileNotFoundError, ValueError, KeyError) as exc:
        raise _fail(exc)
    state, state_pack = _load_state(_state_path(resolved))
    if state_pack and state_pack != pack.pack_id:
        typer.echo(f"Warning: caller state belongs to pack {state_pack}, not {pack.pack_id}")

    scores = score_pack(pack.cards, state.called)
    complete = [s for s in scores if s.is_complete]
    rows = scores if show_all else rank_winners(pack.cards, state.called)

    table = Table(title=f"{pack.title}: {len(complete)} of {len(scores)} complete")
    table.add_column("Card")
    table.add_column("Matched", justify="right")
    table.add_column("Complete at call", justify="right")
    for s in rows:
        table.add_row(s.card_id, f"{s.matched}/{s.needed}", str(s.complete_at_call or "-"))
    console.print(table)


@share_app.command("encode")
def share_encode(
    pack_file: str = typer.Option(..., "--pack", help="Path to pack.json"),
    card_id: str = typer.Option(..., "--card", help="Card id"),
) -> None:
    try:
        pack = load_pack_json(Path(pack_file))
        card = pack.card(card_id)
    except (FileNotFoundError, ValueError, KeyError) as exc:
        raise _fail(exc)
    typer.echo(encode_card(envelope_for(pack, card)))


@share_app.command("decode")
def share_decode(token: str = typer.Argument(..., help="Share token")) -> None:
    try:
        envelope = decode_card(token)
    except BingoError as exc:
        raise _fail(exc)
    typer.echo(
        json.dumps(
            {
                "packId": envelope.pack_id,
                "cardId": envelope.card_id,
                "title": envelope.title,
                "sponsorName": envelope.sponsor_name,
                "grid": [list(row) for row in envelope.grid],
            },
            ensure_ascii=False,
            indent=2,
        )
    )


def main(_argv: list[str] | None = None) -> int:
    try:
        app(standalone_mode=True)
        return 0
    except SystemExit as e:
        return int(e.code) if e.code is not None else 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
