"""defcards CLI — definition lookup and flashcard study commands."""

import json
import logging
import random
import sys
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Annotated

import typer

from defcards.application.config import AppConfig, resolve_config
from defcards.application.definition_index import DefinitionIndex
from defcards.application.flashcard_service import FlashcardService
from defcards.application.parsing import FileRecordParser
from defcards.application.session_counter import SessionCounter
from defcards.application.stats import StatsService
from defcards.domain.errors import ConfigError, PersistenceError, UnknownTermError
from defcards.domain.models import Grade
from defcards.infrastructure import FrontmatterReviewStore, JsonSessionStore, VaultFileStore

# ---------------------------------------------------------------------------
# Root app
# ---------------------------------------------------------------------------

app = typer.Typer(
    help="defcards: look up vault definitions and study them as flashcards.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

config_app = typer.Typer(help="Inspect defcards configuration.")
app.add_typer(config_app, name="config")

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s:%(name)s:%(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)


@dataclass
class _Runtime:
    config: AppConfig
    files: VaultFileStore
    index: DefinitionIndex
    sessions: JsonSessionStore
    counter: SessionCounter
    flashcards: FlashcardService


def _load_config(ctx: typer.Context) -> AppConfig:
    overrides = (ctx.obj or {}).get("overrides", {})
    try:
        return resolve_config(overrides)
    except ConfigError as e:
        typer.secho(f"Invalid configuration: {e}", fg="red", err=True)
        raise typer.Exit(2) from e


def _build_runtime(ctx: typer.Context) -> _Runtime:
    config = _load_config(ctx)
    root = config.definitions_root
    if not root.is_dir():
        typer.secho(f"Definitions folder not found: {root}", fg="red", err=True)
        raise typer.Exit(1)

    files = VaultFileStore(config.vault_root or Path.cwd(), config.def_folder)
    index = DefinitionIndex(files, FileRecordParser(config.parse))
    index.rebuild_all()

    sessions = JsonSessionStore(config.sessions_file)
    counter = SessionCounter()
    counter.load(sessions)

    flashcards = FlashcardService(
        index, FrontmatterReviewStore(files), counter, config.flashcards
    )
    return _Runtime(config, files, index, sessions, counter, flashcards)


# ---------------------------------------------------------------------------
# Global callback
# ---------------------------------------------------------------------------


@app.callback()
def main_callback(
    ctx: typer.Context,
    vault: Annotated[
        Path | None,
        typer.Option("--vault", help="Vault root. Defaults to 'vault_root' in config, or CWD."),
    ] = None,
    def_folder: Annotated[
        str | None, typer.Option("--def-folder", help="Definitions folder inside the vault.")
    ] = None,
    verbose: Annotated[
        int,
        typer.Option("--verbose", "-v", count=True, help="Increase verbosity."),
    ] = 0,
):
    """Global settings for defcards."""
    ctx.ensure_object(dict)
    ctx.obj["overrides"] = {"vault_root": vault, "def_folder": def_folder}
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)


# ---------------------------------------------------------------------------
# Definitions
# ---------------------------------------------------------------------------


@app.command()
def terms(
    ctx: typer.Context,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """List every defined term."""
    rt = _build_runtime(ctx)
    records = sorted(rt.index.records(), key=lambda r: r.key)

    if json_output:
        payload = [
            {
                "key": r.key,
                "word": r.word,
                "aliases": list(r.aliases),
                "file": r.source_file,
                "kind": r.file_kind.value,
            }
            for r in records
        ]
        typer.echo(json.dumps(payload, indent=2))
        return

    for r in records:
        suffix = f"  ({', '.join(r.aliases)})" if r.aliases else ""
        typer.echo(f"{r.word}{suffix}  [{r.source_file}]")

    conflicts = rt.index.conflicts()
    if conflicts:
        typer.secho(f"{len(conflicts)} key(s) defined in more than one file.", fg="yellow")


@app.command()
def lookup(
    ctx: typer.Context,
    word: Annotated[str, typer.Argument(help="Term or alias to look up.")],
):
    """Show the definition of a term."""
    rt = _build_runtime(ctx)
    record = rt.index.lookup(word)
    if record is None:
        typer.secho(f"No definition for '{word}'.", fg="yellow")
        raise typer.Exit(1)

    typer.secho(record.word, bold=True)
    if record.aliases:
        typer.echo(f"Aliases: {', '.join(record.aliases)}")
    typer.echo(f"Source: {record.link_target}")
    typer.echo("")
    typer.echo(record.body)


@app.command()
def mentions(
    ctx: typer.Context,
    file: Annotated[Path, typer.Argument(help="Markdown note to scan.", exists=True)],
):
    """List defined terms mentioned in a note."""
    rt = _build_runtime(ctx)
    text = file.read_text(encoding="utf-8")
    found = rt.index.find_mentions(text)
    if not found:
        typer.echo("No defined terms mentioned.")
        return
    for r in found:
        typer.echo(f"{r.word}  [{r.link_target}]")


# ---------------------------------------------------------------------------
# Flashcards
# ---------------------------------------------------------------------------


@app.command()
def queue(
    ctx: typer.Context,
    extra: Annotated[
        bool, typer.Option("--extra", help="Draw a shuffled practice set past the daily caps.")
    ] = False,
    seed: Annotated[int | None, typer.Option(help="Seed for the --extra shuffle.")] = None,
):
    """Show the cards to study now."""
    rt = _build_runtime(ctx)

    if extra:
        cards = rt.flashcards.extra_queue(rng=random.Random(seed))
        typer.secho(f"Extra session: {len(cards)} card(s)", bold=True)
    else:
        result = rt.flashcards.today_queue()
        cards = result.queue
        typer.secho(
            f"Today: {result.review_count} review + {result.new_count} new", bold=True
        )
        if not cards and result.caps_exhausted:
            typer.secho(
                "Daily limits reached. Run 'defcards queue --extra' to keep studying.",
                fg="yellow",
            )

    for state in cards:
        typer.echo(f"{state.status.value:<10} {state.term_key}  [{state.file_ref}]")


@app.command()
def grade(
    ctx: typer.Context,
    word: Annotated[str, typer.Argument(help="Term that was studied.")],
    answer: Annotated[str, typer.Argument(help="One of: again, hard, good, easy.")],
    seconds: Annotated[int, typer.Option(help="Time spent on the card.")] = 0,
):
    """Record how well you recalled a term."""
    try:
        g = Grade.parse(answer)
    except ValueError as e:
        typer.secho(str(e), fg="red", err=True)
        raise typer.Exit(2) from e

    rt = _build_runtime(ctx)
    try:
        state = rt.flashcards.grade(word, g, elapsed_seconds=seconds)
    except (UnknownTermError, PersistenceError) as e:
        typer.secho(str(e), fg="red", err=True)
        raise typer.Exit(1) from e

    rt.counter.save(rt.sessions)
    typer.secho(
        f"{state.term_key}: {state.status.value}, next review in {state.interval} day(s)",
        fg="green",
    )


@app.command()
def stats(
    ctx: typer.Context,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """Show study statistics."""
    rt = _build_runtime(ctx)
    s = StatsService(rt.flashcards, rt.counter).get_stats()

    if json_output:
        typer.echo(json.dumps(asdict(s), indent=2))
        return

    typer.secho("Cards", bold=True)
    typer.echo(
        f"  total {s.total_cards}: {s.new_cards} new, {s.learning_cards} learning, "
        f"{s.review_cards} review, {s.graduated_cards} graduated"
    )
    typer.secho("Today", bold=True)
    typer.echo(f"  {s.today_new_cards} new, {s.today_review_cards} review")
    typer.secho("History", bold=True)
    typer.echo(f"  weekly average {s.weekly_average}/day, this month {s.monthly_total}")
    typer.echo(f"  streak {s.current_streak} day(s), longest {s.longest_streak}")
    typer.echo(f"  {s.total_study_minutes} minute(s) studied, accuracy {s.average_accuracy:.0%}")


# ---------------------------------------------------------------------------
# Config subgroup
# ---------------------------------------------------------------------------


@config_app.command("show")
def config_show(ctx: typer.Context):
    """Display final resolved configuration."""
    config = _load_config(ctx)
    typer.echo(json.dumps(config.model_dump(mode="json"), indent=2))


if __name__ == "__main__":
    app()
