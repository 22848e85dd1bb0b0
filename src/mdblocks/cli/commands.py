"""CLI command implementations"""

import json
from pathlib import Path
from typing import Annotated, Optional

import typer

from mdblocks.config import Settings, load_config
from mdblocks.core.pipeline import (
    editor_roundtrip,
    run_check,
    run_editor_load,
    run_editor_save,
    run_extract,
    run_render,
)
from mdblocks.core.utils.diff import count_changes, roundtrip_diff
from mdblocks.core.utils.paths import discover_files


def _fail(msg: str, cause: Exception = None) -> None:
    """Print a user-friendly error to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(1)


def _settings(overrides: dict = None) -> Settings:
    """Load config with standard CLI error handling."""
    try:
        return load_config(overrides=overrides)
    except ValueError as e:
        _fail(str(e))


def _write_or_echo(text: str, out: Optional[str]) -> None:
    if out:
        Path(out).parent.mkdir(parents=True, exist_ok=True)
        Path(out).write_text(text, encoding='utf-8')
        typer.echo(f"Wrote {out}")
    else:
        typer.echo(text, nl=False)


def extract_cmd(
    path: Annotated[str, typer.Argument(help="File or directory to extract from")],
    staging: Annotated[Optional[str], typer.Option("--staging-dir", help="Staging directory")] = None,
    parser: Annotated[Optional[str], typer.Option("--parser-config", help="MarkdownIt preset name")] = None,
    ):
    """Parse markdown files into staged Document JSON."""
    settings = _settings(overrides={"staging_dir": staging, "parser_config": parser})
    staging_dir = Path(settings.staging_dir)
    try:
        results = run_extract(path, settings, staging_dir)
    except RuntimeError as e:
        _fail(str(e))
    for src, out_file in results:
        typer.echo(f"  {src} -> {out_file}")
    typer.echo(f"Extracted {len(results)} document(s) to {staging_dir}/")


def render_cmd(
    staging: Annotated[Optional[str], typer.Option("--staging-dir", help="Staging directory")] = None,
    out: Annotated[Optional[str], typer.Option("--out-dir", help="Output directory")] = None,
    ):
    """Serialize staged Document JSON back to normalized markdown."""
    settings = _settings(overrides={"staging_dir": staging, "output_dir": out})
    staging_dir, output_dir = Path(settings.staging_dir), Path(settings.output_dir)
    try:
        results = run_render(staging_dir, output_dir)
    except RuntimeError as e:
        _fail(str(e))
    if not results:
        typer.echo("Nothing staged. Run 'mdblocks extract <path>' first.")
        raise typer.Exit(1)
    for staged, out_file in results:
        typer.echo(f"  {staged} -> {out_file}")
    typer.echo(f"Rendered {len(results)} document(s) to {output_dir}/")


def build_cmd(
    path: Annotated[str, typer.Argument(help="File or directory to process")],
    out: Annotated[Optional[str], typer.Option("--out-dir", help="Output directory")] = None,
    staging: Annotated[Optional[str], typer.Option("--staging-dir", help="Staging directory")] = None,
    parser: Annotated[Optional[str], typer.Option("--parser-config", help="MarkdownIt preset name")] = None,
    ):
    """Run the full pipeline: extract -> render."""
    settings = _settings(overrides={"output_dir": out, "staging_dir": staging, "parser_config": parser})
    staging_dir, output_dir = Path(settings.staging_dir), Path(settings.output_dir)

    # --- extract ---
    try:
        extracted = run_extract(path, settings, staging_dir)
    except RuntimeError as e:
        _fail(str(e))
    typer.echo(f"Extracted {len(extracted)} document(s) to {staging_dir}/")

    # --- render ---
    try:
        rendered = run_render(staging_dir, output_dir)
    except RuntimeError as e:
        _fail(str(e))
    for _, out_file in rendered:
        typer.echo(f"  {out_file}")
    typer.echo(f"Rendered {len(rendered)} document(s) to {output_dir}/")


def check_cmd(
    path: Annotated[str, typer.Argument(help="File or directory to check")],
    show_diff: Annotated[bool, typer.Option("--diff", help="Print the unified diff for drifting files")] = False,
    editor: Annotated[bool, typer.Option("--editor", help="Also pass blocks through the editor form")] = False,
    ):
    """Report files whose markdown changes when parsed and serialized again. Exits 1 on drift."""
    settings = _settings()
    if editor:
        results = []
        for p in discover_files(Path(path)):
            source = p.read_text(encoding='utf-8')
            results.append((p, roundtrip_diff(source, editor_roundtrip(source, settings), label=p.as_posix())))
    else:
        results = run_check(path, settings)

    drifting = [(p, diff) for p, diff in results if diff]
    for p, diff in drifting:
        typer.echo(f"  changed: {p} ({count_changes(diff)} line(s))")
        if show_diff:
            typer.echo("".join(diff), nl=False)
    typer.echo(f"Checked {len(results)} document(s), {len(drifting)} changed")
    if drifting:
        raise typer.Exit(1)


def editor_load_cmd(
    path: Annotated[str, typer.Argument(help="Markdown file to load")],
    out: Annotated[Optional[str], typer.Option("--out", help="Write editor JSON here instead of stdout")] = None,
    ):
    """Convert a markdown file into editor JSON."""
    settings = _settings()
    try:
        payload = run_editor_load(Path(path), settings)
    except OSError as e:
        _fail(f"Cannot read {path}", e)
    _write_or_echo(json.dumps(payload, indent=2, ensure_ascii=False, default=str) + "\n", out)


def editor_save_cmd(
    path: Annotated[str, typer.Argument(help="Editor JSON file to save")],
    out: Annotated[Optional[str], typer.Option("--out", help="Write markdown here instead of stdout")] = None,
    ):
    """Convert editor JSON back into markdown."""
    try:
        markdown = run_editor_save(Path(path))
    except OSError as e:
        _fail(f"Cannot read {path}", e)
    except ValueError as e:
        _fail(str(e))
    _write_or_echo(markdown, out)
