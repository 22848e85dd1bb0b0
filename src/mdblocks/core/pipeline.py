"""Pipeline step functions: extract, render, check, and editor load/save over files"""

import json
import logging
from pathlib import Path
from typing import Any

from mdblocks.config import Settings
from mdblocks.core.export import serialize_document
from mdblocks.core.models import Document
from mdblocks.core.parse import parse_document
from mdblocks.core.utils.diff import roundtrip_diff
from mdblocks.core.utils.paths import discover_files, staged_name
from mdblocks.editor.adapter import from_editor_form, save, to_editor_form


logger = logging.getLogger(__name__)


def _recorded_path(p: Path, root: Path) -> Path:
    """Path a discovered file is staged under.

    Clean relative paths are kept as given. Absolute paths and paths through
    '..' are recorded relative to the extract root's parent, so files from
    different folders never share a name.
    """
    if not p.is_absolute() and ".." not in p.parts:
        return p
    return Path(root.resolve().name) / p.absolute().relative_to(root.absolute())


def run_extract(path: str, settings: Settings, staging_dir: Path) -> list[tuple[Path, Path]]:
    """Parse path and write Document JSON to staging_dir. Returns (source_path, staging_file) pairs."""
    staging_dir.mkdir(parents=True, exist_ok=True)
    root = Path(path)
    results = []
    for p in discover_files(root):
        try:
            source = _recorded_path(p, root)
            doc = parse_document(p.read_text(encoding='utf-8'), path=source.as_posix(), settings=settings)
            out_file = staging_dir / f"{staged_name(source)}.json"
            out_file.write_text(doc.model_dump_json(indent=2), encoding='utf-8')
            results.append((p, out_file))
        except Exception as e:
            raise RuntimeError(f"Failed to extract {p}: {e}") from e
    logger.info("Extracted %d document(s) to %s", len(results), staging_dir)
    return results


def _render_path(doc: Document, staged: Path, output_dir: Path) -> Path:
    """Mirror the document's path under output_dir; paths that resolve outside it are refused."""
    src = Path(doc.path) if doc.path else Path(f"{staged.stem}.md")
    if src.is_absolute():
        src = src.relative_to(src.anchor)
    out = output_dir / src.parent / f"{src.stem}.md"
    if not out.resolve().is_relative_to(output_dir.resolve()):
        raise ValueError(f"output path {out} is outside {output_dir}")
    return out


def run_render(staging_dir: Path, output_dir: Path) -> list[tuple[Path, Path]]:
    """Serialize staged Document JSON back to markdown. Returns (staging_file, output_file) pairs."""
    files = sorted(staging_dir.glob('*.json')) if staging_dir.exists() else []
    results = []
    for f in files:
        try:
            doc = Document.model_validate_json(f.read_text(encoding='utf-8'))
            out_file = _render_path(doc, f, output_dir)
            out_file.parent.mkdir(parents=True, exist_ok=True)
            out_file.write_text(serialize_document(doc), encoding='utf-8')
            results.append((f, out_file))
        except Exception as e:
            raise RuntimeError(f"Failed to render {f}: {e}") from e
    return results


def run_check(path: str, settings: Settings) -> list[tuple[Path, list[str]]]:
    """Round-trip each markdown file under path. Returns (source_path, diff_lines) pairs."""
    results = []
    for p in discover_files(Path(path)):
        source = p.read_text(encoding='utf-8')
        rendered = serialize_document(parse_document(source, path=p.as_posix(), settings=settings))
        diff = roundtrip_diff(source, rendered, label=p.as_posix())
        if diff:
            logger.debug("Round trip of %s changed %d diff line(s)", p, len(diff))
        results.append((p, diff))
    return results


def run_editor_load(path: Path, settings: Settings) -> dict[str, Any]:
    """Parse one markdown file into an editor payload: {'frontmatter': ..., 'blocks': [...]}."""
    doc = parse_document(path.read_text(encoding='utf-8'), path=path.as_posix(), settings=settings)
    return {
        "frontmatter": doc.frontmatter,
        "blocks": [node.model_dump() for node in to_editor_form(doc.blocks)],
    }


def run_editor_save(path: Path) -> str:
    """Read an editor payload (object with 'blocks', or a bare node list) and return markdown."""
    try:
        data = json.loads(path.read_text(encoding='utf-8'))
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid editor JSON in {path}: {e}") from e
    if isinstance(data, list):
        return save(data)
    if not isinstance(data, dict):
        raise ValueError(f"Invalid editor JSON in {path}: expected an object or a list")
    return save(data.get("blocks") or [], data.get("frontmatter") or {})


def editor_roundtrip(markup: str, settings: Settings) -> str:
    """Markup -> blocks -> editor nodes -> blocks -> markup; the path the editor takes on load and save."""
    doc = parse_document(markup, settings=settings)
    blocks = from_editor_form(to_editor_form(doc.blocks))
    return serialize_document(Document(frontmatter=doc.frontmatter, blocks=blocks))
