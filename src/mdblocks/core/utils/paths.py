"""Markdown file discovery and staged file naming"""

import re
from pathlib import Path


MD_EXTENSIONS = {'.md', '.markdown'}


def discover_files(path: Path) -> list[Path]:
    """Return sorted markdown files under path, or [path] for a single markdown file."""
    if path.is_file():
        return [path] if path.suffix in MD_EXTENSIONS else []
    return sorted(p for p in path.rglob('*') if p.suffix in MD_EXTENSIONS)


def staged_name(path: Path) -> str:
    """Flatten a relative source path into a file-safe stem: 'docs/Intro Guide.md' -> 'docs--intro-guide'."""
    parts = [*path.parent.parts, path.stem] if path.parent != Path('.') else [path.stem]
    slugs = []
    for part in parts:
        part = re.sub(r'[^\w\s-]', '', part.lower())
        part = re.sub(r'[\s_]+', '-', part).strip('-')
        if part:
            slugs.append(part)
    return '--'.join(slugs) or 'document'
