"""
Write the site: registered routes plus the non-template parts of the source tree.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Iterator, List, Set

from ..render import TemplateRenderer
from ..util import copy_file, ensure_directory, is_relative_to, safe_unlink, write_text_file
from .sitemap import Sitemap

logger = logging.getLogger(__name__)

LAYOUTS_DIR = "layouts"
TEMPLATE_SUFFIXES = {".html", ".htm"}


class BuildError(RuntimeError):
    """Raised when the site cannot be written."""


@dataclass
class BuildReport:
    """
    What a build produced.

    Attributes:
        root: Output directory.
        routes_rendered: Files written from registered routes.
        templates_rendered: Source templates rendered without locals.
        files_copied: Static files copied from the source tree.
        files_removed: Stale files deleted by a clean build.
    """
    root: Path
    routes_rendered: List[Path] = field(default_factory=list)
    templates_rendered: List[Path] = field(default_factory=list)
    files_copied: List[Path] = field(default_factory=list)
    files_removed: List[Path] = field(default_factory=list)

    @property
    def outputs(self) -> Set[Path]:
        return set(self.routes_rendered) | set(self.templates_rendered) | set(self.files_copied)

    def summary_rows(self) -> Iterable[tuple[str, str]]:
        yield ("Output", str(self.root))
        yield ("Routes rendered", str(len(self.routes_rendered)))
        yield ("Templates rendered", str(len(self.templates_rendered)))
        yield ("Files copied", str(len(self.files_copied)))
        yield ("Stale files removed", str(len(self.files_removed)))


def output_target(root: Path, path: str) -> Path:
    """
    Map a site path such as ``/pages/about/index.html`` to a file under ``root``.

    Raises:
        BuildError: If the path would land outside ``root``.
    """
    relative = path.replace("\\", "/").lstrip("/")
    target = (root / relative).resolve()
    if target == root or not is_relative_to(target, root):
        raise BuildError(f"Refusing to write {path!r} outside of {root}")
    return target


def check_output_dir(root: Path, source_dir: Path, protected: Iterable[Path] = ()) -> None:
    """
    Refuse output directories that would overwrite or clean away site inputs.
    """
    if is_relative_to(source_dir, root):
        raise BuildError(f"Output directory {root} must not contain the source directory {source_dir}")
    if is_relative_to(root, source_dir):
        raise BuildError(f"Output directory {root} must not be inside the source directory {source_dir}")
    for path in protected:
        resolved = Path(path).expanduser().resolve()
        if is_relative_to(resolved, root):
            raise BuildError(f"Output directory {root} must not contain {resolved}")


def _is_excluded(relative: Path) -> bool:
    if relative.parts and relative.parts[0] == LAYOUTS_DIR:
        return True
    return any(part.startswith(("_", ".")) for part in relative.parts)


def iter_source_files(source_dir: Path, sitemap: Sitemap) -> Iterator[Path]:
    """
    Yield source files (relative paths) that belong in the output, skipping
    layouts, partials, hidden files and ignored paths.
    """
    if not source_dir.is_dir():
        return
    for path in sorted(source_dir.rglob("*")):
        if not path.is_file():
            continue
        relative = path.relative_to(source_dir)
        if _is_excluded(relative) or sitemap.is_ignored(relative.as_posix()):
            continue
        yield relative


def build_site(
    sitemap: Sitemap,
    renderer: TemplateRenderer,
    *,
    source_dir: Path,
    output_dir: Path,
    clean: bool = True,
    protected: Iterable[Path] = (),
) -> BuildReport:
    """
    Render every registered route and process the source tree into ``output_dir``.

    Routes take precedence over source files mapping to the same output path.
    With ``clean`` set, files left in ``output_dir`` by earlier builds are removed.

    Raises:
        BuildError: If ``output_dir`` is, or contains, the source directory or
            any ``protected`` path (such as the config file).
    """
    source_dir = Path(source_dir).expanduser().resolve()
    check_output_dir(Path(output_dir).expanduser().resolve(), source_dir, protected)
    root = ensure_directory(output_dir)
    report = BuildReport(root=root)

    route_targets = {output_target(root, route.path): route for route in sitemap.routes}

    for relative in iter_source_files(source_dir, sitemap):
        target = output_target(root, relative.as_posix())
        if target in route_targets:
            logger.debug("Route overrides source file %s", relative)
            continue
        if relative.suffix.lower() in TEMPLATE_SUFFIXES:
            write_text_file(target, renderer.render(relative.as_posix()))
            report.templates_rendered.append(target)
        else:
            copy_file(source_dir / relative, target)
            report.files_copied.append(target)

    for target, route in route_targets.items():
        html = renderer.render(route.template, route.locals)
        write_text_file(target, html)
        report.routes_rendered.append(target)
        logger.debug("Wrote %s", route.path)

    if clean:
        _remove_stale_outputs(root, report)

    logger.info(
        "Built %d route(s), %d template(s), %d static file(s) into %s",
        len(report.routes_rendered),
        len(report.templates_rendered),
        len(report.files_copied),
        root,
    )
    return report


def _remove_stale_outputs(root: Path, report: BuildReport) -> None:
    keep = report.outputs
    for path in sorted(root.rglob("*"), reverse=True):
        if path.is_file() and path.resolve() not in keep:
            if safe_unlink(path, base_dir=root):
                report.files_removed.append(path)
        elif path.is_dir() and not any(path.iterdir()):
            path.rmdir()
