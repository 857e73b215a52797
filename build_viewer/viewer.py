# viewer.py
"""
Один запуск: проект -> build log -> map -> снимок -> сверка -> отчёт -> новый снимок.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from .config import PROJECT_EXTENSIONS, RECORD_FILE_NAME, RunConfig
from .errors import CannotOpen, MissingProjectSetting, PathEscapesRoot, PathNotAbsolute
from .mapfile.reader import MapFile, parse_map_file
from .model import iter_exec_regions
from .project.build_log import parse_build_log
from .project.files import (
    apply_renames,
    bind_paths,
    library_names,
    name_widths,
    resolve_collisions,
)
from .project.paths import combine_path
from .project.uvoptx import options_file, parse_current_target
from .project.uvprojx import ProjectInfo, parse_project
from .reconcile import reconcile
from .record.store import Record, load_record, save_record
from .report.log import ReportLog
from .report.objects import label_width, render_object_table
from .report.regions import Layout, render_regions, select_layout
from .stack import read_stack_usage, stack_report_file


@dataclass
class Analysis:
    project: ProjectInfo
    map: MapFile
    record: Optional[Record]
    record_path: Path
    layout: Layout
    renames: dict = field(default_factory=dict)
    fallback_renames: List[tuple] = field(default_factory=list)
    stack_usage: Optional[str] = None
    warnings: List[str] = field(default_factory=list)

    @property
    def lto(self) -> bool:
        return self.project.lto or self.map.lto


# ---- Поиск проектов ----
def find_projects(folder: Path) -> List[Path]:
    """Keil-проекты в папке (без рекурсии), по имени."""
    folder = Path(folder)
    if not folder.is_dir():
        return []
    return sorted(p for p in folder.iterdir()
                  if p.is_file() and p.suffix.lower() in PROJECT_EXTENSIONS)


def resolve_project(location: Optional[Path]) -> Path:
    """Файл проекта как есть; для папки берём последний найденный проект."""
    location = Path(location) if location else Path.cwd()
    if location.is_file():
        return location.resolve()
    found = find_projects(location)
    if not found:
        raise CannotOpen(location, "no .uvprojx/.uvproj project")
    return found[-1].resolve()


# ---- Анализ ----
def _output_dir(project: ProjectInfo, warnings: List[str]) -> Optional[Path]:
    if not project.output_dir:
        return None
    try:
        return combine_path(project.path, project.output_dir)
    except (PathNotAbsolute, PathEscapesRoot) as e:
        # build log и stack - необязательные файлы
        warnings.append(f"{e}: {project.output_dir}")
        return None


def analyze(project_file: Path, config: RunConfig, target: Optional[str] = None,
            record_path: Optional[Path] = None) -> Analysis:
    project_file = Path(project_file)
    warnings: List[str] = []

    if target is None:
        target = parse_current_target(options_file(project_file), config.encoding)
        if target is None:
            warnings.append(f"current target not found in {options_file(project_file).name}, "
                            f"using the first target")

    project = parse_project(project_file, target, config.encoding)
    if not project.output_name:
        raise MissingProjectSetting(project_file, "<OutputName>")
    if not project.listing_path:
        raise MissingProjectSetting(project_file, "<ListingPath>")

    renames: dict = {}
    stack_usage = None
    out_dir = _output_dir(project, warnings)
    if out_dir is not None:
        log_file = out_dir / f"{project.output_name}.build_log.htm"
        found = parse_build_log(log_file, config.encoding)
        if found is None:
            warnings.append(f"build log not found: {log_file}")
        else:
            renames = found
            apply_renames(project.files, renames)
        stack_usage = read_stack_usage(stack_report_file(out_dir, project.output_name),
                                       config.encoding)
    fallback = resolve_collisions(project.files)

    map_path = combine_path(project_file, project.listing_path) / f"{project.output_name}.map"
    libs = library_names(project.files) if project.has_user_lib else []
    mapfile = parse_map_file(map_path, project.catalog, libs, config.encoding)
    bind_paths(mapfile.objects, project.files)

    record_path = Path(record_path) if record_path else project_file.parent / RECORD_FILE_NAME
    record = load_record(record_path, config.encoding)
    if record is not None and not record.complete:
        warnings.append(f"record file is truncated, comparing with what was read: {record_path}")
    reconcile(mapfile.objects, mapfile.load_regions, record)

    layout = select_layout(project.has_pack, project.custom_scatter, bool(project.catalog))
    return Analysis(project=project, map=mapfile, record=record, record_path=record_path,
                    layout=layout, renames=renames, fallback_renames=fallback,
                    stack_usage=stack_usage, warnings=warnings)


# ---- Отчёт ----
def write_report(analysis: Analysis, config: RunConfig, log: ReportLog) -> None:
    project = analysis.project
    log.print(f"[{project.path.stem}]  [{project.target_name}]  [{project.device}]")

    # детали разбора - только в файл
    for memory in project.catalog:
        log.save(f"[memory] {memory.id} {memory.name} 0x{memory.base:08X} 0x{memory.size:08X} "
                 f"{memory.kind.value} {memory.provenance.value} on_chip={memory.on_chip}")
    for source, new_name in analysis.renames.items():
        log.save(f"[rename] {source} -> {new_name}")
    for entry, new_name in analysis.fallback_renames:
        log.save(f"[rename] {entry.path} -> {new_name} (fallback)")
    for region in iter_exec_regions(analysis.map.load_regions):
        for block in region.zi_blocks:
            log.save(f"[zi] {region.name} 0x{block.start:08X} 0x{block.size:08X}")
    log.save(f"[layout] {analysis.layout.name}")

    if config.display_object and not analysis.lto:
        max_name, max_path = name_widths(project.files)
        width = label_width(max_name, max_path, config.display_path)
        log.print_lines(render_object_table(analysis.map.objects, width, config))
    elif analysis.lto:
        log.print("LTO build: per-object table is not available")

    log.print_lines(render_regions(analysis.map.load_regions, project.catalog,
                                   analysis.layout, config))
    if analysis.stack_usage:
        log.print(analysis.stack_usage)


def store_record(analysis: Analysis, config: RunConfig) -> Path:
    return save_record(analysis.record_path, analysis.map.objects, analysis.map.load_regions,
                       include_objects=not analysis.lto, encoding=config.encoding)
