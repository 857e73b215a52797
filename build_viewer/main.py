from __future__ import annotations
import json
from pathlib import Path
from datetime import datetime

import typer
from rich import print
from rich.markup import escape

from .config import APP_NAME, APP_VERSION, LOG_FILE, REPORT_LOG_NAME, RunConfig
from .errors import ViewerError
from .report.log import ReportLog
from .viewer import analyze, find_projects, resolve_project, store_record, write_report

app = typer.Typer(add_completion=False, help="Keil build viewer: размеры объектов и заполнение памяти по map-файлу.")

def _log_event(kind: str, payload: dict):
    LOG_FILE.parent.mkdir(parents=True, exist_ok=True)
    record = {
        "ts": datetime.utcnow().isoformat() + "Z",
        "kind": kind,
        "payload": payload,
    }
    with open(LOG_FILE, "a", encoding="utf-8") as f:
        f.write(json.dumps(record, ensure_ascii=False) + "\n")

@app.command()
def projects(
    folder: Path = typer.Argument(Path("."), help="Папка с .uvprojx/.uvproj"),
):
    """Показать Keil-проекты в папке."""
    found = find_projects(folder)
    if not found:
        print("[yellow]Проекты не найдены.[/]")
        return
    for p in found:
        print(f"[cyan]{p.name}[/] - {p.parent}")

@app.command()
def view(
    project: Path = typer.Argument(None, help="Файл проекта или папка (по умолчанию текущая)"),
    target: str = typer.Option(None, help="Имя target; по умолчанию активный из .uvoptx"),
    obj: bool = typer.Option(True, "--obj/--no-obj", help="Таблица по объектным файлам"),
    path: bool = typer.Option(True, "--path/--no-path", help="Показывать путь к исходнику вместо имени .o"),
    ascii_bar: bool = typer.Option(False, "--ascii", help="Прогресс-бар символами ASCII"),
    encoding: str = typer.Option("utf-8", help="Кодировка файлов Keil (напр. gbk, cp1251)"),
    record: Path = typer.Option(None, help="Файл снимка прошлой сборки"),
):
    """
    Разобрать проект и map-файл, показать RAM/Flash по объектам и регионам,
    сравнить с прошлым запуском и перезаписать снимок.
    """
    config = RunConfig(
        display_object=obj,
        display_path=path,
        bar_style="ascii" if ascii_bar else "block",
        encoding=encoding,
    )

    try:
        project_file = resolve_project(project)
    except ViewerError as e:
        print(f"[red][ERROR] {escape(str(e))}[/]")
        print(f"[red][ERROR] Please check: {escape(str(e.path))}[/]")
        _log_event("error", {"code": e.exit_code, "error": str(e), "path": str(e.path)})
        raise typer.Exit(code=e.exit_code)

    log_path = project_file.parent / REPORT_LOG_NAME
    with ReportLog(log_path) as log:
        log.print(f"{APP_NAME} {APP_VERSION}")
        try:
            analysis = analyze(project_file, config, target=target, record_path=record)
            for warning in analysis.warnings:
                log.save(f"[WARNING] {warning}")
                print(f"[yellow][WARNING] {escape(warning)}[/]")
            write_report(analysis, config, log)
            saved = store_record(analysis, config)
        except ViewerError as e:
            log.print("")
            log.print(f"[ERROR] {e}")
            log.print(f"[ERROR] Please check: {e.path}")
            _log_event("error", {"project": str(project_file), "code": e.exit_code,
                                 "error": str(e), "path": str(e.path)})
            raise typer.Exit(code=e.exit_code)

    _log_event("view", {
        "project": str(project_file),
        "target": analysis.project.target_name,
        "objects": len(analysis.map.objects),
        "lto": analysis.lto,
        "layout": analysis.layout.name,
        "record": str(saved),
    })
    print(f"\n[dim]Отчёт записан в: {log_path}[/]")


if __name__ == "__main__":
    app()
