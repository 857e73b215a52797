# project/paths.py
from __future__ import annotations
from pathlib import Path, PurePath, PurePosixPath, PureWindowsPath

from ..errors import PathEscapesRoot, PathNotAbsolute


def _flavor(text: str) -> type[PurePath]:
    # Keil хранит пути в стиле Windows; на других ОС работаем с '/'
    return PureWindowsPath if PureWindowsPath(text).drive else PurePosixPath


def _pure(text: str) -> PurePath:
    flavor = _flavor(text)
    if flavor is PurePosixPath:
        text = text.replace("\\", "/")
    return flavor(text)


def combine_path(project_file: Path | str, relative: str) -> Path:
    """
    Папка проекта + относительный путь из .uvprojx ('.\\Objects\\', '..\\out\\').
    Абсолютный relative возвращается как есть.
    """
    project = _pure(str(project_file))
    target = _pure(relative)
    if target.is_absolute():
        return Path(str(target))
    if not project.is_absolute():
        raise PathNotAbsolute(project_file, str(project_file))

    base = project.parent
    parts = relative.replace("\\", "/").split("/")
    rest: list[str] = []
    for i, part in enumerate(parts):
        if part == "..":
            if base == base.parent:
                raise PathEscapesRoot(project_file, relative)
            base = base.parent
        elif part in (".", ""):
            continue
        else:
            rest = [p for p in parts[i:] if p]
            break
    return Path(str(base.joinpath(*rest)))
