from dataclasses import dataclass
from pathlib import Path

APP_NAME = "keil-build-viewer"
APP_VERSION = "v1.6"

LOG_DIR = Path(__file__).parent / "logs"
LOG_FILE = LOG_DIR / "session.jsonl"

# файлы рядом с keil-проектом
REPORT_LOG_NAME = f"{APP_NAME}.log"
RECORD_FILE_NAME = f"{APP_NAME}-record.txt"

PROJECT_EXTENSIONS = (".uvprojx", ".uvproj")

# символы прогресс-бара: занято / ZI / свободно
BAR_STYLES = {
    "block": ("■", "□", "_"),
    "ascii": ("#", "o", "_"),
}
BAR_WIDTH = 50


@dataclass(frozen=True)
class RunConfig:
    """Настройки одного запуска, передаются явно в рендер и парсеры."""

    display_object: bool = True   # таблица по объектным файлам
    display_path: bool = True     # показывать путь вместо имени .o
    bar_style: str = "block"
    encoding: str = "utf-8"       # кодировка .uvprojx/.map/record

    @property
    def symbols(self) -> tuple[str, str, str]:
        return BAR_STYLES.get(self.bar_style, BAR_STYLES["block"])
