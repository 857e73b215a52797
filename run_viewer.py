from __future__ import annotations
import sys
import build_viewer.main as _cli_mod

def main():
    if len(sys.argv) == 1:
        # без аргументов: отчёт по проекту в текущей папке
        _cli_mod.app(["view"])
    else:
        # CLI
        _cli_mod.app()

if __name__ == "__main__":
    main()
