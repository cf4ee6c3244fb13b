"""Punto de entrada de la app Kivy."""

from __future__ import annotations

from hourly_glucose.app import run_app
from hourly_glucose.errors import PersistenceError


def main() -> int:
    """Run app entrypoint."""
    try:
        return run_app()
    except ImportError as exc:
        print(f"No se pudo iniciar Kivy: {exc}")
        print("Instala dependencias de GUI: pip install 'hourly-glucose[gui]'")
        return 1
    except PersistenceError as exc:
        print(f"No se pudo abrir el almacenamiento local: {exc}")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
