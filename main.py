"""Interactive viewer for the escape room."""

from __future__ import annotations

from escape_lights.ui.main import cli


if __name__ == "__main__":
    cli()
