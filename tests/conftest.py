import os
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

# Allow running the suite from a checkout without installing the package.
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")


@pytest.fixture(scope="session")
def qapp():
    pytest.importorskip("PySide6.QtWidgets", reason="Qt widgets not available", exc_type=ImportError)
    from PySide6.QtWidgets import QApplication

    app = QApplication.instance()
    if app is None:
        app = QApplication([])
    yield app


@pytest.fixture
def settings_path(tmp_path: Path) -> Path:
    """Isolated settings.json whose database and storage live under tmp_path."""

    from riseadmin.utils.jsonio import write_json

    path = tmp_path / "config" / "settings.json"
    write_json(
        path,
        {
            "schema": "riseadmin/settings@1",
            "database_path": str(tmp_path / "content.db"),
            "storage": {"root": str(tmp_path / "storage"), "public_base_url": "https://cdn.example.org"},
        },
    )
    return path
