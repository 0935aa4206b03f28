import pytest

pytest.importorskip("PySide6", reason="PySide6 is required for worker tests", exc_type=ImportError)

from PySide6.QtGui import QColor, QImage

from riseadmin.crop.geometry import CropRegion
from riseadmin.errors import ImageLoadError, SurfaceUnavailableError
from riseadmin.gui.tasks.crop_extract_worker import CropExtractWorker
from riseadmin.gui.tasks.image_load_worker import ImageLoadWorker
from riseadmin.utils import image_loader


def _solid_image(width: int = 640, height: int = 480) -> QImage:
    image = QImage(width, height, QImage.Format.Format_ARGB32)
    image.fill(QColor("#336699"))
    return image


def test_image_load_worker_emits_image(qapp, tmp_path):
    path = tmp_path / "photo.jpg"
    assert _solid_image().save(str(path), "JPEG")
    worker = ImageLoadWorker(path)
    loaded, failed = [], []
    worker.signals.imageLoaded.connect(loaded.append)
    worker.signals.loadFailed.connect(failed.append)

    worker.run()

    assert not failed
    assert len(loaded) == 1
    assert (loaded[0].width(), loaded[0].height()) == (640, 480)


def test_image_load_worker_reports_failure(qapp, tmp_path):
    worker = ImageLoadWorker(str(tmp_path / "missing.png"))
    failed = []
    worker.signals.loadFailed.connect(failed.append)

    worker.run()

    assert len(failed) == 1
    assert isinstance(failed[0], ImageLoadError)


def test_image_load_worker_wraps_unexpected_errors(qapp, monkeypatch):
    def broken_load(source):
        raise ValueError("truncated download")

    monkeypatch.setattr(image_loader, "load_source", broken_load)
    worker = ImageLoadWorker("https://example.org/photo.jpg")
    failed = []
    worker.signals.loadFailed.connect(failed.append)

    worker.run()

    assert len(failed) == 1
    assert isinstance(failed[0], ImageLoadError)
    assert isinstance(failed[0].__cause__, ValueError)


def test_crop_extract_worker_tags_outcome_with_request_id(qapp):
    worker = CropExtractWorker(_solid_image(), CropRegion(0, 0, 320, 240), request_id=7)
    finished = []
    worker.signals.finished.connect(lambda request_id, outcome: finished.append((request_id, outcome)))

    worker.run()

    request_id, outcome = finished[0]
    assert request_id == 7
    assert outcome.ok
    assert (outcome.result.width, outcome.result.height) == (320, 240)


def test_crop_extract_worker_reports_surface_failure(qapp):
    worker = CropExtractWorker(_solid_image(), CropRegion(10, 10, 0, 0), request_id=2)
    finished = []
    worker.signals.finished.connect(lambda request_id, outcome: finished.append((request_id, outcome)))

    worker.run()

    _, outcome = finished[0]
    assert not outcome.ok
    assert isinstance(outcome.error, SurfaceUnavailableError)
