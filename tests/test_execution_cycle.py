import logging
import re
from concurrent.futures import ThreadPoolExecutor

import pytest
from PIL import Image as PILImage

from binarizer.exceptions import BinarizerError, StillRunning, NeverRan, CycleFailed
from binarizer.models.cycle_record import CycleState
from binarizer.pipeline.execution_cycle import ExecutionCycle
from binarizer.services.image_service import ImageService

from conftest import GRAY_ROW


def _warnings(caplog):
    return [r for r in caplog.records if r.levelno >= logging.WARNING]


def test_grayscale_file_is_binarized(make_bmp, make_config, read_binary, capsys, caplog):
    src = make_bmp("gray.bmp", GRAY_ROW)
    cycle = ExecutionCycle(src, make_config())

    assert cycle.run() is True

    out = src.with_name("gray_BINARIZED.bmp")
    assert cycle.output_path == out
    with PILImage.open(out) as img:
        assert img.size == (4, 1)
    assert read_binary(out).tolist() == [[False, False, True, True]]

    lines = capsys.readouterr().out.splitlines()
    prefix = f"[Cycle {cycle.cycle_id}]"
    assert lines[0] == f"{prefix} Started."
    assert re.fullmatch(rf"\[Cycle {cycle.cycle_id}\] This image file reading step took \d+ milliseconds\.", lines[1])
    assert "image binarization" in lines[2]
    assert "image file writing" in lines[3]
    assert lines[4] == f"{prefix} Finished. This execution cycle took {cycle.processing_time()} ms."
    assert len(lines) == 5
    assert _warnings(caplog) == []


def test_threshold_boundary_is_black(make_bmp, make_config, read_binary):
    src = make_bmp("edge.bmp", [[(127, 127, 127)]])
    assert ExecutionCycle(src, make_config(threshold=127)).run()
    assert read_binary(src.with_name("edge_BINARIZED.bmp")).tolist() == [[False]]


def test_color_file_without_force_fails(make_bmp, make_config, capsys, caplog):
    src = make_bmp("color.bmp", [[(10, 20, 30)]])
    cycle = ExecutionCycle(src, make_config())

    assert cycle.run() is False

    assert cycle.state is CycleState.FAILED
    assert not src.with_name("color_BINARIZED.bmp").exists()
    out = capsys.readouterr().out
    assert f"[Cycle {cycle.cycle_id}] Failed in processing image!" in out
    assert "image binarization step" not in out
    assert "Finished" not in out
    assert "force-grayscale" in caplog.text
    assert cycle.record.binarize_ms is not None
    assert cycle.record.write_ms is None


def test_color_file_with_force_is_binarized(make_bmp, make_config, read_binary):
    src = make_bmp("color.bmp", [[(10, 20, 30)]])
    assert ExecutionCycle(src, make_config(force_grayscale=True)).run()
    assert read_binary(src.with_name("color_BINARIZED.bmp")).tolist() == [[False]]


def test_wrong_extension_fails_at_read(tmp_path, make_config, capsys):
    src = tmp_path / "a.png"
    PILImage.new("RGB", (1, 1)).save(src)
    cycle = ExecutionCycle(src, make_config())

    assert cycle.run() is False
    assert "Failed in reading image file!" in capsys.readouterr().out
    assert cycle.record.binarize_ms is None


def test_write_failure_is_reported(make_bmp, make_config, capsys):
    src = make_bmp("gray.bmp", GRAY_ROW)
    # A folder squatting on the output name makes the write fail.
    src.with_name("gray_BINARIZED.bmp").mkdir()

    cycle = ExecutionCycle(src, make_config())
    assert cycle.run() is False
    out = capsys.readouterr().out
    assert "Failed in writing image file!" in out
    assert "Finished" not in out


def test_processing_time_lifecycle(make_bmp, make_config):
    cycle = ExecutionCycle(make_bmp("gray.bmp", GRAY_ROW), make_config())
    assert cycle.state is CycleState.NOT_STARTED
    with pytest.raises(NeverRan):
        cycle.processing_time()
    with pytest.raises(NeverRan):
        cycle.processing_time_until_now()

    cycle.run()

    record = cycle.record
    assert cycle.state is CycleState.FINISHED
    assert cycle.processing_time() == record.end_ms - record.start_ms
    assert cycle.processing_time_until_now() == cycle.processing_time()
    assert cycle.processing_time() >= 0
    assert record.stages_ms >= 0


def test_processing_time_of_failed_cycle(tmp_path, make_config):
    cycle = ExecutionCycle(tmp_path / "missing.bmp", make_config())
    cycle.run()
    with pytest.raises(CycleFailed):
        cycle.processing_time()


class _ProbingImageService(ImageService):
    """Looks at the owning cycle from inside the read stage."""
    cycle = None
    observed = None

    def load(self, path):
        with pytest.raises(StillRunning):
            self.cycle.processing_time()
        self.observed = self.cycle.processing_time_until_now()
        return super().load(path)


def test_processing_time_while_running(make_bmp, make_config):
    service = _ProbingImageService()
    cycle = ExecutionCycle(make_bmp("gray.bmp", GRAY_ROW), make_config(), image_service=service)
    service.cycle = cycle

    assert cycle.run()
    assert service.observed is not None and service.observed >= 0


def test_cycle_runs_only_once(make_bmp, make_config):
    cycle = ExecutionCycle(make_bmp("gray.bmp", GRAY_ROW), make_config())
    cycle.run()
    with pytest.raises(BinarizerError):
        cycle.run()


def test_cycle_ids_are_unique_under_concurrency(tmp_path, make_config):
    config = make_config()
    with ThreadPoolExecutor(max_workers=8) as executor:
        cycles = list(executor.map(lambda i: ExecutionCycle(tmp_path / f"{i}.bmp", config), range(200)))
    ids = sorted(c.cycle_id for c in cycles)
    assert ids == list(range(ids[0], ids[0] + 200))
