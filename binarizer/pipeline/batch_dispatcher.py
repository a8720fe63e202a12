# pipeline/batch_dispatcher.py
from __future__ import annotations
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import List
import logging
import stat

from ..exceptions import InvalidConfig, EmptyDirectory
from ..models.configuration import Configuration
from ..services.image_service import ImageService
from ..services.binarization_service import BinarizationService
from .execution_cycle import ExecutionCycle

logger = logging.getLogger(__name__)


def is_hidden(path: Path) -> bool:
    """Dot-files on POSIX, the hidden attribute on Windows."""
    if path.name.startswith("."):
        return True
    attributes = getattr(path.lstat(), "st_file_attributes", 0)
    return bool(attributes & stat.FILE_ATTRIBUTE_HIDDEN)


def list_input_files(folder: Path) -> List[Path]:
    """
    Non-hidden entries directly inside *folder*, sorted by name. Entries that
    are not BMP files are kept; their read stage rejects them.
    An unreadable folder yields an empty list.
    """
    try:
        children = sorted(folder.iterdir())
        files = [p for p in children if not is_hidden(p)]
    except OSError as err:
        logger.debug(f"Could not list {folder}: {err}")
        return []
    logger.debug(f"Found {len(files)} entries in {folder}")
    return files


def dispatch(
    config: Configuration,
    *,
    image_service: ImageService = ImageService(),
    binarization_service: BinarizationService = BinarizationService(),
) -> List[ExecutionCycle]:
    """
    Run one execution cycle per input file, on the calling thread or on a
    fixed-size worker pool, and return once every cycle has completed.

    Per-file failures are reported by the cycles themselves and never stop
    the batch.

    Returns:
        List[ExecutionCycle]: The cycles in submission order.
    """
    path = config.input_path

    def new_cycle(source: Path) -> ExecutionCycle:
        return ExecutionCycle(
            source,
            config,
            image_service=image_service,
            binarization_service=binarization_service,
        )

    if path.is_file():
        if config.multithreaded:
            logger.warning("Argument path is a single file, rolling back to single-threaded version.")
        cycle = new_cycle(path)
        cycle.run()
        return [cycle]

    if not path.is_dir():
        raise InvalidConfig(f"The given path is neither a file nor a directory: {path}")

    files = list_input_files(path)
    if not files:
        raise EmptyDirectory("Directory is empty!")

    if not config.multithreaded:
        logger.warning(
            "Argument path is a directory. We recommend using [-M] argument for running "
            "this in multi-threading when processing multiple files."
        )
        cycles = []
        for source in files:
            cycle = new_cycle(source)
            cycles.append(cycle)
            try:
                cycle.run()
            except Exception as err:
                logger.error(f"Cycle {cycle.cycle_id} crashed on {cycle.source}", exc_info=err)
        return cycles

    logger.debug(f"Submitting {len(files)} cycle(s) to a pool of {config.pool_size} worker(s)")
    cycles = [new_cycle(source) for source in files]
    # Leaving the block shuts the pool down and waits for every task.
    with ThreadPoolExecutor(max_workers=config.pool_size, thread_name_prefix="cycle") as executor:
        futures = [executor.submit(cycle.run) for cycle in cycles]

    for cycle, future in zip(cycles, futures):
        err = future.exception()
        if err is not None:
            logger.error(f"Cycle {cycle.cycle_id} crashed on {cycle.source}", exc_info=err)
    return cycles
