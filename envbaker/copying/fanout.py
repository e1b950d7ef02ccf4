"""Concurrent fan-out of one source tree into many destinations."""

from __future__ import annotations

import functools
import logging
import threading
import time
from pathlib import Path
from typing import Callable, Sequence

from ..core.errors import CopyError, CopyErrorKind
from ..core.models import CopyResult
from .barrier import CompletionBarrier
from .tree import copy_tree

logger = logging.getLogger(__name__)

Copier = Callable[[Path, Path], None]


def copy_to_many(
    source: Path | str,
    destinations: Sequence[Path | str],
    *,
    copier: Copier | None = None,
) -> list[CopyResult]:
    """Copy ``source`` into every destination concurrently.

    One thread is started per destination before any is awaited, then the
    caller blocks until every unit has succeeded or failed. A failing unit
    never affects its siblings. The source is validated inside each unit,
    so a missing source yields one failure per destination.

    Args:
        source: Directory to replicate
        destinations: Destination roots, one per copy
        copier: Per-destination copy routine (default: :func:`copy_tree`)

    Returns:
        One result per destination, in the same order as ``destinations``
    """
    source = Path(source)
    targets = [Path(d) for d in destinations]
    if not targets:
        return []

    if copier is None:
        copier = functools.partial(copy_tree, skip=targets)

    results: list[CopyResult] = [
        CopyResult(
            destination=target,
            error=CopyError(
                CopyErrorKind.IO_FAILURE,
                target,
                RuntimeError("copy unit did not report an outcome"),
            ),
        )
        for target in targets
    ]
    barrier = CompletionBarrier(len(targets))

    def _unit(index: int, destination: Path) -> None:
        started = time.monotonic()
        error: CopyError | None = None
        try:
            logger.debug(f"Copying {source} → {destination}")
            copier(source, destination)
        except CopyError as exc:
            error = exc
        except Exception as exc:
            logger.exception(f"Unexpected failure copying into {destination}")
            error = CopyError(CopyErrorKind.IO_FAILURE, destination, exc)
        finally:
            elapsed = time.monotonic() - started
            results[index] = CopyResult(
                destination=destination, error=error, elapsed=elapsed
            )
            barrier.done()

        if error is None:
            logger.info(f"Copied {source} → {destination} ({elapsed:.2f}s)")
        else:
            logger.error(f"Failed to copy into {destination}: {error}")

    threads = [
        threading.Thread(
            target=_unit,
            args=(index, target),
            name=f"envbaker-copy-{index}",
            daemon=True,
        )
        for index, target in enumerate(targets)
    ]
    for thread in threads:
        thread.start()

    barrier.wait()
    for thread in threads:
        thread.join()

    failed = sum(1 for result in results if not result.ok)
    logger.info(
        f"Copied {source} into {len(results) - failed}/{len(results)} destination(s)"
    )
    return results
