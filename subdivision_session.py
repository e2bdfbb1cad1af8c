"""Holds the currently displayed mesh and runs subdivision passes off the caller's thread."""

import concurrent.futures
import functools
import logging
import threading

from catmull_clark import catmull_clark
from mesh_factory import seed_shape
from root_three import root_three
from subdivision_config import ALGORITHMS, resolve_cfg

logger = logging.getLogger(__name__)

PASSES = dict(zip(ALGORITHMS, (catmull_clark, root_three)))


class PassInFlightError(RuntimeError):
    """A subdivision pass was requested while another one is still running."""


class SubdivisionSession:
    """
    Owns the "current mesh" handle shown by a renderer.

    A pass runs on a single background worker and at most one pass may be in
    flight; a second request is rejected rather than queued. When a pass
    finishes its result replaces the current mesh in one reference swap, so
    a reader always sees either the old mesh or the new one. A failed pass
    leaves the current mesh as it was and reports the error through the
    returned future.
    """

    def __init__(self, seed="triangle_cube", cfg=None):
        self.cfg = resolve_cfg(cfg)
        self.lock = threading.Lock()
        self.executor = concurrent.futures.ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="subdivision")
        self._in_flight = None
        self._current = seed_shape(seed)

    @property
    def current(self):
        return self._current

    @property
    def busy(self):
        with self.lock:
            return self._in_flight is not None

    def reset(self, seed="triangle_cube"):
        mesh = seed_shape(seed)
        with self.lock:
            if self._in_flight is not None:
                raise PassInFlightError("Cannot reset while a subdivision pass is running")
            self._current = mesh
        logger.info("Session reset to %s %r", seed, mesh)
        return mesh

    def submit(self, algorithm):
        """
        Starts one pass over the current mesh. `algorithm` is one of
        ALGORITHMS, run with the session config, or any callable taking a
        mesh and returning the refined mesh.
        """
        if callable(algorithm):
            subdivide = algorithm
            name = getattr(algorithm, "__name__", repr(algorithm))
        else:
            try:
                subdivide = functools.partial(PASSES[algorithm], cfg=self.cfg)
            except KeyError:
                raise ValueError("Unknown algorithm {!r}, expected one of {}".format(
                    algorithm, ALGORITHMS)) from None
            name = algorithm

        with self.lock:
            if self._in_flight is not None:
                raise PassInFlightError("A {} pass is already running".format(self._in_flight))
            self._in_flight = name
            source = self._current
            try:
                future = self.executor.submit(self._run, name, subdivide, source)
            except RuntimeError:
                self._in_flight = None
                raise
        return future

    def _run(self, name, subdivide, source):
        logger.info("Running %s subdivision on %r", name, source)
        try:
            result = subdivide(source)
        except Exception:
            logger.exception("%s subdivision failed, keeping the current mesh", name)
            with self.lock:
                self._in_flight = None
            raise
        with self.lock:
            self._current = result
            self._in_flight = None
        logger.info("%s subdivision finished: %r", name, result)
        return result

    def close(self):
        self.executor.shutdown(wait=True)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
