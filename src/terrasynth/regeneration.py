"""Single-flight height-field regeneration.

Callers such as an interactive viewer issue a new build every time a
parameter changes. Only the most recent request may publish its result:
older in-flight builds are cancelled, and any that finish anyway are
discarded instead of overwriting a newer field.
"""

import threading
from concurrent.futures import Future, ThreadPoolExecutor

import structlog

from .config import FBMParameters, GridSpec
from .exceptions import BuildCancelledError
from .generator import Generator
from .heightfield import CancelToken, HeightField

logger = structlog.get_logger()


class HeightFieldRegenerator:
    """
    Runs height-field builds in the background; the latest request wins.

    Usage:
        regen = HeightFieldRegenerator(create_generator(42))
        regen.request(grid, params)
        regen.request(grid, other_params)  # supersedes the first
        field = regen.wait()
    """

    def __init__(self, generator: Generator, workers: int = 1):
        self.generator = generator
        self._executor = ThreadPoolExecutor(
            max_workers=workers, thread_name_prefix="regenerate"
        )
        self._lock = threading.Lock()
        self._generation = 0
        self._published_generation = 0
        self._current: HeightField | None = None
        self._token: CancelToken | None = None
        self._latest: Future | None = None
        self._closed = False

    @property
    def current(self) -> HeightField | None:
        """Most recently published field, or None before the first one."""
        with self._lock:
            return self._current

    @property
    def generation(self) -> int:
        """Number of requests issued so far."""
        with self._lock:
            return self._generation

    @property
    def published_generation(self) -> int:
        """Generation of the field in ``current`` (0 if none)."""
        with self._lock:
            return self._published_generation

    def request(
        self,
        grid: GridSpec,
        params: FBMParameters,
        height_scale: float = 1.0,
    ) -> "Future[HeightField | None]":
        """Start a build, superseding any build still in flight.

        Inputs are validated here, before anything is cancelled, so an
        invalid request leaves the previous build and field untouched.

        Args:
            grid: Grid placement and resolution.
            params: fBm parameters.
            height_scale: Vertical multiplier applied to every sample.

        Returns:
            Future resolving to the published HeightField, or None if this
            request was superseded before it could publish.

        Raises:
            ConfigurationError: If the grid or parameters are invalid.
            RuntimeError: If the regenerator has been closed.
        """
        grid.check()
        params.check()

        with self._lock:
            if self._closed:
                raise RuntimeError("cannot request a build after close()")
            if self._token is not None:
                self._token.cancel()
                logger.debug("regeneration_superseded", generation=self._generation)
            self._generation += 1
            generation = self._generation
            token = CancelToken()
            self._token = token
            future = self._executor.submit(
                self._run, generation, token, grid, params, height_scale
            )
            self._latest = future
        return future

    def wait(self, timeout: float | None = None) -> HeightField | None:
        """Block until the latest request settles and return ``current``."""
        with self._lock:
            latest = self._latest
        if latest is not None:
            latest.result(timeout=timeout)
        return self.current

    def close(self) -> None:
        """Cancel outstanding work and stop the background executor."""
        with self._lock:
            self._closed = True
            if self._token is not None:
                self._token.cancel()
        self._executor.shutdown(wait=True, cancel_futures=True)

    def __enter__(self) -> "HeightFieldRegenerator":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _run(
        self,
        generation: int,
        token: CancelToken,
        grid: GridSpec,
        params: FBMParameters,
        height_scale: float,
    ) -> HeightField | None:
        try:
            field = self.generator.build_height_field(
                grid, params, height_scale=height_scale, cancel=token
            )
        except BuildCancelledError:
            logger.debug("regeneration_abandoned", generation=generation)
            return None

        with self._lock:
            if generation != self._generation:
                logger.debug(
                    "regeneration_discarded",
                    generation=generation,
                    latest=self._generation,
                )
                return None
            self._current = field
            self._published_generation = generation

        logger.info(
            "height_field_published",
            generation=generation,
            width=field.width,
            depth=field.depth,
        )
        return field
