"""
Background routing worker.

Large canvases make each route more expensive, so routes can be computed
on a background thread while the caller stays responsive. The two sides
talk only through message dicts:

    caller -> worker:
        {"type": "updateElements", "elements": [...]}
        {"type": "computeRoute", "requestId": n, "params": {...}}
    worker -> caller:
        {"type": "routeResult", "requestId": n, "points": [...]}

The worker owns a private ElbowRouter (and therefore a private cache) and a
value copy of the canvas elements; nothing is shared with the caller.

Usage:
    >>> manager = ElbowWorkerManager()
    >>> manager.update_elements(elements)
    >>> points = manager.compute_route(RouteParams(Point(0, 0), Point(200, 80)))
    >>> manager.dispose()
"""

import itertools
import logging
import queue
import threading
from concurrent.futures import Future
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Union

from .config import WORKER_THRESHOLD, WORKER_TIMEOUT, RoutingConfig
from .models import Binding, Point, ShapeSnapshot
from .router import ElbowRouter
from .simplify import simplify_elbow_path

logger = logging.getLogger(__name__)

Message = Dict[str, Any]

_STOP = object()


class ProtocolError(ValueError):
    """Raised when a worker message cannot be parsed."""

    pass


class WorkerDisposedError(RuntimeError):
    """Raised for requests still pending when the manager is disposed."""

    pass


def _point_from_dict(data: Any, name: str) -> Point:
    try:
        return Point(float(data["x"]), float(data["y"]))
    except (KeyError, TypeError, ValueError) as e:
        raise ProtocolError(f"Invalid point for {name}: {data!r}") from e


def _binding_from_dict(data: Any, name: str) -> Optional[Binding]:
    if data is None:
        return None
    try:
        return Binding.from_dict(data)
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise ProtocolError(f"Invalid binding for {name}: {data!r}") from e


@dataclass
class RouteParams:
    """
    One routing request in the worker protocol.

    Attributes:
        start_world: Connector start in world coordinates.
        end_world: Connector end in world coordinates.
        start_binding: Binding at start, if any.
        end_binding: Binding at end, if any.
        min_stub_length: Requested stub length.
    """

    start_world: Point
    end_world: Point
    start_binding: Optional[Binding] = None
    end_binding: Optional[Binding] = None
    min_stub_length: Optional[float] = None

    def to_dict(self) -> Message:
        data: Message = {
            "startWorld": {"x": self.start_world.x, "y": self.start_world.y},
            "endWorld": {"x": self.end_world.x, "y": self.end_world.y},
            "startBinding": self.start_binding.to_dict()
            if self.start_binding
            else None,
            "endBinding": self.end_binding.to_dict() if self.end_binding else None,
        }
        if self.min_stub_length is not None:
            data["minStubLength"] = self.min_stub_length
        return data

    @classmethod
    def from_dict(cls, data: Any) -> "RouteParams":
        """
        Parse the params of a computeRoute message.

        Raises:
            ProtocolError: If a field is missing or malformed.
        """
        if not isinstance(data, Mapping):
            raise ProtocolError(f"Route params must be a mapping, got {data!r}")

        min_stub = data.get("minStubLength")
        if min_stub is not None:
            try:
                min_stub = float(min_stub)
            except (TypeError, ValueError) as e:
                raise ProtocolError(f"Invalid minStubLength: {min_stub!r}") from e

        return cls(
            start_world=_point_from_dict(data.get("startWorld"), "startWorld"),
            end_world=_point_from_dict(data.get("endWorld"), "endWorld"),
            start_binding=_binding_from_dict(data.get("startBinding"), "startBinding"),
            end_binding=_binding_from_dict(data.get("endBinding"), "endBinding"),
            min_stub_length=min_stub,
        )


def serialize_elements(elements: Iterable[ShapeSnapshot]) -> List[Message]:
    """Keep only the fields routing needs."""
    return [el.to_dict() for el in elements]


def deserialize_elements(data: Any) -> List[ShapeSnapshot]:
    """
    Rebuild element snapshots from an updateElements payload.

    Raises:
        ProtocolError: If the payload is not a list of element dicts.
    """
    if not isinstance(data, list):
        raise ProtocolError(f"elements must be a list, got {type(data).__name__}")
    try:
        return [ShapeSnapshot.from_dict(item) for item in data]
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise ProtocolError(f"Invalid element in snapshot: {e}") from e


def straight_line(params: RouteParams) -> List[float]:
    """Two-point route relative to start, used when routing itself fails."""
    return [
        0,
        0,
        params.end_world.x - params.start_world.x,
        params.end_world.y - params.start_world.y,
    ]


class ElbowWorker(threading.Thread):
    """
    Daemon thread that answers routing requests from a message queue.

    Replies are delivered through the on_message callback, which runs on
    the worker thread.
    """

    def __init__(
        self,
        on_message: Callable[[Message], None],
        config: Optional[RoutingConfig] = None,
    ):
        super().__init__(name="elbow-worker", daemon=True)
        self._on_message = on_message
        self._inbox: "queue.Queue[Any]" = queue.Queue()
        self._router = ElbowRouter(config)
        self._elements: List[ShapeSnapshot] = []

    @property
    def element_count(self) -> int:
        return len(self._elements)

    def post(self, message: Message) -> None:
        self._inbox.put(message)

    def stop(self, timeout: Optional[float] = None) -> None:
        """Ask the thread to exit after the queued messages and wait for it."""
        self._inbox.put(_STOP)
        if self.is_alive():
            self.join(timeout)

    def run(self) -> None:
        while True:
            message = self._inbox.get()
            if message is _STOP:
                break
            self.handle(message)
        logger.debug("Elbow worker stopped")

    def handle(self, message: Any) -> None:
        """Process one incoming message."""
        msg_type = message.get("type") if isinstance(message, Mapping) else None

        if msg_type == "updateElements":
            try:
                self._elements = deserialize_elements(message.get("elements"))
            except ProtocolError as e:
                logger.warning("Ignoring updateElements message: %s", e)
            return

        if msg_type == "computeRoute":
            self._compute(message)
            return

        logger.warning("Ignoring unknown worker message type %r", msg_type)

    def _compute(self, message: Mapping[str, Any]) -> None:
        request_id = message.get("requestId")
        try:
            params = RouteParams.from_dict(message.get("params"))
        except ProtocolError as e:
            logger.warning("Ignoring computeRoute request %s: %s", request_id, e)
            return

        try:
            raw = self._router.compute_elbow_points(
                params.start_world,
                params.end_world,
                params.start_binding,
                params.end_binding,
                self._elements,
                params.min_stub_length,
            )
            points = simplify_elbow_path(raw)
        except Exception:
            logger.exception(
                "Routing failed for request %s, replying with a straight line",
                request_id,
            )
            points = straight_line(params)

        self._on_message(
            {"type": "routeResult", "requestId": request_id, "points": points}
        )


class ElbowWorkerManager:
    """
    Caller-side API for the background worker.

    Small canvases are routed synchronously on the calling thread. At or
    above the element threshold requests go to the worker; a request that
    is not answered within the timeout is computed synchronously instead
    and the late worker reply is dropped.
    """

    def __init__(
        self,
        threshold: int = WORKER_THRESHOLD,
        timeout: float = WORKER_TIMEOUT,
        config: Optional[RoutingConfig] = None,
    ):
        self.threshold = threshold
        self.timeout = timeout
        self.config = config
        self._router = ElbowRouter(config)
        self._elements: List[ShapeSnapshot] = []
        self._worker: Optional[ElbowWorker] = None
        self._worker_supported = True
        self._pending: Dict[int, Future] = {}
        self._lock = threading.Lock()
        self._request_ids = itertools.count(1)

    def _get_worker(self) -> Optional[ElbowWorker]:
        if not self._worker_supported:
            return None
        if self._worker is None:
            worker = ElbowWorker(self._handle_message, self.config)
            try:
                worker.start()
            except RuntimeError as e:
                logger.warning("Cannot start elbow worker, routing inline: %s", e)
                self._worker_supported = False
                return None
            self._worker = worker
        return self._worker

    def _handle_message(self, message: Message) -> None:
        if message.get("type") != "routeResult":
            logger.warning("Unexpected message from worker: %r", message.get("type"))
            return
        request_id = message.get("requestId")
        with self._lock:
            future = self._pending.pop(request_id, None)
        if future is None:
            logger.debug("Discarding late result for request %s", request_id)
            return
        future.set_result(list(message.get("points", [])))

    def update_elements(self, elements: Iterable[ShapeSnapshot]) -> None:
        """Replace the obstacle snapshot used for routing."""
        self._elements = list(elements)
        if len(self._elements) >= self.threshold:
            worker = self._get_worker()
            if worker is not None:
                worker.post(
                    {
                        "type": "updateElements",
                        "elements": serialize_elements(self._elements),
                    }
                )

    def compute_route(
        self, params: Union[RouteParams, Mapping[str, Any]]
    ) -> List[float]:
        """
        Compute a route, on the worker when the canvas is large.

        Raises:
            ProtocolError: If params is a malformed mapping.
            WorkerDisposedError: If the manager is disposed while waiting.
        """
        if not isinstance(params, RouteParams):
            params = RouteParams.from_dict(params)

        if len(self._elements) < self.threshold:
            return self.compute_sync(params)
        worker = self._get_worker()
        if worker is None:
            return self.compute_sync(params)

        request_id = next(self._request_ids)
        future: Future = Future()
        with self._lock:
            self._pending[request_id] = future
        worker.post(
            {
                "type": "computeRoute",
                "requestId": request_id,
                "params": params.to_dict(),
            }
        )

        try:
            return future.result(timeout=self.timeout)
        except FutureTimeoutError:
            with self._lock:
                self._pending.pop(request_id, None)
            logger.debug(
                "Worker request %d timed out after %.3fs, routing inline",
                request_id,
                self.timeout,
            )
            return self.compute_sync(params)

    def compute_sync(self, params: RouteParams) -> List[float]:
        """Route on the calling thread with the manager's own router."""
        raw = self._router.compute_elbow_points(
            params.start_world,
            params.end_world,
            params.start_binding,
            params.end_binding,
            self._elements,
            params.min_stub_length,
        )
        return simplify_elbow_path(raw)

    def dispose(self) -> None:
        """Stop the worker and fail every request still waiting on it."""
        if self._worker is not None:
            self._worker.stop(timeout=1.0)
            self._worker = None
        with self._lock:
            pending = list(self._pending.values())
            self._pending.clear()
        for future in pending:
            future.set_exception(WorkerDisposedError("Worker disposed"))

    @property
    def is_worker_active(self) -> bool:
        """True while a worker thread is running."""
        return self._worker is not None and self._worker.is_alive()
