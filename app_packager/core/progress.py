"""Streaming progress protocol decoding

The image runtime answers pull, push and load requests with a stream of JSON
status records. Records are decoded one at a time; an embedded ``error``
aborts the operation immediately. The deadline and cancellation are observed
even while the stream is silent.
"""

import codecs
import json
import logging
import queue
import threading
import time
from typing import Any, Callable, Dict, Iterable, Iterator, Optional, Tuple, Union

from ..api.exceptions import (
    OperationCancelledError,
    OperationTimeoutError,
    RemoteOperationError,
)
from ..constants import PROGRESS_POLL_INTERVAL

logger = logging.getLogger(__name__)

Chunk = Union[bytes, str, Dict[str, Any]]


class Deadline:
    """Timeout and cancellation for one remote operation"""

    def __init__(self,
                 operation: str,
                 timeout: float,
                 cancel_event: Optional[threading.Event] = None,
                 clock: Callable[[], float] = time.monotonic):
        """
        Initialize deadline

        Args:
            operation: Operation name used in error messages
            timeout: Seconds until the deadline elapses
            cancel_event: Event set by the caller to abort the operation
            clock: Monotonic clock
        """
        self.operation = operation
        self.timeout = timeout
        self.cancel_event = cancel_event or threading.Event()
        self._clock = clock
        self._expires_at = clock() + timeout

    @property
    def expired(self) -> bool:
        """Whether the deadline has elapsed"""
        return self._clock() >= self._expires_at

    @property
    def remaining(self) -> float:
        """Seconds left before the deadline elapses"""
        return max(0.0, self._expires_at - self._clock())

    @property
    def cancelled(self) -> bool:
        """Whether the caller cancelled the operation"""
        return self.cancel_event.is_set()

    def cancel(self) -> None:
        """Request cancellation"""
        self.cancel_event.set()

    def check(self) -> None:
        """Raise if the operation was cancelled or timed out"""
        if self.cancelled:
            raise OperationCancelledError(self.operation)
        if self.expired:
            raise OperationTimeoutError(self.operation, self.timeout)


def record_error(record: Dict[str, Any]) -> Optional[str]:
    """Extract the error message carried by a status record"""
    error = record.get("error")
    if error:
        return str(error)
    detail = record.get("errorDetail")
    if isinstance(detail, dict) and detail.get("message"):
        return str(detail["message"])
    return None


def _decode_error(text: str) -> RemoteOperationError:
    return RemoteOperationError(f"error decoding progress message: {text.strip()[:200]}")


def iter_records(stream: Iterable[Chunk]) -> Iterator[Dict[str, Any]]:
    """Yield JSON records from a stream of raw chunks

    Chunks may split or join records arbitrarily, including inside a
    multi-byte UTF-8 sequence. Already decoded records (dicts) are passed
    through unchanged.
    """
    decoder = json.JSONDecoder()
    text_decoder = codecs.getincrementaldecoder("utf-8")()
    buffer = ""

    for chunk in stream:
        if isinstance(chunk, dict):
            yield chunk
            continue
        if isinstance(chunk, bytes):
            try:
                chunk = text_decoder.decode(chunk)
            except UnicodeDecodeError as e:
                raise RemoteOperationError(f"error decoding progress message: {e}") from e
        buffer += chunk

        while True:
            buffer = buffer.lstrip()
            if not buffer:
                break
            try:
                record, end = decoder.raw_decode(buffer)
            except json.JSONDecodeError as e:
                # an incomplete record has no newline past the failure point
                if "\n" in buffer[e.pos:]:
                    raise _decode_error(buffer.split("\n", 1)[0]) from e
                break
            buffer = buffer[end:]
            if isinstance(record, dict):
                yield record

    try:
        buffer += text_decoder.decode(b"", final=True)
    except UnicodeDecodeError as e:
        raise RemoteOperationError(f"error decoding progress message: {e}") from e
    if buffer.strip():
        raise _decode_error(buffer)


class _RecordReader(threading.Thread):
    """Reads one record at a time from a blocking iterator

    The consumer asks for each record explicitly, so nothing is read ahead
    of the record being handled.
    """

    _END = object()

    def __init__(self, records: Iterator[Dict[str, Any]]):
        super().__init__(name="progress-reader", daemon=True)
        self._records = records
        self._wanted = threading.Semaphore(0)
        self._results: "queue.Queue[Tuple[Any, Optional[BaseException]]]" = queue.Queue()
        self._stopped = threading.Event()

    def run(self) -> None:
        while True:
            self._wanted.acquire()
            if self._stopped.is_set():
                return
            try:
                record = next(self._records, self._END)
            except Exception as e:  # re-raised in the consuming thread
                self._results.put((None, e))
                return
            self._results.put((record, None))
            if record is self._END:
                return

    def read(self, deadline: Deadline, poll_interval: float) -> Optional[Dict[str, Any]]:
        """Wait for the next record; None at end-of-stream"""
        self._wanted.release()
        while True:
            deadline.check()
            try:
                record, error = self._results.get(timeout=min(poll_interval, deadline.remaining))
            except queue.Empty:
                continue
            if error is not None:
                raise error
            return None if record is self._END else record

    def stop(self) -> None:
        self._stopped.set()
        self._wanted.release()


def _close_stream(stream: Any) -> None:
    """Close a progress stream, releasing the connection behind it"""
    close = getattr(stream, "close", None)
    if close is None:
        return
    try:
        close()
    except ValueError:
        # generator still blocked inside a read
        logger.debug("progress stream busy, left to the connection timeout")


def decode_progress(stream: Iterable[Chunk],
                    deadline: Deadline,
                    on_record: Optional[Callable[[Dict[str, Any]], None]] = None,
                    abort: Optional[Callable[[], None]] = None,
                    poll_interval: float = PROGRESS_POLL_INTERVAL) -> int:
    """Consume a progress stream until end-of-stream

    Reads happen on a helper thread so that a stalled stream still observes
    the deadline and cancellation. When decoding stops early, ``abort`` is
    called to release the stream.

    Args:
        stream: Raw chunks or decoded records from the runtime
        deadline: Deadline checked while waiting for every record
        on_record: Optional callback for each status record
        abort: Releases the stream on early exit (defaults to closing it)
        poll_interval: Longest wait between deadline checks

    Returns:
        Number of records consumed

    Raises:
        OperationTimeoutError: If the deadline elapses
        OperationCancelledError: If the caller cancels
        RemoteOperationError: If a record carries an error or cannot be decoded
    """
    count = 0
    deadline.check()

    reader = _RecordReader(iter_records(stream))
    reader.start()
    finished = False
    try:
        while True:
            record = reader.read(deadline, poll_interval)
            if record is None:
                finished = True
                return count
            deadline.check()

            message = record_error(record)
            if message:
                logger.debug(f"{deadline.operation} reported error: {message}")
                raise RemoteOperationError(message)

            count += 1
            if on_record:
                on_record(record)
    finally:
        reader.stop()
        if not finished:
            if abort is not None:
                abort()
            else:
                _close_stream(stream)
