from collections import deque
from typing import Deque, Generic, Iterable, Iterator, Optional, TypeVar

T = TypeVar("T")


class LookaheadBuffer(Generic[T]):
    """
    wraps a single-pass iterator and allows looking one or two items ahead.

    peeked items sit in a queue of at most two entries; ``next`` always drains
    the queue before pulling from the source. all three accessors return None
    at end of input.
    """

    DEPTH = 2

    def __init__(self, source: Iterable[T]):
        self._source: Iterator[T] = iter(source)
        self._peeked: Deque[T] = deque()
        self._finished = False

    def _fill(self, count: int) -> None:
        while len(self._peeked) < count and not self._finished:
            try:
                self._peeked.append(next(self._source))
            except StopIteration:
                self._finished = True

    def peek(self) -> Optional[T]:
        self._fill(1)
        return self._peeked[0] if self._peeked else None

    def peek_further(self) -> Optional[T]:
        self._fill(self.DEPTH)
        return self._peeked[1] if len(self._peeked) > 1 else None

    def next(self) -> Optional[T]:
        self._fill(1)
        return self._peeked.popleft() if self._peeked else None

    def __iter__(self):
        return self

    def __next__(self) -> T:
        item = self.next()
        if item is None:
            raise StopIteration
        return item
