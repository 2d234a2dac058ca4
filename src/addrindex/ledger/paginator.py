"""Fixed-size paging over ordered id lists.

Two policies share the same window arithmetic and differ only at the end of
the sequence:

* :func:`paginate` (address listings) never fails; a sequence that fits in
  one page is returned whole whatever page was asked for, and a page past
  the end is empty.
* :func:`paginate_strict` (block listings) raises ``PageOutOfBoundsError``
  for a page that starts past the end.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, TypeVar

from addrindex.errors import PageOutOfBoundsError

if TYPE_CHECKING:
    from collections.abc import Sequence

T = TypeVar("T")

PAGE_SIZE = 10


def _window(length: int, page_index: int, page_size: int) -> tuple[int, int]:
    if page_index < 0:
        msg = f"page index must be >= 0, got {page_index}"
        raise ValueError(msg)
    start = page_index * page_size
    return start, min(start + page_size, length)


def paginate(sequence: Sequence[T], page_index: int, *, page_size: int = PAGE_SIZE) -> list[T]:
    """Return page *page_index* (0-based) of *sequence*."""
    if len(sequence) <= page_size:
        return list(sequence)
    start, end = _window(len(sequence), page_index, page_size)
    if start >= len(sequence):
        return []
    return list(sequence[start:end])


def paginate_strict(
    sequence: Sequence[T], page_index: int, *, page_size: int = PAGE_SIZE
) -> list[T]:
    """Return page *page_index* (0-based), raising when it does not exist.

    Page 0 always exists, even for an empty sequence.
    """
    start, end = _window(len(sequence), page_index, page_size)
    if start > len(sequence) or (start == len(sequence) and page_index > 0):
        raise PageOutOfBoundsError(page_index)
    return list(sequence[start:end])
