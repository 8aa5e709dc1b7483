"""Start-after cursors for drivers that list from a sorted path set."""

import base64
import binascii
from bisect import bisect_right
from collections.abc import Sequence

from storehub.core.errors import InvalidPageError
from storehub.core.interfaces import ListFilesResult


def encode_cursor(last_path: str) -> str:
    return base64.urlsafe_b64encode(last_path.encode()).decode("ascii")


def decode_cursor(page: str) -> str:
    try:
        last_path = base64.urlsafe_b64decode(page.encode("ascii")).decode()
    except (binascii.Error, UnicodeError, ValueError) as e:
        raise InvalidPageError() from e
    if not last_path:
        raise InvalidPageError()
    return last_path


def paginate(
    sorted_paths: Sequence[str], page: str | None, page_size: int
) -> ListFilesResult:
    """Slice one page out of a lexicographically sorted path list.

    The cursor names the last path already returned, so a fixed path set
    yields the same pages on every call and deleted entries never shift
    later pages.
    """
    start = 0 if page is None else bisect_right(sorted_paths, decode_cursor(page))
    entries = list(sorted_paths[start : start + page_size])

    next_page = None
    if entries and start + page_size < len(sorted_paths):
        next_page = encode_cursor(entries[-1])
    return ListFilesResult(entries=entries, page=next_page)
