# pdfgate/utils.py
"""
Shared utilities: page range selection.
"""

from typing import List


def parse_page_range(range_spec: str, max_pages: int) -> List[int]:
    """
    Turn a range like "1-3,5,10" into sorted zero-based page indices.

    "all" selects every page. Pages are 1-based in the input; numbers
    outside 1..max_pages are dropped. Raises ValueError on non-numeric parts.
    """
    if range_spec.strip().lower() == "all":
        return list(range(max_pages))

    pages = set()
    for part in range_spec.split(","):
        part = part.strip()
        if not part:
            continue
        if "-" in part:
            start, end = (int(bound.strip()) for bound in part.split("-", 1))
            candidates = range(start, end + 1)
        else:
            candidates = [int(part)]
        pages.update(p - 1 for p in candidates if 0 < p <= max_pages)
    return sorted(pages)
