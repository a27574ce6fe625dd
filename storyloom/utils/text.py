"""Mixed CJK/Latin text measurements shared by token estimation and word counts."""

from __future__ import annotations

import re
from typing import Optional

# CJK Unified Ideographs, Extension A and Compatibility Ideographs
CJK_PATTERN = re.compile(r"[\u4e00-\u9fff\u3400-\u4dbf\uf900-\ufaff]")


def split_counts(text: str) -> tuple[int, int]:
    """Return (cjk_char_count, non_cjk_word_count) for ``text``.

    CJK characters are replaced by spaces before splitting, so punctuation
    glued to an ideograph still counts as its own word.
    """
    cjk_count = len(CJK_PATTERN.findall(text))
    words = CJK_PATTERN.sub(" ", text).split()
    return cjk_count, len(words)


def count_words(text: Optional[str]) -> int:
    """Word count for mixed prose: each ideograph counts as a word."""
    if not text:
        return 0
    cjk_count, word_count = split_counts(text)
    return cjk_count + word_count
