"""Token estimation for context assembly.

Heuristic, tokenizer-free estimate:

- CJK ideographs count 1.5 tokens each
- every other whitespace-separated word counts 1.3 tokens

The sum is rounded up.  No provider tokenizer is consulted; the estimate is
deterministic and works offline.
"""

from __future__ import annotations

from typing import Optional

from storyloom.utils.text import split_counts

# Weights in tenths of a token; integer arithmetic keeps the ceiling exact
# (10 words is 13 tokens, not ceil(13.000000000000002) = 14).
CJK_TOKEN_WEIGHT_X10 = 15
WORD_TOKEN_WEIGHT_X10 = 13


def estimate_tokens(text: Optional[str]) -> int:
    """Estimate the model-token cost of ``text``.

    >>> estimate_tokens("Hello world this is a test")
    8
    >>> estimate_tokens("从前有一座山")
    9
    """
    if not text or text.isspace():
        return 0
    cjk_count, word_count = split_counts(text)
    weighted = cjk_count * CJK_TOKEN_WEIGHT_X10 + word_count * WORD_TOKEN_WEIGHT_X10
    return -(-weighted // 10)
