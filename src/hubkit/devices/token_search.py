# SPDX-License-Identifier: Apache-2.0
# Copyright (C) 2024-2026 The Birthmark Standard Foundation

"""
Fuzzy token search over a fixed record set.

Each indexed field of a record is lowercased and split on a delimiter. A
query is scored against each field:

- every query token is compared with every field token; equal tokens score
  1.0, otherwise difflib's SequenceMatcher ratio is used
- the field score is the mean over query tokens of their best match

Fields scoring below the threshold do not match. Results are ordered by
descending score; equal scores keep record order.
"""

import difflib
from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, List, Mapping, Sequence, Tuple, TypeVar

from ..errors import InvalidArgumentError

T = TypeVar("T")


@dataclass(frozen=True)
class SearchResult(Generic[T]):
    """One search hit."""
    item: T
    score: float
    field: str


def _field_text(record: Any, field: str) -> str:
    if isinstance(record, Mapping):
        value = record.get(field)
    else:
        value = getattr(record, field, None)
    if value is None:
        return ""
    if isinstance(value, Enum):
        value = value.value
    return str(value).lower()


def token_similarity(left: str, right: str) -> float:
    """Similarity of two lowercase tokens in [0, 1]."""
    if left == right:
        return 1.0
    if not left or not right:
        return 0.0
    return difflib.SequenceMatcher(None, left, right).ratio()


class TokenIndex(Generic[T]):
    """
    Read-only fuzzy index over records.

    Built once; a new index must be constructed to pick up new records.
    """

    def __init__(
        self,
        records: Sequence[T],
        fields: Sequence[str],
        delimiter: str = " ",
        threshold: float = 0.5,
        unique: bool = False,
    ):
        """
        Build the index.

        Args:
            records: Records to index (order is the tie-break order)
            fields: Attribute (or mapping key) names to index
            delimiter: Token separator
            threshold: Minimum field score for a match (0.0-1.0)
            unique: Report each record at most once, with its best score
        """
        if not fields:
            raise InvalidArgumentError("At least one field must be indexed")
        if not delimiter:
            raise InvalidArgumentError("Delimiter cannot be empty")
        if not 0.0 <= threshold <= 1.0:
            raise InvalidArgumentError(f"Threshold must be between 0 and 1, got {threshold}")

        self.fields = tuple(fields)
        self.delimiter = delimiter
        self.threshold = threshold
        self.unique = unique
        self._records: Tuple[T, ...] = tuple(records)

        # Per record, per field: tokens
        self._entries: List[Tuple[Tuple[str, ...], ...]] = [
            tuple(self._tokenize(_field_text(record, f)) for f in self.fields)
            for record in self._records
        ]

    def __len__(self) -> int:
        return len(self._records)

    def _tokenize(self, text: str) -> Tuple[str, ...]:
        return tuple(token for token in text.split(self.delimiter) if token)

    def _score(self, query_tokens: Tuple[str, ...], tokens: Tuple[str, ...]) -> float:
        if not tokens:
            return 0.0
        return sum(
            max(token_similarity(q, t) for t in tokens) for q in query_tokens
        ) / len(query_tokens)

    def search(self, query: str, max_results: int) -> List[SearchResult[T]]:
        """
        Search the index.

        Args:
            query: Free-text query
            max_results: Maximum number of results to return

        Returns:
            Results ordered by descending score, ties in record order

        Raises:
            InvalidArgumentError: If max_results is less than 1
        """
        if isinstance(max_results, bool) or not isinstance(max_results, int) or max_results < 1:
            raise InvalidArgumentError(f"max_results must be a positive integer, got {max_results!r}")

        query_tokens = self._tokenize((query or "").lower())
        if not query_tokens:
            return []

        matches: List[SearchResult[T]] = []
        for record, entry in zip(self._records, self._entries):
            best = None
            for field, tokens in zip(self.fields, entry):
                score = self._score(query_tokens, tokens)
                if score < self.threshold:
                    continue
                if not self.unique:
                    matches.append(SearchResult(record, score, field))
                elif best is None or score > best.score:
                    best = SearchResult(record, score, field)
            if best is not None:
                matches.append(best)

        # sorted() is stable, so equal scores keep record order
        matches = sorted(matches, key=lambda result: -result.score)
        return matches[:max_results]
