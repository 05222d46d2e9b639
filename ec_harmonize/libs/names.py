"""Candidate name parsing and the canonical "Last, First Middle" key.

Every cross-table comparison of candidate names goes through
``reassemble(parse(x))`` so that raw results, auxiliary candidate tables and
winners lists all agree on one spelling of the key.

Heuristic (applied uniformly to every era):
  - "Last, First Middle ..."  -> text before the first comma is the last name,
    first token after it is the first name, any remaining tokens are middle names.
    A comma wins over the requested order, so a key is read back as itself
    even when the caller asked for display order.
  - "First Middle ... Last"   -> first token is the first name, final token is
    the last name, tokens in between are middle names.
  - (last, first, middle) parts -> the first-name field may hold several tokens;
    the first one is the first name and the rest are prepended to the middle names.

Known ambiguity: a two-token last name written in display order ("John Van Dyke")
or stored in the first-name field is split incorrectly. Stylistic names
(quoted nicknames, "aka", parentheses, generational suffixes) are not guessed at:
they are passed through unchanged and flagged ``low_confidence``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Sequence, Union

from ec_harmonize.libs.formatting import clean_text

LAST_FIRST = "last_first"
DISPLAY = "display"
AUTO = "auto"

_SUFFIXES = {"jr", "jr.", "sr", "sr.", "ii", "iii", "iv"}
_AMBIGUOUS_RE = re.compile(r"[\"“”«»()\[\]]|(?:^|\s)'[^']+'(?:\s|$)|\baka\b|\ba\.k\.a\.", re.IGNORECASE)


@dataclass(frozen=True)
class CandidateNameComponents:
    full_raw: str
    last: str
    first: str
    middle: Optional[str] = None
    low_confidence: bool = False

    @property
    def canonical_key(self) -> str:
        return reassemble(self)


def canonical_key(last: str, first: str, middle: Optional[str] = None) -> str:
    key = f"{last}, {first}" if first else last
    if first and middle:
        key = f"{key} {middle}"
    return key


def _tokens(s: Optional[str]) -> list:
    return s.split() if s else []


def _is_ambiguous(s: str) -> bool:
    if _AMBIGUOUS_RE.search(s):
        return True
    toks = s.replace(",", " ").split()
    return any(t.casefold() in _SUFFIXES for t in toks[1:])


def _build(full_raw: str, last_toks: list, first_toks: list, middle_toks: list) -> CandidateNameComponents:
    if not last_toks:
        # Nothing but given names: the final one has to act as the last name.
        rest = first_toks + middle_toks
        last_toks, first_toks, middle_toks = rest[-1:], rest[:1] if len(rest) > 1 else [], rest[1:-1]
    if not first_toks and middle_toks:
        first_toks, middle_toks = middle_toks[:1], middle_toks[1:]
    return CandidateNameComponents(
        full_raw=full_raw,
        last=" ".join(last_toks),
        first=" ".join(first_toks),
        middle=" ".join(middle_toks) or None,
    )


def _passthrough(raw: str) -> CandidateNameComponents:
    return CandidateNameComponents(full_raw=raw, last="", first="", middle=None, low_confidence=True)


def _parse_parts(parts: Sequence) -> CandidateNameComponents:
    last, first, middle = (list(parts) + [None, None, None])[:3]
    last, first, middle = clean_text(last), clean_text(first), clean_text(middle)
    full_raw = " ".join(p for p in (last, first, middle) if p)
    if _is_ambiguous(full_raw):
        return _passthrough(canonical_key(last or "", first or "", middle))
    first_toks = _tokens(first)
    return _build(
        full_raw,
        _tokens(last),
        first_toks[:1],
        first_toks[1:] + _tokens(middle),
    )


def _parse_string(raw: str, order: str) -> CandidateNameComponents:
    if _is_ambiguous(raw):
        return _passthrough(raw)
    if "," in raw:
        head, tail = raw.split(",", 1)
        # Legacy files join the three parts with ", " so extra commas are separators too.
        tail_toks = _tokens(tail.replace(",", " "))
        if not head.strip():
            return _parse_string(" ".join(tail_toks), DISPLAY)
        return _build(raw, _tokens(head), tail_toks[:1], tail_toks[1:])
    toks = _tokens(raw.replace(",", " "))
    if order == LAST_FIRST:
        return _build(raw, toks[:1], toks[1:2], toks[2:])
    if len(toks) == 1:
        return _build(raw, toks, [], [])
    return _build(raw, toks[-1:], toks[:1], toks[1:-1])


def parse(
    raw: Union[str, Sequence, CandidateNameComponents, None],
    order: str = AUTO,
) -> CandidateNameComponents:
    if isinstance(raw, CandidateNameComponents):
        return raw
    if isinstance(raw, (tuple, list)):
        return _parse_parts(raw)
    s = clean_text(raw)
    if s is None:
        return CandidateNameComponents(full_raw="", last="", first="")
    return _parse_string(s, order)


def reassemble(components: CandidateNameComponents) -> str:
    if components.low_confidence:
        return components.full_raw
    return canonical_key(components.last, components.first, components.middle)


def normalize_key(raw, order: str = AUTO) -> Optional[str]:
    """``reassemble(parse(raw))``, with empty names mapped to None."""
    key = reassemble(parse(raw, order))
    return key or None
