"""Party-name normalization to one vocabulary across every era.

Elections Canada spells the same party differently from one release to the
next ("N.D.P./N.P.D." in 2004, "NDP-New Democratic Party" in 2019). The rules
below map every known raw variant onto the canonical English name used by the
Library of Parliament; ``french()`` gives the matching French label.

Rules are data, not code: adding a raw variant means adding one
``(pattern, canonical)`` pair. A pattern matches when it equals the
whole value or one half of a bilingual "English/French" value, ignoring case
and runs of whitespace. Suffix stripping tries the longest pattern first.
"""

from __future__ import annotations

import re
from typing import Dict, List, Optional, Sequence, Tuple

from ec_harmonize.libs.formatting import clean_text

LIBERAL = "Liberal Party of Canada"
CONSERVATIVE = "Conservative Party of Canada"
NDP = "New Democratic Party"
BLOC = "Bloc Québécois"
GREEN = "Green Party of Canada"
PC = "Progressive Conservative Party"
REFORM = "Reform Party of Canada"
ALLIANCE = "Canadian Reform Conservative Alliance"
CHP = "Christian Heritage Party of Canada"
MARXIST = "Marxist-Leninist Party of Canada"
COMMUNIST = "Communist Party of Canada"
LIBERTARIAN = "Libertarian Party of Canada"
MARIJUANA = "Marijuana Party"
CANADIAN_ACTION = "Canadian Action Party"
PROGRESSIVE_CANADIAN = "Progressive Canadian Party"
NATURAL_LAW = "Natural Law Party of Canada"
PPC = "People's Party of Canada"
ANIMAL = "Animal Protection Party of Canada"
RHINO = "Rhinoceros Party"
INDEPENDENT = "Independent"
NO_AFFILIATION = "No affiliation"

PARTY_VOCABULARY: Dict[str, str] = {
    LIBERAL: "Parti libéral du Canada",
    CONSERVATIVE: "Parti conservateur du Canada",
    NDP: "Nouveau Parti démocratique",
    BLOC: "Bloc Québécois",
    GREEN: "Parti vert du Canada",
    PC: "Parti progressiste-conservateur",
    REFORM: "Parti réformiste du Canada",
    ALLIANCE: "Alliance réformiste-conservatrice canadienne",
    CHP: "Parti de l'Héritage Chrétien du Canada",
    MARXIST: "Parti marxiste-léniniste du Canada",
    COMMUNIST: "Parti communiste du Canada",
    LIBERTARIAN: "Parti libertarien du Canada",
    MARIJUANA: "Parti Marijuana",
    CANADIAN_ACTION: "Parti action canadienne",
    PROGRESSIVE_CANADIAN: "Parti progressiste canadien",
    NATURAL_LAW: "Parti de la loi naturelle du Canada",
    PPC: "Parti populaire du Canada",
    ANIMAL: "Parti pour la protection des animaux du Canada",
    RHINO: "Parti Rhinocéros",
    INDEPENDENT: "Indépendant",
    NO_AFFILIATION: "Aucune appartenance",
}

# Raw variants as published. Bilingual "English/French" forms are the ones that
# appear glued to candidate names in the 2004 lookup tables.
PARTY_RULES: List[Tuple[str, str]] = [
    ("Liberal/Libéral", LIBERAL),
    ("Conservative/conservateur", CONSERVATIVE),
    ("N.D.P./N.P.D.", NDP),
    ("Green Party/Parti Vert", GREEN),
    ("Bloc Québécois/Bloc Québécois", BLOC),
    ("Independent/Indépendant", INDEPENDENT),
    ("No Affiliation/Aucune appartenance", NO_AFFILIATION),
    ("Christian Heritage Party/Parti de l'Héritage Chrétien", CHP),
    ("Marxist-Leninist/Marxiste-Léniniste", MARXIST),
    ("Communist/Communiste", COMMUNIST),
    ("Libertarian/Libertarien", LIBERTARIAN),
    ("Marijuana Party/Parti Marijuana", MARIJUANA),
    ("Canadian Action/Action canadienne", CANADIAN_ACTION),
    ("PC Party/Parti PC", PROGRESSIVE_CANADIAN),
    ("NDP-New Democratic Party", NDP),
    ("New Democratic Party", NDP),
    ("Nouveau Parti démocratique", NDP),
    ("N.D.P.", NDP),
    ("NDP", NDP),
    ("Liberal", LIBERAL),
    ("Libéral", LIBERAL),
    ("Parti libéral", LIBERAL),
    ("Conservative", CONSERVATIVE),
    ("Parti conservateur", CONSERVATIVE),
    ("Progressive Conservative", PC),
    ("P.C.", PC),
    ("Parti progressiste-conservateur", PC),
    ("Progressive Canadian", PROGRESSIVE_CANADIAN),
    ("PC Party", PROGRESSIVE_CANADIAN),
    ("Progressive Conservative Party of Canada", PC),
    ("Reform Party", REFORM),
    ("Reform", REFORM),
    ("Canadian Alliance", ALLIANCE),
    ("Canadian Reform Conservative Alliance", ALLIANCE),
    ("Alliance", ALLIANCE),
    ("Bloc Québécois", BLOC),
    ("Bloc Quebecois", BLOC),
    ("Green Party", GREEN),
    ("Parti Vert", GREEN),
    ("Christian Heritage Party", CHP),
    ("Christian Heritage", CHP),
    ("Marxist-Leninist", MARXIST),
    ("Communist", COMMUNIST),
    ("Communist Party", COMMUNIST),
    ("Libertarian", LIBERTARIAN),
    ("Libertarian Party", LIBERTARIAN),
    ("Marijuana", MARIJUANA),
    ("Canadian Action Party", CANADIAN_ACTION),
    ("Progressive Canadian Party", PROGRESSIVE_CANADIAN),
    ("Canadian Action", CANADIAN_ACTION),
    ("Natural Law", NATURAL_LAW),
    ("People's Party", PPC),
    ("Animal Protection Party", ANIMAL),
    ("Animal Alliance", ANIMAL),
    ("Animal Alliance Environment Voters", ANIMAL),
    ("Rhinoceros Party", RHINO),
    ("Rhinoceros", RHINO),
    ("Rhinocéros", RHINO),
    ("Independent", INDEPENDENT),
    ("Indépendant", INDEPENDENT),
    ("No Affiliation", NO_AFFILIATION),
    ("Aucune appartenance", NO_AFFILIATION),
]


def _fold(s: str) -> str:
    return re.sub(r"\s+", " ", s.replace("’", "'")).strip().casefold()


class PartyNameNormalizer:
    """Ordered-rule normalizer. Stateless once built; safe to share between threads."""

    def __init__(
        self,
        rules: Sequence[Tuple[str, str]] = PARTY_RULES,
        vocabulary: Optional[Dict[str, str]] = None,
    ) -> None:
        self.vocabulary = dict(PARTY_VOCABULARY if vocabulary is None else vocabulary)
        merged: Dict[str, str] = {}
        # Canonical names (both languages) map to themselves so normalize() is idempotent.
        for en, fr in self.vocabulary.items():
            merged.setdefault(_fold(en), en)
            merged.setdefault(_fold(fr), en)
        for pattern, canonical in rules:
            merged[_fold(pattern)] = canonical
        self._lookup = merged
        # Suffix stripping only trusts bilingual forms: a bare "Green" may be a surname.
        self._suffixes: List[str] = sorted((p for p in merged if "/" in p), key=lambda p: (-len(p), p))

    def match(self, raw) -> Tuple[Optional[str], bool]:
        """Return ``(value, matched)``; unmatched strings come back unchanged."""
        s = clean_text(raw)
        if s is None:
            return None, True
        folded = _fold(s)
        candidates = [folded]
        if "/" in folded:
            candidates += [half.strip() for half in folded.split("/", 1) if half.strip()]
        for key in candidates:
            canonical = self._lookup.get(key)
            if canonical is not None:
                return canonical, True
        return s, False

    def normalize(self, raw) -> Optional[str]:
        return self.match(raw)[0]

    def french(self, canonical: Optional[str]) -> Optional[str]:
        if canonical is None:
            return None
        return self.vocabulary.get(canonical)

    def strip_suffix(self, text, guess: bool = False) -> Tuple[Optional[str], Optional[str]]:
        """Split ``"<name> <party variant>"`` into ``(name, raw_party)``.

        The longest known bilingual variant found at the end of the string wins.
        Matching is word by word, so folding that changes the length of a word
        ("ß" -> "ss") still cuts at the right place.

        With ``guess``, an unknown ``"English/French"`` tail is split off too:
        the French half gives the number of words taken from the English side,
        leaving at least two words of name. Otherwise an unmatched string is
        returned whole as the name and the party is None.
        """
        s = clean_text(text)
        if s is None:
            return None, None
        words = s.split(" ")
        for pattern in self._suffixes:
            n = pattern.count(" ") + 1
            if n > len(words):
                continue
            if _fold(" ".join(words[-n:])) == pattern:
                return " ".join(words[:-n]) or None, " ".join(words[-n:])
        if guess:
            return _guess_suffix(words, s)
        return s, None


def _guess_suffix(words: List[str], s: str) -> Tuple[Optional[str], Optional[str]]:
    slash = [i for i, w in enumerate(words) if "/" in w]
    if not slash:
        return s, None
    i = slash[-1]
    english, french = words[i].split("/", 1)
    french_words = sum(1 for w in [french] + words[i + 1:] if w)
    head = len(words[:i]) + (1 if english else 0)
    cut = head - max(1, min(french_words, head - 2))
    if cut < 1:
        return None, s
    return " ".join(words[:cut]), " ".join(words[cut:])


DEFAULT_NORMALIZER = PartyNameNormalizer()
