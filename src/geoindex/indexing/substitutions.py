"""
Road Name Permutation

Generates textual variants of a street name so that "Main St" and
"Main Street" both match at query time. Each language has a table of
(pattern, replacement) pairs; every rule that matches the input produces one
variant.
"""

import re
from typing import Dict, List, Sequence, Tuple

from ..errors import SubstitutionRuleError

Rule = Tuple[str, str]

STREET_ABBREVIATIONS: Dict[str, List[Tuple[str, str]]] = {
    'en': [
        ('St', 'Street'),
        ('Ave', 'Avenue'),
        ('Rd', 'Road'),
        ('Blvd', 'Boulevard'),
        ('Dr', 'Drive'),
        ('Ln', 'Lane'),
        ('Ct', 'Court'),
        ('Pl', 'Place'),
        ('Hwy', 'Highway'),
        ('Pkwy', 'Parkway'),
        ('Ter', 'Terrace'),
        ('N', 'North'),
        ('S', 'South'),
        ('E', 'East'),
        ('W', 'West'),
    ],
    'de': [
        ('Str.', 'Straße'),
        ('Pl.', 'Platz'),
    ],
    'fr': [
        ('Av.', 'Avenue'),
        ('Bd', 'Boulevard'),
        ('Pl.', 'Place'),
        ('St', 'Saint'),
    ],
}


def _word(text: str) -> str:
    # Abbreviations ending in "." are not followed by a word boundary
    escaped = re.escape(text)
    return rf"\b{escaped}\b" if text[-1].isalnum() else rf"\b{escaped}(?!\w)"


def build_rules(abbreviations: Sequence[Tuple[str, str]]) -> List[Rule]:
    """Expand (short, long) pairs into rules for both directions."""
    rules = []
    for short, long in abbreviations:
        rules.append((_word(short), long))
        rules.append((_word(long), short))
    return rules


DEFAULT_RULES: Dict[str, List[Rule]] = {
    language: build_rules(pairs) for language, pairs in STREET_ABBREVIATIONS.items()
}


class RoadPermuter:
    """
    Applies per-language substitution rules to road names.

    Patterns are compiled once, case-insensitively. A malformed pattern
    raises ``SubstitutionRuleError`` when the permuter is built.
    """

    def __init__(self, rules: Dict[str, Sequence[Rule]]):
        self.rules: Dict[str, List[Tuple["re.Pattern[str]", str]]] = {}

        for language, table in rules.items():
            compiled = []
            for pattern, replacement in table:
                try:
                    compiled.append((re.compile(pattern, re.IGNORECASE), replacement))
                except re.error as e:
                    raise SubstitutionRuleError(language, pattern, str(e)) from e
            self.rules[language] = compiled

    def permute(self, road: str, language: str) -> List[str]:
        """
        Return the road name followed by each distinct variant.

        Every match of every rule yields one variant with only that match
        replaced, so "St Marks St" gives both "Street Marks St" and
        "St Marks Street". The input is always the first element, so unknown
        languages and names without a matching rule yield ``[road]``.
        """
        variants = [road]
        for pattern, replacement in self.rules.get(language, []):
            for match in pattern.finditer(road):
                variant = road[:match.start()] + replacement + road[match.end():]
                if variant not in variants:
                    variants.append(variant)
        return variants

    __call__ = permute


default_permuter = RoadPermuter(DEFAULT_RULES)


def permute_road(road: str, language: str) -> List[str]:
    return default_permuter.permute(road, language)
