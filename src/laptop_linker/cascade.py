"""
Ordered pattern cascades: first-rule-wins extraction.

Every attribute the extractor produces comes from a Cascade, an ordered list
of (pattern -> transform) rules. The first rule whose pattern matches decides
the value and no later rule is consulted, so list order IS the priority:

    series = Cascade.from_keywords('series', ['pavilion x360', 'pavilion'])
    series.first('HP Pavilion x360 14')    -> 'pavilion x360'
    series.explain('HP Pavilion 15')       -> ('pavilion', 'pavilion')

Input text is lower-cased and trimmed before matching. Non-string input
(None, numbers from JSON) is coerced, never rejected.
"""

import re
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Pattern, Tuple

Transform = Callable[[re.Match], str]


def _whole_match(match: re.Match) -> str:
    return match.group(0)


def prepare_text(text) -> str:
    """Lower-case and trim any value; None becomes ''."""
    if text is None:
        return ''
    if not isinstance(text, str):
        text = str(text)
    return text.lower().strip()


@dataclass(frozen=True)
class Rule:
    """One pattern -> transform pair inside a cascade."""

    name: str
    pattern: Pattern[str]
    transform: Transform = _whole_match

    def apply(self, text: str) -> Optional[str]:
        """Return the transformed value, or None when the pattern does not match."""
        match = self.pattern.search(text)
        if match is None:
            return None
        return self.transform(match).strip()


class Cascade:
    """An ordered, named list of rules evaluated until the first match."""

    def __init__(self, name: str, rules: Iterable[Rule]):
        self.name = name
        self.rules: Tuple[Rule, ...] = tuple(rules)
        seen = set()
        for rule in self.rules:
            if rule.name in seen:
                raise ValueError(f"Duplicate rule name '{rule.name}' in cascade '{name}'")
            seen.add(rule.name)

    @classmethod
    def from_keywords(cls, name: str, keywords: Iterable[str]) -> 'Cascade':
        """
        Build a substring cascade from an ordered keyword list.

        Keywords are matched as case-insensitive substrings. An earlier generic
        keyword shadows a later, more specific one ('15' before 'swift go 14').
        """
        rules = []
        for keyword in keywords:
            kw = prepare_text(keyword)
            if kw:
                rules.append(Rule(kw, re.compile(re.escape(kw))))
        return cls(name, rules)

    @property
    def rule_names(self) -> List[str]:
        return [rule.name for rule in self.rules]

    def explain(self, text) -> Tuple[str, str]:
        """Return (rule_name, value) of the winning rule, ('', '') on a miss."""
        prepared = prepare_text(text)
        if not prepared:
            return '', ''
        for rule in self.rules:
            value = rule.apply(prepared)
            if value is not None:
                return rule.name, value
        return '', ''

    def first(self, text) -> str:
        """Return the value of the first matching rule, '' when nothing matches."""
        return self.explain(text)[1]

    def __len__(self) -> int:
        return len(self.rules)

    def __repr__(self) -> str:
        return f"Cascade({self.name!r}, rules={self.rule_names!r})"
