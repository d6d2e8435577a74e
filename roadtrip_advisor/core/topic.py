"""Cheap relevance gate that rejects obviously unrelated questions before any LLM call."""
from __future__ import annotations

import re
from typing import Any, Protocol, Sequence


class TopicValidator(Protocol):
    """Decides whether free text belongs to the travel / roadtrip domain."""

    def is_in_scope(self, query: Any) -> bool:
        ...


TRAVEL_KEYWORDS: tuple[str, ...] = (
    # travel verbs and trip nouns
    r"voyag\w*",
    r"road[\s-]?trips?",
    r"trips?",
    r"travel\w*",
    r"partir",
    r"visit\w*",
    r"découvr\w*",
    r"explor\w*",
    r"vacances?",
    r"séjours?",
    r"escapades?",
    r"excursions?",
    r"périples?",
    r"circuits?",
    r"itinérai\w*",
    r"itinerar\w*",
    r"destinations?",
    r"touris\w*",
    r"holidays?",
    r"vacation\w*",
    # duration units
    r"jours?",
    r"journées?",
    r"semaines?",
    r"week-?ends?",
    r"nuits?",
    r"days?",
    r"weeks?",
    r"nights?",
    # transport
    r"voitures?",
    r"vans?",
    r"camping-?cars?",
    r"campervans?",
    r"motos?",
    r"routes?",
    r"autoroutes?",
    r"condui\w*",
    r"carburant",
    r"essence",
    r"avions?",
    r"trains?",
    r"ferry",
    r"driv\w*",
    r"road",
    # lodging
    r"hôtels?",
    r"hotels?",
    r"campings?",
    r"auberges?",
    r"hébergements?",
    r"logements?",
    r"gîtes?",
    r"airbnb",
    r"bivouacs?",
    r"motels?",
    r"hostels?",
    # activities
    r"randonnées?",
    r"plages?",
    r"musées?",
    r"parcs? nationa\w*",
    r"activités?",
    r"attractions?",
    r"plongée",
    r"hiking",
    r"sightseeing",
    # budget
    r"budgets?",
    r"dépenses?",
    r"pas cher",
    # curated roadtrip destinations
    r"france",
    r"norvège",
    r"norway",
    r"islande",
    r"iceland",
    r"écosse",
    r"scotland",
    r"irlande",
    r"ireland",
    r"portugal",
    r"italie",
    r"italy",
    r"toscane",
    r"sicile",
    r"corse",
    r"provence",
    r"bretagne",
    r"normandie",
    r"alsace",
    r"croatie",
    r"slovénie",
    r"suisse",
    r"autriche",
    r"allemagne",
    r"grèce",
    r"suède",
    r"finlande",
    r"maroc",
    r"namibie",
    r"afrique du sud",
    r"canada",
    r"québec",
    r"états-unis",
    r"usa",
    r"californie",
    r"arizona",
    r"utah",
    r"alaska",
    r"floride",
    r"mexique",
    r"patagonie",
    r"chili",
    r"argentine",
    r"australie",
    r"nouvelle-zélande",
    r"new zealand",
    r"japon",
    r"vietnam",
    r"thaïlande",
)

INTENT_PATTERNS: tuple[str, ...] = (
    r"\b(?:je|j'|nous|on)\s*(?:veux|voudrais|voudrions|voulons|souhaite|souhaitons|aimerais|aimerions|compte|pense|vais|allons)\s+(?:aller|partir|visiter|découvrir|faire\s+un\s+tour)\b",
    r"\b(?:où|quand|comment)\s+(?:aller|partir|dormir|loger|séjourner|se\s+rendre)\b",
    r"\b(?:itinéraire|programme|plan|planning|organiser|planifier|préparer)\b.*\b(?:voyage|séjour|trip|vacances|circuit|tour)\b",
    r"\b(?:conseils?|suggestions?|recommandations?|idées?)\b.*\b(?:destination|voyage|séjour|vacances|visiter|pays|région)\b",
    r"\bbudget\b.*\b(?:voyage|séjour|trip|vacances)\b",
    r"\bque\s+(?:faire|voir|visiter)\s+(?:à|en|au|aux|pendant|durant)\b",
    r"\bi\s+(?:want|would\s+like|plan|am\s+planning)\s+to\s+(?:go|visit|travel|drive)\b",
    r"\bwhere\s+(?:to|should\s+i|can\s+i)\s+(?:go|stay|travel|sleep)\b",
    r"\bwhat\s+to\s+(?:do|see)\s+(?:in|during|at|around)\b",
)


class KeywordTopicValidator:
    """Keyword OR intent-pattern heuristic; false positives and negatives are accepted."""

    def __init__(
        self,
        keywords: Sequence[str] = TRAVEL_KEYWORDS,
        patterns: Sequence[str] = INTENT_PATTERNS,
    ) -> None:
        self._keyword_re = re.compile(r"\b(?:" + "|".join(keywords) + r")\b")
        self._patterns = [re.compile(pattern) for pattern in patterns]

    def has_keyword(self, text: str) -> bool:
        return self._keyword_re.search(text) is not None

    def matches_intent(self, text: str) -> bool:
        return any(pattern.search(text) for pattern in self._patterns)

    def is_in_scope(self, query: Any) -> bool:
        if not isinstance(query, str):
            return False
        text = query.strip().lower()
        if not text:
            return False
        return self.has_keyword(text) or self.matches_intent(text)
