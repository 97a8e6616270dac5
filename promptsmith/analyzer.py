"""Lightweight heuristic prompt analyzer.

Produces the ``AnalysisResult`` signals the registry and scorer consume:
complexity, ambiguity, domain hints, technical terms, readability, language.
Everything is regex and word-list based; no model downloads.
"""

from __future__ import annotations

import math
import re
from typing import Dict, List

from promptsmith.errors import ensure_text
from promptsmith.models import AnalysisResult

MAX_INPUT_CHARS = 10000

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")
_WHITESPACE = re.compile(r"\s+")
_WORD = re.compile(r"\b\w+\b")
_SENTENCE_SPLIT = re.compile(r"[.!?]+")

VAGUE_TERMS = {
    "good", "bad", "nice", "bonito", "bonita", "bueno", "malo",
    "stuff", "things", "something", "anything", "some", "many",
    "big", "small", "fast", "slow", "easy", "hard", "simple",
}
INDEFINITE_PRONOUNS = {"it", "this", "that", "these", "those", "they"}
MODAL_VERBS = {"might", "could", "should", "would", "may"}
HEDGE_WORDS = {"probably", "maybe", "perhaps", "possibly", "somewhat"}

# Stand-in for part-of-speech tagging: conjunctions and common prepositions
CONNECTIVES = {
    "and", "or", "but", "nor", "yet", "so", "in", "on", "at", "of", "for", "with",
    "by", "from", "into", "about", "through", "after", "before", "between", "under",
    "y", "o", "pero", "en", "con", "por", "para", "de", "sin",
}

POSITIVE_WORDS = {"good", "great", "awesome", "excellent", "nice", "wonderful", "love", "best", "happy"}
NEGATIVE_WORDS = {"bad", "terrible", "awful", "horrible", "wrong", "error", "hate", "worst", "broken"}

DOMAIN_KEYWORDS: Dict[str, List[str]] = {
    "sql": ["table", "query", "database", "select", "insert", "update", "delete", "join", "sql", "db", "schema"],
    "branding": ["brand", "marketing", "campaign", "logo", "copy", "audience", "message", "slogan"],
    "cine": ["script", "screenplay", "film", "movie", "cinema", "character", "scene", "dialogue"],
    "saas": ["app", "application", "feature", "user", "dashboard", "api", "integration", "subscription"],
    "devops": ["deploy", "deployment", "docker", "kubernetes", "aws", "cloud", "pipeline", "infrastructure"],
}

TECH_PATTERNS = [
    re.compile(r"^[A-Z]{2,}$"),
    re.compile(r"^\w+\.(js|ts|py|sql|html|css|java)$", re.IGNORECASE),
    re.compile(r"^(API|HTTP|JSON|XML|CSS|HTML|SQL|NoSQL|REST|GraphQL)$", re.IGNORECASE),
    re.compile(r"^(React|Vue|Angular|Node|Express|Django|Flask)$", re.IGNORECASE),
    re.compile(r"^(Docker|Kubernetes|AWS|GCP|Azure)$", re.IGNORECASE),
    re.compile(r"^(OAuth2?|JWT|SAML|SSO|2FA|MFA)$", re.IGNORECASE),
    re.compile(r"^(PostgreSQL|MySQL|MongoDB|Redis|SQLite)$", re.IGNORECASE),
    re.compile(r"^(JavaScript|TypeScript|Python|Java|PHP|Ruby|Go|Rust)$", re.IGNORECASE),
    re.compile(r"^(function|class|interface|component|method|endpoint|database|schema|table)$", re.IGNORECASE),
]

VARIABLE_PATTERNS = [
    re.compile(r"\{\{\s*\w+\s*\}\}"),  # {{variable}}
    re.compile(r"\$\w+"),  # $variable
    re.compile(r":\w+"),  # :variable
    re.compile(r"%\w+%"),  # %variable%
    re.compile(r"\[[\w\s]+\]"),  # [placeholder]
    re.compile(r"<[\w\s]+>"),  # <placeholder>
]

_SPANISH = re.compile(
    r"\b(el|la|los|las|un|una|de|del|en|con|por|para|que|es|son|esta|muy|bonit[ao]|bueno|malo)\b",
    re.IGNORECASE,
)
_ENGLISH = re.compile(
    r"\b(the|a|an|and|or|but|in|on|at|to|for|of|with|by|is|are|was|were|good|bad|nice)\b",
    re.IGNORECASE,
)


def clean_input(text: str) -> str:
    """Drop control characters, collapse whitespace and cap the length."""
    cleaned = _CONTROL_CHARS.sub("", text)
    cleaned = _WHITESPACE.sub(" ", cleaned).strip()
    return cleaned[:MAX_INPUT_CHARS]


def estimate_tokens(text: str) -> int:
    """Rough GPT-style token estimate (1 token ~= 4 chars or 0.75 words)."""
    if not text:
        return 0
    words = len([w for w in _WHITESPACE.split(text.strip()) if w])
    return max(1, math.ceil(min(len(text) / 4, words / 0.75)))


def is_technical_term(word: str) -> bool:
    return any(p.match(word) for p in TECH_PATTERNS)


def count_syllables(word: str) -> int:
    word = word.lower()
    if len(word) <= 3:
        return 1
    count = 0
    previous_vowel = False
    for ch in word:
        vowel = ch in "aeiouy"
        if vowel and not previous_vowel:
            count += 1
        previous_vowel = vowel
    if word.endswith("e"):
        count -= 1
    return max(1, count)


def _sentences(text: str) -> List[str]:
    return [s for s in _SENTENCE_SPLIT.split(text) if s.strip()]


class PromptAnalyzer:
    """Default ``analyze(text) -> AnalysisResult`` implementation."""

    def analyze(self, text: str) -> AnalysisResult:
        ensure_text(text)
        cleaned = clean_input(text)
        tokens = _WORD.findall(cleaned)
        return AnalysisResult(
            complexity=self.complexity(cleaned, tokens),
            ambiguity_score=self.ambiguity(tokens),
            domain_hints=self.domain_hints(cleaned),
            technical_terms=self.technical_terms(tokens),
            sentiment_score=self.sentiment(tokens),
            readability_score=self.readability(cleaned),
            language=self.language(cleaned),
            has_variables=any(p.search(cleaned) for p in VARIABLE_PATTERNS),
            estimated_tokens=estimate_tokens(cleaned),
        )

    def complexity(self, text: str, tokens: List[str]) -> float:
        if not text or not tokens:
            return 0.0
        score = min(len(text) / 100, 2.0) * 0.35
        sentences = _sentences(text)
        if sentences:
            score += min((len(text) / len(sentences)) / 30, 1.5) * 0.25
        lowered = [t.lower() for t in tokens]
        score += (len(set(lowered)) / len(tokens)) * 0.15
        tech = sum(1 for t in tokens if is_technical_term(t))
        score += min(tech / len(tokens) * 5, 1.0) * 0.15
        connectives = sum(1 for t in lowered if t in CONNECTIVES)
        score += min(connectives / len(tokens) * 2, 1.0) * 0.1
        return min(score, 1.0)

    def ambiguity(self, tokens: List[str]) -> float:
        if not tokens:
            return 1.0
        lowered = [t.lower() for t in tokens]
        n = len(lowered)
        score = sum(1 for t in lowered if t in VAGUE_TERMS) / n * 0.4
        score += sum(1 for t in lowered if t in INDEFINITE_PRONOUNS) / n * 0.3
        score += sum(1 for t in lowered if t in MODAL_VERBS) / n * 0.2
        score += sum(1 for t in lowered if t in HEDGE_WORDS) / n * 0.1
        return min(score, 1.0)

    def domain_hints(self, text: str) -> List[str]:
        lower = text.lower()
        # Substring containment, so "app" also hints on "application"
        return [domain for domain, words in DOMAIN_KEYWORDS.items() if any(w in lower for w in words)]

    def technical_terms(self, tokens: List[str]) -> List[str]:
        seen = set()
        terms: List[str] = []
        for token in tokens:
            key = token.lower()
            if key in seen or not is_technical_term(token):
                continue
            seen.add(key)
            terms.append(token)
        return terms

    def sentiment(self, tokens: List[str]) -> float:
        lowered = [t.lower() for t in tokens]
        positive = sum(1 for t in lowered if t in POSITIVE_WORDS)
        negative = sum(1 for t in lowered if t in NEGATIVE_WORDS)
        if positive + negative == 0:
            return 0.0
        return max(-1.0, min(1.0, (positive - negative) / (positive + negative)))

    def readability(self, text: str) -> float:
        """Flesch reading ease scaled to [0, 1] (1 = easy)."""
        sentences = _sentences(text)
        words = [w for w in _WHITESPACE.split(text) if w]
        if not sentences or not words:
            return 0.0
        syllables = sum(count_syllables(w) for w in words)
        flesch = 206.835 - 1.015 * (len(words) / len(sentences)) - 84.6 * (syllables / len(words))
        return max(0.0, min(1.0, flesch / 100))

    def language(self, text: str) -> str:
        spanish = len(_SPANISH.findall(text))
        english = len(_ENGLISH.findall(text))
        if spanish > english:
            return "es"
        if english > spanish:
            return "en"
        return "unknown"


__all__ = ["PromptAnalyzer", "clean_input", "estimate_tokens", "is_technical_term", "count_syllables"]
