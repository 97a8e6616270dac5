"""
Prompt store

Holds saved prompts together with their score. ``PromptStore`` is the
interface the orchestrator talks to; ``InMemoryPromptStore`` is the default
implementation (no persistence, safe to share between threads).
"""

from __future__ import annotations

import hashlib
import threading
from dataclasses import asdict, dataclass, field, replace
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional, Protocol

from pydantic import BaseModel, Field, field_validator

from promptsmith.models import Domain, QualityScore


class SaveMetadata(BaseModel):
    """Caller supplied description of a prompt being saved."""

    name: str
    domain: Domain = Domain.GENERAL
    tags: List[str] = Field(default_factory=list)
    description: str = ""
    category: str = ""
    is_public: bool = False
    author_id: Optional[str] = None
    version: str = "1.0.0"

    @field_validator("domain", mode="before")
    @classmethod
    def _parse_domain(cls, value: Any) -> Domain:
        return Domain.parse(value)


class SearchCriteria(BaseModel):
    query: Optional[str] = None
    domain: Optional[Domain] = None
    tags: List[str] = Field(default_factory=list)
    category: Optional[str] = None
    min_score: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    limit: int = Field(default=20, ge=1, le=100)
    offset: int = Field(default=0, ge=0)
    sort_by: Literal["score", "created", "updated", "relevance"] = "score"
    sort_order: Literal["asc", "desc"] = "desc"

    @field_validator("domain", mode="before")
    @classmethod
    def _parse_domain(cls, value: Any) -> Optional[Domain]:
        return None if value is None else Domain.parse(value)


@dataclass
class SavedPrompt:
    """A stored prompt and its quality score"""

    id: str
    prompt: str
    metadata: SaveMetadata
    score: QualityScore
    system_prompt: str = ""
    created_at: str = field(default_factory=lambda: datetime.now().isoformat())
    updated_at: str = field(default_factory=lambda: datetime.now().isoformat())
    relevance: float = 1.0

    @property
    def name(self) -> str:
        return self.metadata.name

    @property
    def domain(self) -> Domain:
        return self.metadata.domain

    @property
    def tags(self) -> List[str]:
        return self.metadata.tags

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["metadata"] = self.metadata.model_dump(mode="json")
        data["score"] = self.score.model_dump(mode="json")
        return data


class PromptStore(Protocol):
    def save(
        self, refined: str, metadata: SaveMetadata, score: QualityScore, system_prompt: str = ""
    ) -> SavedPrompt: ...

    def get_by_id(self, prompt_id: str) -> Optional[SavedPrompt]: ...

    def search(self, criteria: SearchCriteria) -> List[SavedPrompt]: ...


class InMemoryPromptStore:
    """Dictionary backed store; ids are short content hashes."""

    def __init__(self):
        self._entries: Dict[str, SavedPrompt] = {}
        self._lock = threading.Lock()
        self._counter = 0

    def __len__(self) -> int:
        return len(self._entries)

    def save(
        self, refined: str, metadata: SaveMetadata, score: QualityScore, system_prompt: str = ""
    ) -> SavedPrompt:
        with self._lock:
            self._counter += 1
            prompt_id = hashlib.sha256(
                f"{self._counter}_{metadata.name}_{refined}".encode("utf-8")
            ).hexdigest()[:12]
            entry = SavedPrompt(
                id=prompt_id,
                prompt=refined,
                metadata=metadata,
                score=score,
                system_prompt=system_prompt,
            )
            self._entries[prompt_id] = entry
            return entry

    def get_by_id(self, prompt_id: str) -> Optional[SavedPrompt]:
        return self._entries.get(prompt_id)

    def search(self, criteria: SearchCriteria) -> List[SavedPrompt]:
        with self._lock:
            entries = list(self._entries.values())

        results: List[SavedPrompt] = []
        for entry in entries:
            if criteria.domain is not None and entry.domain != criteria.domain:
                continue
            if criteria.category and entry.metadata.category != criteria.category:
                continue
            if criteria.tags and not set(t.lower() for t in criteria.tags) <= set(t.lower() for t in entry.tags):
                continue
            if criteria.min_score is not None and entry.score.overall < criteria.min_score:
                continue
            relevance = self._relevance(entry, criteria.query)
            if relevance == 0.0:
                continue
            # Relevance is per query, so hand back a copy
            results.append(replace(entry, relevance=relevance))

        reverse = criteria.sort_order == "desc"
        if criteria.sort_by == "score":
            results.sort(key=lambda e: e.score.overall, reverse=reverse)
        elif criteria.sort_by == "created":
            results.sort(key=lambda e: e.created_at, reverse=reverse)
        elif criteria.sort_by == "updated":
            results.sort(key=lambda e: e.updated_at, reverse=reverse)
        else:
            results.sort(key=lambda e: e.relevance, reverse=reverse)
        return results[criteria.offset : criteria.offset + criteria.limit]

    @staticmethod
    def _relevance(entry: SavedPrompt, query: Optional[str]) -> float:
        """Share of query words found in the name, description or prompt."""
        if not query or not query.strip():
            return 1.0
        haystack = " ".join([entry.name, entry.metadata.description, entry.prompt]).lower()
        words = query.lower().split()
        found = sum(1 for w in words if w in haystack)
        return found / len(words)


__all__ = ["InMemoryPromptStore", "PromptStore", "SaveMetadata", "SavedPrompt", "SearchCriteria"]
