"""
Data contracts for feed ranking
Articles come from the aggregation layer; scored articles and distribution
snapshots only live for the duration of one diversification call
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from utils.dates import parse_dt


class RelatedArticle(BaseModel):
    """Link to a related article, attached by the linking collaborator"""
    model_config = ConfigDict(extra="allow")

    id: str
    title: str = ""
    link: str = ""
    source: str = ""


class Article(BaseModel):
    """Aggregated news article (read-only to the ranking engine)"""
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str
    title: str = ""
    link: str = ""
    pub_date: Optional[datetime] = Field(default=None, alias="pubDate")
    iso_date: Optional[datetime] = Field(default=None, alias="isoDate")
    author: Optional[str] = None
    content: str = ""
    content_snippet: str = Field(default="", alias="contentSnippet")
    categories: Optional[List[str]] = None
    guid: Optional[str] = None

    source: str
    source_name: str = Field(default="", alias="sourceName")
    category: str
    image_url: Optional[str] = Field(default=None, alias="imageUrl")
    image_caption: Optional[str] = Field(default=None, alias="imageCaption")
    related_articles: List[RelatedArticle] = Field(default_factory=list, alias="relatedArticles")

    @field_validator("pub_date", "iso_date", mode="before")
    @classmethod
    def parse_timestamp(cls, v: Any) -> Optional[datetime]:
        # Unreadable feed dates are treated as missing
        return parse_dt(v)

    @field_validator("title", "content", "content_snippet", "source_name", mode="before")
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @property
    def published_at(self) -> Optional[datetime]:
        """Publication time, falling back to the discovered-at timestamp"""
        return self.pub_date or self.iso_date

    @property
    def has_image(self) -> bool:
        return bool(self.image_url)

    @property
    def content_length(self) -> int:
        return len(self.content_snippet)

    @property
    def has_author(self) -> bool:
        return bool(self.author)

    @property
    def title_length(self) -> int:
        return len(self.title)

    @property
    def display_source(self) -> str:
        return self.source_name or self.source


@dataclass(frozen=True)
class ScoreBreakdown:
    """Component scores behind a composite score"""
    recency: float
    diversity: float
    quality: float
    category: float

    def to_dict(self, precision: int = 4) -> Dict[str, float]:
        return {
            'recency': round(self.recency, precision),
            'diversity': round(self.diversity, precision),
            'quality': round(self.quality, precision),
            'category': round(self.category, precision),
        }


@dataclass(frozen=True)
class ScoredArticle:
    """Article with its composite score"""
    article: Article
    score: float
    breakdown: ScoreBreakdown

    def to_dict(self, precision: int = 4) -> Dict[str, Any]:
        scores = self.breakdown.to_dict(precision)
        scores['final'] = round(self.score, precision)
        return {
            'id': self.article.id,
            'source': self.article.source,
            'category': self.article.category,
            'scores': scores,
        }


@dataclass
class DistributionSnapshot:
    """
    Source and category counts of the articles placed so far, plus the order
    their sources were placed in. Scoped to a single diversification call.
    """
    source_counts: Counter = field(default_factory=Counter)
    category_counts: Counter = field(default_factory=Counter)
    source_history: List[str] = field(default_factory=list)

    @classmethod
    def from_articles(cls, articles: List[Article]) -> "DistributionSnapshot":
        snapshot = cls()
        for article in articles:
            snapshot.record(article)
        return snapshot

    @property
    def total(self) -> int:
        return sum(self.source_counts.values())

    def record(self, article: Article) -> None:
        self.source_counts[article.source] += 1
        self.category_counts[article.category] += 1
        self.source_history.append(article.source)

    def source_count(self, source: str) -> int:
        return self.source_counts.get(source, 0)

    def category_count(self, category: str) -> int:
        return self.category_counts.get(category, 0)

    def recent_sources(self, window: int) -> List[str]:
        if window <= 0:
            return []
        return self.source_history[-window:]

    def copy(self) -> "DistributionSnapshot":
        return DistributionSnapshot(
            source_counts=Counter(self.source_counts),
            category_counts=Counter(self.category_counts),
            source_history=list(self.source_history),
        )
