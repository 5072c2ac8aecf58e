"""
Feed Ranking API Service
Turns raw aggregated articles into the ordered home or category feed
"""

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from pydantic import ValidationError

from core.config import DiversificationConfig
from ranking_service.categories import (
    CategoryInfo,
    filter_articles_by_category,
    get_all_categories,
    sort_articles_by_date,
)
from ranking_service.diversification import ContentDiversifier
from ranking_service.explainability import DiversificationStats, get_diversification_stats
from ranking_service.models import Article
from utils.dates import ensure_utc, utc_now

logger = logging.getLogger(__name__)

RawArticle = Union[Article, Dict[str, Any]]


@dataclass
class FeedRequest:
    """Feed request structure"""
    articles: Sequence[RawArticle]
    category: Optional[str] = None
    limit: Optional[int] = None
    debug: bool = False
    now: Optional[datetime] = None


@dataclass
class FeedResponse:
    """Feed response structure"""
    articles: List[Article]
    total_results: int
    last_updated: datetime
    response_time_ms: int
    errors: List[str] = field(default_factory=list)
    stats: Optional[DiversificationStats] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'articles': [a.model_dump(mode='json', by_alias=True) for a in self.articles],
            'errors': list(self.errors),
            'lastUpdated': self.last_updated.isoformat(),
            'totalResults': self.total_results,
            'responseTimeMs': self.response_time_ms,
            'stats': self.stats.to_dict() if self.stats else None,
        }


class FeedRankingAPI:
    """Feed ranking orchestrator, constructed once and shared by request handlers"""

    def __init__(self, config: Optional[DiversificationConfig] = None,
                 categories: Optional[Sequence[CategoryInfo]] = None):
        self.config = config or DiversificationConfig()
        self.categories = list(categories) if categories is not None else get_all_categories()
        self.category_slugs = {c.slug for c in self.categories}
        self.diversifier = ContentDiversifier(self.config, self.categories)

    def parse_articles(self, raw_articles: Sequence[RawArticle]) -> Tuple[List[Article], List[str]]:
        """Validate raw records; invalid ones are reported, not raised"""
        articles: List[Article] = []
        errors: List[str] = []

        for index, raw in enumerate(raw_articles):
            if isinstance(raw, Article):
                articles.append(raw)
                continue
            try:
                articles.append(Article.model_validate(raw))
            except ValidationError as exc:
                record_id = raw.get('id') if isinstance(raw, dict) else None
                message = f"Invalid article at index {index} (id={record_id}): {exc.error_count()} validation error(s)"
                logger.warning(message)
                errors.append(message)

        return articles, errors

    def rank_feed(self, request: FeedRequest) -> FeedResponse:
        """Main feed endpoint"""
        start_time = time.time()
        now = ensure_utc(request.now) if request.now is not None else utc_now()

        articles, errors = self.parse_articles(request.articles)

        if request.category:
            if request.category not in self.category_slugs:
                logger.warning(f"Unknown category requested: {request.category}")
                errors.append(f"Unknown category: {request.category}")
                ordered = []
            else:
                # Category pages are chronological, not diversified
                ordered = sort_articles_by_date(
                    filter_articles_by_category(articles, request.category)
                )
        else:
            ordered = self.diversifier.diversify(articles, debug=request.debug, now=now)

        total_results = len(ordered)
        if request.limit is not None:
            ordered = ordered[:max(0, request.limit)]

        stats = None
        if request.debug:
            stats = get_diversification_stats(ordered[:self.config.debug_stats_window])

        response_time = int((time.time() - start_time) * 1000)
        logger.info(f"Feed ranked: category={request.category or 'home'} "
                    f"results={total_results} errors={len(errors)} ({response_time}ms)")

        return FeedResponse(
            articles=ordered,
            total_results=total_results,
            last_updated=now,
            response_time_ms=response_time,
            errors=errors,
            stats=stats,
        )
