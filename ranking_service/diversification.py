"""
Content Diversification
Orders a pool of articles so that every category is represented and no
single source dominates, without ever dropping an article
"""

import logging
from datetime import datetime
from typing import List, Optional, Sequence, Tuple

from core.config import DiversificationConfig
from utils.dates import EPOCH, ensure_utc, utc_now

from .categories import CategoryInfo, get_all_categories
from .explainability import (
    get_diversification_stats,
    log_diversification_stats,
    summarize_scores,
)
from .models import Article, DistributionSnapshot, ScoredArticle
from .scorer import CompositeScorer

logger = logging.getLogger(__name__)


def _publish_sort_key(article: Article) -> datetime:
    return article.published_at or EPOCH


def sort_by_recency(articles: Sequence[Article]) -> List[Article]:
    """Newest first, stable for equal timestamps"""
    return sorted(articles, key=_publish_sort_key, reverse=True)


def ensure_category_representation(articles: Sequence[Article],
                                   categories: Sequence[CategoryInfo],
                                   min_per_category: int = 1
                                   ) -> Tuple[List[Article], List[Article]]:
    """
    Pick the most recent `min_per_category` articles of every category.

    Returns (guaranteed, remaining); remaining keeps the pool order and
    excludes guaranteed articles by id.
    """
    guaranteed: List[Article] = []
    used_ids = set()

    for category in categories:
        category_articles = sort_by_recency(
            [a for a in articles if a.category == category.slug]
        )
        for article in category_articles[:min_per_category]:
            guaranteed.append(article)
            used_ids.add(article.id)

    remaining = [a for a in articles if a.id not in used_ids]
    return guaranteed, remaining


def interleave_articles(guaranteed: Sequence[Article],
                        ranked: Sequence[Article]) -> List[Article]:
    """Guaranteed articles first, then ranked ones not already included"""
    result: List[Article] = []
    used_ids = set()

    for article in guaranteed:
        result.append(article)
        used_ids.add(article.id)

    for article in ranked:
        if article.id not in used_ids:
            result.append(article)
            used_ids.add(article.id)

    return result


class ContentDiversifier:
    """Category coverage + composite ranking + interleaving"""

    def __init__(self, config: Optional[DiversificationConfig] = None,
                 categories: Optional[Sequence[CategoryInfo]] = None):
        self.config = config or DiversificationConfig()
        self.categories = list(categories) if categories is not None else get_all_categories()
        self.scorer = CompositeScorer(config=self.config, num_categories=len(self.categories))

    def score_remaining(self, remaining: Sequence[Article],
                        snapshot: DistributionSnapshot,
                        now: datetime) -> List[ScoredArticle]:
        """Remainder scores, best first; progressive_rescoring caps same-source runs at two"""
        if self.config.progressive_rescoring:
            return self.scorer.rank_progressively(remaining, snapshot, now)
        return self.scorer.rank(self.scorer.score_articles(remaining, snapshot, now))

    def diversify(self, articles: Sequence[Article], debug: bool = False,
                  now: Optional[datetime] = None) -> List[Article]:
        """Reorder the pool for display. Output is a permutation of the input."""
        if not articles:
            return []

        now = ensure_utc(now) if now is not None else utc_now()

        # Phase 1: Ensure category representation
        guaranteed, remaining = ensure_category_representation(
            articles, self.categories, self.config.min_articles_per_category
        )

        # Phase 2: Score the remainder against the guaranteed distribution
        snapshot = DistributionSnapshot.from_articles(guaranteed)
        ranked = self.score_remaining(remaining, snapshot, now)

        # Phase 3: Guaranteed by recency, then ranked remainder
        result = interleave_articles(
            sort_by_recency(guaranteed),
            [scored.article for scored in ranked],
        )

        logger.info(f"Diversified {len(articles)} articles: "
                    f"{len(guaranteed)} guaranteed, {len(ranked)} ranked")

        if debug or self.config.debug_mode:
            stats = get_diversification_stats(result[:self.config.debug_stats_window])
            log_diversification_stats(stats, logger)
            logger.info(f"Remainder score summary: {summarize_scores(ranked)}")

        return result

    def explain(self, articles: Sequence[Article],
                now: Optional[datetime] = None) -> Tuple[List[Article], List[ScoredArticle]]:
        """Guaranteed articles and the scored remainder, for diagnostics"""
        now = ensure_utc(now) if now is not None else utc_now()
        guaranteed, remaining = ensure_category_representation(
            articles, self.categories, self.config.min_articles_per_category
        )
        snapshot = DistributionSnapshot.from_articles(guaranteed)
        return sort_by_recency(guaranteed), self.score_remaining(remaining, snapshot, now)
