"""
Feed Scoring Engine
Implements weighted scoring: 0.35·S_recency + 0.35·S_diversity + 0.20·S_quality + 0.10·S_category
"""

import math
import logging
from dataclasses import replace
from datetime import datetime
from typing import List, Optional, Sequence

from core.config import DiversificationConfig, ScoringWeights
from utils.dates import hours_between

from .models import Article, DistributionSnapshot, ScoreBreakdown, ScoredArticle

logger = logging.getLogger(__name__)


def _clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


def calculate_recency_score(published_at: datetime, now: datetime,
                            half_life_hours: float = 24.0) -> float:
    """
    Exponential decay: e^(-hours / half_life).
    Future timestamps (clock skew) clamp to 1.
    """
    hours_since = hours_between(published_at, now)
    if hours_since <= 0:
        return 1.0
    score = math.exp(-hours_since / half_life_hours)
    return _clamp(score)


def calculate_quality_score(article: Article) -> float:
    """Additive content quality heuristic, capped at 1"""
    score = 0.0

    if article.has_image:
        score += 0.3

    content_length = article.content_length
    if content_length > 200:
        score += 0.4
    elif content_length > 100:
        score += 0.2

    if article.has_author:
        score += 0.2

    if 40 <= article.title_length <= 120:
        score += 0.1

    return min(1.0, score)


def calculate_source_diversity_score(source: str,
                                     distribution: DistributionSnapshot,
                                     total_articles: int,
                                     consecutive_window: int = 2,
                                     consecutive_penalty: float = 0.6,
                                     midpoint: float = 0.3,
                                     steepness: float = 10.0) -> float:
    """
    Smooth over-representation penalty times a consecutive-repeat penalty.
    Share 0% = ~1.0, 25% = ~0.7, 50% = ~0.3, 75%+ = ~0.1
    """
    source_count = distribution.source_count(source)
    source_share = source_count / total_articles if total_articles > 0 else 0.0

    overrepresentation = 1.0 / (1.0 + math.exp(steepness * (source_share - midpoint)))

    repeats = sum(1 for s in distribution.recent_sources(consecutive_window) if s == source)
    consecutive = consecutive_penalty ** repeats

    return overrepresentation * consecutive


def calculate_category_balance_score(category: str,
                                     distribution: DistributionSnapshot,
                                     total_articles: int,
                                     num_categories: int,
                                     gain: float = 4.0) -> float:
    """Above 0.5 for categories under their equal share, below 0.5 over it"""
    expected_share = 1.0 / num_categories if num_categories > 0 else 0.0
    category_count = distribution.category_count(category)
    actual_share = category_count / total_articles if total_articles > 0 else 0.0

    return _clamp(0.5 + gain * (expected_share - actual_share))


class CompositeScorer:
    """Combines the four feature scores and orders the remaining pool"""

    def __init__(self, config: Optional[DiversificationConfig] = None,
                 weights: Optional[ScoringWeights] = None,
                 num_categories: int = 8):
        self.config = config or DiversificationConfig()
        if weights is not None:
            self.config = replace(self.config, weights=weights)
        self.weights = self.config.weights
        self.num_categories = num_categories

    def recency(self, article: Article, now: datetime) -> float:
        published_at = article.published_at or now
        return calculate_recency_score(published_at, now, self.config.recency_half_life_hours)

    def diversity(self, article: Article, distribution: DistributionSnapshot,
                  total_articles: int) -> float:
        return calculate_source_diversity_score(
            article.source,
            distribution,
            total_articles,
            consecutive_window=self.config.consecutive_window,
            consecutive_penalty=self.config.consecutive_penalty,
            midpoint=self.config.overrepresentation_midpoint,
            steepness=self.config.overrepresentation_steepness,
        )

    def category_balance(self, article: Article, distribution: DistributionSnapshot,
                         total_articles: int) -> float:
        return calculate_category_balance_score(
            article.category,
            distribution,
            total_articles,
            self.num_categories,
            gain=self.config.category_balance_gain,
        )

    def combine(self, breakdown: ScoreBreakdown) -> float:
        return (
            breakdown.recency * self.weights.recency +
            breakdown.diversity * self.weights.diversity +
            breakdown.quality * self.weights.quality +
            breakdown.category * self.weights.category
        )

    def score_article(self, article: Article, distribution: DistributionSnapshot,
                      total_articles: int, now: datetime,
                      recency: Optional[float] = None,
                      quality: Optional[float] = None) -> ScoredArticle:
        """Score one article against a distribution snapshot"""
        breakdown = ScoreBreakdown(
            recency=self.recency(article, now) if recency is None else recency,
            diversity=self.diversity(article, distribution, total_articles),
            quality=calculate_quality_score(article) if quality is None else quality,
            category=self.category_balance(article, distribution, total_articles),
        )
        return ScoredArticle(article=article, score=self.combine(breakdown), breakdown=breakdown)

    def score_articles(self, articles: Sequence[Article],
                       distribution: DistributionSnapshot,
                       now: datetime) -> List[ScoredArticle]:
        """
        Score every article against the same static snapshot. The share
        denominator grows with each article considered.
        """
        base_total = distribution.total
        scored = [
            self.score_article(article, distribution, base_total + i, now)
            for i, article in enumerate(articles)
        ]
        logger.debug(f"Scored {len(scored)} articles against {base_total} placed articles")
        return scored

    @staticmethod
    def rank(scored_articles: Sequence[ScoredArticle]) -> List[ScoredArticle]:
        """Descending composite score; equal scores keep input order"""
        return sorted(scored_articles, key=lambda s: s.score, reverse=True)

    def rank_progressively(self, articles: Sequence[Article],
                           distribution: DistributionSnapshot,
                           now: datetime) -> List[ScoredArticle]:
        """
        Greedy ordering: each placement updates the snapshot the remaining
        candidates are scored against. O(n^2).
        """
        working = distribution.copy()
        candidates = list(articles)
        recency = {id(a): self.recency(a, now) for a in candidates}
        quality = {id(a): calculate_quality_score(a) for a in candidates}

        ranked: List[ScoredArticle] = []
        while candidates:
            total = working.total
            scored = [
                self.score_article(a, working, total, now,
                                   recency=recency[id(a)], quality=quality[id(a)])
                for a in candidates
            ]
            best_idx = max(range(len(scored)), key=lambda i: scored[i].score)
            best = scored[best_idx]
            ranked.append(best)
            working.record(best.article)
            candidates.pop(best_idx)

        logger.debug(f"Progressive ranking placed {len(ranked)} articles")
        return ranked
