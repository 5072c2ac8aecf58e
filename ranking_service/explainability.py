"""
Explainability Engine
Diversification statistics and transparent explanations for feed ordering
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

import numpy as np

from utils.dates import hours_between, utc_now

from .models import Article, ScoredArticle

logger = logging.getLogger(__name__)


@dataclass
class TopSource:
    name: str = ''
    count: int = 0
    percentage: float = 0.0


@dataclass
class DiversificationStats:
    """Composition of a slice of the feed"""
    total_articles: int
    category_counts: Dict[str, int] = field(default_factory=dict)
    source_counts: Dict[str, int] = field(default_factory=dict)
    top_source: TopSource = field(default_factory=TopSource)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'totalArticles': self.total_articles,
            'categoryCounts': dict(self.category_counts),
            'sourceCounts': dict(self.source_counts),
            'topSource': {
                'name': self.top_source.name,
                'count': self.top_source.count,
                'percentage': round(self.top_source.percentage, 1),
            },
        }


def get_diversification_stats(articles: Sequence[Article]) -> DiversificationStats:
    """Category/source counts and the most frequent source of a slice"""
    category_counts: Dict[str, int] = {}
    source_counts: Dict[str, int] = {}

    for article in articles:
        category_counts[article.category] = category_counts.get(article.category, 0) + 1
        name = article.display_source
        source_counts[name] = source_counts.get(name, 0) + 1

    top_source = TopSource()
    for name, count in source_counts.items():
        if count > top_source.count:
            top_source = TopSource(name=name, count=count,
                                   percentage=count / len(articles) * 100)

    return DiversificationStats(
        total_articles=len(articles),
        category_counts=category_counts,
        source_counts=source_counts,
        top_source=top_source,
    )


def log_diversification_stats(stats: DiversificationStats,
                              log: Optional[logging.Logger] = None) -> None:
    log = log or logger
    log.info(f"Content diversification stats (first {stats.total_articles} articles)")
    log.info(f"Category distribution: {stats.category_counts}")
    log.info(f"Source distribution: {stats.source_counts}")
    top = stats.top_source
    log.info(f"Top source: {top.name} ({top.count} articles, {top.percentage:.1f}%)")


def summarize_scores(scored_articles: Sequence[ScoredArticle]) -> Dict[str, float]:
    """Distribution of composite scores"""
    if not scored_articles:
        return {'count': 0, 'mean': 0.0, 'min': 0.0, 'max': 0.0, 'p50': 0.0, 'p90': 0.0}

    scores = np.array([s.score for s in scored_articles], dtype=np.float64)
    return {
        'count': int(scores.size),
        'mean': round(float(np.mean(scores)), 4),
        'min': round(float(np.min(scores)), 4),
        'max': round(float(np.max(scores)), 4),
        'p50': round(float(np.percentile(scores, 50)), 4),
        'p90': round(float(np.percentile(scores, 90)), 4),
    }


@dataclass
class ExplanationConfig:
    """Configuration for explanation generation"""
    show_score_breakdown: bool = True
    show_ranking_factors: bool = True


class ExplainabilityEngine:
    """Engine for generating transparent ranking explanations"""

    def __init__(self, config: Optional[ExplanationConfig] = None):
        self.config = config or ExplanationConfig()

    def explain_freshness_score(self, published_at: Optional[datetime],
                                now: Optional[datetime] = None) -> str:
        """Generate explanation for recency"""
        if not published_at:
            return "No publication date available"

        age_hours = hours_between(published_at, now or utc_now())

        if age_hours < 1:
            return "Just published (< 1 hour ago)"
        elif age_hours < 24:
            return f"Recent ({int(age_hours)} hours ago)"
        elif age_hours < 168:  # 1 week
            days = int(age_hours / 24)
            return f"Published {days} day{'s' if days > 1 else ''} ago"
        else:
            weeks = int(age_hours / 168)
            return f"Published {weeks} week{'s' if weeks > 1 else ''} ago"

    def explain_quality_score(self, article: Article) -> List[str]:
        signals = []
        if article.has_image:
            signals.append("Has image")
        if article.content_length > 200:
            signals.append("Substantial summary")
        elif article.content_length > 100:
            signals.append("Short summary")
        if article.has_author:
            signals.append("Credited author")
        if 40 <= article.title_length <= 120:
            signals.append("Well-sized headline")
        return signals

    def explain_diversity_score(self, source: str, diversity_score: float) -> str:
        if diversity_score >= 0.8:
            return f"Underrepresented source ({source})"
        elif diversity_score >= 0.5:
            return f"Moderately represented source ({source})"
        elif diversity_score >= 0.2:
            return f"Frequent source ({source})"
        else:
            return f"Dominant or repeated source ({source})"

    def explain_category_score(self, category: str, category_score: float) -> str:
        if category_score > 0.5:
            return f"Category below its share ({category})"
        elif category_score < 0.5:
            return f"Category above its share ({category})"
        return f"Category at its expected share ({category})"

    def generate_explanation(self, scored: ScoredArticle,
                             now: Optional[datetime] = None) -> Dict[str, Any]:
        """Generate explanation for a scored article"""
        article = scored.article
        breakdown = scored.breakdown
        explanation: Dict[str, Any] = {
            'result_id': article.id,
            'score_breakdown': {},
            'ranking_factors': [],
            'freshness_reason': self.explain_freshness_score(article.published_at, now),
            'quality_signals': self.explain_quality_score(article),
            'source_reason': self.explain_diversity_score(article.source, breakdown.diversity),
            'category_reason': self.explain_category_score(article.category, breakdown.category),
        }

        if self.config.show_score_breakdown:
            explanation['score_breakdown'] = scored.to_dict()['scores']

        if self.config.show_ranking_factors:
            factors = []

            if breakdown.recency > 0.7:
                factors.append("Recent publication")
            elif breakdown.recency > 0.3:
                factors.append("Moderately recent")

            if breakdown.diversity > 0.7:
                factors.append("Adds source variety")
            elif breakdown.diversity < 0.3:
                factors.append("Source already well covered")

            if breakdown.quality >= 0.7:
                factors.append("Rich content")

            if breakdown.category > 0.5:
                factors.append("Balances category mix")

            explanation['ranking_factors'] = factors

        return explanation

    def format_explanation(self, explanation: Dict[str, Any]) -> str:
        """Plain-text rendering of an explanation"""
        lines = [f"Article {explanation['result_id']}"]

        scores = explanation.get('score_breakdown', {})
        if scores:
            lines.append(f"  Overall score: {scores.get('final', 0):.3f}")
            lines.append(
                f"  recency={scores['recency']:.3f} diversity={scores['diversity']:.3f} "
                f"quality={scores['quality']:.3f} category={scores['category']:.3f}"
            )

        for factor in explanation.get('ranking_factors', []):
            lines.append(f"  - {factor}")

        lines.append(f"  Timing: {explanation['freshness_reason']}")
        lines.append(f"  Source: {explanation['source_reason']}")
        lines.append(f"  Category: {explanation['category_reason']}")
        if explanation.get('quality_signals'):
            lines.append(f"  Quality: {', '.join(explanation['quality_signals'])}")

        return "\n".join(lines)

    def bulk_explain(self, scored_articles: Sequence[ScoredArticle],
                     now: Optional[datetime] = None) -> List[Dict[str, Any]]:
        """Generate explanations for multiple scored articles"""
        return [self.generate_explanation(scored, now) for scored in scored_articles]
