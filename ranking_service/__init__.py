"""
Feed Ranking Service for RSS News System
Implements category coverage, composite scoring, diversification and explainability
"""

from .models import Article, DistributionSnapshot, RelatedArticle, ScoreBreakdown, ScoredArticle
from .categories import CategoryInfo, get_all_categories
from .scorer import CompositeScorer
from .diversification import ContentDiversifier, ensure_category_representation, interleave_articles
from .explainability import ExplainabilityEngine, get_diversification_stats

__version__ = "1.0.0"
__all__ = [
    "Article",
    "CategoryInfo",
    "CompositeScorer",
    "ContentDiversifier",
    "DistributionSnapshot",
    "ExplainabilityEngine",
    "RelatedArticle",
    "ScoreBreakdown",
    "ScoredArticle",
    "ensure_category_representation",
    "get_all_categories",
    "get_diversification_stats",
    "interleave_articles",
]
