"""
Unit tests for ranking_service/scorer.py
Tests feature scorers, weight validation and composite ranking
"""

import math
from collections import Counter
from datetime import timedelta

import pytest

from core.config import DiversificationConfig, InvalidWeightsError, ScoringWeights
from ranking_service.models import DistributionSnapshot, ScoreBreakdown, ScoredArticle
from ranking_service.scorer import (
    CompositeScorer,
    calculate_category_balance_score,
    calculate_quality_score,
    calculate_recency_score,
    calculate_source_diversity_score,
)
from tests.fixtures.sample_article import FIXED_NOW, make_article, rich_article


def _sigmoid_penalty(share):
    return 1 / (1 + math.exp(10 * (share - 0.3)))


class TestRecencyScore:
    """Test exponential recency decay"""

    def test_just_published_scores_one(self):
        assert calculate_recency_score(FIXED_NOW, FIXED_NOW) == pytest.approx(1.0)

    def test_one_half_life_old(self):
        published = FIXED_NOW - timedelta(hours=24)
        assert calculate_recency_score(published, FIXED_NOW) == pytest.approx(math.exp(-1))

    def test_two_days_old(self):
        published = FIXED_NOW - timedelta(hours=48)
        assert calculate_recency_score(published, FIXED_NOW) == pytest.approx(math.exp(-2))

    def test_future_timestamp_clamps_to_one(self):
        published = FIXED_NOW + timedelta(hours=3)
        assert calculate_recency_score(published, FIXED_NOW) == 1.0

    def test_custom_half_life(self):
        published = FIXED_NOW - timedelta(hours=6)
        score = calculate_recency_score(published, FIXED_NOW, half_life_hours=6)
        assert score == pytest.approx(math.exp(-1))

    def test_very_old_article_stays_non_negative(self):
        published = FIXED_NOW - timedelta(days=365)
        assert 0.0 <= calculate_recency_score(published, FIXED_NOW) < 1e-6

    def test_far_future_timestamp_clamps_without_overflow(self):
        published = FIXED_NOW + timedelta(days=800)
        assert calculate_recency_score(published, FIXED_NOW) == 1.0


class TestQualityScore:
    """Test additive quality heuristic"""

    def test_no_signals(self):
        article = make_article('q1', title='Short')
        assert calculate_quality_score(article) == 0.0

    def test_all_signals_capped_at_one(self):
        assert calculate_quality_score(rich_article('q2')) == pytest.approx(1.0)
        assert calculate_quality_score(rich_article('q3')) <= 1.0

    def test_image_only(self):
        article = make_article('q4', title='Short', image_url='https://example.com/a.jpg')
        assert calculate_quality_score(article) == pytest.approx(0.3)

    def test_medium_content(self):
        article = make_article('q5', title='Short', content_snippet='x' * 150)
        assert calculate_quality_score(article) == pytest.approx(0.2)

    def test_content_length_boundaries(self):
        assert calculate_quality_score(
            make_article('q6', title='Short', content_snippet='x' * 200)
        ) == pytest.approx(0.2)
        assert calculate_quality_score(
            make_article('q7', title='Short', content_snippet='x' * 201)
        ) == pytest.approx(0.4)
        assert calculate_quality_score(
            make_article('q8', title='Short', content_snippet='x' * 100)
        ) == 0.0

    def test_author_only(self):
        article = make_article('q9', title='Short', author='A. Writer')
        assert calculate_quality_score(article) == pytest.approx(0.2)

    def test_title_length_window(self):
        assert calculate_quality_score(make_article('q10', title='t' * 40)) == pytest.approx(0.1)
        assert calculate_quality_score(make_article('q11', title='t' * 120)) == pytest.approx(0.1)
        assert calculate_quality_score(make_article('q12', title='t' * 39)) == 0.0
        assert calculate_quality_score(make_article('q13', title='t' * 121)) == 0.0

    def test_missing_signals_contribute_zero(self):
        article = make_article('q14', title='', author=None, image_url=None, content_snippet=None)
        assert calculate_quality_score(article) == 0.0


class TestSourceDiversityScore:
    """Test over-representation and consecutive penalties"""

    def test_empty_distribution(self):
        score = calculate_source_diversity_score('npr', DistributionSnapshot(), 0)
        assert score == pytest.approx(_sigmoid_penalty(0.0))
        assert score > 0.95

    def test_quarter_share(self):
        snapshot = DistributionSnapshot(source_counts=Counter({'npr': 1, 'bbc': 3}))
        score = calculate_source_diversity_score('npr', snapshot, 4)
        assert score == pytest.approx(_sigmoid_penalty(0.25))

    def test_heavy_share_is_suppressed(self):
        snapshot = DistributionSnapshot(source_counts=Counter({'espn': 3, 'bbc': 1}))
        score = calculate_source_diversity_score('espn', snapshot, 4)
        assert score < 0.1

    def test_one_recent_repeat(self):
        articles = [
            make_article('d1', source='a'),
            make_article('d2', source='b'),
            make_article('d3', source='c'),
            make_article('d4', source='d'),
        ]
        snapshot = DistributionSnapshot.from_articles(articles)

        repeated = calculate_source_diversity_score('d', snapshot, 4)
        not_repeated = calculate_source_diversity_score('a', snapshot, 4)

        assert repeated / not_repeated == pytest.approx(0.6)

    def test_two_recent_repeats(self):
        articles = [
            make_article('d5', source='b'),
            make_article('d6', source='c'),
            make_article('d7', source='a'),
            make_article('d8', source='a'),
        ]
        snapshot = DistributionSnapshot.from_articles(articles)

        score = calculate_source_diversity_score('a', snapshot, 4)
        assert score == pytest.approx(_sigmoid_penalty(0.5) * 0.36)

    def test_never_negative(self):
        snapshot = DistributionSnapshot(
            source_counts=Counter({'a': 10}),
            source_history=['a', 'a'],
        )
        assert calculate_source_diversity_score('a', snapshot, 10) > 0.0

    def test_over_represented_source_scores_lower(self):
        snapshot = DistributionSnapshot(source_counts=Counter({'A': 100, 'B': 60}))

        score_a = calculate_source_diversity_score('A', snapshot, 160)
        score_b = calculate_source_diversity_score('B', snapshot, 160)

        assert score_a < score_b


class TestCategoryBalanceScore:
    """Test category balance bonus"""

    def test_expected_share_is_neutral(self):
        snapshot = DistributionSnapshot(category_counts=Counter({'sports': 1}))
        score = calculate_category_balance_score('sports', snapshot, 8, num_categories=8)
        assert score == pytest.approx(0.5)

    def test_unseen_category_gets_bonus(self):
        snapshot = DistributionSnapshot(category_counts=Counter({'sports': 4}))
        score = calculate_category_balance_score('health', snapshot, 4, num_categories=8)
        assert score == pytest.approx(1.0)

    def test_dominant_category_clamps_to_zero(self):
        snapshot = DistributionSnapshot(category_counts=Counter({'sports': 4}))
        score = calculate_category_balance_score('sports', snapshot, 4, num_categories=8)
        assert score == 0.0

    def test_expected_share_follows_category_count(self):
        snapshot = DistributionSnapshot(category_counts=Counter({'sports': 1}))
        score = calculate_category_balance_score('sports', snapshot, 4, num_categories=4)
        assert score == pytest.approx(0.5)

    def test_no_articles_yet(self):
        score = calculate_category_balance_score('sports', DistributionSnapshot(), 0, num_categories=8)
        assert score == pytest.approx(1.0)


class TestScoringWeights:
    """Test weight-sum configuration contract"""

    def test_default_weights_sum_to_one(self):
        weights = ScoringWeights()
        assert weights.total == pytest.approx(1.0)
        assert weights.to_dict() == {
            'recency': 0.35, 'diversity': 0.35, 'quality': 0.20, 'category': 0.10,
        }

    def test_weights_summing_to_point_nine_fail_fast(self):
        with pytest.raises(InvalidWeightsError):
            ScoringWeights(recency=0.3, diversity=0.3, quality=0.2, category=0.1)

    def test_ranker_with_bad_weights_never_scores(self):
        with pytest.raises(InvalidWeightsError):
            CompositeScorer(weights=ScoringWeights(recency=0.45, diversity=0.35, quality=0.2, category=0.1))

    def test_negative_weight_rejected(self):
        with pytest.raises(InvalidWeightsError):
            ScoringWeights(recency=1.2, diversity=-0.2, quality=0.0, category=0.0)

    def test_invalid_weights_are_configuration_errors(self):
        with pytest.raises(ValueError):
            ScoringWeights(recency=0.5, diversity=0.5, quality=0.5, category=0.5)


class TestCompositeScorer:
    """Test composite scoring and ranking"""

    def setup_method(self):
        """Setup test fixtures"""
        self.scorer = CompositeScorer()

    def test_combine_uses_default_weights(self):
        breakdown = ScoreBreakdown(recency=1.0, diversity=0.5, quality=0.2, category=0.5)
        expected = 0.35 * 1.0 + 0.35 * 0.5 + 0.20 * 0.2 + 0.10 * 0.5
        assert self.scorer.combine(breakdown) == pytest.approx(expected)

    def test_score_stays_in_unit_interval(self):
        article = rich_article('c1')
        scored = self.scorer.score_article(article, DistributionSnapshot(), 0, FIXED_NOW)
        assert 0.0 <= scored.score <= 1.0
        assert scored.article is article

    def test_custom_weights(self):
        scorer = CompositeScorer(weights=ScoringWeights(recency=1.0, diversity=0.0, quality=0.0, category=0.0))
        article = make_article('c2', hours_ago=24)
        scored = scorer.score_article(article, DistributionSnapshot(), 0, FIXED_NOW)
        assert scored.score == pytest.approx(math.exp(-1))

    def test_missing_date_scores_as_now(self):
        article = make_article('c3', pub_date=None)
        scored = self.scorer.score_article(article, DistributionSnapshot(), 0, FIXED_NOW)
        assert scored.breakdown.recency == pytest.approx(1.0)

    def test_iso_date_fallback(self):
        article = make_article('c4', pub_date=None, iso_date=FIXED_NOW - timedelta(hours=24))
        scored = self.scorer.score_article(article, DistributionSnapshot(), 0, FIXED_NOW)
        assert scored.breakdown.recency == pytest.approx(math.exp(-1))

    def test_recency_monotonicity(self):
        snapshot = DistributionSnapshot.from_articles([make_article('g1', source='bbc')])
        newer = make_article('c5', source='npr', hours_ago=1)
        older = make_article('c6', source='npr', hours_ago=5)

        newer_score = self.scorer.score_article(newer, snapshot, 1, FIXED_NOW).score
        older_score = self.scorer.score_article(older, snapshot, 1, FIXED_NOW).score

        assert newer_score >= older_score

    def test_share_denominator_grows_with_each_article(self):
        snapshot = DistributionSnapshot.from_articles([make_article('g2', source='espn', category='sports')])
        remaining = [
            make_article('c7', source='espn', category='sports'),
            make_article('c8', source='espn', category='sports'),
        ]

        scored = self.scorer.score_articles(remaining, snapshot, FIXED_NOW)

        assert scored[0].breakdown.diversity == pytest.approx(_sigmoid_penalty(1.0) * 0.6)
        assert scored[1].breakdown.diversity == pytest.approx(_sigmoid_penalty(0.5) * 0.6)

    def test_snapshot_is_not_updated_while_scoring(self):
        snapshot = DistributionSnapshot.from_articles([make_article('g3', source='bbc')])
        remaining = [make_article(f'c{i}', source='npr') for i in range(10, 15)]

        self.scorer.score_articles(remaining, snapshot, FIXED_NOW)

        assert snapshot.total == 1
        assert snapshot.source_history == ['bbc']

    def test_rank_descending_and_stable(self):
        breakdown = ScoreBreakdown(recency=0, diversity=0, quality=0, category=0)
        first = ScoredArticle(article=make_article('r1'), score=0.5, breakdown=breakdown)
        second = ScoredArticle(article=make_article('r2'), score=0.9, breakdown=breakdown)
        third = ScoredArticle(article=make_article('r3'), score=0.5, breakdown=breakdown)

        ranked = CompositeScorer.rank([first, second, third])

        assert [s.article.id for s in ranked] == ['r2', 'r1', 'r3']

    def test_under_represented_source_ranks_first(self):
        snapshot = DistributionSnapshot.from_articles([
            make_article('g4', source='espn', category='sports'),
            make_article('g5', source='espn', category='business'),
        ])
        remaining = [
            make_article('c20', source='espn', category='health'),
            make_article('c21', source='reuters', category='health'),
        ]

        ranked = self.scorer.rank(self.scorer.score_articles(remaining, snapshot, FIXED_NOW))

        assert [s.article.id for s in ranked] == ['c21', 'c20']

    def test_progressive_ranking_updates_snapshot(self):
        scorer = CompositeScorer(config=DiversificationConfig(progressive_rescoring=True))
        snapshot = DistributionSnapshot.from_articles([make_article('g6', source='a', category='sports')])
        remaining = [make_article(f'p{i}', source='a', category='sports') for i in range(3)]
        remaining += [make_article(f'q{i}', source='b', category='sports') for i in range(3)]

        ranked = scorer.rank_progressively(remaining, snapshot, FIXED_NOW)

        assert [s.article.source for s in ranked] == ['b', 'a', 'b', 'a', 'b', 'a']
        assert snapshot.total == 1
