"""
Known feed categories and category helpers
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from utils.dates import EPOCH

from .models import Article


@dataclass(frozen=True)
class CategoryInfo:
    """Category slug, display name and the feeds that populate it"""
    id: str
    name: str
    slug: str
    description: Optional[str] = None
    feed_urls: List[str] = field(default_factory=list)


CATEGORIES: Dict[str, CategoryInfo] = {
    'us-news': CategoryInfo(
        id='us-news',
        name='U.S. News',
        slug='us-news',
        description='Latest news from across the United States',
        feed_urls=[
            'https://feeds.npr.org/1001/rss.xml',
            'https://rss.nytimes.com/services/xml/rss/nyt/US.xml',
        ],
    ),
    'world-news': CategoryInfo(
        id='world-news',
        name='World News',
        slug='world-news',
        description='International news and global events',
        feed_urls=[
            'https://feeds.bbci.co.uk/news/world/rss.xml',
            'https://rss.nytimes.com/services/xml/rss/nyt/World.xml',
        ],
    ),
    'sports': CategoryInfo(
        id='sports',
        name='Sports',
        slug='sports',
        description='Sports news, scores, and analysis',
        feed_urls=[
            'https://www.espn.com/espn/rss/news',
            'https://rss.nytimes.com/services/xml/rss/nyt/Sports.xml',
        ],
    ),
    'technology': CategoryInfo(
        id='technology',
        name='Technology',
        slug='technology',
        description='Tech news, gadgets, and innovations',
        feed_urls=[
            'https://feeds.arstechnica.com/arstechnica/index',
            'https://rss.nytimes.com/services/xml/rss/nyt/Technology.xml',
        ],
    ),
    'business': CategoryInfo(
        id='business',
        name='Business',
        slug='business',
        description='Business and financial news',
        feed_urls=[
            'https://rss.nytimes.com/services/xml/rss/nyt/Business.xml',
            'https://www.cnbc.com/id/100003114/device/rss/rss.html',
        ],
    ),
    'entertainment': CategoryInfo(
        id='entertainment',
        name='Entertainment',
        slug='entertainment',
        description='Entertainment, movies, music, and culture',
        feed_urls=[
            'https://rss.nytimes.com/services/xml/rss/nyt/Movies.xml',
            'https://www.hollywoodreporter.com/feed/',
        ],
    ),
    'health': CategoryInfo(
        id='health',
        name='Health',
        slug='health',
        description='Health, wellness, and medical news',
        feed_urls=[
            'https://rss.nytimes.com/services/xml/rss/nyt/Health.xml',
            'https://feeds.webmd.com/rss/rss.aspx?RSSSource=RSS_PUBLIC',
        ],
    ),
    'science': CategoryInfo(
        id='science',
        name='Science',
        slug='science',
        description='Scientific discoveries and research',
        feed_urls=[
            'https://rss.nytimes.com/services/xml/rss/nyt/Science.xml',
            'https://www.sciencedaily.com/rss/all.xml',
        ],
    ),
}


def get_all_categories() -> List[CategoryInfo]:
    """All known categories, in display order"""
    return list(CATEGORIES.values())


def get_category_by_slug(slug: str) -> Optional[CategoryInfo]:
    return CATEGORIES.get(slug)


def get_category_name(slug: str) -> str:
    """Display name for a slug (the slug itself when unknown)"""
    category = CATEGORIES.get(slug)
    return category.name if category else slug


def is_valid_category(slug: str) -> bool:
    return slug in CATEGORIES


def filter_articles_by_category(articles: Iterable[Article], category: str) -> List[Article]:
    return [article for article in articles if article.category == category]


def sort_articles_by_date(articles: Iterable[Article]) -> List[Article]:
    """Newest first; undated articles sink to the end in input order"""
    return sorted(
        articles,
        key=lambda a: a.iso_date or a.pub_date or EPOCH,
        reverse=True,
    )


def group_articles_by_source(articles: Iterable[Article]) -> Dict[str, List[Article]]:
    groups: Dict[str, List[Article]] = {}
    for article in articles:
        groups.setdefault(article.source, []).append(article)
    return groups
