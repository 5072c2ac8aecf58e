"""
Main CLI for the feed ranking service
"""

import argparse
import json
import logging
import os
import sys
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

from core.config import ConfigurationError, DiversificationConfig
from ranking_api import FeedRankingAPI, FeedRequest
from ranking_service.explainability import ExplainabilityEngine, get_diversification_stats


def _init_logging():
    """Initialize logging from LOG_LEVEL / LOG_FILE"""
    level_name = os.getenv("LOG_LEVEL", "INFO").upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        level = logging.INFO

    handlers = [logging.StreamHandler(sys.stderr)]
    log_file = os.getenv("LOG_FILE")
    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding='utf-8'))

    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers,
    )


logger = logging.getLogger(__name__)


def _load_articles(path):
    """Read a JSON list of articles (or an {"articles": [...]} payload)"""
    with open(path, 'r', encoding='utf-8') as f:
        payload = json.load(f)
    if isinstance(payload, dict):
        payload = payload.get('articles', [])
    return payload


def _cmd_rank(api, args):
    raw = _load_articles(args.input)
    response = api.rank_feed(FeedRequest(
        articles=raw,
        category=args.category,
        limit=args.limit,
        debug=args.debug,
    ))
    print(json.dumps(response.to_dict(), indent=2, ensure_ascii=False))

    if args.explain and not args.category:
        articles, _ = api.parse_articles(raw)
        guaranteed, ranked = api.diversifier.explain(articles, now=response.last_updated)
        explainer = ExplainabilityEngine()
        for article in guaranteed:
            print(f"Article {article.id}\n  Guaranteed for category {article.category}", file=sys.stderr)
        for explanation in explainer.bulk_explain(ranked, now=response.last_updated):
            print(explainer.format_explanation(explanation), file=sys.stderr)

    return 0 if not response.errors else 1


def _cmd_stats(api, args):
    raw = _load_articles(args.input)
    articles, errors = api.parse_articles(raw)
    ordered = api.diversifier.diversify(articles)
    stats = get_diversification_stats(ordered[:args.top])
    print(json.dumps(stats.to_dict(), indent=2, ensure_ascii=False))
    return 0 if not errors else 1


def main(argv=None):
    _init_logging()

    ap = argparse.ArgumentParser("Feed diversification and ranking")
    sub = ap.add_subparsers(dest="cmd", required=True)

    p_rank = sub.add_parser("rank", help="Order an article pool for display")
    p_rank.add_argument("--input", required=True, help="JSON file with articles")
    p_rank.add_argument("--category", help="Category slug (chronological category feed)")
    p_rank.add_argument("--limit", type=int, help="Maximum number of articles to return")
    p_rank.add_argument("--debug", action="store_true", help="Include diversification stats")
    p_rank.add_argument("--explain", action="store_true", help="Explain remainder scores on stderr")

    p_stats = sub.add_parser("stats", help="Diversification stats of the ranked feed")
    p_stats.add_argument("--input", required=True, help="JSON file with articles")
    p_stats.add_argument("--top", type=int, default=20, help="Size of the feed slice to analyze")

    sub.add_parser("config", help="Print the validated configuration")

    args = ap.parse_args(argv)

    try:
        config = DiversificationConfig.from_env()
    except ConfigurationError as exc:
        logger.error(f"Configuration error: {exc}")
        return 2

    if args.cmd == "config":
        print(json.dumps(config.to_dict(), indent=2))
        return 0

    api = FeedRankingAPI(config)

    if args.cmd == "rank":
        return _cmd_rank(api, args)
    if args.cmd == "stats":
        return _cmd_stats(api, args)

    return 1


if __name__ == "__main__":
    sys.exit(main())
