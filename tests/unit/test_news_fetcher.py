# tests/unit/test_news_fetcher.py

import unittest
from datetime import datetime, timezone
from unittest.mock import patch

from services.news_fetcher import DEFAULT_CATEGORY, NewsFetcher


def _item(headline="Bank raises dividend", summary="Summary text", ts=1751380200, **extra):
    item = {
        "headline": headline,
        "summary": summary,
        "source": "Reuters",
        "url": f"https://example.com/{headline.replace(' ', '-')}",
        "image": "https://example.com/img.png",
        "datetime": ts,
        "category": "company",
    }
    item.update(extra)
    return item


class TestFetchCompanyNews(unittest.TestCase):
    @patch("services.news_fetcher.finnhub_provider.get_company_news")
    def test_maps_finnhub_items(self, mock_news):
        mock_news.return_value = [_item()]

        articles = NewsFetcher().fetch_company_news("JPM", "2025-06-01", "2025-07-01")

        self.assertEqual(len(articles), 1)
        article = articles[0]
        self.assertEqual(article.title, "Bank raises dividend")
        self.assertEqual(article.content, "Summary text")
        self.assertEqual(article.excerpt, "Summary text")
        self.assertEqual(article.relatedTickers, ["JPM"])
        self.assertEqual(article.category, "company")
        self.assertEqual(article.publishedAt, datetime.fromtimestamp(1751380200, tz=timezone.utc))
        mock_news.assert_called_once_with("JPM", "2025-06-01", "2025-07-01")

    @patch("services.news_fetcher.finnhub_provider.get_company_news")
    def test_long_summary_is_truncated_in_excerpt(self, mock_news):
        summary = "x" * 250
        mock_news.return_value = [_item(summary=summary)]

        article = NewsFetcher().fetch_company_news("JPM", "a", "b")[0]

        self.assertEqual(article.excerpt, "x" * 200 + "...")
        self.assertEqual(article.content, summary)

    @patch("services.news_fetcher.finnhub_provider.get_company_news")
    def test_items_without_headline_or_summary_are_dropped(self, mock_news):
        mock_news.return_value = [_item(headline=""), _item(summary=None), _item(headline="Kept"), "junk"]
        articles = NewsFetcher().fetch_company_news("BAC", "a", "b")
        self.assertEqual([a.title for a in articles], ["Kept"])

    @patch("services.news_fetcher.finnhub_provider.get_company_news")
    def test_empty_image_and_category_defaults(self, mock_news):
        mock_news.return_value = [_item(image="", category="")]
        article = NewsFetcher().fetch_company_news("BAC", "a", "b")[0]
        self.assertIsNone(article.imageUrl)
        self.assertEqual(article.category, DEFAULT_CATEGORY)

    @patch("services.news_fetcher.finnhub_provider.get_company_news", return_value=None)
    def test_provider_failure_yields_empty_list(self, mock_news):
        self.assertEqual(NewsFetcher().fetch_company_news("BAC", "a", "b"), [])

    @patch("services.news_fetcher.finnhub_provider.get_company_news")
    def test_malformed_items_are_dropped_not_raised(self, mock_news):
        mock_news.return_value = [
            _item(headline="Kept"),
            _item(headline="Numeric url", url=12345),
            _item(headline="Numeric source", source=7),
            {**_item(headline="List headline"), "headline": ["not", "a", "string"]},
            _item(headline="Bad time", ts="yesterday"),
        ]

        articles = NewsFetcher().fetch_company_news("JPM", "a", "b")

        self.assertEqual([a.title for a in articles], ["Kept"])

    @patch("services.news_fetcher.finnhub_provider.get_company_news")
    def test_malformed_item_does_not_sink_other_symbols(self, mock_news):
        def fake_news(symbol, from_date, to_date):
            if symbol == "BAC":
                return [_item(headline="BAC bad", url={"href": "x"})]
            return [_item(headline=f"{symbol} good")]

        mock_news.side_effect = fake_news

        articles = NewsFetcher().fetch_multiple_company_news(["JPM", "BAC"])

        self.assertEqual([a.title for a in articles], ["JPM good"])


class TestFetchMultipleCompanyNews(unittest.TestCase):
    @patch("services.news_fetcher.finnhub_provider.get_company_news")
    def test_fans_out_and_sorts_newest_first(self, mock_news):
        def fake_news(symbol, from_date, to_date):
            base = {"JPM": 1000, "BAC": 2000, "WFC": 1500}[symbol]
            return [_item(headline=f"{symbol} {i}", ts=base + i) for i in range(2)]

        mock_news.side_effect = fake_news

        articles = NewsFetcher(max_workers=3).fetch_multiple_company_news(["JPM", "BAC", "WFC"], lookback_days=30)

        self.assertEqual(len(articles), 6)
        self.assertEqual(articles[0].title, "BAC 1")
        self.assertEqual(articles[-1].title, "JPM 0")
        stamps = [a.publishedAt for a in articles]
        self.assertEqual(stamps, sorted(stamps, reverse=True))
        self.assertEqual(mock_news.call_count, 3)

    @patch("services.news_fetcher.finnhub_provider.get_company_news")
    def test_window_is_lookback_days(self, mock_news):
        mock_news.return_value = []
        NewsFetcher().fetch_multiple_company_news(["JPM"], lookback_days=30)

        _, from_date, to_date = mock_news.call_args[0]
        delta = datetime.fromisoformat(to_date) - datetime.fromisoformat(from_date)
        self.assertEqual(delta.days, 30)

    def test_no_symbols(self):
        self.assertEqual(NewsFetcher().fetch_multiple_company_news([]), [])
