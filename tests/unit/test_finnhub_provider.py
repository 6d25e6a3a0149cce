# tests/unit/test_finnhub_provider.py

import unittest
from unittest.mock import patch, MagicMock
import os
import finnhub  # Required for FinnhubAPIException testing

from providers import finnhub_provider


class TestFinnhubQuote(unittest.TestCase):
    @patch.dict(os.environ, {"FINNHUB_API_KEY": "test_key"})
    @patch('finnhub.Client')
    def test_get_quote_success(self, mock_finnhub_client):
        """Returns the raw quote dictionary and uses the configured key."""
        # 1. Arrange
        mock_instance = MagicMock()
        mock_finnhub_client.return_value = mock_instance
        mock_instance.quote.return_value = {'c': 25.4, 'd': 0.3, 'dp': 1.19, 't': 1751380200}

        # 2. Act
        result = finnhub_provider.get_quote('JPM')

        # 3. Assert
        self.assertEqual(result['c'], 25.4)
        mock_finnhub_client.assert_called_once_with(api_key="test_key")
        mock_instance.quote.assert_called_once_with('JPM')

    @patch.dict(os.environ, {}, clear=True)
    @patch('finnhub.Client')
    def test_missing_api_key_uses_demo(self, mock_finnhub_client):
        mock_finnhub_client.return_value.quote.return_value = {'c': 0}
        finnhub_provider.get_quote('JPM')
        mock_finnhub_client.assert_called_once_with(api_key="demo")

    @patch('finnhub.Client')
    def test_api_exception_returns_none(self, mock_finnhub_client):
        """Finnhub API errors are logged and absorbed."""
        mock_finnhub_client.return_value.quote.side_effect = finnhub.FinnhubAPIException(
            MagicMock(json=lambda: {"error": "You don't have access to this resource."})
        )

        self.assertIsNone(finnhub_provider.get_quote('JPM'))

    @patch('finnhub.Client')
    def test_non_dict_payload_returns_none(self, mock_finnhub_client):
        mock_finnhub_client.return_value.quote.return_value = "unexpected"
        self.assertIsNone(finnhub_provider.get_quote('JPM'))


class TestFinnhubCompanyNews(unittest.TestCase):
    @patch('finnhub.Client')
    def test_company_news_success(self, mock_finnhub_client):
        mock_instance = mock_finnhub_client.return_value
        mock_instance.company_news.return_value = [{'headline': 'H', 'summary': 'S', 'datetime': 1}]

        result = finnhub_provider.get_company_news('BAC', '2025-06-01', '2025-07-01')

        self.assertEqual(len(result), 1)
        mock_instance.company_news.assert_called_once_with('BAC', _from='2025-06-01', to='2025-07-01')

    @patch('finnhub.Client')
    def test_company_news_invalid_format(self, mock_finnhub_client):
        mock_finnhub_client.return_value.company_news.return_value = {'error': 'bad'}
        self.assertIsNone(finnhub_provider.get_company_news('BAC', '2025-06-01', '2025-07-01'))

    @patch('finnhub.Client')
    def test_company_news_exception(self, mock_finnhub_client):
        mock_finnhub_client.return_value.company_news.side_effect = Exception("network down")
        self.assertIsNone(finnhub_provider.get_company_news('BAC', '2025-06-01', '2025-07-01'))


if __name__ == '__main__':
    unittest.main()
