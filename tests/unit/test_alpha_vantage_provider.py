# tests/unit/test_alpha_vantage_provider.py

import os
import unittest
from unittest.mock import MagicMock, patch

import requests

from providers import alpha_vantage_provider

GLOBAL_QUOTE = {
    "01. symbol": "XYZ",
    "05. price": "10.5000",
    "07. latest trading day": "2025-07-01",
    "09. change": "-0.2000",
    "10. change percent": "-1.9048%",
}


class TestAlphaVantageProvider(unittest.TestCase):
    @patch.dict(os.environ, {"ALPHA_VANTAGE_API_KEY": "av_key"})
    @patch('providers.alpha_vantage_provider.requests.get')
    def test_get_global_quote_success(self, mock_get):
        mock_response = MagicMock()
        mock_response.json.return_value = {"Global Quote": GLOBAL_QUOTE}
        mock_response.raise_for_status.return_value = None
        mock_get.return_value = mock_response

        result = alpha_vantage_provider.get_global_quote("XYZ", timeout=5)

        self.assertEqual(result["05. price"], "10.5000")
        _, kwargs = mock_get.call_args
        self.assertEqual(kwargs["params"], {"function": "GLOBAL_QUOTE", "symbol": "XYZ", "apikey": "av_key"})
        self.assertEqual(kwargs["timeout"], 5)

    @patch('providers.alpha_vantage_provider.requests.get')
    def test_rate_limit_note_returns_none(self, mock_get):
        mock_get.return_value.json.return_value = {"Note": "Thank you for using Alpha Vantage! Our standard API rate limit is 25 requests per day."}
        self.assertIsNone(alpha_vantage_provider.get_global_quote("XYZ"))

    @patch('providers.alpha_vantage_provider.requests.get')
    def test_empty_quote_returns_none(self, mock_get):
        mock_get.return_value.json.return_value = {"Global Quote": {}}
        self.assertIsNone(alpha_vantage_provider.get_global_quote("NOPE"))

    @patch('providers.alpha_vantage_provider.requests.get')
    def test_http_error_returns_none(self, mock_get):
        mock_get.return_value.raise_for_status.side_effect = requests.exceptions.HTTPError("503 Server Error")
        self.assertIsNone(alpha_vantage_provider.get_global_quote("XYZ"))

    @patch('providers.alpha_vantage_provider.requests.get', side_effect=requests.exceptions.Timeout("timed out"))
    def test_timeout_returns_none(self, mock_get):
        self.assertIsNone(alpha_vantage_provider.get_global_quote("XYZ"))

    @patch('providers.alpha_vantage_provider.requests.get')
    def test_non_json_body_returns_none(self, mock_get):
        mock_get.return_value.json.side_effect = ValueError("No JSON object could be decoded")
        self.assertIsNone(alpha_vantage_provider.get_global_quote("XYZ"))


if __name__ == '__main__':
    unittest.main()
