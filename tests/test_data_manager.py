"""
Tests for DataManager loading, caching and failure reporting.
"""

import json
import os
import shutil
import tempfile
from datetime import datetime, timedelta
from unittest.mock import Mock, patch

import pytest
import requests

from business_logic.error_handler import DataLoadError
from data.manager import DataManager


def write_dataset(path, campaigns):
    with open(path, 'w', encoding='utf-8') as f:
        json.dump({"company": "Test Co", "campaigns": campaigns}, f)


class TestFileLoading:
    """Loading the dataset from a local JSON file."""

    def setup_method(self):
        self.temp_dir = tempfile.mkdtemp()
        self.data_file = os.path.join(self.temp_dir, 'marketing_data.json')
        write_dataset(self.data_file, [{"id": "CMP-1", "name": "One", "medium": "Search",
                                        "spend": 100, "revenue": 250}])
        self.manager = DataManager(source=self.data_file)

    def teardown_method(self):
        shutil.rmtree(self.temp_dir)

    def test_loads_default_source(self):
        data = self.manager.load_marketing_data()
        assert len(data.campaigns) == 1
        assert data.campaigns[0].id == "CMP-1"
        assert data.extras["company"] == "Test Co"

    def test_cache_hit_returns_same_object(self):
        first = self.manager.load_marketing_data()
        second = self.manager.load_marketing_data()
        assert first is second

    def test_modified_file_is_reloaded(self):
        first = self.manager.load_marketing_data()
        write_dataset(self.data_file, [{"id": "CMP-1"}, {"id": "CMP-2"}])

        second = self.manager.load_marketing_data()
        assert second is not first
        assert len(second.campaigns) == 2

    def test_expired_cache_is_reloaded(self):
        first = self.manager.load_marketing_data()
        self.manager._cache.last_updated = datetime.now() - timedelta(minutes=30)

        second = self.manager.load_marketing_data()
        assert second is not first
        assert second == first

    def test_other_source_bypasses_cache(self):
        other_file = os.path.join(self.temp_dir, 'other.json')
        write_dataset(other_file, [])
        self.manager.load_marketing_data()

        data = self.manager.load_marketing_data(other_file)
        assert data.campaigns == ()
        assert self.manager.get_cache_stats()['source'] == other_file

    def test_clear_cache(self):
        first = self.manager.load_marketing_data()
        self.manager.clear_cache()
        assert self.manager.get_cache_stats()['in_memory'] is False
        assert self.manager.load_marketing_data() is not first

    def test_cache_stats(self):
        stats = self.manager.get_cache_stats()
        assert stats['in_memory'] is False
        assert stats['campaigns'] == 0

        self.manager.load_marketing_data()
        stats = self.manager.get_cache_stats()
        assert stats['in_memory'] is True
        assert stats['source'] == self.data_file
        assert stats['campaigns'] == 1
        assert stats['last_updated'] is not None

    def test_utf8_bom_accepted(self):
        with open(self.data_file, 'w', encoding='utf-8-sig') as f:
            json.dump({"campaigns": [{"id": "CMP-9"}]}, f)
        data = self.manager.load_marketing_data()
        assert data.campaigns[0].id == "CMP-9"


class TestFileLoadFailures:

    def setup_method(self):
        self.temp_dir = tempfile.mkdtemp()
        self.manager = DataManager()

    def teardown_method(self):
        shutil.rmtree(self.temp_dir)

    def test_missing_file(self):
        missing = os.path.join(self.temp_dir, 'missing.json')
        with pytest.raises(DataLoadError) as exc_info:
            self.manager.load_marketing_data(missing)
        assert "not found" in str(exc_info.value)
        assert exc_info.value.source == missing

    def test_invalid_json(self):
        path = os.path.join(self.temp_dir, 'broken.json')
        with open(path, 'w') as f:
            f.write('{"campaigns": [')
        with pytest.raises(DataLoadError) as exc_info:
            self.manager.load_marketing_data(path)
        assert "Invalid JSON" in str(exc_info.value)

    def test_malformed_payload(self):
        path = os.path.join(self.temp_dir, 'malformed.json')
        with open(path, 'w') as f:
            json.dump({"campaigns": "none"}, f)
        with pytest.raises(DataLoadError) as exc_info:
            self.manager.load_marketing_data(path)
        assert "Malformed marketing data" in str(exc_info.value)

    def test_not_utf8(self):
        path = os.path.join(self.temp_dir, 'binary.json')
        with open(path, 'wb') as f:
            f.write(b'\xff\xfe\xfa')
        with pytest.raises(DataLoadError):
            self.manager.load_marketing_data(path)

    def test_directory_source(self):
        with pytest.raises(DataLoadError):
            self.manager.load_marketing_data(self.temp_dir)

    def test_failure_does_not_populate_cache(self):
        with pytest.raises(DataLoadError):
            self.manager.load_marketing_data(os.path.join(self.temp_dir, 'missing.json'))
        assert self.manager.get_cache_stats()['in_memory'] is False


class TestRemoteLoading:
    """Loading the dataset from an HTTP(S) URL."""

    url = "https://example.com/marketing_data.json"

    def setup_method(self):
        self.manager = DataManager(source=self.url, request_timeout=5)

    def _response(self, payload, status_code=200):
        response = Mock()
        response.status_code = status_code
        response.content = json.dumps(payload).encode('utf-8')
        if status_code >= 400:
            response.raise_for_status.side_effect = requests.exceptions.HTTPError(response=response)
        else:
            response.raise_for_status.return_value = None
        return response

    def test_is_remote(self):
        assert DataManager.is_remote("https://example.com/data.json")
        assert DataManager.is_remote("HTTP://example.com/data.json")
        assert not DataManager.is_remote("sample_data/marketing_data.json")

    @patch('data.manager.requests.get')
    def test_fetches_and_caches(self, mock_get):
        mock_get.return_value = self._response({"campaigns": [{"id": "CMP-1"}]})

        first = self.manager.load_marketing_data()
        second = self.manager.load_marketing_data()

        assert first is second
        assert first.campaigns[0].id == "CMP-1"
        mock_get.assert_called_once_with(self.url, timeout=5)

    @patch('data.manager.requests.get')
    def test_http_error_status(self, mock_get):
        mock_get.return_value = self._response({}, status_code=503)

        with pytest.raises(DataLoadError) as exc_info:
            self.manager.load_marketing_data()
        assert str(exc_info.value) == "Failed to fetch marketing data: HTTP 503"

    @patch('data.manager.requests.get')
    def test_timeout(self, mock_get):
        mock_get.side_effect = requests.exceptions.Timeout("slow")

        with pytest.raises(DataLoadError) as exc_info:
            self.manager.load_marketing_data()
        assert "Timed out" in str(exc_info.value)

    @patch('data.manager.requests.get')
    def test_connection_error(self, mock_get):
        mock_get.side_effect = requests.exceptions.ConnectionError("refused")

        with pytest.raises(DataLoadError) as exc_info:
            self.manager.load_marketing_data()
        assert "Failed to fetch marketing data" in str(exc_info.value)
