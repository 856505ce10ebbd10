# tests/conftest.py
import pytest
import sys
import argparse
import xml.etree.ElementTree as ET
from pathlib import Path
from unittest.mock import MagicMock

# Ensure the app package is findable by pytest by adding the project root to the path
project_root = Path(__file__).parent.parent.resolve()
sys.path.insert(0, str(project_root))

from media_resolver.models import ShowIdentity

SEARCH_XML = """<?xml version="1.0" encoding="UTF-8"?>
<Results>
  <show>
    <showid>2930</showid>
    <name>Buffy the Vampire Slayer</name>
    <link>http://www.tvrage.com/Buffy_The_Vampire_Slayer</link>
  </show>
  <show>
    <showid>31192</showid>
    <name>Buffy the Vampire Slayer - Season Eight: Motion Comics</name>
    <link>http://www.tvrage.com/shows/id-31192</link>
  </show>
</Results>
"""

EPISODE_LIST_XML = """<?xml version="1.0" encoding="UTF-8"?>
<Show>
  <name>Buffy the Vampire Slayer</name>
  <totalseasons>3</totalseasons>
  <Episodelist>
    <Season no="1">
      <episode><epnum>1</epnum><seasonnum>01</seasonnum><title>Welcome to the Hellmouth (1)</title></episode>
      <episode><epnum>2</epnum><seasonnum>02</seasonnum><title>The Harvest (2)</title></episode>
    </Season>
    <Season no="2">
      <episode><epnum>3</epnum><seasonnum>01</seasonnum><title>When She Was Bad</title></episode>
      <episode><epnum>4</epnum><seasonnum>02</seasonnum><title>Some Assembly Required</title></episode>
      <episode><epnum>5</epnum><seasonnum>02</seasonnum><title>Some Assembly Required (Alt)</title></episode>
    </Season>
    <Season no="Special">
      <episode><seasonnum>01</seasonnum><title>Unaired Pilot</title></episode>
    </Season>
    <Season no="3">
      <episode><epnum>6</epnum><seasonnum>01</seasonnum><title>Anne &amp;amp; Faith</title></episode>
    </Season>
  </Episodelist>
</Show>
"""


@pytest.fixture
def buffy() -> ShowIdentity:
    return ShowIdentity(name="Buffy the Vampire Slayer", show_id=2930, link="http://www.tvrage.com/Buffy_The_Vampire_Slayer")


@pytest.fixture
def stub_fetcher():
    """A DocumentFetcher that serves the canned feeds above by URL."""
    def _fetch(url):
        if "full_search.php" in url:
            return ET.fromstring(SEARCH_XML.encode('utf-8'))
        if "episode_list.php" in url:
            return ET.fromstring(EPISODE_LIST_XML.encode('utf-8'))
        raise AssertionError(f"Unexpected URL requested: {url}")
    fetcher = MagicMock(name="DocumentFetcher")
    fetcher.fetch.side_effect = _fetch
    return fetcher


@pytest.fixture
def mock_cfg_helper():
    """ConfigHelper stand-in returning values from a plain dict."""
    class MockConfigHelper:
        def __init__(self):
            self.args = argparse.Namespace(profile='default')
            self.values = {}
            self.api_keys = {}
        def __call__(self, key, default_value=None, arg_value=None):
            if arg_value is not None: return arg_value
            return self.values.get(key, default_value)
        def get_api_key(self, service_name): return self.api_keys.get(service_name)
        def get_path(self, key):
            value = self.values.get(key)
            return Path(value) if value else None
    return MockConfigHelper()
