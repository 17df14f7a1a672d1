import pytest

from src.platform.cache.ttl_cache import TtlCache
from test.unit_helpers import ManualClock


pytestmark = pytest.mark.unit


class TestTtlCache:
    def setup_method(self):
        self.clock = ManualClock()
        self.cache = TtlCache(default_ttl=120, clock=self.clock)

    def test_returns_fresh_entry(self):
        self.cache.set('event:1', {'id': '1'})

        self.clock.advance(119)

        assert self.cache.get('event:1') == {'id': '1'}
        assert self.cache.has('event:1')

    def test_expired_entry_is_deleted_on_read(self):
        self.cache.set('event:1', {'id': '1'})

        self.clock.advance(121)

        assert self.cache.get('event:1') is None
        assert len(self.cache) == 0

    def test_caller_can_ask_with_shorter_ttl(self):
        self.cache.set('show:9', {'id': '9'})
        self.clock.advance(30)

        assert self.cache.get('show:9', ttl=10) is None
        assert self.cache.get('show:9') is None  # dropped by the previous read

    def test_clear_with_pattern_only_drops_matching_keys(self):
        self.cache.set('event:1', 1)
        self.cache.set('event:2', 2)
        self.cache.set('show:1', 3)

        self.cache.clear('event:')

        assert not self.cache.has('event:1')
        assert not self.cache.has('event:2')
        assert self.cache.get('show:1') == 3

    def test_clear_without_pattern_drops_everything(self):
        self.cache.set('event:1', 1)
        self.cache.set('show:1', 2)

        self.cache.clear()

        assert len(self.cache) == 0
