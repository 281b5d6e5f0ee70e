"""Tests for providers/apifootball/config.py - league catalogue."""

from __future__ import annotations

import pytest

from reftrends.providers.apifootball.config import (
    EXTENDED_LEAGUES,
    TOP_LEAGUES,
    LeagueConfig,
    league_by_code,
    league_by_id,
    league_name,
    resolve_leagues,
)


class TestLeagueCatalogue:
    """Lookups over the configured leagues."""

    def test_top_five(self):
        """The five major leagues, Premier League first."""
        assert [l.api_id for l in TOP_LEAGUES] == [39, 140, 135, 78, 61]
        assert set(l.api_id for l in TOP_LEAGUES) <= set(l.api_id for l in EXTENDED_LEAGUES)

    def test_lookup_by_id_and_code(self):
        """Ids and codes both resolve."""
        assert league_by_id(140).name == "La Liga"
        assert league_by_code(" EPL ").api_id == 39
        assert league_by_id(999) is None
        assert league_by_code("nope") is None

    def test_league_name_fallback(self):
        """Unknown ids get a generic label."""
        assert league_name(2) == "Champions League"
        assert league_name(4242) == "League 4242"

    def test_default_code(self):
        """Code is derived from the name when omitted."""
        assert LeagueConfig(api_id=1, name="Test League", country="X").code == "test_league"

    def test_invalid_id(self):
        """api_id must be positive."""
        with pytest.raises(ValueError):
            LeagueConfig(api_id=0, name="Bad", country="X")


class TestResolveLeagues:
    """CLI selectors."""

    def test_default_is_top_five(self):
        """No selectors means the top five."""
        assert resolve_leagues() == TOP_LEAGUES
        assert resolve_leagues([]) == TOP_LEAGUES

    def test_mixed_selectors(self):
        """Ids and codes can be mixed."""
        assert [l.api_id for l in resolve_leagues(["88", "ucl"])] == [88, 2]

    def test_unknown_selector(self):
        """Unknown selectors raise ValueError."""
        with pytest.raises(ValueError):
            resolve_leagues(["atlantis"])
