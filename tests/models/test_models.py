"""Tests for the animatch data models."""

import pytest
from pydantic import ValidationError

from animatch.errors import NoMatchFound
from animatch.models import (
    RESULT_ITEMS_ADAPTER,
    Ambiguous,
    AnimeLink,
    ConfidentMatch,
    EpisodeLink,
    ListingReference,
    ListingTitles,
    MatchQuery,
    NoMatch,
    ScoredCandidate,
    TitleReference,
)


def make_link(title: str = "Naruto") -> AnimeLink:
    return AnimeLink(title=title, link="https://example.org/naruto", source="test")


def test_result_items_are_discriminated_by_kind():
    items = RESULT_ITEMS_ADAPTER.validate_python(
        [
            {"kind": "anime", "title": "Naruto", "link": "l1", "source": "catalog"},
            {
                "kind": "episode",
                "anime": {"title": "Naruto", "link": "l1", "source": "catalog"},
                "name": "Enter: Naruto Uzumaki!",
                "identifier": "ep-1",
            },
            {"kind": "listing", "service": "anilist", "identifier": "20", "name": "Naruto"},
        ]
    )
    assert [type(i) for i in items] == [AnimeLink, EpisodeLink, ListingReference]
    assert items[1].anime.title == "Naruto"


def test_unknown_kind_is_rejected():
    with pytest.raises(ValidationError):
        RESULT_ITEMS_ADAPTER.validate_python([{"kind": "manga", "title": "x"}])


def test_links_are_frozen():
    link = make_link()
    with pytest.raises(ValidationError):
        link.title = "Boruto"


def test_scored_candidate_score_range():
    with pytest.raises(ValidationError):
        ScoredCandidate(candidate=make_link(), score=1.5)
    with pytest.raises(ValidationError):
        ScoredCandidate(candidate=make_link(), score=-0.1)


def test_listing_titles_all_names():
    titles = ListingTitles(
        default="Shingeki no Kyojin",
        english="Attack on Titan",
        romaji="Shingeki no Kyojin",
        synonyms=("AoT", "Attack on Titan"),
    )
    assert titles.all_names == ["Shingeki no Kyojin", "Attack on Titan", "AoT"]
    assert titles.default_name == "Shingeki no Kyojin"
    assert isinstance(titles, TitleReference)


def test_listing_titles_proximity_uses_best_name():
    titles = ListingTitles(default="Shingeki no Kyojin", synonyms=("AoT",))
    assert titles.proximity("aot") == 1.0
    assert titles.proximity("Shingeki no Kyojin") == 1.0


def test_query_from_reference():
    titles = ListingTitles(default="Shingeki no Kyojin", english="Attack on Titan")
    query = MatchQuery.from_reference(titles)
    assert query.title == "Shingeki no Kyojin"
    assert query.preferred_reference is titles
    assert query.score("Attack on Titan") == 1.0


def test_plain_query_scores_by_title():
    query = MatchQuery(title="Naruto")
    assert query.score("naruto") == 1.0
    assert query.score("Bleach") < 0.5


def test_no_match_raises_for_status():
    query = MatchQuery(title="xyz")
    with pytest.raises(NoMatchFound) as excinfo:
        NoMatch(query).raise_for_status()
    assert excinfo.value.query is query
    assert not excinfo.value.is_fetching_error


def test_decisions_to_dict():
    best = ScoredCandidate(candidate=make_link(), score=0.5)
    query = MatchQuery.from_reference(ListingTitles(default="Naruto"))

    assert NoMatch(MatchQuery(title="x")).to_dict() == {
        "kind": "no_match",
        "query": {"title": "x", "preferred_reference": None},
    }

    confident = ConfidentMatch(query, best).to_dict()
    assert confident["kind"] == "confident"
    assert confident["query"]["preferred_reference"] == "Naruto"
    assert confident["best"]["candidate"]["title"] == "Naruto"

    ambiguous = Ambiguous(query, best, (best,)).to_dict()
    assert ambiguous["kind"] == "ambiguous"
    assert len(ambiguous["candidates"]) == 1
    assert ambiguous["best"]["score"] == 0.5


def test_match_decisions_expose_best_candidate():
    best = ScoredCandidate(candidate=make_link("Bleach"), score=0.999)
    decision = ConfidentMatch(MatchQuery(title="Bleach"), best)
    assert decision.candidate.title == "Bleach"
    assert decision.score == 0.999
    decision.raise_for_status()
