"""Unit tests for fuzzy search."""

import pytest

from fieldscope.core.search import score, search, search_view
from fieldscope.tui.views import get_view, View

NAMES = ["user_id", "id", "idea", "name", "owner_id", "created_at", "userName"]


class TestScore:
    def test_non_subsequence_scores_zero(self):
        assert score("xyz", "user_id") == 0

    def test_empty_query_scores_zero(self):
        assert score("", "user_id") == 0

    def test_query_longer_than_candidate(self):
        assert score("identity", "id") == 0

    def test_any_match_is_positive(self):
        assert score("d", "a_very_long_candidate_name_with_d") >= 1

    def test_case_insensitive(self):
        assert score("ID", "id") == score("id", "id") > 0

    def test_exact_beats_prefix(self):
        assert score("id", "id") > score("id", "idea")

    def test_prefix_beats_inner_match(self):
        assert score("id", "idea") > score("id", "user_id")

    def test_camel_case_hump_is_a_boundary(self):
        assert score("i", "ownerId") > score("i", "ownerxid")


class TestSearch:
    def test_empty_query_is_identity(self):
        assert search("", NAMES) == NAMES

    def test_only_matches_returned(self):
        results = search("own", NAMES)
        assert results == ["owner_id"]

    def test_no_match(self):
        assert search("zzz", NAMES) == []

    def test_ranking(self):
        assert search("id", NAMES)[:3] == ["id", "idea", "user_id"]

    def test_ties_break_by_name(self):
        assert search("x", ["b_x", "a_x"]) == ["a_x", "b_x"]

    @pytest.mark.parametrize("shorter,longer", [("u", "us"), ("us", "use"), ("use", "user")])
    def test_longer_query_never_adds_results(self, shorter, longer):
        assert set(search(longer, NAMES)) <= set(search(shorter, NAMES))

    def test_deterministic(self):
        assert search("e", NAMES) == search("e", list(reversed(NAMES)))

    def test_endpoint_labels(self):
        labels = ["GET /pets", "POST /pets", "GET /pets/{petId}", "PUT /owners/{ownerId}/notes"]
        results = search("petid", labels)
        assert results == ["GET /pets/{petId}"]


class TestSearchView:
    def test_searches_view_candidates(self, petstore_output):
        results = search_view("pet", get_view(View.SCHEMAS), petstore_output.index)

        assert "Pet" in results
        assert "NewPet" in results
        assert "Error" not in results


CANDIDATE_SETS = [
    NAMES,
    ["pet_id", "petId", "pets", "owner_id", "id", "tag", "status", "pinned", "note", "limit"],
    ["GET /pets", "POST /pets", "GET /pets/{petId}", "DELETE /pets/{petId}", "PUT /owners/{ownerId}"],
    ["a", "ab", "abc", "b_a", "ba", "cab", "x_a_b", "aXb", "bb"],
]


class TestOrdering:
    @pytest.mark.parametrize("candidates", CANDIDATE_SETS)
    @pytest.mark.parametrize("query", ["a", "id", "pe", "ab", "o", "ts", "e"])
    def test_scores_never_rise_and_ties_sort_by_name(self, query, candidates):
        results = search(query, candidates)
        scores = [score(query, r) for r in results]

        assert all(s > 0 for s in scores)
        ranked = list(zip(scores, results))
        for (high, first), (low, second) in zip(ranked, ranked[1:]):
            assert low <= high
            if low == high:
                assert first <= second

    @pytest.mark.parametrize("candidates", CANDIDATE_SETS)
    @pytest.mark.parametrize("query", ["a", "id", "pe", "o"])
    def test_every_match_is_returned(self, query, candidates):
        expected = {c for c in candidates if score(query, c) > 0}
        assert set(search(query, candidates)) == expected
