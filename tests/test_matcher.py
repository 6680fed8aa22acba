"""Tests for fuzzy matching and ranking."""

import unittest

from awsprofileselector.core import Profile
from awsprofileselector.matcher import (
    BASELINE_SCORE,
    Candidate,
    candidates_from_profiles,
    rank,
    score,
)


def make_candidates(names):
    return [Candidate(name, name) for name in names]


def ranked_names(ranked):
    return [item.candidate.sort_key for item in ranked]


class TestScore(unittest.TestCase):
    """Test scoring a single candidate."""

    def test_empty_query_scores_baseline_for_every_text(self):
        for text in ["dev", "prod-readonly", "", "Sandbox_Admin"]:
            self.assertEqual(score(text, ""), BASELINE_SCORE)

    def test_non_subsequence_does_not_match(self):
        self.assertIsNone(score("dev", "x"))
        self.assertIsNone(score("prod", "dp"))
        self.assertIsNone(score("dev", "vd"))
        self.assertIsNone(score("dev", "devs"))

    def test_match_is_case_insensitive(self):
        self.assertIsNotNone(score("Dev-Prod", "dp"))
        self.assertIsNotNone(score("dev-prod", "DP"))

    def test_contiguous_beats_scattered(self):
        self.assertGreater(score("devops", "dev"), score("dxexvops", "dev"))

    def test_earlier_match_beats_later(self):
        self.assertGreater(score("prod-east", "prod"), score("east-prod-x", "prod"))

    def test_word_start_beats_mid_word(self):
        # "r" lands on a segment start in the first text, mid-word in the second
        self.assertGreater(score("dev-ro", "dr"), score("devro", "dr"))

    def test_case_transition_counts_as_word_start(self):
        self.assertGreater(score("myProd", "p"), score("myprod", "p"))

    def test_exact_match_beats_prefix(self):
        self.assertGreater(score("dev", "dev"), score("dev-readonly", "dev"))

    def test_best_alignment_is_chosen(self):
        # The later "p" on a word start outranks the first greedy "p"
        self.assertGreater(score("app-prod", "prod"), score("apxprod", "prod"))

    def test_characters_that_grow_when_lowercased(self):
        # "İ".lower() is two code points
        self.assertIsNotNone(score("İstanbul-dev", "dev"))
        self.assertIsNotNone(score("İx", "x"))
        self.assertIsNotNone(score("İstanbul", "i"))
        self.assertEqual(score("İx", "İx"), score("ix", "ix"))

    def test_deterministic(self):
        first = score("team-dev-readonly", "tdr")
        score("other", "o")
        self.assertEqual(score("team-dev-readonly", "tdr"), first)


class TestRank(unittest.TestCase):
    """Test ranking candidate lists."""

    def test_empty_query_keeps_original_order(self):
        names = ["zeta", "alpha", "mid"]
        self.assertEqual(ranked_names(rank(make_candidates(names), "")), names)

    def test_exact_prefix_ranks_first(self):
        ranked = ranked_names(rank(make_candidates(["dev", "dev-readonly", "prod"]), "dev"))
        self.assertEqual(ranked, ["dev", "dev-readonly"])
        self.assertNotIn("prod", ranked)

    def test_subsequence_filters_candidates(self):
        ranked = ranked_names(rank(make_candidates(["dev-prod", "dev", "prod"]), "dp"))
        self.assertEqual(ranked, ["dev-prod"])

    def test_no_matches_is_empty(self):
        self.assertEqual(rank(make_candidates(["dev", "prod"]), "x"), [])

    def test_empty_candidate_list(self):
        self.assertEqual(rank([], "dev"), [])

    def test_equal_scores_keep_original_order(self):
        names = ["b-dev", "a-dev", "c-dev"]
        ranked = rank(make_candidates(names), "dev")
        self.assertEqual(len({item.score for item in ranked}), 1)
        self.assertEqual(ranked_names(ranked), names)

    def test_stability_for_every_query(self):
        candidates = make_candidates(["qa-east", "qa-west", "dev-east", "dev-west", "prod"])
        for query in ["", "e", "ea", "w", "qa", "d", "st"]:
            ranked = rank(candidates, query)
            positions = {c.sort_key: i for i, c in enumerate(candidates)}
            for before, after in zip(ranked, ranked[1:]):
                self.assertGreaterEqual(before.score, after.score)
                if before.score == after.score:
                    self.assertLess(
                        positions[before.candidate.sort_key], positions[after.candidate.sort_key]
                    )

    def test_non_ascii_names_rank_without_error(self):
        ranked = rank(make_candidates(["İx", "x", "Ärger-dev"]), "x")
        self.assertEqual(ranked_names(ranked), ["x", "İx"])

    def test_ranking_is_repeatable(self):
        candidates = make_candidates(["dev", "dev-readonly", "prod", "staging", "devops"])
        self.assertEqual(rank(candidates, "dv"), rank(candidates, "dv"))

    def test_matches_on_sort_key_not_display_text(self):
        candidates = [Candidate("dev (123456789012) [us-west-2]", "dev")]
        self.assertEqual(rank(candidates, "123"), [])
        self.assertEqual(len(rank(candidates, "dev")), 1)


class TestCandidatesFromProfiles(unittest.TestCase):
    def test_display_and_sort_key(self):
        profiles = [Profile("dev", {"region": "us-west-2"}), Profile("prod")]
        self.assertEqual(
            candidates_from_profiles(profiles),
            [Candidate("dev [us-west-2]", "dev"), Candidate("prod", "prod")],
        )


if __name__ == "__main__":
    unittest.main()
