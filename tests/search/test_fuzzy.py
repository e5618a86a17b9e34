import itertools

import pytest

from collegedir.search.fuzzy import FuzzyMatcher, MatchResult, MatchType, levenshtein, match


@pytest.mark.parametrize("query, text", [("", "Delhi"), ("del", ""), (None, "Delhi"), ("del", None)])
def test_empty_inputs_do_not_match(query, text):
    assert match(query, text) is None


def test_substring_is_exact_and_case_insensitive():
    assert match("DEL", "AIIMS Delhi") == MatchResult(0, MatchType.EXACT)


def test_word_prefix_is_caught_by_substring_rule_first():
    result = match("aii", "AIIMS Delhi")
    assert result is not None
    assert result.match_type is MatchType.EXACT


def test_rules_apply_in_order_not_by_best_score():
    # "nd" is within edit distance of "new" and also the initials of "New Delhi";
    # the fuzzy rule comes first even though the acronym rule scores lower.
    assert match("nd", "New Delhi") == MatchResult(5, MatchType.FUZZY)


def test_fuzzy_match_scores_three_plus_distance():
    result = match("dehli", "Delhi")
    assert result == MatchResult(3 + 2, MatchType.FUZZY)


def test_fuzzy_match_against_closest_word():
    result = match("aims", "AIIMS Delhi")
    assert result == MatchResult(4, MatchType.FUZZY)


def test_threshold_is_absolute_edit_distance():
    assert match("dehli", "Delhi", threshold=1) is None
    assert match("dehli", "Delhi", threshold=2) is not None


def test_acronym_match():
    assert match("ims", "Indian Medical Society") == MatchResult(4, MatchType.ACRONYM)


def test_no_match_returns_none():
    assert match("zzzzzz", "Karnataka") is None


def test_numbers_are_matched_as_text():
    assert match("42", 142) == MatchResult(0, MatchType.EXACT)


@pytest.mark.parametrize(
    "query, text",
    [("dehli", "delhi"), ("karnatka", "karnataka"), ("mumbay", "mumbai"), ("chenai", "chennai")],
)
def test_fuzzy_bound(query, text):
    result = match(query, text)
    assert result is not None and result.match_type is MatchType.FUZZY
    distance = levenshtein(query, text)
    assert distance <= 3
    assert result.score == 3 + distance


def test_levenshtein_known_values():
    assert levenshtein("kitten", "sitting") == 3
    assert levenshtein("", "abc") == 3
    assert levenshtein("abc", "") == 3
    assert levenshtein("same", "same") == 0
    assert levenshtein("flaw", "lawn") == 2


def test_levenshtein_is_symmetric():
    words = ["", "a", "aims", "aiims", "delhi", "dehli", "puducherry", "medical college"]
    for a, b in itertools.product(words, repeat=2):
        assert levenshtein(a, b) == levenshtein(b, a)


def test_matcher_uses_configured_threshold():
    strict = FuzzyMatcher(threshold=0)
    assert strict.match("dehli", "Delhi") is None
    assert FuzzyMatcher().match("dehli", "Delhi").match_type is MatchType.FUZZY


def test_multi_word_text_scores_by_closest_word():
    # Whole-text distance is far over the threshold; the closest word decides.
    assert levenshtein("xy", "sri ram dental college") > 3
    assert levenshtein("xy", "sri") == 3
    assert match("xy", "Sri Ram Dental College") == MatchResult(3 + 3, MatchType.FUZZY)
    assert match("aims", "AIIMS Delhi").score == 3 + levenshtein("aims", "aiims")


def test_single_word_text_has_no_word_fallback():
    assert levenshtein("xy", "srinagar") > 3
    assert match("xy", "Srinagar") is None
