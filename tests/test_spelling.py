import pytest

from booklender.utils.spelling import edit_distance, find_closest_word, normalize_token, tokenize


def test_kitten_sitting():
    assert edit_distance("kitten", "sitting") == 3


@pytest.mark.parametrize("a,b", [("flaw", "lawn"), ("", "abc"), ("hobbit", "hobit"), ("dune", "dune")])
def test_distance_is_symmetric(a, b):
    assert edit_distance(a, b) == edit_distance(b, a)


def test_distance_to_self_is_zero():
    assert edit_distance("tolkien", "tolkien") == 0
    assert edit_distance("", "abc") == 3


def test_normalize_token():
    assert normalize_token("Tolkien,") == "tolkien"
    assert normalize_token("J.R.R.") == "jrr"
    assert normalize_token("三体!") == "三体"
    assert normalize_token("--") == ""
    assert normalize_token(None) == ""


def test_tokenize_drops_empty_tokens():
    assert tokenize("  The  Lord - of the Rings ") == ["the", "lord", "of", "the", "rings"]
    assert tokenize(None) == []


def test_closest_word_first_found_wins_ties():
    assert find_closest_word("cat", ["bat", "hat"]) == "bat"


def test_closest_word_prefers_smaller_distance():
    assert find_closest_word("hobit", ["habits", "hobbit"]) == "hobbit"


def test_closest_word_distance_limit():
    assert find_closest_word("abcd", ["abxy"]) == "abxy"
    assert find_closest_word("abcd", ["axyz"]) is None


def test_short_words_never_corrected():
    assert find_closest_word("ab", ["abc"]) is None
