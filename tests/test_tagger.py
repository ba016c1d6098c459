"""Unit tests for keyword taxonomy matching."""

from tg_reporter.tagger import TagMatcher, matches_any, normalize_taxonomy


class TestMatchesAny:
    """Tests for matches_any helper."""

    def test_substring_not_whole_word(self):
        assert matches_any("поиск жилья срочно", ["жиль"])

    def test_no_match(self):
        assert not matches_any("hello world", ["жиль", "квартир"])

    def test_expects_lowercase_keywords(self):
        assert matches_any("need housing", ["housing"])
        assert not matches_any("need housing", ["HOUSING"])

    def test_empty_keyword_never_matches(self):
        assert not matches_any("anything", [""])


class TestTagMatcher:
    """Tests for TagMatcher class."""

    def test_counters_start_at_zero_for_every_category(self):
        matcher = TagMatcher({"housing": ["жиль"], "work": ["работ"], "empty": []})

        assert matcher.counts == {"housing": 0, "work": 0, "empty": 0}

    def test_category_counted_once_per_message(self):
        """Test that two keywords of one category in one message count once."""
        matcher = TagMatcher({"housing": ["жиль", "квартир"]})

        matcher.add("ищу жильё или квартиру, поиск жилья")

        assert matcher.counts["housing"] == 1

    def test_multiple_categories_per_message(self):
        matcher = TagMatcher({"housing": ["жиль"], "urgent": ["срочно"], "work": ["работ"]})

        matched = matcher.add("поиск жилья срочно")

        assert matched == ["housing", "urgent"]
        assert matcher.counts == {"housing": 1, "urgent": 1, "work": 0}

    def test_counts_accumulate_over_messages(self):
        matcher = TagMatcher({"housing": ["жиль"]})

        for body in ["жилье", "нет", "жильё"]:
            matcher.add(body)

        assert matcher.counts["housing"] == 2

    def test_matchers_do_not_share_counters(self):
        taxonomy = {"housing": ["жиль"]}
        first = TagMatcher(taxonomy)
        second = TagMatcher(taxonomy)

        first.add("жилье")

        assert first.counts["housing"] == 1
        assert second.counts["housing"] == 0

    def test_match_does_not_count(self):
        matcher = TagMatcher({"housing": ["жиль"]})

        assert matcher.match("жилье") == ["housing"]
        assert matcher.counts["housing"] == 0

    def test_uppercase_keywords_match(self):
        matcher = TagMatcher({"housing": ["HOUSING", "Квартир"]})

        assert matcher.match("need housing") == ["housing"]
        assert matcher.match("ищу квартиру") == ["housing"]


class TestNormalizeTaxonomy:
    """Tests for normalize_taxonomy helper."""

    def test_lowercases_and_drops_empty_keywords(self):
        taxonomy = {"Жильё": ["Квартир", "", "ЖИЛЬ"], "Работа": []}

        assert normalize_taxonomy(taxonomy) == {"Жильё": ["квартир", "жиль"], "Работа": []}

    def test_keeps_category_order(self):
        taxonomy = {"b": ["x"], "a": ["y"], "c": ["z"]}

        assert list(normalize_taxonomy(taxonomy)) == ["b", "a", "c"]
