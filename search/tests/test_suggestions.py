"""
Tests for search-as-you-type suggestions.
"""

import pytest

from search.services import SearchVocabulary, SuggestionGenerator


class TestSuggestionGenerator:

    @pytest.fixture
    def generator(self):
        return SuggestionGenerator()

    def test_blank_partial(self, generator):
        assert generator.suggest("") == []
        assert generator.suggest("   ") == []
        assert generator.suggest(None) == []

    def test_location_prefix(self, generator):
        suggestions = generator.suggest("lek")
        assert [s.text for s in suggestions] == ["Lekki"]
        assert suggestions[0].type == "location"
        assert suggestions[0].relevance == 0.9
        assert suggestions[0].description == "Properties in Lekki"

    def test_prefix_beats_substring(self, generator):
        suggestions = generator.suggest("la")
        assert suggestions[0].text == "Lagos"
        assert suggestions[1].text == "land"
        relevances = [s.relevance for s in suggestions]
        assert relevances == sorted(relevances, reverse=True)

    def test_ties_keep_source_order(self, generator):
        suggestions = generator.suggest("la")
        substring_locations = [s.text for s in suggestions if s.type == "location" and s.relevance == 0.7]
        assert substring_locations == ["Calabar", "Victoria Island", "Banana Island", "Maryland"]

    def test_natural_language_pattern(self, generator):
        suggestions = generator.suggest("3 bed")
        assert suggestions[0].text == "3 Bedroom Apartment"
        assert suggestions[0].type == "query"
        assert suggestions[0].description == "Based on your search"

    def test_shortlet_pattern(self, generator):
        texts = [s.text for s in generator.suggest("shortlet")]
        assert "Short-let Apartments" in texts

    def test_history_entries(self, generator):
        suggestions = generator.suggest("lekki", history=["Lekki duplex", "Ikeja flat"])
        assert [s.text for s in suggestions] == ["Lekki", "Lekki duplex"]
        assert suggestions[1].relevance == 0.8
        assert suggestions[1].description == "From your search history"

    def test_at_most_ten(self, generator):
        assert len(generator.suggest("a")) == 10

    def test_custom_vocabulary(self):
        generator = SuggestionGenerator(SearchVocabulary(locations=("Accra",), property_types=(), amenities=()))
        assert [s.text for s in generator.suggest("acc")] == ["Accra"]
