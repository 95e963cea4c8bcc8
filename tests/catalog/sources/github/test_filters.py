from catalog.sources.github.filters import build_search_query


class TestBuildSearchQuery:
    def test_name_only(self):
        assert build_search_query("vapor") == "vapor in:name"

    def test_language_and_topic(self):
        query = build_search_query("vapor", language="swift", options={"topic": "server"})
        assert query == "vapor in:name language:swift topic:server"

    def test_blank_options_are_dropped(self):
        assert build_search_query(" kitura ", options={"topic": "  "}) == "kitura in:name"

    def test_multi_word_values_are_quoted(self):
        query = build_search_query("kit", options={"topic": "server side"})
        assert query == 'kit in:name topic:"server side"'
