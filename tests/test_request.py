"""
Tests for YoutubeDLRequest — option storage and command building.
"""

from ytdl_engine.core.models.request import YoutubeDLRequest


class TestConstruction:
    def test_single_url(self):
        assert YoutubeDLRequest("https://example.com/v").urls == ["https://example.com/v"]

    def test_url_list(self):
        request = YoutubeDLRequest(["a", "b"])
        assert request.urls == ["a", "b"]

    def test_empty(self):
        request = YoutubeDLRequest()
        assert request.urls == []
        assert request.build_command() == []


class TestOptions:
    def test_get_option_returns_first_value(self):
        request = YoutubeDLRequest().add_option("-f", "best").add_option("-f", "worst")
        assert request.get_option("-f") == "best"
        assert request.get_arguments("-f") == ["best", "worst"]

    def test_flag_without_value(self):
        request = YoutubeDLRequest().add_option("--dump-json")
        assert request.has_option("--dump-json")
        assert request.get_option("--dump-json") is None

    def test_missing_option(self):
        request = YoutubeDLRequest()
        assert not request.has_option("-o")
        assert request.get_option("-o") is None
        assert request.get_arguments("-o") == []

    def test_numeric_value_becomes_text(self):
        request = YoutubeDLRequest().add_option("--retries", 3)
        assert request.get_option("--retries") == "3"

    def test_set_option_replaces(self):
        request = YoutubeDLRequest().add_option("-f", "a").add_option("-f", "b")
        request.set_option("-f", "c")
        assert request.get_arguments("-f") == ["c"]

    def test_remove_option(self):
        request = YoutubeDLRequest().add_option("-o", "x").remove_option("-o")
        assert not request.has_option("-o")

    def test_options_view_is_a_copy(self):
        request = YoutubeDLRequest().add_option("-f", "best")
        request.options["-f"].append("worst")
        assert request.get_arguments("-f") == ["best"]


class TestBuildCommand:
    def test_order_options_commands_urls(self):
        request = YoutubeDLRequest(["u1", "u2"])
        request.add_option("-f", "best")
        request.add_option("--no-playlist")
        request.add_commands(["--", "raw"])

        assert request.build_command() == ["-f", "best", "--no-playlist", "--", "raw", "u1", "u2"]

    def test_repeated_flag_is_not_deduplicated(self):
        request = YoutubeDLRequest("u")
        request.add_option("--add-header", "A:1")
        request.add_option("--add-header", "B:2")

        assert request.build_command() == ["--add-header", "A:1", "--add-header", "B:2", "u"]

    def test_insertion_order_kept_across_flags(self):
        request = YoutubeDLRequest()
        request.add_option("-a", "1")
        request.add_option("-b", "2")
        request.add_option("-a", "3")

        # values of one flag stay grouped under the flag's first position
        assert request.build_command() == ["-a", "1", "-a", "3", "-b", "2"]

    def test_set_option_moves_flag_last(self):
        request = YoutubeDLRequest()
        request.add_option("-a", "1")
        request.add_option("-b", "2")
        request.set_option("-a", "9")

        assert request.build_command() == ["-b", "2", "-a", "9"]

    def test_empty_value_emits_flag_only(self):
        request = YoutubeDLRequest().add_option("--cache-dir", "")
        assert request.build_command() == ["--cache-dir"]


class TestCopy:
    def test_copy_is_independent(self):
        original = YoutubeDLRequest("u").add_option("-f", "best")
        clone = original.copy()
        clone.add_option("-f", "worst")
        clone.urls.append("v")

        assert original.get_arguments("-f") == ["best"]
        assert original.urls == ["u"]

    def test_repr_mentions_urls(self):
        assert "https://example.com" in repr(YoutubeDLRequest("https://example.com"))
