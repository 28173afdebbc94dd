from api_workbench.model.headers import flatten_headers, format_headers, parse_headers


class TestParseHeaders:
    def test_parse_simple_block(self):
        pairs = parse_headers("Accept: application/json\nX-Trace: abc")
        assert pairs == [("Accept", "application/json"), ("X-Trace", "abc")]

    def test_splits_on_first_colon_only(self):
        pairs = parse_headers("Referer: https://example.com:8080/path")
        assert pairs == [("Referer", "https://example.com:8080/path")]

    def test_trims_key_and_value(self):
        assert parse_headers("   X-Key   :   some value  ") == [("X-Key", "some value")]

    def test_skips_blank_and_colonless_lines(self):
        pairs = parse_headers("\n   \nnot a header\nAccept: */*\n\t\n")
        assert pairs == [("Accept", "*/*")]

    def test_keeps_repeated_keys(self):
        pairs = parse_headers("Cookie: a=1\nCookie: b=2")
        assert pairs == [("Cookie", "a=1"), ("Cookie", "b=2")]

    def test_empty_value_is_kept(self):
        assert parse_headers("X-Empty:") == [("X-Empty", "")]

    def test_empty_text(self):
        assert parse_headers("") == []


class TestFlattenHeaders:
    def test_joins_repeated_values(self):
        flat = flatten_headers([("Cookie", "a=1"), ("Accept", "*/*"), ("Cookie", "b=2")])
        assert flat == {"Cookie": "a=1, b=2", "Accept": "*/*"}
        assert list(flat) == ["Cookie", "Accept"]

    def test_parse_flatten_parse_is_stable(self):
        text = "A: 1\nB: x\nA: 2\nbroken line\nC: z:y"
        once = flatten_headers(parse_headers(text))
        twice = flatten_headers(parse_headers(format_headers(once)))
        assert twice == once
        assert once["A"] == "1, 2"


class TestFormatHeaders:
    def test_format_mapping(self):
        assert format_headers({"A": "1", "B": "2"}) == "A: 1\nB: 2\n"

    def test_format_pairs(self):
        assert format_headers([("A", "1"), ("A", "2")]) == "A: 1\nA: 2\n"
