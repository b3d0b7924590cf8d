from __future__ import annotations

import pytest

from url_query_cleaner.cleaner import ParseError, build_query, clean, filter_query, parse_query
from url_query_cleaner.models import QueryParam

SAMPLE_URLS = [
    "https://e.com/?a=1&a=2&b=3",
    "https://e.com/?flag&x=1",
    "https://www.example.com/?&name=ferret&troop=12&item=vase",
    "https://www.example.com/path/page.html?q=hello%20world&empty=&bare#top",
    "http://user:pw@[::1]:8080/p?x=%E2%9C%93&y=a+b",
    "https://example.com?only=1",
]


def test_clean_removes_every_duplicate() -> None:
    assert clean("https://e.com/?a=1&a=2&b=3", ["a"]) == "https://e.com/?b=3"


def test_clean_keeps_bare_parameter() -> None:
    assert clean("https://e.com/?flag&x=1", ["x"]) == "https://e.com/?flag"


def test_clean_multiple_filters() -> None:
    url = "https://www.example.com/?&name=ferret&troop=12&item=vase"
    assert clean(url, ["name", "troop"]) == "https://www.example.com/?item=vase"


def test_clean_keeps_empty_value_equals_sign() -> None:
    assert clean("https://e.com/?name=&x=1", ["x"]) == "https://e.com/?name="


def test_clean_preserves_fragment() -> None:
    url = "https://www.example.com/?name=ferret&gclid=someid#dope"
    assert clean(url, ["gclid"]) == "https://www.example.com/?name=ferret#dope"


def test_clean_drops_question_mark_when_nothing_left() -> None:
    assert clean("https://e.com/path?a=1&b=2#frag", ["a", "b"]) == "https://e.com/path#frag"
    assert clean("https://e.com/?a=1", ["a"]) == "https://e.com/"


def test_clean_leaves_empty_path_alone() -> None:
    assert clean("https://www.example.com?a=1&b=2", ["a"]) == "https://www.example.com?b=2"


def test_clean_empty_query_drops_separator() -> None:
    assert clean("https://e.com/?", []) == "https://e.com/"
    assert clean("https://e.com/?&&", []) == "https://e.com/"


def test_clean_is_case_sensitive() -> None:
    assert clean("https://e.com/?UTM_source=x&utm_source=y", ["utm_source"]) == (
        "https://e.com/?UTM_source=x"
    )


def test_clean_matches_decoded_names() -> None:
    assert clean("https://e.com/?na%6De=1&keep=2", ["name"]) == "https://e.com/?keep=2"


def test_clean_ignores_values() -> None:
    assert clean("https://e.com/?a=utm_source&utm_source=a", ["utm_source"]) == (
        "https://e.com/?a=utm_source"
    )


def test_clean_accepts_single_string_blocklist() -> None:
    assert clean("https://e.com/?ab=1&a=2", "ab") == "https://e.com/?a=2"


def test_clean_encodes_characters_not_allowed_in_query() -> None:
    assert clean("https://e.com/?q=café&x=1", ["x"]) == "https://e.com/?q=caf%C3%A9"


@pytest.mark.parametrize(
    "url",
    [
        "https://e.com/",
        "https://e.com",
        "https://e.com/path#frag?not-a-query",
        "mailto:someone@example.com",
    ],
)
def test_clean_without_query_returns_input(url: str) -> None:
    assert clean(url, ["a", "frag"]) == url


@pytest.mark.parametrize("url", SAMPLE_URLS)
def test_clean_with_disjoint_blocklist_keeps_params(url: str) -> None:
    before = filter_query(url, [])
    after = filter_query(url, ["not-present"])
    assert [(p.name, p.value) for p in after.kept] == [(p.name, p.value) for p in before.kept]
    assert after.removed == ()


@pytest.mark.parametrize("url", SAMPLE_URLS)
def test_clean_removing_everything_leaves_no_query(url: str) -> None:
    names = [param.name for param in filter_query(url, []).kept]
    assert "?" not in clean(url, names)


@pytest.mark.parametrize("url", SAMPLE_URLS)
@pytest.mark.parametrize("blocklist", [[], ["a"], ["x", "flag"], ["name", "troop", "empty"]])
def test_clean_is_idempotent(url: str, blocklist: list[str]) -> None:
    once = clean(url, blocklist)
    assert clean(once, blocklist) == once


@pytest.mark.parametrize(
    "url",
    [
        "not a url",
        "",
        "example.com/?a=1",
        "/relative/path?a=1",
        "http://[:::1]/",
        "http://[::1/",
        "https://example.com:port/?a=1",
        "https://example.com:99999/",
        "https:///path?a=1",
        "https://example.com/?a=%zz",
        "https://example.com/?a=100%",
        "https://example.com/?a=%ff",
        "https://example.com/\tpath",
        "https://e.com/?a=\udcff",
        "https://e.com/?a=\ud800&b=1",
    ],
)
def test_clean_rejects_invalid_urls(url: str) -> None:
    with pytest.raises(ParseError):
        clean(url, [])


def test_parse_error_carries_url() -> None:
    with pytest.raises(ParseError, match="malformed percent-encoding") as excinfo:
        clean("https://example.com/?a=%zz", [])
    assert excinfo.value.url == "https://example.com/?a=%zz"
    assert isinstance(excinfo.value, ValueError)


def test_parse_error_for_lone_surrogate() -> None:
    with pytest.raises(ParseError, match="not valid UTF-8") as excinfo:
        clean("https://e.com/?a=\ud800&b=1", ["b"])
    assert excinfo.value.url == "https://e.com/?a=\ud800&b=1"


def test_parse_error_for_non_string() -> None:
    with pytest.raises(ParseError, match="expected a string"):
        clean(None, [])  # type: ignore[arg-type]


def test_parse_query_shapes() -> None:
    params = parse_query("flag&name=&a=b=c&&sp=a+b%21")
    assert [(p.name, p.value) for p in params] == [
        ("flag", None),
        ("name", ""),
        ("a", "b=c"),
        ("sp", "a b!"),
    ]
    assert params[0].is_bare
    assert not params[1].is_bare


def test_build_query_uses_raw_text() -> None:
    params = parse_query("q=hello%20world&flag&sp=a+b")
    assert build_query(params) == "q=hello%20world&flag&sp=a+b"
    params = [
        QueryParam(name="a b", value="é", raw_name="a+b", raw_value="é"),
        QueryParam(name="bare", raw_name="bare"),
    ]
    assert build_query(params) == "a+b=%C3%A9&bare"


def test_filter_query_reports_removed() -> None:
    result = filter_query("https://e.com/?a=1&b=2&a=3", ["a"])
    assert result.url == "https://e.com/?b=2"
    assert result.removed_names == ["a", "a"]
    assert [p.name for p in result.kept] == ["b"]
    assert result.changed


def test_filter_query_without_query_is_unchanged() -> None:
    result = filter_query("https://e.com/path", ["a"])
    assert result.url == "https://e.com/path"
    assert not result.changed
    assert result.kept == () and result.removed == ()
