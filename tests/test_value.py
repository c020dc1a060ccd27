import inspect
import os
import posixpath

import pytest

from resolvecss.value import (
    LITERAL,
    URL,
    Capabilities,
    Options,
    Segment,
    split_query,
    tokenize,
    value_processor,
)

FILE_PATH = "/project/src/a.css"
DIRECTORY = "/project/src"


def posix_join(directory, uri):
    return posixpath.normpath(posixpath.join(directory, uri))


def posix_relative(start, target):
    return posixpath.relpath(target, start)


def make(absolute=False, keep_query=False, **capabilities):
    capabilities.setdefault("join", posix_join)
    capabilities.setdefault("relative_path", posix_relative)
    return value_processor(
        FILE_PATH,
        Options(absolute=absolute, keep_query=keep_query),
        Capabilities(**capabilities),
    )


def test_tokenize_is_lazy():
    assert inspect.isgenerator(tokenize("url(a.png)"))


def test_tokenize_segments():
    assert list(tokenize('a url( "x.png" ) b')) == [
        Segment(LITERAL, 'a url( "'),
        Segment(URL, "x.png"),
        Segment(LITERAL, '" ) b'),
    ]


def test_tokenize_unquoted_trims_whitespace():
    assert list(tokenize("url(  x.png  )")) == [
        Segment(LITERAL, "url(  "),
        Segment(URL, "x.png"),
        Segment(LITERAL, "  )"),
    ]


def test_tokenize_empty_arguments():
    assert [s for s in tokenize("url()") if s.kind == URL] == [Segment(URL, "")]
    assert [s for s in tokenize("url('')") if s.kind == URL] == [Segment(URL, "")]


def test_tokenize_unquoted_stops_at_first_paren():
    assert list(tokenize("url(a(b).png)")) == [
        Segment(LITERAL, "url("),
        Segment(URL, "a(b"),
        Segment(LITERAL, ").png)"),
    ]


@pytest.mark.parametrize(
    "value",
    [
        "",
        "color: red; margin: 0 auto",
        "url(img/x.png",
        "URL(img/x.png)",
        'url("img/x.png)',
        'url("a\\"b.png")',
        "background: url(a.png), url('b.png') no-repeat, url(\"c d.png\")",
    ],
)
def test_tokenize_round_trip(value):
    assert "".join(segment.text for segment in tokenize(value)) == value


def test_split_query():
    assert split_query("a.png") == ("a.png", "")
    assert split_query("a.png?v=1#x") == ("a.png", "?v=1#x")
    assert split_query("a.svg#icon?x") == ("a.svg", "#icon?x")
    assert split_query("?v=1") == ("", "?v=1")


def test_identity_without_url():
    value = "1px solid rgba(0, 0, 0, 0.5) !important"
    assert make()(value, DIRECTORY) == value
    assert make(absolute=True)(value, DIRECTORY) == value


@pytest.mark.parametrize(
    "value",
    [
        "background: url(data:image/png;base64,AAAA)",
        "background: url(http://example.com/x.png?v=1)",
        "background: url(//cdn.example.com/x.png)",
        "background: url(#gradient)",
        "background: url()",
        'background: url("")',
    ],
)
def test_non_requests_pass_through(value):
    assert make()(value, DIRECTORY) == value
    assert make(absolute=True, keep_query=True)(value, DIRECTORY) == value


def test_relative_mode():
    result = make()("url(img/x.png)", DIRECTORY)
    assert result == "url(../img/x.png)"
    request = result[4:-1]
    assert posixpath.normpath(posixpath.join(FILE_PATH, request)) == (
        "/project/src/img/x.png"
    )


def test_relative_mode_uses_directory():
    transform = make()
    assert transform("url(x.png)", "/project/vendor") == "url(../../vendor/x.png)"


def test_absolute_mode():
    transform = make(absolute=True)
    assert transform("url(img/x.png)", DIRECTORY) == "url(/project/src/img/x.png)"
    assert transform("url(../img/x.png)", DIRECTORY) == "url(/project/img/x.png)"


def test_keep_query():
    value = "url(img/x.png?v=2)"
    assert make(absolute=True, keep_query=True)(value, DIRECTORY) == (
        "url(/project/src/img/x.png?v=2)"
    )
    assert make(absolute=True)(value, DIRECTORY) == "url(/project/src/img/x.png)"
    assert make(keep_query=True)(value, DIRECTORY) == "url(../img/x.png?v=2)"
    assert make()(value, DIRECTORY) == "url(../img/x.png)"


def test_keep_query_hash():
    value = "url('fonts/icons.svg#regular')"
    assert make(absolute=True, keep_query=True)(value, DIRECTORY) == (
        "url('/project/src/fonts/icons.svg#regular')"
    )


@pytest.mark.parametrize("absolute", [True, False])
def test_quote_styles_are_equivalent(absolute):
    transform = make(absolute=absolute)
    results = {
        transform(value, DIRECTORY)[4:-1].strip("'\"")
        for value in ["url('img/x.png')", 'url("img/x.png")', "url(img/x.png)"]
    }
    assert len(results) == 1


def test_quotes_are_preserved():
    transform = make(absolute=True)
    assert transform("url('img/x.png')", DIRECTORY) == "url('/project/src/img/x.png')"
    assert transform('url( "img/x.png" )', DIRECTORY) == (
        'url( "/project/src/img/x.png" )'
    )


def test_multiple_occurrences():
    value = "url(a.png) left top, url('b/c.png') no-repeat"
    assert make(absolute=True)(value, DIRECTORY) == (
        "url(/project/src/a.png) left top, url('/project/src/b/c.png') no-repeat"
    )


def test_whole_stylesheet():
    value = "a {\n  background: url(img/x.png);\n}\nb { color: red; }\n"
    assert make(absolute=True)(value, DIRECTORY) == (
        "a {\n  background: url(/project/src/img/x.png);\n}\nb { color: red; }\n"
    )


def test_backslashes_are_normalized():
    def windows_join(directory, uri):
        return "C:\\project\\src\\" + uri.replace("/", "\\")

    def windows_relative(start, target):
        return "..\\img\\x.png"

    transform = make(absolute=True, join=windows_join)
    assert transform("url(img/x.png)", DIRECTORY) == "url(C:/project/src/img/x.png)"
    transform = make(join=windows_join, relative_path=windows_relative)
    assert transform("url(img/x.png)", DIRECTORY) == "url(../img/x.png)"


@pytest.mark.parametrize("absolute", [True, False])
def test_unresolvable_join_falls_back(absolute):
    transform = make(absolute=absolute, join=lambda directory, uri: None)
    assert transform("url(img/x.png?v=2)", DIRECTORY) == "url(img/x.png?v=2)"


def test_unencodable_request_falls_back():
    transform = make(keep_query=True, url_to_request=lambda url, root: None)
    assert transform("url(img/x.png?v=2)", DIRECTORY) == "url(img/x.png?v=2)"


def test_root_marker_is_passed_through():
    seen = []

    def is_url_request(url, root):
        seen.append(root)
        return True

    transform = value_processor(
        FILE_PATH,
        Options(root="@", absolute=True),
        Capabilities(join=posix_join, is_url_request=is_url_request),
    )
    transform("url(a.png)", DIRECTORY)
    assert seen == ["@"]


def test_options_join_is_used():
    transform = value_processor(
        FILE_PATH,
        Options(absolute=True, join=lambda directory, uri: "/joined/" + uri),
    )
    assert transform("url(x.png)", DIRECTORY) == "url(/joined/x.png)"


def test_transformer_is_reusable():
    transform = make(absolute=True)
    first = transform("url(x.png)", DIRECTORY)
    assert transform("url(x.png)", DIRECTORY) == first
    assert transform("url(x.png)", "/other") == "url(/other/x.png)"


@pytest.mark.skipif(os.name == "nt", reason="POSIX paths")
def test_default_capabilities():
    transform = value_processor(FILE_PATH, Options())
    assert transform("url(img/x.png)", DIRECTORY) == "url(../img/x.png)"
    transform = value_processor("/project/dist", Options())
    assert transform("url(img/x.png)", DIRECTORY) == "url(../src/img/x.png)"
    assert transform("url(x.png)", "/project/dist") == "url(./x.png)"


@pytest.mark.skipif(os.name == "nt", reason="POSIX paths")
def test_default_capabilities_same_file():
    transform = value_processor(FILE_PATH, Options())
    assert transform("url(a.css)", DIRECTORY) == "url(a.css)"
    assert transform("url(a.css?v=1)", DIRECTORY) == "url(a.css?v=1)"
    transform = value_processor(FILE_PATH, Options(keep_query=True))
    assert transform("url(a.css?v=1)", DIRECTORY) == "url(./?v=1)"


def test_empty_relative_path_falls_back():
    transform = make(relative_path=lambda start, target: "")
    assert transform("url(img/x.png?v=2)", DIRECTORY) == "url(img/x.png?v=2)"
    transform = make(keep_query=True, relative_path=lambda start, target: "")
    assert transform("url(img/x.png?v=2)", DIRECTORY) == "url(./?v=2)"
