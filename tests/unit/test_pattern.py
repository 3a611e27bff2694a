import re

import pytest

from aiorewrite.errors import PatternCompilationError
from aiorewrite.pattern import Key, path_to_regex

pytestmark = [
    pytest.mark.pattern,
    pytest.mark.unit,
]


def compile_keys(path, **options):
    keys = []
    expr = path_to_regex(path, keys, **options)
    return expr, [key.name for key in keys]


def test_named_params():
    expr, names = compile_keys("/:src..:dst")

    assert expr.pattern == r"^\/(?:([^\/]+?))\.(?:\.([^\/\.]+?))\/?$"
    assert names == ["src", "dst"]
    assert expr.match("/foo..bar").groups() == ("foo", "bar")


def test_wildcard():
    expr, names = compile_keys("/js/*")

    assert expr.pattern == r"^\/js\/(.*)\/?$"
    assert names == [0]
    assert expr.match("/js/vendor/jquery.js").group(1) == "vendor/jquery.js"


def test_escaped_query_separator():
    expr, names = compile_keys(r"/file\?param=:param")

    assert names == ["param"]
    assert expr.match("/file?param=file1").group(1) == "file1"
    assert expr.match("/file") is None


def test_optional_param():
    expr, names = compile_keys("/user/:id?")

    assert names == ["id"]
    assert expr.match("/user").group(1) is None
    assert expr.match("/user/5").group(1) == "5"


def test_custom_capture():
    expr, names = compile_keys(r"/user/:id(\d+)")

    assert names == ["id"]
    assert expr.match("/user/42").group(1) == "42"
    assert expr.match("/user/abc") is None


def test_star_param_adds_unnamed_group():
    expr, names = compile_keys("/:path*")

    assert names == ["path", 0]
    assert expr.match("/a/b/c").groups() == ("a", "/b/c")


def test_unnamed_groups_keep_their_position():
    expr, names = compile_keys(r"/:a/x(\d+)/:b")

    assert names == ["a", 0, "b"]
    assert expr.match("/one/x12/two").groups() == ("one", "12", "two")


def test_slash_paren_is_not_captured():
    expr, names = compile_keys(r"/(\d+)")

    assert names == []
    assert expr.match("/12") is not None
    assert expr.groups == 0


def test_escaped_paren_is_not_a_group():
    expr, names = compile_keys(r"/file\(x\)")

    assert names == []
    assert expr.match("/file(x)") is not None


def test_trailing_slash():
    expr, _ = compile_keys("/path")
    assert expr.match("/path/") is not None

    expr, _ = compile_keys("/path", strict=True)
    assert expr.match("/path/") is None
    assert expr.match("/path") is not None


def test_case_sensitivity():
    expr, _ = compile_keys("/Path")
    assert expr.match("/path") is not None

    expr, _ = compile_keys("/Path", sensitive=True)
    assert expr.match("/path") is None


def test_prefix_match():
    expr, _ = compile_keys("/path", end=False)

    assert expr.match("/path/sub") is not None
    assert expr.match("/pathology") is None


def test_regex_passthrough():
    source = re.compile(r"^/u/(?P<id>\d+)/(\w+)")
    expr, names = compile_keys(source)

    assert expr is source
    assert names == ["id", 0]


def test_list_of_patterns():
    expr, names = compile_keys(["/a/:x", "/b/:y"])

    assert names == ["x", "y"]
    assert expr.match("/b/2").group(2) == "2"
    assert expr.match("/a/1").group(1) == "1"


def test_keys_default_to_new_list():
    expr = path_to_regex("/:id")
    assert expr.groups == 1


def test_key_defaults():
    key = Key("id")
    assert key.optional is False
    assert key.offset == 0


def test_invalid_pattern():
    with pytest.raises(PatternCompilationError) as exc_info:
        path_to_regex("/files/[z-a]")

    assert exc_info.value.pattern == "/files/[z-a]"
    assert isinstance(exc_info.value, ValueError)
