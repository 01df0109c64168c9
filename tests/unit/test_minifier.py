"""
Unit tests for the Lua minifier.
"""

import pytest

from pienkuu.core.minifier import LuaMinifier, tokenize
from pienkuu.models.composition_models import MinifyError


class TestLuaMinifier:
    """Test comment and whitespace stripping."""

    def setup_method(self):
        self.minifier = LuaMinifier()

    def test_strips_comments_and_whitespace(self):
        source = """
-- module header
local M = {}

--[[ block
comment ]]
function M.add(a, b)
    return a + b  -- trailing
end

return M
"""
        assert (
            self.minifier.minify(source)
            == "local M={}function M.add(a,b)return a+b end return M"
        )

    def test_strings_are_preserved(self):
        source = 'print("a  --  b", \'it\\\'s\', [[ long\n  text ]])'

        assert self.minifier.minify(source) == source.replace(", ", ",")

    def test_tokens_that_would_fuse_stay_apart(self):
        assert self.minifier.minify("x = a - -b") == "x=a- -b"
        assert self.minifier.minify("s = 1 .. 2") == "s=1 ..2"
        assert self.minifier.minify("t[ [[k]] ] = 1") == "t[ [[k]]]=1"

    def test_numbers(self):
        assert self.minifier.minify("x = 0x1F + 3.5e-2 + .5") == "x=0x1F+3.5e-2+.5"

    def test_shebang_skipped(self):
        assert self.minifier.minify("#!/usr/bin/lua\nprint(1)\n") == "print(1)"

    def test_nested_blocks(self):
        source = """
for i = 1, 3 do
  if i > 1 then
    repeat i = i - 1 until i == 0
  elseif i == 1 then
    while false do end
  end
end
"""
        assert self.minifier.minify(source) == (
            "for i=1,3 do if i>1 then repeat i=i-1 until i==0 "
            "elseif i==1 then while false do end end end"
        )


class TestLuaMinifierErrors:
    """Test syntax problems are reported."""

    def setup_method(self):
        self.minifier = LuaMinifier()

    @pytest.mark.parametrize(
        "source,line",
        [
            ("local s = 'open\n", 1),
            ("x = 1\n--[[ never closed", 2),
            ("x = 1\ny = [==[ open", 2),
            ("local $x = 1", 1),
            ("x = 3abc", 1),
            ("if x then\n  y()\n", 1),
            ("f(a, b]", 1),
            ("x = 1\nend", 2),
            ("repeat x() end", 1),
            ("x = = 1", 1),
            ("local 5 = 3", 1),
            ("return return", 1),
            ("if then end", 1),
            ("print(,)", 1),
            ("x = 1\ny = = 2", 2),
            ("f()\nx\n", 2),
            ("(f)\n= 1", 2),
            ("local function(a) end", 1),
            ("t = {a = }", 1),
        ],
    )
    def test_syntax_errors(self, source, line):
        with pytest.raises(MinifyError) as exc_info:
            self.minifier.minify(source)

        assert exc_info.value.line == line

    def test_line_numbers_track_long_strings(self):
        tokens = tokenize("a = [[\n\n]]\nb = 1")

        assert [token.line for token in tokens if token.text == "b"] == [4]

    def test_error_message_names_offending_token(self):
        with pytest.raises(MinifyError, match="near '='"):
            self.minifier.minify("x = = 1")


class TestLuaGrammar:
    """Test valid programs across the grammar are accepted."""

    def setup_method(self):
        self.minifier = LuaMinifier()

    @pytest.mark.parametrize(
        "source",
        [
            "local a <const>, b <close> = 1, nil",
            "::top:: goto top",
            "for k, v in pairs(t) do break end",
            "for i = 10, 1, -1 do end",
            "while not done do done = #queue == 0 end",
            "local function f(a, ...) return select('#', ...) end",
            "function obj.nested:method() end",
            "t = {1, 2; x = 3, [k] = {}, f()}",
            "obj:method{1}:other'str'.field = ~x & 3 | y << 1",
            "print((f()))",
            "local g = function(...) return ... end",
            "return",
            "do return 1; end",
            "if a then elseif b then else end",
            "x, y.z, w[1] = 1, 2",
        ],
    )
    def test_accepts_valid_source(self, source):
        assert isinstance(self.minifier.minify(source), str)
