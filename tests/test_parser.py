import pytest

from smmake.errors import DescriptionFileError, ParseError
from smmake.model import Command
from smmake.parser import classify, describe, expand_variables, parse_file, parse_text

MAKEFILE = """\
# toolchain
CC=gcc
CFLAGS = -O2 -Wall

all: app

app: main.o util.o
\t$(CC) -o app main.o util.o
\t@echo built ${CC}

%.o: %.c
\t$(CC) $(CFLAGS) -c $(UNSET)
"""


def test_parses_targets_commands_and_variables():
    g = parse_text(MAKEFILE)

    assert g.variables == {"CC": "gcc", "CFLAGS": "-O2 -Wall"}
    assert [t.name for t in g] == ["all", "app", "%.o"]

    app = g.get("app")
    assert app.dependencies == ("main.o", "util.o")
    assert app.commands == (
        Command("gcc -o app main.o util.o", silent=False, lineno=8),
        Command("echo built gcc", silent=True, lineno=9),
    )
    assert app.lineno == 7


def test_pattern_rule_prefix_and_suffix():
    g = parse_text(MAKEFILE)
    rule = g.get("%.o")
    assert rule.pattern
    assert (rule.prefix, rule.suffix) == ("", ".o")
    assert rule.dependencies == ("%.c",)


def test_undefined_variable_left_verbatim():
    g = parse_text(MAKEFILE)
    assert g.get("%.o").commands[0].text == "gcc -O2 -Wall -c $(UNSET)"


def test_variable_substitution_only_in_commands():
    g = parse_text("OUT=bin\n$(OUT): dep\n\techo $(OUT)\n")
    assert "$(OUT)" in g
    assert "bin" not in g
    assert g.get("$(OUT)").commands[0].text == "echo bin"


def test_variables_only_see_earlier_definitions():
    g = parse_text("t:\n\techo $(LATE)\nLATE=x\n")
    assert g.get("t").commands[0].text == "echo $(LATE)"


def test_variable_value_expands_earlier_variables():
    g = parse_text("A=1\nB=$(A)2\nt:\n\techo $(B)\n")
    assert g.variables["B"] == "12"


def test_expand_variables_both_brace_styles():
    v = {"X": "1", "Y": "2"}
    assert expand_variables("$(X)-${Y}-$(Z)-${Z}", v) == "1-2-$(Z)-${Z}"
    assert expand_variables("$(X}", v) == "$(X}"


def test_dependency_containing_equals_is_a_target_line():
    g = parse_text("build: CFLAGS=-O2 other\n\ttrue\n")
    assert g.get("build").dependencies == ("CFLAGS=-O2", "other")
    assert g.variables == {}


def test_colon_after_equals_is_a_variable():
    g = parse_text("URL=http://example.com\n")
    assert g.variables == {"URL": "http://example.com"}
    assert len(g) == 0


def test_colon_equals_assignment():
    g = parse_text("CC := clang\n")
    assert g.variables == {"CC": "clang"}
    assert len(g) == 0


def test_classify():
    assert classify("") == "skip"
    assert classify("   # comment") == "skip"
    assert classify("\techo hi") == "command"
    assert classify("a: b") == "target"
    assert classify("A = b") == "variable"
    assert classify("just words") == "invalid"


def test_commands_attach_to_most_recent_target_across_variables():
    g = parse_text("t:\n\tone\nV=2\n\ttwo $(V)\n")
    assert [c.text for c in g.get("t").commands] == ["one", "two 2"]


def test_silent_marker_with_spaces():
    g = parse_text("t:\n\t  @  echo hi\n")
    assert g.get("t").commands == (Command("echo hi", silent=True, lineno=2),)


def test_duplicate_target_last_definition_wins():
    g = parse_text("t: a\n\tfirst\nt: b\n\tsecond\n")
    t = g.get("t")
    assert t.dependencies == ("b",)
    assert [c.text for c in t.commands] == ["second"]


def test_several_names_share_one_rule():
    g = parse_text("a b: dep\n\tcmd\n")
    assert g.get("a").commands == g.get("b").commands
    assert g.get("b").dependencies == ("dep",)


def test_command_before_target_reports_line():
    with pytest.raises(ParseError) as exc:
        parse_text("# header\n\techo orphan\n", source="Makefile")
    assert exc.value.lineno == 2
    assert str(exc.value).startswith("Makefile:2:")


def test_space_indented_command_is_rejected_with_hint():
    with pytest.raises(ParseError) as exc:
        parse_text("t:\n    echo hi\n")
    assert exc.value.lineno == 2
    assert "tab" in exc.value.message


def test_pattern_with_two_wildcards_is_rejected():
    with pytest.raises(ParseError, match="more than one"):
        parse_text("%.%: x\n")


def test_missing_names_are_rejected():
    with pytest.raises(ParseError):
        parse_text(": dep\n")
    with pytest.raises(ParseError):
        parse_text("= value\n")


def test_parse_file(tmp_path):
    path = tmp_path / "Makefile"
    path.write_text(MAKEFILE)
    g = parse_file(path)
    assert "app" in g


def test_parse_file_missing(tmp_path):
    with pytest.raises(DescriptionFileError) as exc:
        parse_file(tmp_path / "nope.mk")
    assert "nope.mk" in str(exc.value)


def test_describe_lists_targets():
    lines = describe(parse_text(MAKEFILE))
    assert "Parsed target: %.o (pattern)" in lines
    assert "    (silent) echo built gcc" in lines


def test_trailing_comment_on_target_line():
    g = parse_text("all: a b # deps\n\techo #kept\nlib: x#y\n")
    assert g.get("all").dependencies == ("a", "b")
    assert g.get("all").commands[0].text == "echo #kept"
    assert g.get("lib").dependencies == ("x#y",)


def test_variable_values_keep_hash():
    g = parse_text("COLOR=#fff\nURL=http://host/page#frag\nNOTE = a # b\nt:\n\tpaint $(COLOR) $(URL)\n")
    assert g.variables == {
        "COLOR": "#fff",
        "URL": "http://host/page#frag",
        "NOTE": "a # b",
    }
    assert g.get("t").commands[0].text == "paint #fff http://host/page#frag"
