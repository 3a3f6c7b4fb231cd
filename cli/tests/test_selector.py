from __future__ import annotations

import pytest

from hs_util.highlight import PLAIN_THEME, FormattedLine
from hs_util.selector import Empty, MultiResult, Quit, Selector, SingleResult
from hs_util.terminal import erase_sequence
from hs_util.virtual import VirtualState


class _FakeTerminal:
    def __init__(self, keys=(), width: int = 80):
        self.keys = list(keys)
        self.written: list[str] = []
        self._width = width

    def width(self) -> int:
        return self._width

    def write(self, text: str) -> None:
        self.written.append(text)

    def erase_lines(self, line_count: int) -> None:
        self.write(erase_sequence(line_count))

    def read_key(self) -> str:
        if not self.keys:
            raise AssertionError("selector asked for more keys than the test provided")
        return self.keys.pop(0)

    @property
    def output(self) -> str:
        return "".join(self.written)


def _selector(options, **kwargs) -> Selector:
    kwargs.setdefault("terminal", _FakeTerminal())
    kwargs.setdefault("theme", PLAIN_THEME)
    return Selector(options, **kwargs)


class _Item:
    def __init__(self, content: str, number: int):
        self.content = content
        self.number = number * 2

    def __str__(self) -> str:
        return f"{self.number}-{self.content}"


def _playground(sequence: str) -> list[str]:
    """Seven items shown from 2, with print/delete bindings in both scopes."""
    items = [_Item(c, i) for i, c in enumerate("abcdefg")]
    out: list[str] = []
    mode = "normal"
    selector = _selector(list(items), offset=2)

    def _print_all(_pos, _obj):
        nonlocal mode
        mode = "print_all"

    def _print_all_virtual(_lo, _hi, _objs):
        nonlocal mode
        mode = "print_all_virtual"

    def _delete(pos, obj):
        out.append(f"delete {obj.content}")
        del items[pos]
        selector.load(list(items))

    def _range_delete(lo, _hi, objs):
        for obj in objs:
            out.append(f"range delete {obj.content}")
            del items[lo]
        selector.load(list(items))
        selector.exit_virtual()

    selector.register_keys("A", lambda _, obj: out.append(str(obj)), recur=True)
    selector.register_keys("p", lambda _, obj: out.append(obj.content), recur=True)
    selector.register_keys("P", _print_all)
    selector.register_keys("l", lambda _, __: out.append("===="), recur=True)
    selector.register_keys_virtual("l", lambda _, __, ___: out.append("===="), recur=True)
    selector.register_keys_virtual(
        "p", lambda _, __, objs: out.extend(f"range print {o.content}" for o in objs), recur=True
    )
    selector.register_keys_virtual("P", _print_all_virtual)
    selector.register_keys("d", _delete, recur=True)
    selector.register_keys_virtual("d", _range_delete, recur=True)

    try:
        res = selector.run(sequence.replace(" ", ""))
    except Empty:
        return out + ["empty"]
    except Quit:
        return out + ["quit"]

    if mode == "normal":
        out.append(str(res.option))
    elif mode == "print_all":
        out.extend(i.content for i in items)
    else:
        out.extend(o.content for o in res.options)
    return out


def test_navigation() -> None:
    assert _playground("k\r") == ["12-g"]
    assert _playground("j\r") == ["2-b"]
    assert _playground("jkkkjjjkkkkjjjjj\r") == ["4-c"]
    assert _playground("5\r p jkkkjjjkkkkjjjjj\r") == ["d", "10-f"]
    assert _playground("99\r\r") == ["12-g"]


def test_navigation_with_search() -> None:
    assert _playground("/8-\r p np jjkA n\r") == ["e", "e", "10-f", "8-e"]
    assert _playground("4\rp /2-\rA np n\r") == ["c", "12-g", "b", "12-g"]


def test_range() -> None:
    assert _playground("jjA v 3\rp \rA\rAA l \rA\r kkkp \rA\r l vkkv /2\rnP") == [
        "4-c",
        "range print b",
        "range print c",
        "====",
        "range print c",
        "range print d",
        "range print e",
        "range print f",
        "====",
        "b",
        "c",
        "d",
    ]


def test_deletion() -> None:
    assert _playground("jd jjd v /4\rd P") == [
        "delete b",
        "delete e",
        "range delete c",
        "range delete d",
        "range delete f",
        "a",
        "g",
    ]


def test_enter_returns_cursor_option() -> None:
    res = _selector(["a", "b", "c"]).run("jj\r")

    assert res == SingleResult(2, "c")
    assert not res.is_multi
    assert res.options == ("c",)


def test_arrow_keys_move_the_cursor() -> None:
    assert _selector(["a", "b", "c"]).run("\x1b[B\x1b[B\x1b[A\r").option == "b"


def test_non_recurring_binding_ends_the_selector() -> None:
    seen = []
    selector = _selector(["a", "b", "c"])
    selector.register_keys("x", lambda i, opt: seen.append((i, opt)))

    res = selector.run("jx")

    assert seen == [(1, "b")]
    assert res == SingleResult(1, "b")


def test_non_recurring_binding_reports_option_before_callback() -> None:
    options = ["a", "b"]
    selector = _selector(options)

    def _drop(i, _opt):
        selector.load(options[:i] + options[i + 1:])

    selector.register_keys("x", _drop)

    assert selector.run("x") == SingleResult(0, "a")


def test_recurring_delete_reloads_options() -> None:
    options = ["a", "b", "c"]
    selector = _selector(options)

    def _delete(i, _opt):
        del options[i]
        selector.load(options)

    selector.register_keys("d", _delete, recur=True)

    assert selector.run("dd\r").option == "c"


def test_virtual_range_delete() -> None:
    options = ["a", "b", "c", "d"]
    selector = _selector(options)

    def _delete(lo, hi, _picked):
        del options[lo:hi]
        selector.load(options)
        selector.exit_virtual()

    selector.register_keys_virtual("d", _delete, recur=True)

    res = selector.run("vjjd\r")

    assert options == ["d"]
    assert res == SingleResult(0, "d")


def test_virtual_binding_synthesizes_single_binding() -> None:
    calls = []
    selector = _selector(["a", "b", "c"])
    selector.register_keys_virtual("x", lambda lo, hi, picked: calls.append((lo, hi, list(picked))))

    res = selector.run("jx")

    assert calls == [(1, 2, ["b"])]
    assert res == MultiResult(1, 2, ("b",))
    assert res.is_multi


def test_virtual_binding_without_single_keeps_enter_default() -> None:
    selector = _selector(["a", "b", "c"])
    selector.register_keys_virtual("\r", lambda lo, hi, picked: None, single=False)

    assert selector.run("j\r") == SingleResult(1, "b")
    assert selector.run("vjj\r") == MultiResult(0, 3, ("a", "b", "c"))


def test_v_is_ignored_without_virtual_bindings() -> None:
    selector = _selector(["a", "b"])

    selector.run("vj\r")

    assert selector.virtual is None


def test_q_leaves_virtual_mode_before_quitting() -> None:
    selector = _selector(["a", "b", "c"])
    selector.register_keys_virtual("x", lambda lo, hi, picked: None)

    assert selector.run("vjq\r") == SingleResult(1, "b")
    with pytest.raises(Quit):
        selector.run("jq")


def test_empty_raises_before_reading_keys() -> None:
    selector = _selector([])

    with pytest.raises(Empty):
        selector.run()
    assert selector.terminal.written == []


def test_ctrl_c_in_sequence_exits() -> None:
    with pytest.raises(SystemExit) as exc:
        _selector(["a"]).run("j\x03")
    assert exc.value.code == 1


def test_number_entry_clamps_and_respects_offset() -> None:
    assert _selector(["a", "b", "c"], offset=5).run("3\r\r").option == "a"
    assert _selector(["a", "b", "c"], offset=5).run("6\r\r").option == "b"
    assert _selector(["a", "b", "c"]).run("12\x7f\x7f\x7f\r").option == "a"


def test_search_backspace_and_escape_hatch() -> None:
    selector = _selector(["alpha", "beta", "gamma"])

    assert selector.run("/gx\x7f\r\r").option == "gamma"
    assert selector.run("/\x7fj\r").option == "beta"


def test_n_without_search_string_does_nothing() -> None:
    assert _selector(["a", "b"]).run("nN\r").option == "a"


def test_smart_case_search() -> None:
    selector = _selector(["Apple", "apple"])

    selector.search_string = "apple"
    assert selector.search(1) == 1
    assert selector.search(0) == 0

    selector.search_string = "Apple"
    assert selector.search(1) == 0
    assert selector.search(1, reverse=True) == 0


def test_search_is_total() -> None:
    selector = _selector(["a", "b", "c"])
    selector.search_string = "zzz"

    for start in range(-5, 6):
        assert selector.search(start) is None
        assert selector.search(start, reverse=True) is None


def test_load_clamps_cursor_and_virtual_range() -> None:
    selector = _selector(["a", "b", "c", "d"])
    selector.register_keys_virtual("x", lambda lo, hi, picked: None)
    selector.cursor = 3
    selector.virtual = VirtualState(3)

    selector.load(["a", "b"])

    assert selector.cursor == 1
    lo, hi = selector.virtual.range()
    assert 0 <= lo < hi <= 2


def test_run_resets_state_between_calls() -> None:
    selector = _selector(["a", "b", "c"])

    assert selector.run("jj\r").index == 2
    assert selector.run("\r").index == 0


def test_interactive_frames_render_and_erase() -> None:
    term = _FakeTerminal(keys=["j", "\r"])
    selector = _selector(["a", "b", "c"], terminal=term)

    res = selector.run()

    assert res.option == "b"
    assert term.output.count("press h/H for help") == 1
    assert "> 1. a" in term.output
    assert "> 2. b" in term.output
    assert erase_sequence(3) in term.written


def test_wrapped_rows_are_counted_for_erase() -> None:
    term = _FakeTerminal(keys=["j", "\r"], width=10)
    selector = _selector(["x" * 12, "y"], terminal=term)

    selector.run()

    # "> 1. " + 12 chars spans two rows at width 10
    assert erase_sequence(3) in term.written


def test_help_screen_lists_bindings() -> None:
    term = _FakeTerminal(keys=["h", "x", "\r"])
    selector = _selector(["a"], terminal=term)
    selector.register_keys("d", lambda i, opt: None, "delete it", recur=True)

    selector.run()

    assert " * <Enter>: select the option (ends the selector)" in term.output
    assert " * d: delete it" in term.output
    assert "(press any key to continue)" in term.output


def test_help_is_skipped_during_playback() -> None:
    term = _FakeTerminal()
    selector = _selector(["a", "b"], terminal=term)

    assert selector.run("hj\r").option == "b"
    assert term.written == []


def test_callback_errors_propagate() -> None:
    selector = _selector(["a"])

    def _boom(_i, _opt):
        raise RuntimeError("boom")

    selector.register_keys("x", _boom)
    with pytest.raises(RuntimeError, match="boom"):
        selector.run("x")


def test_format_line_projection_is_used() -> None:
    class _Opt:
        def format_line(self):
            return FormattedLine("formatted")

    selector = _selector([_Opt()])
    selector.search_string = "format"
    assert selector.search(0) == 0
    assert selector.format_option(0).text == "formatted"


def test_search_string_survives_between_runs() -> None:
    selector = _selector(["alpha", "beta", "gamma", "beta2"])

    assert selector.run("/beta\r\r").index == 1
    assert selector.search_string == "beta"
    assert selector.run("n\r").index == 1
    assert selector.run("nn\r").index == 3
