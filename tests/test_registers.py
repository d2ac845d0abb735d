"""
Register File Tests — the fixed 33-entry RV64 register set.
"""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest
from rv_regsim.registers import (
    RegisterFile, REGISTER_TABLE, SPECIAL, SAVE, TEMP, format_value, parse_literal,
)


class TestLayout:

    def test_thirty_three_registers(self):
        regs = RegisterFile()
        assert len(regs) == 33
        assert len(REGISTER_TABLE) == 33

    def test_aliases(self):
        regs = RegisterFile()
        for i, (name, alias, _) in enumerate(REGISTER_TABLE[:32]):
            assert alias == f"x{i}"
            assert regs.resolve(alias) == name
        assert regs.resolve("pc") == "pc"
        assert regs.resolve("fp") == "s0"
        assert regs.resolve("A0") == "a0"
        assert regs.resolve("x32") is None
        assert regs.resolve("q7") is None

    def test_categories(self):
        regs = RegisterFile()
        cats = {r.name: r.category for r in regs}
        for name in ("zero", "sp", "gp", "tp", "pc"):
            assert cats[name] == SPECIAL
        for name in ("s0", "s1", "s2", "s11"):
            assert cats[name] == SAVE
        for name in ("ra", "t0", "t6", "a0", "a7"):
            assert cats[name] == TEMP

    def test_power_on_state(self):
        for snap in RegisterFile().view().values():
            assert snap.value == "0x0000000000000000"
            assert snap.changed is False
            assert snap.bits == 64
            assert snap.history == ()


class TestReadWrite:

    def test_write_marks_changed_and_logs(self):
        regs = RegisterFile()
        assert regs.write("a0", 5)
        assert regs.write("x10", 7)
        state = regs.get("a0")
        assert state.value == 7
        assert state.changed
        assert state.previous_values == [0, 5]

    def test_zero_register_discards_writes(self):
        regs = RegisterFile()
        assert regs.write("zero", 0xFF) is False
        assert regs.write("x0", 1) is False
        assert regs.read("zero") == 0
        snap = regs.view()["zero"]
        assert snap.value == "0x0000000000000000"
        assert not snap.changed

    def test_values_masked_to_width(self):
        regs = RegisterFile()
        regs.write("t0", (1 << 64) + 3)
        assert regs.read("t0") == 3

    def test_symbolic_value(self):
        regs = RegisterFile()
        regs.write("pc", "foo")
        snap = regs.view()["pc"]
        assert snap.value == "foo"
        assert snap.symbolic

    def test_unknown_register_raises(self):
        regs = RegisterFile()
        with pytest.raises(KeyError):
            regs.read("bogus")
        with pytest.raises(KeyError):
            regs.write("bogus", 1)

    def test_reset(self):
        regs = RegisterFile()
        regs.write("s3", 9)
        regs.reset()
        assert regs == RegisterFile()

    def test_copy_is_independent(self):
        regs = RegisterFile()
        regs.write("a1", 1)
        clone = regs.copy()
        regs.write("a1", 2)
        assert clone.read("a1") == 1
        assert clone.get("a1").previous_values == [0]

    def test_view_is_read_only(self):
        view = RegisterFile().view()
        with pytest.raises(TypeError):
            view["a0"] = None


class TestFormatting:

    def test_format_value(self):
        assert format_value(5) == "0x0000000000000005"
        assert format_value(0x100) == "0x0000000000000100"
        assert format_value(-1) == "0xffffffffffffffff"
        assert format_value(0xAB, bits=32) == "0x000000ab"
        assert format_value("label") == "label"

    def test_parse_literal(self):
        cases = [
            ("0x5", 5),
            ("0X1F", 31),
            ("42", 42),
            ("0b101", 5),
            ("0o17", 15),
            ("+3", 3),
            ("-1", (1 << 64) - 1),
            ("-0x10", (1 << 64) - 16),
        ]
        for text, expected in cases:
            assert parse_literal(text) == expected, text

    def test_parse_literal_rejects_non_numbers(self):
        for text in ("", "foo", "0xZZ", "a0", "1.5", "-", "0x-5", "0x+5",
                     "0x1_0", "1_000", "0b", "--1"):
            assert parse_literal(text) is None, text
