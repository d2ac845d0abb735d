"""
CLI Tests for rvregs.
"""
import sys
import os
import json
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest
import rvregs

PROGRAM = """\
.equ N, 0x20
start:
    li   a0, N        # a0 = 0x20
    mv   a1, a0
    call start
    li   q7, 1        // bad register
"""


@pytest.fixture
def asm_file(tmp_path):
    p = tmp_path / "prog.s"
    p.write_text(PROGRAM, encoding="utf-8")
    return p


class TestCLI:

    def test_table_output(self, asm_file, capsys):
        assert rvregs.main([str(asm_file), "--line", "4"]) == 0
        out = capsys.readouterr().out
        assert "* a0" in out
        assert "0x0000000000000020" in out
        assert len(out.strip().splitlines()) == 33

    def test_changed_only_history_symbols(self, asm_file, capsys):
        rc = rvregs.main([str(asm_file), "--changed-only", "--history", "--symbols"])
        assert rc == 0
        out = capsys.readouterr().out
        assert "History:" in out
        assert "start" in out and "0x00000004" in out
        assert "N" in out
        assert "  t0 " not in out

    def test_json_output(self, asm_file, capsys):
        assert rvregs.main([str(asm_file), "--format", "json", "--history"]) == 0
        doc = json.loads(capsys.readouterr().out)
        assert doc["registers"]["a1"]["value"] == "0x0000000000000020"
        assert doc["registers"]["pc"]["value"] == "0x0000000000000004"
        assert doc["registers"]["ra"]["changed"] is True
        assert len(doc["diagnostics"]) == 1
        assert [h["register"] for h in doc["history"]] == ["a0", "a1", "ra", "pc"]

    def test_verbatim_profile(self, asm_file, capsys):
        rvregs.main([str(asm_file), "--format", "json", "--profile", "verbatim"])
        doc = json.loads(capsys.readouterr().out)
        assert doc["registers"]["a0"]["value"] == "N"
        assert doc["registers"]["pc"]["value"] == "start"

    def test_config_file(self, asm_file, tmp_path, capsys):
        cfg = tmp_path / "sim.json"
        cfg.write_text(json.dumps({"profile": "default", "resolve_labels": False}))
        rvregs.main([str(asm_file), "--format", "json", "--config", str(cfg)])
        doc = json.loads(capsys.readouterr().out)
        assert doc["registers"]["pc"]["value"] == "start"
        assert doc["registers"]["a0"]["value"] == "0x0000000000000020"

    def test_bad_config(self, asm_file, tmp_path, capsys):
        cfg = tmp_path / "sim.json"
        cfg.write_text(json.dumps({"profile": "warp-speed"}))
        assert rvregs.main([str(asm_file), "--config", str(cfg)]) == 1
        assert "Config error" in capsys.readouterr().err

    def test_missing_file(self, tmp_path, capsys):
        assert rvregs.main([str(tmp_path / "nope.s")]) == 1
        assert "File not found" in capsys.readouterr().err

    def test_file_not_utf8(self, tmp_path, capsys):
        p = tmp_path / "latin1.s"
        p.write_bytes(b"LI a0, 1 # \xff\n")
        assert rvregs.main([str(p)]) == 1
        assert "Error reading" in capsys.readouterr().err

    def test_config_value_of_wrong_type(self, asm_file, tmp_path, capsys):
        cfg = tmp_path / "sim.json"
        cfg.write_text(json.dumps({"snapshot_interval": "4"}))
        assert rvregs.main([str(asm_file), "--config", str(cfg)]) == 1
        assert "Config error" in capsys.readouterr().err
