#!/usr/bin/env python3
"""
rvregs — show RISC-V register state at a line of an assembly file

Usage:
    python rvregs.py <input.s> [--line N] [--profile default|verbatim|assembler]
                               [--config sim.json] [--format table|json]
                               [--changed-only] [--history] [--symbols]
                               [--verbose] [--log-file PATH]

Examples:
    python rvregs.py boot.s --line 12
    python rvregs.py boot.s --changed-only --history
    python rvregs.py boot.s --format json --profile verbatim
"""

import argparse
import json
import logging
import sys
import os

# Allow running from project root without installing
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from rv_regsim import __version__
from rv_regsim.config import SIM_PROFILES, SimConfig, load_config
from rv_regsim.errors import ConfigError
from rv_regsim.log_setup import setup_logging
from rv_regsim.machine import RegisterMachine

log = logging.getLogger("rv_regsim.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rvregs",
        description="Register state of a RISC-V assembly file at a given line",
        epilog="Profiles: " + ", ".join(SIM_PROFILES.keys()),
    )
    parser.add_argument("input", help="Assembly source file")
    parser.add_argument("--line", "-l", type=int, default=None,
                        help="Run through this 1-indexed line (default: end of file)")
    parser.add_argument("--profile", default=None, choices=list(SIM_PROFILES.keys()),
                        help="Simulator profile (default: default; replaces --config settings)")
    parser.add_argument("--config", default=None,
                        help="JSON config file (profile + overrides)")
    parser.add_argument("--format", choices=["table", "json"], default="table",
                        help="Output format")
    parser.add_argument("--changed-only", action="store_true",
                        help="Only show registers written during the run")
    parser.add_argument("--history", action="store_true",
                        help="Also print every register write, in order")
    parser.add_argument("--symbols", action="store_true",
                        help="Also print the label and constant tables")
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Log skipped instructions to stderr")
    parser.add_argument("--log-file", default=None,
                        help="Write a DEBUG log to this file")
    parser.add_argument("--version", action="version",
                        version=f"rvregs {__version__}")
    return parser


def make_config(args) -> SimConfig:
    if args.config:
        config, _host = load_config(args.config)
        if args.profile:
            config = SimConfig.from_profile(args.profile)
        return config
    return SimConfig.from_profile(args.profile or "default")


def render_table(machine: RegisterMachine, view, args) -> str:
    out = []
    for snap in view.values():
        if args.changed_only and not snap.changed:
            continue
        mark = "*" if snap.changed else " "
        out.append(f"{mark} {snap.name:<5s} {snap.alias:>4s}  {snap.value:<18s}  {snap.category}")

    if args.history:
        out.append("")
        out.append("History:")
        for change in machine.history():
            out.append(f"  line {change.line:>4d}  {change.register:<5s} "
                       f"{change.previous} -> {change.value}")

    if args.symbols:
        out.append("")
        out.append("Labels:")
        for name, addr in machine.symbols.labels.items():
            out.append(f"  {name:<20s} {addr}")
        out.append("Constants:")
        for name, value in machine.symbols.constants.items():
            out.append(f"  {name:<20s} {value}")

    if args.verbose and machine.diagnostics:
        out.append("")
        out.append("Skipped:")
        out.extend(f"  {d}" for d in machine.diagnostics)
    return "\n".join(out)


def render_json(machine: RegisterMachine, view, args) -> str:
    registers = {
        name: {
            "name": snap.name,
            "alias": snap.alias,
            "value": snap.value,
            "bits": snap.bits,
            "category": snap.category,
            "changed": snap.changed,
        }
        for name, snap in view.items()
        if snap.changed or not args.changed_only
    }
    doc = {"registers": registers, "diagnostics": list(machine.diagnostics)}
    if args.history:
        doc["history"] = [
            {"line": c.line, "register": c.register, "previous": c.previous, "value": c.value}
            for c in machine.history()
        ]
    if args.symbols:
        doc["labels"] = dict(machine.symbols.labels)
        doc["constants"] = dict(machine.symbols.constants)
    return json.dumps(doc, indent=2)


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    setup_logging(
        "rv_regsim",
        console_level=logging.DEBUG if args.verbose else logging.WARNING,
        log_file=args.log_file,
    )

    try:
        with open(args.input, "r", encoding="utf-8") as f:
            source = f.read()
    except FileNotFoundError:
        print(f"Error: File not found: {args.input}", file=sys.stderr)
        return 1
    except (OSError, UnicodeDecodeError) as e:
        print(f"Error reading {args.input}: {e}", file=sys.stderr)
        return 1

    try:
        config = make_config(args)
        machine = RegisterMachine(config)
        target = args.line if args.line is not None else source.count("\n") + 1
        view = machine.parse_to_line(source, target)
        log.debug("%s: ran to line %d with profile %s", args.input, target, config.profile)

        if args.format == "json":
            print(render_json(machine, view, args))
        else:
            print(render_table(machine, view, args))
    except ConfigError as e:
        print(f"Config error: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"Internal error: {e}", file=sys.stderr)
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
