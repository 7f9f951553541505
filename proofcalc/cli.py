"""
Minimal CLI for the dilution calculators (no GUI).

Usage examples:
  python -m proofcalc.cli --table proof_table.csv top --weight 100 --proof 80.620
  python -m proofcalc.cli --table proof_table.csv bottom --dist-weight 500 --dist-proof 90.5
  python -m proofcalc.cli --table proof_table.csv variable --weight 100 --current-proof 177.726 --target-proof 90.0
  python -m proofcalc.cli log list --newest-first

Commands:
  - top / bottom / variable: compute, print JSON (or write .json/.csv), record to the log file
  - log list: print the log in the front end's text layout
  - log clear: remove all entries, or one operator's entries
"""
from __future__ import annotations

import argparse
import csv
import json
import logging
import os
import sys
from typing import Any, Dict, List

from . import api
from . import calibration as CAL
from .audit import AuditLog, render_log
from .engine import ConversionEngine
from .errors import LoadError, ProofCalcError
from .io import load_log, save_log


def _fail_on_drift() -> None:
    mismatches: List[str] = CAL.drift()
    if mismatches:
        raise SystemExit("Calibration drift detected (anchors vs runtime):\n" + "\n".join(" - "+m for m in mismatches))


def _write_output(obj: Any, path: str | None) -> None:
    if not path:
        json.dump(obj, sys.stdout, ensure_ascii=False)
        sys.stdout.write("\n")
        return
    ext = os.path.splitext(path)[1].lower()
    if ext == ".json":
        with open(path, "w", encoding="utf-8") as f:
            json.dump(obj, f, ensure_ascii=False)
    elif ext == ".csv":
        # One row: inputs, raw outputs, then display strings
        flat: Dict[str, Any] = {"mode": obj.get("mode", "")}
        for section in ("inputs", "outputs", "display"):
            for k, v in (obj.get(section) or {}).items():
                flat[f"{section}.{k}"] = v
        with open(path, "w", newline="", encoding="utf-8") as f:
            w = csv.writer(f)
            w.writerow(list(flat.keys()))
            w.writerow([flat[k] for k in flat.keys()])
    else:
        raise SystemExit(f"Unsupported output extension: {ext} (use .json or .csv)")


def _engine(args: argparse.Namespace) -> ConversionEngine:
    source = args.table or CAL.TABLE_PATH
    if not source:
        raise LoadError("no proof table given (use --table or set PROOFCALC_TABLE)")
    return ConversionEngine.from_source(source)


def _open_log(args: argparse.Namespace) -> AuditLog:
    return AuditLog(load_log(args.log_file), max_entries=CAL.LOG_MAX_ENTRIES)


def _compute(args: argparse.Namespace, mode: api.Mode, inputs: Dict[str, Any]) -> int:
    if args.fail_on_drift:
        _fail_on_drift()
    engine = _engine(args)
    log = None if args.no_log else _open_log(args)
    out = api.compute(engine, mode, inputs, operator_id=args.operator, log=log)
    if log is not None:
        save_log(args.log_file, log.list_for())
    _write_output(out, args.output)
    return 0


def cmd_top(args: argparse.Namespace) -> int:
    return _compute(args, "top", {"weight": args.weight, "proof": args.proof})


def cmd_bottom(args: argparse.Namespace) -> int:
    return _compute(args, "bottom", {"dist_weight": args.dist_weight, "dist_proof": args.dist_proof})


def cmd_variable(args: argparse.Namespace) -> int:
    return _compute(args, "variable", {
        "weight": args.weight,
        "current_proof": args.current_proof,
        "target_proof": args.target_proof,
    })


def cmd_log_list(args: argparse.Namespace) -> int:
    log = _open_log(args)
    entries = log.newest_first(args.operator) if args.newest_first else log.list_for(args.operator)
    if args.json:
        json.dump([e.model_dump(mode="json") for e in entries], sys.stdout, ensure_ascii=False)
        sys.stdout.write("\n")
    else:
        sys.stdout.write(render_log(entries) + "\n")
    return 0


def cmd_log_clear(args: argparse.Namespace) -> int:
    log = _open_log(args)
    removed = log.clear(args.operator)
    save_log(args.log_file, log.list_for())
    sys.stdout.write(f"removed {removed} entr{'y' if removed == 1 else 'ies'}\n")
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="proofcalc", description="Spirits dilution calculator (Sheet2 formula chain)")
    p.add_argument("--table", required=False, help="Proof table file (.csv or .json); defaults to $PROOFCALC_TABLE")
    p.add_argument("--log-file", default=CAL.LOG_PATH, help="Audit log JSON file (default: %(default)s)")
    p.add_argument("--operator", required=False, help="Operator/user code scoping log entries")
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = p.add_subparsers(dest="cmd", required=True)

    def _calc_opts(sp: argparse.ArgumentParser) -> None:
        sp.add_argument("--output", required=False, help="Output file (.json or .csv)")
        sp.add_argument("--no-log", action="store_true", help="Do not record this calculation")
        sp.add_argument("--fail-on-drift", action="store_true", help="Fail if calibration differs from anchors")

    p_top = sub.add_parser("top", help="2nd round water (weight + 3-decimal proof)")
    p_top.add_argument("--weight", required=True, help="Weight (B2)")
    p_top.add_argument("--proof", required=True, help="Proof (B4), exactly 3 decimals, e.g. 80.136")
    _calc_opts(p_top)
    p_top.set_defaults(func=cmd_top)

    p_bot = sub.add_parser("bottom", help="1st water (dist weight + 1-decimal dist proof)")
    p_bot.add_argument("--dist-weight", required=True, help="Dist Weight (B13)")
    p_bot.add_argument("--dist-proof", required=True, help="Dist PF (B15), exactly 1 decimal, e.g. 90.5")
    _calc_opts(p_bot)
    p_bot.set_defaults(func=cmd_bottom)

    p_var = sub.add_parser("variable", help="Reduction from a 3-decimal current proof to a target proof")
    p_var.add_argument("--weight", required=True)
    p_var.add_argument("--current-proof", required=True, help="Exactly 3 decimals")
    p_var.add_argument("--target-proof", required=True)
    _calc_opts(p_var)
    p_var.set_defaults(func=cmd_variable)

    p_log = sub.add_parser("log", help="Inspect or clear the audit log")
    log_sub = p_log.add_subparsers(dest="log_cmd", required=True)
    p_list = log_sub.add_parser("list", help="List log entries")
    p_list.add_argument("--newest-first", action="store_true")
    p_list.add_argument("--json", action="store_true", help="Print raw records as JSON")
    p_list.set_defaults(func=cmd_log_list)
    p_clear = log_sub.add_parser("clear", help="Clear all entries (or only --operator's)")
    p_clear.set_defaults(func=cmd_log_clear)

    return p


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    try:
        return args.func(args)
    except ProofCalcError as e:
        sys.stderr.write(f"error: {e.kind}: {e}\n")
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
