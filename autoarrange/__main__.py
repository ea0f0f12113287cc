"""
autoarrange — command line entry point.

Usage:
    python -m autoarrange arrange JOB.json [--out RESULT.json] [--config RULES.json] [-v]
    python -m autoarrange classify BED.json

Exit status: 0 on success, 1 on bad input, 2 if the arrangement was stopped.
"""

import json
import logging
import sys
from pathlib import Path

from autoarrange.config import RULES, ArrangeError, load_rules


USAGE = ("Usage: python -m autoarrange arrange JOB.json "
         "[--out RESULT.json] [--config RULES.json] [-v]\n"
         "       python -m autoarrange classify BED.json")


def _read_json(path: str):
    try:
        return json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ArrangeError(f"Cannot read {path}: {exc}") from exc


def _cmd_arrange(args: list[str]) -> int:
    from autoarrange.arranger import arrange, parse_job, job_to_dict

    job_path = None
    out_path = None
    rules = RULES
    i = 0
    while i < len(args):
        a = args[i]
        if a == "--out" and i + 1 < len(args):
            out_path = args[i + 1]
            i += 2
        elif a == "--config" and i + 1 < len(args):
            rules = load_rules(args[i + 1])
            i += 2
        elif a.startswith("-"):
            i += 1
        else:
            job_path = a
            i += 1
    if job_path is None:
        print(USAGE)
        return 1

    job = parse_job(_read_json(job_path))
    ok = arrange(job.items, job.fixed, job.min_distance, job.bed_hint, rules=rules)
    text = json.dumps(job_to_dict(job, ok), indent=2)
    if out_path:
        Path(out_path).write_text(text + "\n", encoding="utf-8")
    else:
        print(text)
    return 0 if ok else 2


def _cmd_classify(args: list[str]) -> int:
    from autoarrange.arranger import bed_hint_to_dict
    from autoarrange.arranger.serialization import parse_bed

    if not args:
        print(USAGE)
        return 1
    data = _read_json(args[0])
    bed = data.get("bed", data) if isinstance(data, dict) else {"outline": data}
    print(json.dumps(bed_hint_to_dict(parse_bed(bed)), indent=2))
    return 0


def main():
    args = [a for a in sys.argv[1:] if a not in ("-v", "--verbose")]
    verbose = len(args) < len(sys.argv) - 1
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    cmd = args[0] if args else ""

    try:
        if cmd == "arrange":
            code = _cmd_arrange(args[1:])
        elif cmd == "classify":
            code = _cmd_classify(args[1:])
        else:
            print(f"Unknown command: {cmd}" if cmd else USAGE)
            code = 1
    except ArrangeError as exc:
        logging.getLogger("autoarrange").error("%s", exc)
        code = 1
    sys.exit(code)


if __name__ == "__main__":
    main()
