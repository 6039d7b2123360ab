# pejelagarto_cli.py
# Pejelagarto - command line front-end
#
#   pejelagarto --encode < human.txt > coded.txt
#   pejelagarto --decode --infile coded.txt --outfile human.txt
#   pejelagarto --strip-timestamp < coded.txt
#   pejelagarto --show-rules

import argparse
import logging
import random
import sys

import pejelagarto as pj

logger = logging.getLogger(__name__)


def _read_bytes(path):
    if not path:
        return sys.stdin.buffer.read()
    with open(path, "rb") as f:
        return f.read()


def _write_bytes(path, data: bytes) -> None:
    if not path:
        sys.stdout.buffer.write(data)
        sys.stdout.buffer.flush()
        return
    with open(path, "wb") as f:
        f.write(data)


def _show_rules() -> str:
    lines = []
    for ruleset in (pj.PUNCTUATION_RULES, pj.LETTER_RULES):
        for to_pejelagarto in (True, False):
            direction = "to Pejelagarto" if to_pejelagarto else "from Pejelagarto"
            lines.append(f"[{ruleset.name}] {direction}")
            for index, key, value in pj.rule_order(ruleset, to_pejelagarto):
                lines.append(f"  {index:+d}  {key!r} -> {value!r}")
    return "\n".join(lines) + "\n"


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="pejelagarto", description="Pejelagarto reversible text codec")
    action = ap.add_mutually_exclusive_group(required=True)
    action.add_argument("--encode", action="store_true", help="Human -> Pejelagarto (reads raw bytes)")
    action.add_argument("--decode", action="store_true", help="Pejelagarto -> Human (reads UTF-8 text)")
    action.add_argument("--strip-timestamp", action="store_true", help="remove the invisible timestamp characters")
    action.add_argument("--show-rules", action="store_true", help="print the substitution rule order")
    ap.add_argument("--infile", help="read from this file instead of stdin")
    ap.add_argument("--outfile", help="write to this file instead of stdout")
    ap.add_argument("--timestamp", help="ISO-8601 instant to embed instead of the current time (encode)")
    ap.add_argument("--seed", type=int, help="seed for the timestamp insertion positions (encode)")
    ap.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    return ap


def main(argv=None) -> int:
    ap = build_parser()
    args = ap.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    now = None
    if args.timestamp:
        now = pj.parse_timestamp(args.timestamp)
        if now is None:
            ap.error(f"--timestamp: not an ISO-8601 instant: {args.timestamp!r}")
    rng = random.Random(args.seed) if args.seed is not None else None

    try:
        if args.show_rules:
            _write_bytes(args.outfile, _show_rules().encode("utf-8"))
            return 0

        data = _read_bytes(args.infile)
        if args.encode:
            out = pj.encode(data, now=now, rng=rng).encode("utf-8")
        elif args.decode:
            out = pj.decode(data.decode("utf-8", "surrogateescape"))
        else:
            text = pj.strip_invisible_timestamp(data.decode("utf-8", "surrogateescape"))
            out = text.encode("utf-8", "surrogateescape")
        _write_bytes(args.outfile, out)
        logger.debug("wrote %d bytes", len(out))
        return 0

    except (OSError, ValueError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
