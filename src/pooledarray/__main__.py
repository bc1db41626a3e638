# -------------------------------------
# pooledarray CLI entry point
# -------------------------------------
"""
CLI entry point for pooled arrays.

Usage:
    python -m pooledarray b a a NA c --unique
    python -m pooledarray 3 1 2 1 --type int --order
    python -m pooledarray x y x --replace x z
"""
import argparse
import sys

import numpy as np

from .coord import order, replace, unique
from .format import format_pooled
from .pooled import PooledArray

_TYPES = {"str": str, "int": int, "float": float}


def _parse_values(tokens: list[str], na: str, kind: str) -> np.ndarray:
    convert = _TYPES[kind]
    values = np.empty(len(tokens), dtype=object)
    for i, tok in enumerate(tokens):
        values[i] = None if tok == na else convert(tok)
    return values


def _main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(
        description="Pool a list of values and inspect the pooled array.",
    )
    p.add_argument("values", nargs="+", help="Values to pool")
    p.add_argument("--na", default="NA", metavar="TOKEN", help="Token that marks a missing value (default: NA)")
    p.add_argument("--type", dest="kind", choices=sorted(_TYPES), default="str", help="Value type (default: str)")
    p.add_argument("--ref-dtype", choices=["uint8", "uint16", "uint32"], help="Reference width")
    p.add_argument("--replace", nargs=2, metavar=("FROM", "TO"), help="Replace FROM with TO before printing (use the NA token for missing)")
    p.add_argument("--refs", action="store_true", help="Print the reference array")
    p.add_argument("--pool", action="store_true", help="Print the pool")
    p.add_argument("--unique", "-u", action="store_true", help="Print the levels (pool plus NA if any cell is missing)")
    p.add_argument("--order", "-o", action="store_true", help="Print the grouping permutation")
    args = p.parse_args(argv)

    try:
        x = PooledArray.from_values(
            _parse_values(args.values, args.na, args.kind),
            ref_dtype=args.ref_dtype,
        )
        if args.replace:
            old, new = _parse_values(args.replace, args.na, args.kind)
            replace(x, old, new)
    except ValueError as e:
        print(f"pooledarray error: {e}", file=sys.stderr)
        return 1

    if args.refs:
        print(" ".join(str(r) for r in x.refs.tolist()))
    elif args.pool:
        for ref, v in enumerate(x.pool, 1):
            print(f"{ref}\t{v}")
    elif args.unique:
        print(" ".join(args.na if v is None else str(v) for v in unique(x).tolist()))
    elif args.order:
        print(" ".join(str(i) for i in order(x).tolist()))
    else:
        print(format_pooled(x))

    return 0


if __name__ == "__main__":
    import signal
    signal.signal(signal.SIGPIPE, signal.SIG_DFL)
    raise SystemExit(_main())
