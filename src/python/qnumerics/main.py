#!/usr/bin/env python3
"""
===============================================================================
QUATERNION NUMERICS - Command-Line Inspector
===============================================================================
Classifies a quaternion given on the command line and shows its canonical
forms and its conversions to another precision.

USAGE:
    qnumerics 1 0 0 0                      # real, then i, j, k coefficients
    qnumerics -- -5 inf 0 0                # '--' before a leading '-inf'/'-5'
    qnumerics 0.1 0 0 0 --to float32       # exact conversion fails
    qnumerics 1e-310 0 0 0 --dtype float64 # subnormal
    qnumerics 1 2 3 4 --config my.yaml -v

Precision defaults come from config/quaternion_config.yaml (see
qnumerics.config); --dtype and --to override them.
===============================================================================
"""

import argparse
import logging
import sys
from typing import List, Optional

import yaml

from qnumerics.config import NumericsConfig, load_config
from qnumerics.quaternion import Quaternion
from qnumerics.real import real_type

logger = logging.getLogger('qnumerics.main')

PREDICATES = ('is_finite', 'is_normal', 'is_subnormal',
              'is_zero', 'is_real', 'is_pure')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='qnumerics',
        description='Classify a quaternion and show its canonical forms.',
    )
    parser.add_argument('components', nargs=4, metavar='COMPONENT',
                        help='real part followed by the i, j, k coefficients '
                             "(accepts 'inf', 'nan', '-0.0')")
    parser.add_argument('--dtype', default=None,
                        help='precision of the quaternion (default: config)')
    parser.add_argument('--to', dest='target', default=None,
                        help='precision to convert to (default: config)')
    parser.add_argument('--config', default=None,
                        help='path to a YAML config file')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='log at DEBUG level')
    return parser


def parse_quaternion(texts: List[str], dtype: str) -> Quaternion:
    """
    Build a quaternion from four decimal strings, real part first.

    Parsing goes straight to the target precision so longdouble input keeps
    its extra digits.
    """
    rt = real_type(dtype)
    real, x, y, z = (rt.parse(text) for text in texts)
    return Quaternion(real, (x, y, z), dtype=rt.dtype)


def format_report(q: Quaternion, target: str) -> List[str]:
    """Lines describing ``q`` and its conversion to ``target``."""
    target_name = real_type(target).name
    lines = [f"{'quaternion':<24}: {q!r}"]
    for name in PREDICATES:
        lines.append(f"{name:<24}: {getattr(q, name)}")
    lines.append(f"{'canonicalized':<24}: {q.canonicalized!r}")
    lines.append(f"{'canonicalized_transform':<24}: {q.canonicalized_transform!r}")
    lines.append(f"{'astype(' + target_name + ')':<24}: {q.astype(target)!r}")

    exact = Quaternion.exactly(q, target)
    exact_text = repr(exact) if exact is not None else 'not exactly representable'
    lines.append(f"{'exactly(' + target_name + ')':<24}: {exact_text}")
    return lines


def configure_logging(config: NumericsConfig, verbose: bool) -> None:
    level = logging.DEBUG if verbose else getattr(logging, config.log_level)
    logging.basicConfig(
        level=level,
        format=config.log_format,
        handlers=[logging.StreamHandler(sys.stderr)],
    )


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
    except (OSError, ValueError, yaml.YAMLError) as exc:
        parser.error(f"cannot load config: {exc}")
    configure_logging(config, args.verbose)

    dtype = args.dtype or config.default_dtype
    target = args.target or config.conversion_dtype
    try:
        q = parse_quaternion(args.components, dtype)
        report = format_report(q, target)
    except (TypeError, ValueError) as exc:
        parser.error(str(exc))

    logger.debug("Inspected %r as %s, converted to %s", q, dtype, target)
    print('\n'.join(report))
    return 0


if __name__ == '__main__':
    sys.exit(main())
