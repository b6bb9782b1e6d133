#!/usr/bin/env python3
"""
otp_cli.py — command-line wrapper around otp_core.

Subcommands:
- secret : generate a new Base32 secret
- hotp   : HOTP code for a given counter
- totp   : current (or given-time) TOTP code; --watch refreshes until Ctrl+C
- verify : check a TOTP or HOTP code

Secrets are passed on the command line or via the OTP_SECRET environment
variable; nothing is written to disk.
"""

import argparse
import logging
import os
import sys
import time

from . import otp_core
from .algorithms import Algorithm
from .errors import OTPError
from .refresher import TOTPRefresher

logger = logging.getLogger(__name__)


# --- CLI command handlers ---
def cmd_secret(args):
    if args.length <= 0:
        raise OTPError("--length must be a positive integer")
    print(otp_core.random_secret(args.length))


def cmd_hotp(args):
    code = otp_core.hotp(args.secret, args.counter, args.digits, args.algorithm)
    print(f"HOTP({args.digits}d, counter={args.counter}): {code}")


def cmd_totp(args):
    if args.watch:
        _watch_totp(args)
        return
    code, remaining = otp_core.totp(
        args.secret, timestamp=args.time, period=args.period, digits=args.digits, algorithm=args.algorithm
    )
    print(f"TOTP ({args.digits}d): {code}  (valid ~{remaining:2d}s)")


def _watch_totp(args):
    last_code = None

    def show(code, remaining):
        nonlocal last_code
        if code != last_code:
            print(f"TOTP ({args.digits}d): {code}  (valid ~{remaining:2d}s)")
            last_code = code
        else:
            print(f".. {remaining:2d}s left", end="\r", flush=True)

    refresher = TOTPRefresher(
        args.secret, show, period=args.period, digits=args.digits, algorithm=args.algorithm
    )
    print(f"Press Ctrl+C to quit. Generating {args.digits}-digit TOTP every {args.period}s...\n")
    refresher.start()
    try:
        while refresher.running:
            time.sleep(0.5)
    except KeyboardInterrupt:
        print("\nBye.")
    finally:
        refresher.stop()


def cmd_verify_totp(args):
    ok = otp_core.verify_totp(
        args.secret,
        args.code,
        timestamp=args.time,
        period=args.period,
        digits=args.digits,
        algorithm=args.algorithm,
        window=args.window,
    )
    print("[+] TOTP code is VALID" if ok else "[-] TOTP code is INVALID")
    return 0 if ok else 1


def cmd_verify_hotp(args):
    ok, next_counter = otp_core.verify_hotp(
        args.secret,
        args.code,
        args.counter,
        digits=args.digits,
        algorithm=args.algorithm,
        look_ahead=args.look_ahead,
    )
    if ok:
        print(f"[+] HOTP code is VALID (next counter = {next_counter})")
        return 0
    print("[-] HOTP code is INVALID")
    return 1


def cmd_help(args):
    print("'otp-tool -h' for help.")


# --- Argparse builder ---
def _add_common(p: argparse.ArgumentParser, with_period: bool = False) -> None:
    p.add_argument(
        "--secret",
        default=os.environ.get("OTP_SECRET"),
        required="OTP_SECRET" not in os.environ,
        help="Base32 secret (default: $OTP_SECRET)",
    )
    p.add_argument("--digits", type=int, default=otp_core.DEFAULT_DIGITS, help="Number of OTP digits")
    p.add_argument(
        "--algorithm",
        default=otp_core.DEFAULT_ALGORITHM.value,
        choices=[a.value for a in Algorithm],
        type=str.upper,
        help="HMAC hash algorithm",
    )
    if with_period:
        p.add_argument("--period", type=int, default=otp_core.DEFAULT_TIME_STEP, help="TOTP time step (seconds)")
        p.add_argument("--time", type=int, default=None, help="Epoch seconds to use instead of now")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="otp-tool", description="TOTP/HOTP generator and verifier")
    p.add_argument("--verbose", action="store_true", help="Verbose (debug) logging")
    sub = p.add_subparsers(dest="cmd")
    p.set_defaults(func=cmd_help)

    # secret
    ps = sub.add_parser("secret", help="Generate a random Base32 secret")
    ps.add_argument("--length", type=int, default=otp_core.DEFAULT_SECRET_LENGTH,
                    help="Number of random characters to encode")
    ps.set_defaults(func=cmd_secret)

    # hotp
    ph = sub.add_parser("hotp", help="Generate HOTP code for a specific counter")
    _add_common(ph)
    ph.add_argument("--counter", type=int, required=True)
    ph.set_defaults(func=cmd_hotp)

    # totp
    pt = sub.add_parser("totp", help="Show the TOTP code")
    _add_common(pt, with_period=True)
    pt.add_argument("--watch", action="store_true", help="Refresh every second until Ctrl+C")
    pt.set_defaults(func=cmd_totp)

    # verify
    pv = sub.add_parser("verify", help="Verify an OTP code (TOTP or HOTP)")
    sub_v = pv.add_subparsers(dest="verify_type")
    pv.set_defaults(func=lambda args: pv.print_help())

    pvt = sub_v.add_parser("totp", help="Verify a TOTP code")
    _add_common(pvt, with_period=True)
    pvt.add_argument("--code", required=True, help="OTP code to verify")
    pvt.add_argument("--window", type=int, default=1, help="Allowed +/- step window")
    pvt.set_defaults(func=cmd_verify_totp)

    pvh = sub_v.add_parser("hotp", help="Verify a HOTP code")
    _add_common(pvh)
    pvh.add_argument("--code", required=True, help="OTP code to verify")
    pvh.add_argument("--counter", type=int, required=True, help="Current HOTP counter")
    pvh.add_argument("--look-ahead", type=int, default=0, help="Allowed counter look-ahead")
    pvh.set_defaults(func=cmd_verify_hotp)

    return p


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="[%(levelname)s] %(name)s: %(message)s",
    )
    try:
        rc = args.func(args)
    except ValueError as e:
        logger.debug("command %s rejected input", args.cmd, exc_info=True)
        print(f"[!] {e}", file=sys.stderr)
        return 2
    return rc or 0


if __name__ == "__main__":
    sys.exit(main())
