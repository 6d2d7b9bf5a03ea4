"""
Command line entry point for the tslsp language server.

Editors normally start ``tslsp`` with no arguments and talk to it over
stdin/stdout.  ``tslsp --tcp 2087`` serves a single TCP port instead, which
is handy for attaching a client while debugging the server.
"""
from __future__ import annotations

import argparse
import logging
import sys

LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


def _build_parser() -> argparse.ArgumentParser:
    from tslsp import __version__

    p = argparse.ArgumentParser(
        prog='tslsp',
        description='Publish incremental syntax-error diagnostics for .ts and .tsx documents.',
    )
    p.add_argument('--version', action='version', version=f'tslsp {__version__}')
    transport = p.add_mutually_exclusive_group()
    transport.add_argument('--stdio', action='store_true',
                           help='talk LSP over stdin/stdout (the default)')
    transport.add_argument('--tcp', metavar='PORT', type=int,
                           help='listen on PORT instead of using stdio')
    p.add_argument('--host', default='127.0.0.1',
                   help='interface to bind with --tcp (default: %(default)s)')
    p.add_argument('--log-level', metavar='LEVEL', default='WARNING',
                   type=str.upper, choices=LOG_LEVELS,
                   help='stderr logging threshold (default: %(default)s)')
    return p


def tslsp(argv: list[str] | None = None) -> None:
    """Run the ``tslsp`` command."""
    args = _build_parser().parse_args(argv)
    # stdout carries the protocol, so logs go to stderr only
    logging.basicConfig(
        level=args.log_level,
        format='%(levelname)s %(name)s: %(message)s',
        stream=sys.stderr,
    )

    from tslsp.server import server

    if args.tcp is None:
        server.start_io()
    else:
        logging.getLogger(__name__).info('listening on %s:%d', args.host, args.tcp)
        server.start_tcp(args.host, args.tcp)


if __name__ == '__main__':
    tslsp()
