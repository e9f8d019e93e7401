"""
rhlsp – Rhetos DSL Language Server CLI entry point.

Usage
-----
    rhlsp                                   # stdio mode (default, for use with editors)
    rhlsp --tcp 2087                        # listen on TCP port (useful for debugging)
    rhlsp --concept-module my_app.concepts  # load extra concept types

Options given here override ``.rhlsp.toml``; ``initializationOptions`` sent
by the client override both.
"""
from __future__ import annotations

import argparse
import sys


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog='rhlsp',
        description='Rhetos DSL Language Server (LSP) for concept scripts.',
    )
    mode = p.add_mutually_exclusive_group()
    mode.add_argument(
        '--stdio',
        action='store_true',
        default=False,
        help='Communicate over stdin/stdout (default when no flag given)',
    )
    mode.add_argument(
        '--tcp',
        metavar='PORT',
        type=int,
        default=None,
        help='Listen for connections on the given TCP port instead of stdio',
    )
    p.add_argument(
        '--concept-module',
        metavar='MODULE',
        action='append',
        default=None,
        help='Import concept types from MODULE (repeatable; replaces the built-in set)',
    )
    p.add_argument(
        '--publish-interval',
        metavar='SECONDS',
        type=float,
        default=None,
        help='Seconds between diagnostics publish cycles (default: 0.3)',
    )
    p.add_argument(
        '--version',
        action='store_true',
        default=False,
        help='Print the rhlsp version and exit',
    )
    p.add_argument(
        '--log-level',
        metavar='LEVEL',
        default='WARNING',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
        help='Logging level written to stderr (default: WARNING)',
    )
    return p


def _overrides(args: argparse.Namespace) -> dict:
    options = {}
    if args.concept_module:
        options['concept_modules'] = args.concept_module
    if args.publish_interval is not None:
        options['publish_interval'] = args.publish_interval
    return options


def rhlsp() -> None:
    """Entry point for the ``rhlsp`` command."""
    import logging
    args = _build_parser().parse_args()
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format='%(levelname)s %(name)s: %(message)s',
        stream=sys.stderr,
    )

    if args.version:
        from rhlsp import __version__
        print(f'rhlsp {__version__}')
        sys.exit(0)

    from rhlsp.server import configure, server
    configure(_overrides(args))

    if args.tcp is not None:
        server.start_tcp('127.0.0.1', args.tcp)
    else:
        server.start_io()


if __name__ == '__main__':
    rhlsp()
