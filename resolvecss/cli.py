import argparse
import logging
import os
import sys

import yaml

from .base import Packer


def rewrite(packer, source, destination=None):
    """
    Returns the contents of the source CSS file with url() statements rewritten for a
    copy living at destination (the source itself by default).
    """
    source = os.path.abspath(source)
    destination = os.path.abspath(destination or source)
    transform_value = packer.transformer(os.path.dirname(destination))
    with open(source, "r", encoding="utf-8") as f:
        return transform_value(f.read(), os.path.dirname(source))


def main(*args):
    parser = argparse.ArgumentParser(prog="resolvecss")
    parser.add_argument(
        "-c",
        "--config",
        default=None,
        help="config file to use (resolvecss.yaml by default)",
    )
    parser.add_argument(
        "-o", "--output", default=None, help="override output directory"
    )
    parser.add_argument(
        "-f", "--force", action="store_true", default=False, help="pack everything"
    )
    parser.add_argument(
        "-y", "--yaml", action="store_true", default=False, help="print YAML config"
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", default=False, help="debug logging"
    )
    parser.add_argument(
        "--absolute",
        action="store_true",
        default=None,
        help="rewrite url() as absolute paths",
    )
    parser.add_argument(
        "--keep-query",
        action="store_true",
        default=None,
        help="keep ?query and #hash suffixes on rewritten urls",
    )
    parser.add_argument("--root", default=None, help="root-relative url marker")
    parser.add_argument("command", nargs="*")
    options = parser.parse_args(args=args or None)
    if options.verbose:
        logging.basicConfig(level=logging.DEBUG)
    overrides = {}
    if options.output:
        overrides["output"] = options.output
    packer = Packer(options.config, **overrides)
    for key in ("absolute", "keep_query", "root"):
        value = getattr(options, key)
        if value is not None:
            packer.rewrite[key] = value
    if options.yaml:
        print(yaml.safe_dump(packer.dump_config()))
        sys.exit(1)
    command = options.command[0] if options.command else "pack"
    params = options.command[1:]
    if command == "pack" and len(params) <= 1:
        asset = params[0] if params else None
        packer.pack(asset, force=options.force)
    elif command == "rewrite" and 1 <= len(params) <= 2:
        sys.stdout.write(rewrite(packer, *params))
    else:
        print("Unknown command: {}".format(" ".join(options.command)), file=sys.stderr)
        sys.exit(1)
