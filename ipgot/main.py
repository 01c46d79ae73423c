#!/usr/bin/env python3
"""
IPGOT - IP information lookup

Looks up geolocation and network metadata for an IP address from public
APIs, adds a synthetic risk analysis and serves the result as an HTML report
(server mode) or prints it to the terminal (CLI mode).
"""

import argparse
import logging
import sys
from pathlib import Path

from ipgot.core.config import Config
from ipgot.core.exceptions import ConfigurationError
from ipgot.interfaces.cli import CLI
from ipgot.interfaces.web_server import WebServer

def setup_logging(config: Config):
    """Configure the root logger"""
    if config.debug:
        handlers = [logging.StreamHandler()]
        try:
            handlers.append(logging.FileHandler(config.log_file))
        except OSError as e:
            print(f"Could not open log file {config.log_file}: {e}", file=sys.stderr)
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            handlers=handlers,
        )
    else:
        logging.basicConfig(
            level=logging.INFO,
            format="%(asctime)s - %(levelname)s - %(message)s"
        )

def main(argv=None):
    """Main entry point for IPGOT"""
    argv = sys.argv[1:] if argv is None else argv

    # Parse initial arguments to determine mode
    parser = argparse.ArgumentParser(description="IPGOT - IP information lookup", add_help=False)
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument("--config", type=str, help="Path to configuration file")
    parser.add_argument("--server", action="store_true", help="Run in web server mode")
    parser.add_argument("--bind", type=str, help="Server bind address")
    parser.add_argument("--port", type=int, help="Server bind port")
    parser.add_argument("--version", action="store_true", help="Show version information")

    # Parse just the known args for initial setup
    args, remaining = parser.parse_known_args(argv)

    if args.version:
        from ipgot import __version__
        print(f"IPGOT version {__version__}")
        return 0

    config_path = Path(args.config) if args.config else None
    try:
        config = Config(config_path, debug=args.debug)
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    setup_logging(config)

    # Run in web server mode if requested
    if args.server:
        server = WebServer(config)
        return server.run(address=args.bind, port=args.port)

    # Otherwise, run in CLI mode
    cli = CLI(config)
    return cli.run(remaining)

if __name__ == "__main__":
    sys.exit(main())
