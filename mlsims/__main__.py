"""
Main entry point for mlsims.

This module provides the command line entry point that serves the mlsims API.
"""

import argparse
import logging
import json
import yaml

from mlsims.components.config import ConfigManager
from mlsims.components.server import ServerManager


def setup_logging(level: str = 'INFO') -> None:
    """
    Set up logging.

    Args:
        level: Logging level
    """
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler()
        ]
    )


def parse_args(argv=None) -> argparse.Namespace:
    """
    Parse command line arguments.

    Args:
        argv: Argument list, defaults to sys.argv

    Returns:
        Parsed arguments
    """
    parser = argparse.ArgumentParser(description='mlsims API server')

    parser.add_argument(
        '--config',
        help='Path to configuration file (JSON or YAML)'
    )

    parser.add_argument(
        '--log-level',
        default='INFO',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
        help='Logging level'
    )

    parser.add_argument(
        '--port',
        type=int,
        help='Server port'
    )

    parser.add_argument(
        '--host',
        help='Server host'
    )

    parser.add_argument(
        '--seed',
        type=int,
        help='Seed for all random draws'
    )

    return parser.parse_args(argv)


def load_config_file(filepath: str) -> dict:
    """
    Load configuration from a file.

    Args:
        filepath: Path to configuration file

    Returns:
        Configuration dictionary
    """
    if filepath.endswith('.json'):
        with open(filepath, 'r') as f:
            return json.load(f)
    elif filepath.endswith('.yaml') or filepath.endswith('.yml'):
        with open(filepath, 'r') as f:
            return yaml.safe_load(f) or {}
    else:
        raise ValueError(f"Unsupported configuration file format: {filepath}")


def build_overrides(args: argparse.Namespace) -> dict:
    """
    Merge the configuration file and command line flags into overrides.

    Flags win over the file.
    """
    overrides = {}

    if args.config:
        overrides.update(load_config_file(args.config))

    overrides.setdefault('logging', {})['level'] = args.log_level.lower()

    if args.port:
        overrides.setdefault('server', {})['port'] = args.port

    if args.host:
        overrides.setdefault('server', {})['host'] = args.host

    if args.seed is not None:
        overrides['random-seed'] = args.seed

    return overrides


def main(argv=None) -> None:
    """
    Main entry point.
    """
    args = parse_args(argv)

    setup_logging(args.log_level)

    config = ConfigManager.get_config(build_overrides(args))

    server = ServerManager.get_server(config)
    try:
        server.run()
    except KeyboardInterrupt:
        pass
    finally:
        ServerManager.shutdown()


if __name__ == '__main__':
    main()
