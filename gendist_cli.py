#!/usr/bin/env python3
"""
District GA CLI - Minimal entry point.

This is the command-line interface for the district evolution engine.
All run settings, including the voting district graph, are specified in a
YAML file.

Usage:
    python3 gendist_cli.py run_config.yaml
    python3 gendist_cli.py run_config.yaml --generations 500 --seed 7
    python3 gendist_cli.py --help

Examples:
    # Evolve the bundled 4x4 grid example
    python3 gendist_cli.py examples/grid_run.yaml
"""

import sys
from pathlib import Path

# Add project root to path if needed
project_root = Path(__file__).parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))


def main():
    """Main entry point for district GA CLI."""
    from gendist.cli import main as cli_main

    try:
        sys.exit(cli_main(sys.argv[1:]))
    except KeyboardInterrupt:
        print("\n\nInterrupted by user")
        sys.exit(1)


if __name__ == '__main__':
    main()
