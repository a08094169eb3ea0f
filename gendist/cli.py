"""
CLI module for the redistricting GA.

Handles run configuration loading, validation and dispatch to the
orchestration layer.
"""

import argparse
import sys
from typing import List, Optional

from .config import build_run, load_run_config, validate_run_config
from .exceptions import GendistError


def run_from_config(config_path: str, generations: Optional[int] = None, seed: Optional[int] = None):
    """
    Load run configuration and evolve district assignments.

    This is the main entry point called by gendist_cli.py.

    Args:
        config_path: Path to run configuration YAML file
        generations: Overrides 'generations' from the file
        seed: Overrides 'random_seed' from the file

    Returns:
        GenerationReport for the final generation

    Raises:
        FileNotFoundError: If config file doesn't exist
        GendistError: If config is invalid or the run fails
    """
    print(f"Loading configuration from: {config_path}")
    config = load_run_config(config_path)

    if generations is not None:
        config['generations'] = generations
    if seed is not None:
        config['random_seed'] = seed

    print("Validating configuration...")
    validate_run_config(config)
    setup = build_run(config)
    print()

    from .orchestration import run_evolution
    report = run_evolution(setup)

    print("\nRun completed successfully!")
    return report


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the gendist command."""
    parser = argparse.ArgumentParser(
        description="Evolve legislative district assignments over a voting district graph",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  gendist run_config.yaml                     # Run with settings from the file
  gendist run_config.yaml --generations 500   # Override number of generations
  gendist run_config.yaml --seed 7            # Reproduce a run
        """
    )
    parser.add_argument('config', help='Run configuration YAML file')
    parser.add_argument('--generations', '-g', type=int, default=None,
                        help='Number of generations (overrides config)')
    parser.add_argument('--seed', '-s', type=int, default=None,
                        help='Random seed (overrides config)')

    args = parser.parse_args(argv)

    try:
        run_from_config(args.config, generations=args.generations, seed=args.seed)
    except (GendistError, FileNotFoundError) as e:
        print(f"\nError: {e}")
        return 1

    return 0


if __name__ == '__main__':
    sys.exit(main())
