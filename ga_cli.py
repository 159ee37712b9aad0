#!/usr/bin/env python3
"""
ga_cli.py - evolve a problem described by a single YAML run file.

    python3 ga_cli.py RUN_FILE
    python3 ga_cli.py --config RUN_FILE

The run file's `algorithm` key picks one of two modes:

  standard    Breed one population and evolve it for number_of_generations
              (-1 keeps going until the run is stopped).
  divergent   Evolve min_populations seed populations side by side, then
              repeat extinction_cycles times: drop all but the best
              min_populations, then speciation_events times split every
              population with the speciation operator and evolve each
              split. The population that holds the best genome wins.

Other sections: `strategy` (GA options), `problem` (name and arguments),
`output` (root folder, overwrite, plot) and the optional `logging`.

Results land in output.root: statistics.csv, population.csv (best genome
first), run_metadata.yaml, fitness_history.png when output.plot is set,
and a log file under logs/.

    python3 ga_cli.py configs/target_phrase.yaml
    python3 ga_cli.py configs/target_phrase_divergent.yaml
"""

import sys


def main():
    """Main entry point for GA CLI."""
    if len(sys.argv) < 2 or sys.argv[1] in ['-h', '--help', 'help']:
        print(__doc__)
        sys.exit(0 if len(sys.argv) > 1 else 1)

    config_path = sys.argv[1]

    if config_path.startswith('--config='):
        config_path = config_path.split('=', 1)[1]
    elif config_path == '--config':
        if len(sys.argv) < 3:
            print("Error: --config requires an argument")
            print(__doc__)
            sys.exit(1)
        config_path = sys.argv[2]

    try:
        from ga_engine.cli import run_from_config
        run_from_config(config_path)
    except KeyboardInterrupt:
        print("\n\nInterrupted by user")
        sys.exit(1)
    except Exception as e:
        print(f"\nError: {e}")
        sys.exit(1)


if __name__ == '__main__':
    main()
