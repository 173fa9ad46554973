"""Command-line interface for the vial sort analysis engine."""

import argparse
import sys
import json

from .analysis import AnalysisSession, DifficultyEstimator
from .benchmark import Benchmark
from .benchmark.visualizer import Visualizer
from .core.errors import StateSpaceTooLarge
from .core.moves import get_valid_moves
from .core.state import win_condition
from .game import Game
from .generator import Level, LevelGenerator, load_levels, save_levels


def main():
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="Vial Sort Puzzle Analysis Engine",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # List valid moves
  python -m vialsort.cli moves --puzzle "0,1,0/1,0,1" --height 3 --empty 1

  # Crawl a level: winnability, state count, success probability
  python -m vialsort.cli analyze --level-file levels.json --index 0

  # Generate 5 random levels with 4 colors
  python -m vialsort.cli generate --count 5 --colors 4 --output levels.json
        """
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    puzzle_parent = argparse.ArgumentParser(add_help=False)
    puzzle_parent.add_argument(
        "--puzzle", "-p", type=str, default=None,
        help="Puzzle string: vials separated by '/', items top first separated by ','"
    )
    puzzle_parent.add_argument(
        "--height", type=int, default=4,
        help="Vial height for --puzzle (default: 4)"
    )
    puzzle_parent.add_argument(
        "--empty", type=int, default=2,
        help="Extra empty vials for --puzzle (default: 2)"
    )
    puzzle_parent.add_argument(
        "--level-file", "-f", type=str, default=None,
        help="JSON file with one level or a list of levels"
    )
    puzzle_parent.add_argument(
        "--index", "-i", type=int, default=0,
        help="Level index within --level-file (default: 0)"
    )

    subparsers.add_parser("moves", parents=[puzzle_parent], help="List valid moves")

    analyze_parser = subparsers.add_parser(
        "analyze", parents=[puzzle_parent], help="Crawl the state space of a puzzle"
    )
    analyze_parser.add_argument(
        "--max-states", type=int, default=None,
        help="Abort the crawl after this many states"
    )
    analyze_parser.add_argument(
        "--no-probability", action="store_true",
        help="Skip the success probability computation"
    )
    analyze_parser.add_argument(
        "--verbose", "-v", action="store_true",
        help="Show detailed crawl statistics"
    )

    subparsers.add_parser("solve", parents=[puzzle_parent], help="Print a shortest solution")

    diff_parser = subparsers.add_parser(
        "difficulty", parents=[puzzle_parent], help="Estimate the puzzle's difficulty"
    )
    diff_parser.add_argument(
        "--tolerance", "-t", type=float, default=0.02,
        help="Relative standard error to stop at (default: 0.02)"
    )
    diff_parser.add_argument(
        "--max-samples", type=int, default=100000,
        help="Maximum number of samples (default: 100000)"
    )
    diff_parser.add_argument(
        "--seed", "-s", type=int, default=None,
        help="Random seed for reproducibility"
    )

    gen_parser = subparsers.add_parser("generate", help="Generate random levels")
    gen_parser.add_argument(
        "--count", "-n", type=int, default=5,
        help="Number of levels to generate (default: 5)"
    )
    gen_parser.add_argument(
        "--colors", "-c", type=int, default=4,
        help="Number of colors (default: 4)"
    )
    gen_parser.add_argument(
        "--height", type=int, default=4,
        help="Vial height (default: 4)"
    )
    gen_parser.add_argument(
        "--empty", type=int, default=2,
        help="Empty vials (default: 2)"
    )
    gen_parser.add_argument(
        "--output", "-o", type=str, default=None,
        help="Output file for levels (JSON format)"
    )
    gen_parser.add_argument(
        "--seed", "-s", type=int, default=None,
        help="Random seed for reproducibility"
    )

    bench_parser = subparsers.add_parser("benchmark", help="Analyse batches of random levels")
    bench_parser.add_argument(
        "--colors", "-c", type=int, nargs="+", default=[2, 3, 4, 5],
        help="Color counts to benchmark (default: 2 3 4 5)"
    )
    bench_parser.add_argument(
        "--levels", "-n", type=int, default=5,
        help="Levels per color count (default: 5)"
    )
    bench_parser.add_argument(
        "--timeout", type=float, default=60.0,
        help="Seconds allowed per level (default: 60)"
    )
    bench_parser.add_argument(
        "--output", "-o", type=str, default="results",
        help="Output directory for results (default: results)"
    )
    bench_parser.add_argument(
        "--seed", "-s", type=int, default=42,
        help="Random seed for reproducibility (default: 42)"
    )
    bench_parser.add_argument(
        "--no-charts", action="store_true",
        help="Skip chart generation"
    )

    args = parser.parse_args()

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    commands = {
        "moves": cmd_moves,
        "analyze": cmd_analyze,
        "solve": cmd_solve,
        "difficulty": cmd_difficulty,
        "generate": cmd_generate,
        "benchmark": cmd_benchmark,
    }
    commands[args.command](args)


def load_puzzle(args) -> Level:
    """Build the level selected by --puzzle or --level-file, or exit."""
    try:
        if args.puzzle is not None:
            return Level.from_string(args.puzzle, vial_height=args.height, empty_vials=args.empty)
        if args.level_file is not None:
            return load_levels(args.level_file)[args.index]
        raise ValueError("either --puzzle or --level-file is required")
    except (ValueError, IndexError, KeyError, OSError, json.JSONDecodeError) as e:
        print(f"Error parsing puzzle: {e}")
        sys.exit(1)


def load_state(args):
    level = load_puzzle(args)
    try:
        return level.to_state()
    except ValueError as e:
        print(f"Error parsing puzzle: {e}")
        sys.exit(1)


def cmd_moves(args):
    """Handle the moves command."""
    state = load_state(args)
    print(state)
    print()

    if win_condition(state):
        print("Puzzle is already sorted.")
    moves = get_valid_moves(state)
    print(f"{len(moves)} valid moves:")
    for move in moves:
        print(f"  {move.src} -> {move.dst}")


def cmd_analyze(args):
    """Handle the analyze command."""
    state = load_state(args)
    print("Input puzzle:")
    print(state)
    print()

    session = AnalysisSession(state, track_memory=args.verbose)
    print("Crawling...")
    try:
        stats = session.crawl(max_states=args.max_states)
    except StateSpaceTooLarge as e:
        print(f"✗ {e}")
        sys.exit(1)

    print(f"Reachable states: {stats.states:,}")
    print(f"Winnable states:  {stats.winnable_states:,}")
    if stats.start_winnable:
        print(f"✓ Puzzle is winnable in {stats.start_distance_from_win} moves")
    else:
        print("✗ There is no solution")
    if args.verbose:
        print(f"  Edges: {stats.edges:,}")
        print(f"  Time: {stats.time_seconds:.4f}s")
        print(f"  Memory: {stats.memory_bytes / 1024:.2f} KB")
        print(f"  Winning moves now: {len(session.winning_moves(state))}")

    if not args.no_probability:
        sccs = session.sccs()
        probability = session.success_probability(state)
        print(f"Strongly connected components: {len(sccs):,}")
        print(f"Success probability under random play: {probability:.6g}")


def cmd_solve(args):
    """Handle the solve command."""
    level = load_puzzle(args)
    try:
        game = Game(level)
    except ValueError as e:
        print(f"Error parsing puzzle: {e}")
        sys.exit(1)

    print("Input puzzle:")
    print(game.state)
    print()

    path = game.solve()
    if path is None:
        print("✗ There is no solution")
        sys.exit(1)

    print(f"✓ Solved in {len(path)} moves:")
    for step, move in enumerate(path, 1):
        print(f"  {step:3d}. {move.src} -> {move.dst}")
    print()
    print(game.state)


def cmd_difficulty(args):
    """Handle the difficulty command."""
    state = load_state(args)
    estimator = DifficultyEstimator(
        tolerance=args.tolerance,
        max_samples=args.max_samples,
        seed=args.seed
    )

    print("Estimating difficulty...")
    estimate = estimator.estimate(state)
    print(f"Estimated difficulty is {estimate.mean:.4g} +/- {estimate.std_error:.4g}")
    print(f"  Samples: {estimate.samples:,} ({estimate.successes:,} found a win)")
    if not estimate.converged:
        print("  Warning: sampling stopped before reaching the requested tolerance")


def cmd_generate(args):
    """Handle the generate command."""
    try:
        generator = LevelGenerator(args.height, args.empty, seed=args.seed)
        levels = generator.generate_batch(args.count, args.colors)
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(1)

    for i, level in enumerate(levels, 1):
        print(f"\n--- Level {i} ({level.num_colors} colors) ---")
        print(level.to_string())
        print(level.to_state())

    if args.output:
        save_levels(levels, args.output)
        print(f"\nAll levels saved to {args.output}")

    print(f"\nTotal levels generated: {len(levels)}")


def cmd_benchmark(args):
    """Handle the benchmark command."""
    print("=" * 60)
    print("VIAL SORT ANALYSIS BENCHMARK")
    print("=" * 60)
    print(f"Levels per color count: {args.levels}")
    print(f"Color counts: {args.colors}")
    print(f"Output directory: {args.output}")
    print("=" * 60)

    benchmark = Benchmark(
        color_counts=args.colors,
        levels_per_count=args.levels,
        timeout_seconds=args.timeout,
        seed=args.seed
    )
    results = benchmark.run()
    summary = benchmark.get_summary()

    print("\n" + "=" * 60)
    print("RESULTS SUMMARY")
    print("=" * 60)
    for colors, stats in summary["results_by_colors"].items():
        print(f"\n{colors} colors:")
        print(f"  Winnable: {stats['winnable_percent']:.1f}% ({stats['analysed']}/{stats['tested']} analysed)")
        print(f"  Avg States: {stats['avg_states']:,.0f}")
        print(f"  Avg Success Probability: {stats['avg_success_probability']:.4f}")
        if stats["avg_difficulty"] is not None:
            print(f"  Avg Difficulty: {stats['avg_difficulty']:.1f}")

    benchmark.save_results(args.output)

    if not args.no_charts:
        print("\nGenerating charts...")
        visualizer = Visualizer(results, args.output)
        charts = visualizer.generate_all()
        visualizer.generate_summary_table()
        print(f"Charts saved to {args.output}/")
        for chart in charts:
            print(f"  - {chart.split('/')[-1]}")

    print("\n" + "=" * 60)
    print("Benchmark complete!")


if __name__ == "__main__":
    main()
