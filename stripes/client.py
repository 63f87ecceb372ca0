#!/usr/bin/env python3
"""
Stripes CLI
Provides commands to run a co-occurrence job locally, inspect its output,
and benchmark the combiner
"""

import argparse
import json
import logging
import os
import sys

from stripes import config
from stripes.benchmark import (DEFAULT_CONFIGS, aggregate_runs, plot_combiner_comparison,
                               run_benchmark, save_results)
from stripes.config import JobConfig, parse_radius
from stripes.coordinator.job_runner import LocalJobRunner, read_output
from stripes.errors import InvalidConfiguration, JobFailed


def run_job(args):
    """Run a co-occurrence job on the local engine"""
    try:
        job_config = JobConfig(
            input_path=args.input,
            output_path=args.output,
            radius=parse_radius(args.radius),
            num_map_tasks=args.num_map_tasks,
            num_reduce_tasks=args.num_reduce_tasks,
            use_combiner=args.use_combiner,
            job_file=args.job_file,
            data_dir=args.data_dir
        )
        if args.job_id:
            job_config.job_id = args.job_id

        metrics = LocalJobRunner(max_workers=args.max_workers).run(job_config)
    except InvalidConfiguration as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    except JobFailed as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"✓ Job {metrics.job_id} completed in {metrics.total_time_seconds:.2f}s")
    print(f"  Output: {args.output}")
    print(f"  Words: {metrics.words_written}")
    print(f"  Intermediate records: {metrics.records_written} (emitted {metrics.records_emitted})")

    if args.metrics_file:
        metrics.save_to_file(args.metrics_file)
        print(f"  Metrics: {args.metrics_file}")
    return 0


def show_output(args):
    """Print the merged stripes of a finished job"""
    if not os.path.isdir(args.output):
        print(f"Error: Output directory {args.output} not found", file=sys.stderr)
        return 1

    stripes = read_output(args.output)
    words = args.words or sorted(stripes)
    missing = 0
    for word in words:
        if word not in stripes:
            print(f"{word}\t(not found)")
            missing += 1
            continue
        print(f"{word}\t{json.dumps(stripes[word], sort_keys=True)}")
    return 1 if missing else 0


def benchmark(args):
    """Compare runs with and without the combiner"""
    try:
        radius = parse_radius(args.radius)
    except InvalidConfiguration as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    if not os.path.isfile(args.input):
        print(f"Error: Input file {args.input} not found", file=sys.stderr)
        return 2

    results = run_benchmark(args.input, DEFAULT_CONFIGS, runs=args.runs, radius=radius)
    aggregated = aggregate_runs(results)

    for name, stats in sorted(aggregated.items()):
        print(f"{name}: {stats['avg_runtime']:.3f}s ± {stats['std_runtime']:.3f}s, "
              f"intermediate {stats['avg_intermediate_bytes'] / 1024:.1f} KB "
              f"over {stats['num_runs']} run(s)")

    if args.results:
        save_results(results, args.results)
    if args.plot:
        plot_combiner_comparison(aggregated, args.plot)

    return 0 if all(r['success'] for r in results) else 1


def build_parser():
    parser = argparse.ArgumentParser(
        prog='stripes',
        description='Word co-occurrence counting with the stripes pattern',
        epilog='Example: %(prog)s run input.txt output/ 2 --use-combiner'
    )
    parser.add_argument('--log-level', default=config.LOG_LEVEL,
                        help='Logging level (default: $STRIPES_LOG_LEVEL or INFO)')

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    # run command
    run_parser = subparsers.add_parser(
        'run',
        help='Run a co-occurrence job',
        description='Count word co-occurrences of INPUT and write stripes to OUTPUT'
    )
    run_parser.add_argument('input', help='Input text file')
    run_parser.add_argument('output', help='Output directory (replaced if it exists)')
    run_parser.add_argument('radius', nargs='?', default=config.RADIUS,
                            help='Window radius (default: $STRIPES_RADIUS or 1)')
    run_parser.add_argument('--num-map-tasks', type=int, default=config.DEFAULT_NUM_MAP_TASKS,
                            help=f'Number of map tasks (default: {config.DEFAULT_NUM_MAP_TASKS})')
    run_parser.add_argument('--num-reduce-tasks', type=int, default=config.DEFAULT_NUM_REDUCE_TASKS,
                            help=f'Number of reduce tasks (default: {config.DEFAULT_NUM_REDUCE_TASKS})')
    run_parser.add_argument('--use-combiner', action='store_true', help='Enable combiner optimization')
    run_parser.add_argument('--job-file', default=config.DEFAULT_JOB_FILE,
                            help='Python file with map/reduce functions')
    run_parser.add_argument('--job-id', help='Custom job ID (auto-generated if not provided)')
    run_parser.add_argument('--data-dir', default=config.DATA_DIR,
                            help='Directory for intermediate files (default: $STRIPES_DATA_DIR)')
    run_parser.add_argument('--max-workers', type=int, default=4, help='Concurrent tasks (default: 4)')
    run_parser.add_argument('--metrics-file', help='Write job metrics as JSON to this file')
    run_parser.set_defaults(func=run_job)

    # show command
    show_parser = subparsers.add_parser(
        'show',
        help='Show job output',
        description='Print the merged stripes of a finished job'
    )
    show_parser.add_argument('output', help='Output directory of a finished job')
    show_parser.add_argument('words', nargs='*', help='Words to show (default: all)')
    show_parser.set_defaults(func=show_output)

    # benchmark command
    bench_parser = subparsers.add_parser(
        'benchmark',
        help='Benchmark the combiner',
        description='Run the job with and without the combiner and compare'
    )
    bench_parser.add_argument('input', help='Input text file')
    bench_parser.add_argument('--radius', default=config.RADIUS, help='Window radius')
    bench_parser.add_argument('--runs', type=int, default=3, help='Runs per configuration (default: 3)')
    bench_parser.add_argument('--results', help='Write raw results as JSON to this file')
    bench_parser.add_argument('--plot', help='Write a comparison chart to this file')
    bench_parser.set_defaults(func=benchmark)

    return parser


def main(argv=None):
    """Main CLI entry point"""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    if not hasattr(args, 'func'):
        parser.print_help()
        return 1

    return args.func(args)


if __name__ == '__main__':
    sys.exit(main())
