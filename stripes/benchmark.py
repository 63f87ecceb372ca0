#!/usr/bin/env python3
"""
Benchmark local stripes jobs with and without the combiner, and plot results.
"""

import json
import logging
import os
import shutil
import tempfile
from collections import defaultdict

import matplotlib
matplotlib.use('Agg')  # Non-interactive backend
import matplotlib.pyplot as plt
import numpy as np

from stripes.config import JobConfig
from stripes.coordinator.job_runner import LocalJobRunner
from stripes.errors import JobFailed

logger = logging.getLogger(__name__)

DEFAULT_CONFIGS = [
    {'name': 'no_combiner', 'num_map_tasks': 4, 'num_reduce_tasks': 2, 'use_combiner': False},
    {'name': 'combiner', 'num_map_tasks': 4, 'num_reduce_tasks': 2, 'use_combiner': True},
]


def run_benchmark(input_path, configs=None, runs=1, radius=1, max_workers=4):
    """
    Run one local job per configuration and run number.

    Args:
        input_path: Text file to process
        configs: List of dicts with 'name', 'num_map_tasks', 'num_reduce_tasks'
            and 'use_combiner' keys
        runs: Number of runs per configuration
        radius: Window radius for every run
        max_workers: Thread pool size of the runner

    Returns:
        List of result dicts, one per run
    """
    configs = configs or DEFAULT_CONFIGS
    input_size_mb = os.path.getsize(input_path) / (1024 * 1024)
    workdir = tempfile.mkdtemp(prefix='stripes-bench-')
    results = []

    try:
        for config in configs:
            for run_number in range(1, runs + 1):
                logger.info(f"Benchmark {config['name']} run {run_number}/{runs}")
                job_config = JobConfig(
                    input_path=input_path,
                    output_path=os.path.join(workdir, f"{config['name']}-{run_number}"),
                    radius=radius,
                    num_map_tasks=config['num_map_tasks'],
                    num_reduce_tasks=config['num_reduce_tasks'],
                    use_combiner=config['use_combiner'],
                    data_dir=workdir
                )

                result = {
                    'benchmark_name': config['name'],
                    'run_number': run_number,
                    'num_map_tasks': config['num_map_tasks'],
                    'num_reduce_tasks': config['num_reduce_tasks'],
                    'use_combiner': config['use_combiner'],
                    'radius': radius,
                    'input_size_mb': input_size_mb,
                }
                try:
                    metrics = LocalJobRunner(max_workers=max_workers).run(job_config)
                except JobFailed as e:
                    logger.error(f"Benchmark {config['name']} run {run_number} failed: {e}")
                    result.update({'success': False, 'error_message': str(e)})
                else:
                    runtime = metrics.total_time_seconds
                    result.update({
                        'success': True,
                        'total_runtime_seconds': runtime,
                        'throughput_mbps': input_size_mb / runtime if runtime > 0 else 0.0,
                        'intermediate_size_bytes': metrics.intermediate_size_bytes,
                        'records_written': metrics.records_written,
                        'combiner_reduction_ratio': metrics.combiner_reduction_ratio,
                    })
                results.append(result)
    finally:
        shutil.rmtree(workdir, ignore_errors=True)

    return results


def aggregate_runs(results):
    """
    Aggregate multiple runs of the same benchmark.
    Returns dict: benchmark_name -> {avg_runtime, std_runtime, ...}
    """
    by_benchmark = defaultdict(list)
    for r in results:
        if r['success']:
            by_benchmark[r['benchmark_name']].append(r)

    aggregated = {}
    for name, runs in by_benchmark.items():
        runtimes = [r['total_runtime_seconds'] for r in runs]
        intermediate = [r['intermediate_size_bytes'] for r in runs]
        first = runs[0]

        aggregated[name] = {
            'benchmark_name': name,
            'use_combiner': first['use_combiner'],
            'num_map_tasks': first['num_map_tasks'],
            'num_reduce_tasks': first['num_reduce_tasks'],
            'avg_runtime': float(np.mean(runtimes)),
            'std_runtime': float(np.std(runtimes)),
            'min_runtime': float(np.min(runtimes)),
            'max_runtime': float(np.max(runtimes)),
            'avg_intermediate_bytes': float(np.mean(intermediate)),
            'num_runs': len(runs)
        }

    return aggregated


def save_results(results, filepath):
    with open(filepath, 'w') as f:
        json.dump(results, f, indent=2)


def plot_combiner_comparison(aggregated, output_file):
    """Bar chart of runtime and intermediate data size per benchmark."""
    if not aggregated:
        logger.warning("No successful benchmark runs to plot")
        return

    names = sorted(aggregated)
    runtimes = [aggregated[n]['avg_runtime'] for n in names]
    stds = [aggregated[n]['std_runtime'] for n in names]
    sizes_kb = [aggregated[n]['avg_intermediate_bytes'] / 1024 for n in names]
    x = np.arange(len(names))

    fig, (ax1, ax2) = plt.subplots(1, 2, figsize=(12, 5))
    ax1.bar(x, runtimes, yerr=stds, capsize=5, color='steelblue')
    ax1.set_xticks(x)
    ax1.set_xticklabels(names)
    ax1.set_ylabel('Runtime (seconds)')
    ax1.set_title('Job runtime')
    ax1.grid(True, axis='y', alpha=0.3)

    ax2.bar(x, sizes_kb, color='orangered')
    ax2.set_xticks(x)
    ax2.set_xticklabels(names)
    ax2.set_ylabel('Intermediate data (KB)')
    ax2.set_title('Shuffle volume')
    ax2.grid(True, axis='y', alpha=0.3)

    fig.tight_layout()
    fig.savefig(output_file, dpi=150, bbox_inches='tight')
    plt.close(fig)
    logger.info(f"Saved plot: {output_file}")
