"""
Tests for combiner benchmarking
"""

import json
import os

import pytest

from stripes.benchmark import aggregate_runs, plot_combiner_comparison, run_benchmark, save_results
from stripes.client import main


@pytest.mark.integration
class TestBenchmark:
    """Tests for benchmark runs and reporting"""

    def test_run_and_aggregate(self, sample_input_file):
        results = run_benchmark(sample_input_file, runs=2)

        assert len(results) == 4
        assert all(r['success'] for r in results)

        aggregated = aggregate_runs(results)
        assert set(aggregated) == {'no_combiner', 'combiner'}
        assert aggregated['combiner']['num_runs'] == 2
        assert aggregated['combiner']['avg_intermediate_bytes'] < \
            aggregated['no_combiner']['avg_intermediate_bytes']

    def test_save_and_plot(self, sample_input_file, temp_dir):
        results = run_benchmark(sample_input_file, runs=1)
        results_file = os.path.join(temp_dir, 'results.json')
        plot_file = os.path.join(temp_dir, 'combiner.png')

        save_results(results, results_file)
        plot_combiner_comparison(aggregate_runs(results), plot_file)

        with open(results_file) as f:
            assert len(json.load(f)) == 2
        assert os.path.getsize(plot_file) > 0

    def test_aggregate_skips_failed_runs(self):
        results = [{'benchmark_name': 'x', 'success': False, 'error_message': 'boom'}]
        assert aggregate_runs(results) == {}

    def test_plot_without_data_writes_nothing(self, temp_dir):
        plot_file = os.path.join(temp_dir, 'empty.png')
        plot_combiner_comparison({}, plot_file)
        assert not os.path.exists(plot_file)

    def test_benchmark_command(self, sample_input_file, temp_dir, capsys):
        plot_file = os.path.join(temp_dir, 'plot.png')

        assert main(['benchmark', sample_input_file, '--runs', '1', '--plot', plot_file]) == 0
        out = capsys.readouterr().out
        assert 'combiner' in out
        assert os.path.exists(plot_file)
