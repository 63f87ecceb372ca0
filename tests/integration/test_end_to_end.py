"""
End-to-end tests: complete local jobs over real files
"""

import os
from collections import defaultdict
from unittest.mock import Mock

import pytest

from stripes.config import JobConfig
from stripes.coordinator.job_runner import LocalJobRunner, read_output
from stripes.emitter import emit
from stripes.errors import InvalidConfiguration, JobFailed
from stripes.merger import merge
from stripes.tokenizer import tokenize

CORPUS = """I have a dream that one day this nation will rise up and live out the true meaning of its creed.
We hold these truths to be self-evident, that all men are created equal.

I have a dream that one day on the red hills of Georgia,
the sons of former slaves and the sons of former slave owners
will be able to sit down together at the table of brotherhood.
1963 -- !!!
I have a dream today!
"""


def reference_stripes(text, radius):
    """Expected output computed in memory with the core functions"""
    grouped = defaultdict(list)
    for line in text.splitlines():
        for record in emit(tokenize(line), radius):
            grouped[record.word].append(record)
    return {word: merge(records).stripe for word, records in grouped.items()}


@pytest.fixture
def corpus_file(temp_dir):
    filepath = os.path.join(temp_dir, 'speech.txt')
    with open(filepath, 'w') as f:
        f.write(CORPUS)
    return filepath


def _config(corpus_file, temp_dir, **kwargs):
    return JobConfig(
        input_path=corpus_file,
        output_path=os.path.join(temp_dir, 'output'),
        data_dir=os.path.join(temp_dir, 'data'),
        **kwargs
    )


@pytest.mark.integration
class TestLocalJobCorrectness:
    """Output must not depend on how the work was split"""

    @pytest.mark.parametrize("num_map_tasks,num_reduce_tasks,use_combiner", [
        (1, 1, False),
        (1, 1, True),
        (4, 2, False),
        (4, 2, True),
        (7, 3, True),
        (16, 5, False),
    ])
    def test_matches_in_memory_reference(self, corpus_file, temp_dir,
                                         num_map_tasks, num_reduce_tasks, use_combiner):
        config = _config(corpus_file, temp_dir, radius=2, num_map_tasks=num_map_tasks,
                         num_reduce_tasks=num_reduce_tasks, use_combiner=use_combiner)

        metrics = LocalJobRunner().run(config)

        assert read_output(config.output_path) == reference_stripes(CORPUS, 2)
        assert metrics.words_written == len(reference_stripes(CORPUS, 2))

    def test_dream_stripe(self, corpus_file, temp_dir):
        """'dream' appears three times, always between 'a' and 'that'/'today'"""
        config = _config(corpus_file, temp_dir, radius=1)
        LocalJobRunner().run(config)

        stripes = read_output(config.output_path)
        assert stripes['dream'] == {'a': 3, 'that': 2, 'today': 1}
        assert stripes['today'] == {'dream': 1}

    def test_radius_zero(self, corpus_file, temp_dir):
        config = _config(corpus_file, temp_dir, radius=0)
        LocalJobRunner().run(config)

        stripes = read_output(config.output_path)
        assert stripes
        assert all(stripe == {} for stripe in stripes.values())

    def test_combiner_shrinks_intermediate_data(self, corpus_file, temp_dir):
        without = LocalJobRunner().run(_config(corpus_file, temp_dir, num_map_tasks=1))
        with_combiner = LocalJobRunner().run(_config(corpus_file, temp_dir, num_map_tasks=1,
                                                     use_combiner=True))

        assert with_combiner.records_emitted == without.records_emitted
        assert with_combiner.records_written < without.records_written
        assert with_combiner.combiner_reduction_ratio > 0
        assert without.combiner_reduction_ratio == 0

    def test_rerun_replaces_output_and_cleans_intermediate(self, corpus_file, temp_dir):
        config = _config(corpus_file, temp_dir)
        os.makedirs(config.output_path)
        stale = os.path.join(config.output_path, 'part-99.txt')
        with open(stale, 'w') as f:
            f.write('stale\t{"x": 1}\n')

        LocalJobRunner().run(config)

        assert not os.path.exists(stale)
        assert not os.path.exists(config.intermediate_dir)

    def test_keep_intermediate(self, corpus_file, temp_dir):
        config = _config(corpus_file, temp_dir, num_reduce_tasks=2)
        LocalJobRunner().run(config, keep_intermediate=True)

        assert os.listdir(config.intermediate_dir)

    def test_job_status_completed(self, corpus_file, temp_dir):
        runner = LocalJobRunner()
        config = _config(corpus_file, temp_dir)
        runner.run(config)

        status = runner.job_manager.get_job_status(config.job_id)
        assert status['status'] == 'completed'
        assert status['progress'] == 100


@pytest.mark.integration
class TestLocalJobErrors:
    """Tests for configuration and task failures"""

    def test_negative_radius_produces_no_output(self, corpus_file, temp_dir):
        config = _config(corpus_file, temp_dir, radius=-1)

        with pytest.raises(InvalidConfiguration):
            LocalJobRunner().run(config)

        assert not os.path.exists(config.output_path)

    def test_failing_map_function_raises_job_failed(self, corpus_file, temp_dir):
        job_file = os.path.join(temp_dir, 'broken.py')
        with open(job_file, 'w') as f:
            f.write("def map_function(key, value, radius=1):\n"
                    "    raise RuntimeError('map is broken')\n\n"
                    "def reduce_function(key, values):\n"
                    "    yield (key, values)\n")

        runner = LocalJobRunner()
        config = _config(corpus_file, temp_dir, job_file=job_file)

        with pytest.raises(JobFailed) as excinfo:
            runner.run(config)

        assert excinfo.value.phase == 'map'
        assert 'map is broken' in str(excinfo.value)
        assert runner.job_manager.get_job_status(config.job_id)['status'] == 'failed'
        assert not os.path.exists(config.intermediate_dir)

    def test_unexpected_error_marks_job_failed(self, corpus_file, temp_dir):
        ''"Errors outside the tasks still leave the job in the failed state''"
        runner = LocalJobRunner()
        runner.job_manager.generate_map_tasks = Mock(side_effect=OSError('disk gone'))
        config = _config(corpus_file, temp_dir)

        with pytest.raises(OSError):
            runner.run(config)

        status = runner.job_manager.get_job_status(config.job_id)
        assert status['status'] == 'failed'
        assert 'disk gone' in status['error_message']
