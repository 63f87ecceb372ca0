#!/usr/bin/env python3
"""
Reduce Task Executor
Executes reduce tasks by reading intermediate data, grouping by word,
applying the reduce function, and writing final output
"""

import json
import logging
import os
import time
from collections import defaultdict

import psutil

from stripes.errors import InvalidStripe
from stripes.stripe import validate_stripe
from stripes.worker.function_loader import FunctionLoader

logger = logging.getLogger(__name__)


def format_output_line(word: str, stripe: dict) -> str:
    """Serialize one aggregated record as ``word<TAB>{json stripe}``."""
    return f"{word}\t{json.dumps(stripe, sort_keys=True)}\n"


class ReduceExecutor:
    """Executes a single reduce task"""

    def __init__(self, task_id: int, partition_id: int, intermediate_files: list,
                 job_file: str, output_path: str, job_id: str):
        """
        Initialize the reduce executor

        Args:
            task_id: Unique ID for this reduce task
            partition_id: Partition ID this reduce task is responsible for
            intermediate_files: List of intermediate file paths to read
            job_file: Path to the job's map/reduce Python file
            output_path: Directory path where final output should be written
            job_id: Unique job identifier
        """
        self.task_id = task_id
        self.partition_id = partition_id
        self.intermediate_files = intermediate_files
        self.job_file = job_file
        self.output_path = output_path
        self.job_id = job_id
        self.loader = FunctionLoader(job_file)

    def execute(self) -> dict:
        """
        Execute the reduce task

        Returns:
            Dictionary with 'success', 'execution_time_ms', 'error_message',
            'words_written' and 'memory_usage_bytes' fields
        """
        start_time = time.time()

        try:
            logger.info(f"Reduce task {self.task_id}: Loading reduce function")
            reduce_func = self.loader.get_reduce_function()

            logger.info(f"Reduce task {self.task_id}: Reading and grouping intermediate data")
            key_groups = self._read_and_group_intermediate()
            logger.info(f"Reduce task {self.task_id}: Grouped {len(key_groups)} unique words")

            results = []
            for key in sorted(key_groups.keys()):  # Sort by word for deterministic output
                for out_key, out_value in reduce_func(key, key_groups[key]):
                    results.append((out_key, out_value))

            logger.info(f"Reduce task {self.task_id}: Writing {len(results)} output records")
            self._write_output(results)

            execution_time = int((time.time() - start_time) * 1000)
            logger.info(f"Reduce task {self.task_id}: Completed in {execution_time}ms")

            return {
                'success': True,
                'execution_time_ms': execution_time,
                'error_message': '',
                'words_written': len(results),
                'memory_usage_bytes': psutil.Process().memory_info().rss
            }

        except Exception as e:
            execution_time = int((time.time() - start_time) * 1000)
            logger.error(f"Reduce task {self.task_id} failed: {e}")
            return {
                'success': False,
                'execution_time_ms': execution_time,
                'error_message': str(e),
                'words_written': 0,
                'memory_usage_bytes': psutil.Process().memory_info().rss
            }

    def _read_and_group_intermediate(self) -> dict:
        """
        Read all intermediate files and group stripes by word

        Returns:
            Dictionary mapping word to list of stripes
        """
        key_groups = defaultdict(list)
        files_read = 0
        lines_processed = 0
        lines_skipped = 0

        for filepath in self.intermediate_files:
            if not os.path.exists(filepath):
                logger.warning(f"Reduce task {self.task_id}: file not found: {filepath}")
                continue

            files_read += 1

            with open(filepath, 'r', encoding='utf-8', errors='ignore') as f:
                for line in f:
                    line = line.strip()
                    if not line:
                        continue

                    try:
                        record = json.loads(line)
                        key = str(record['key'])
                        value = validate_stripe(record['value'])
                    except (json.JSONDecodeError, KeyError, TypeError, InvalidStripe) as e:
                        lines_skipped += 1
                        logger.warning(f"Reduce task {self.task_id}: Skipping malformed "
                                       f"record in {filepath}: {e}")
                        continue

                    key_groups[key].append(value)
                    lines_processed += 1

        logger.info(f"Reduce task {self.task_id}: Read {files_read} files, processed "
                    f"{lines_processed} records, skipped {lines_skipped} malformed records")
        return key_groups

    def _write_output(self, results: list):
        """
        Write final reduce output

        Args:
            results: List of (word, stripe) tuples to write
        """
        os.makedirs(self.output_path, exist_ok=True)
        output_file = os.path.join(self.output_path, f"part-{self.partition_id}.txt")

        with open(output_file, 'w', encoding='utf-8') as f:
            for key, value in results:
                f.write(format_output_line(key, value))

        logger.info(f"Reduce task {self.task_id}: Wrote output to {output_file}")
