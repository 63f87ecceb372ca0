#!/usr/bin/env python3
"""
Map Task Executor
Executes map tasks by reading input splits, applying the map function,
partitioning output, and writing intermediate files
"""

import hashlib
import json
import logging
import os
import time
from collections import defaultdict

import psutil

from stripes.worker.function_loader import FunctionLoader

logger = logging.getLogger(__name__)


def partition_for(key: str, num_partitions: int) -> int:
    """Stable hash partitioner, identical across processes and runs."""
    digest = hashlib.sha1(str(key).encode('utf-8')).hexdigest()
    return int(digest, 16) % num_partitions


class MapExecutor:
    """Executes a single map task"""

    def __init__(self, task_id: int, input_path: str, start_offset: int,
                 end_offset: int, num_reduce_tasks: int, job_file: str,
                 use_combiner: bool, job_id: str, intermediate_dir: str,
                 job_params: dict = None):
        """
        Initialize the map executor

        Args:
            task_id: Unique ID for this map task
            input_path: Path to input file
            start_offset: Byte offset where this task should start reading
            end_offset: Byte offset where this task should stop reading
            num_reduce_tasks: Number of reduce tasks (for partitioning)
            job_file: Path to the job's map/reduce Python file
            use_combiner: Whether to apply combiner function
            job_id: Unique job identifier
            intermediate_dir: Directory for this job's intermediate files
            job_params: Keyword arguments for the map function (e.g. radius)
        """
        self.task_id = task_id
        self.input_path = input_path
        self.start_offset = start_offset
        self.end_offset = end_offset
        self.num_reduce_tasks = num_reduce_tasks
        self.job_file = job_file
        self.use_combiner = use_combiner
        self.job_id = job_id
        self.intermediate_dir = intermediate_dir
        self.job_params = job_params or {}
        self.loader = FunctionLoader(job_file, self.job_params)

    def execute(self) -> dict:
        """
        Execute the map task

        Returns:
            Dictionary with 'success', 'execution_time_ms', 'error_message',
            'records_emitted', 'records_written' and 'memory_usage_bytes' fields
        """
        start_time = time.time()
        records_emitted = 0
        records_written = 0

        try:
            logger.info(f"Map task {self.task_id}: Loading map function")
            map_func = self.loader.bind_map_function()

            logger.info(f"Map task {self.task_id}: Reading input split "
                        f"[{self.start_offset}, {self.end_offset})")
            key_values = self._read_input_split()

            logger.info(f"Map task {self.task_id}: Processing {len(key_values)} lines")
            intermediate = defaultdict(list)
            for key, value in key_values:
                for out_key, out_value in map_func(key, value):
                    partition = partition_for(out_key, self.num_reduce_tasks)
                    intermediate[partition].append((out_key, out_value))
                    records_emitted += 1

            logger.info(f"Map task {self.task_id}: Generated {records_emitted} intermediate pairs")

            if self.use_combiner:
                logger.info(f"Map task {self.task_id}: Applying combiner")
                intermediate = self._apply_combiner(intermediate)
                logger.info(f"Map task {self.task_id}: After combiner: "
                            f"{sum(len(v) for v in intermediate.values())} pairs")

            logger.info(f"Map task {self.task_id}: Writing intermediate files")
            records_written = self._write_intermediate_files(intermediate)

            execution_time = int((time.time() - start_time) * 1000)
            logger.info(f"Map task {self.task_id}: Completed in {execution_time}ms")

            return {
                'success': True,
                'execution_time_ms': execution_time,
                'error_message': '',
                'records_emitted': records_emitted,
                'records_written': records_written,
                'memory_usage_bytes': psutil.Process().memory_info().rss
            }

        except Exception as e:
            execution_time = int((time.time() - start_time) * 1000)
            logger.error(f"Map task {self.task_id} failed: {e}")
            return {
                'success': False,
                'execution_time_ms': execution_time,
                'error_message': str(e),
                'records_emitted': records_emitted,
                'records_written': records_written,
                'memory_usage_bytes': psutil.Process().memory_info().rss
            }

    def _read_input_split(self):
        """
        Read assigned byte range of the input file with line boundary alignment.

        A line belongs to the split holding its first byte, so adjacent splits
        never share or drop a line. Undecodable bytes are dropped.

        Returns:
            List of (line_offset, line_content) tuples
        """
        key_values = []

        with open(self.input_path, 'rb') as f:
            if self.start_offset > 0:
                # Finish the line that started in the previous split
                f.seek(self.start_offset - 1)
                f.readline()

            while f.tell() < self.end_offset:
                offset = f.tell()
                line = f.readline()
                if not line:
                    break
                key_values.append((offset, line.decode('utf-8', errors='ignore').strip()))

        return key_values

    def _apply_combiner(self, intermediate: dict) -> dict:
        """
        Apply combiner function to local map output

        Args:
            intermediate: Dictionary mapping partition_id to list of (key, value) pairs

        Returns:
            Dictionary with same structure but with combined values
        """
        combiner_func = self.loader.get_combiner_function()
        if not combiner_func:
            return intermediate

        combined = {}
        for partition, kv_pairs in intermediate.items():
            key_groups = defaultdict(list)
            for k, v in kv_pairs:
                key_groups[k].append(v)

            combined_pairs = []
            for key, values in key_groups.items():
                for out_key, out_value in combiner_func(key, values):
                    combined_pairs.append((out_key, out_value))

            combined[partition] = combined_pairs

        return combined

    def _write_intermediate_files(self, intermediate: dict) -> int:
        """
        Write intermediate key-value pairs to disk, one JSON object per line

        Args:
            intermediate: Dictionary mapping partition_id to list of (key, value) pairs

        Returns:
            Number of records written
        """
        os.makedirs(self.intermediate_dir, exist_ok=True)

        written = 0
        for partition, kv_pairs in intermediate.items():
            filename = os.path.join(self.intermediate_dir,
                                    f"map-{self.task_id}-reduce-{partition}.txt")

            with open(filename, 'w', encoding='utf-8') as f:
                for key, value in kv_pairs:
                    f.write(json.dumps({'key': key, 'value': value}) + '\n')
                    written += 1

        return written
