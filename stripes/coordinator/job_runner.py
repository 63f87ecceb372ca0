#!/usr/bin/env python3
"""
Local job runner
Runs the map phase, then the reduce phase, of a stripes job in thread pools
"""

import glob
import json
import logging
import os
import shutil
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Dict, List, Optional

from stripes.config import JobConfig
from stripes.coordinator.job_manager import Job, JobManager, JobStatus, TaskStatus
from stripes.coordinator.metrics import JobMetrics, MetricsCollector
from stripes.errors import JobFailed
from stripes.worker.map_executor import MapExecutor
from stripes.worker.reduce_executor import ReduceExecutor

logger = logging.getLogger(__name__)


class LocalJobRunner:
    """Executes jobs in-process, one thread per concurrently running task"""

    def __init__(self, max_workers: int = 4):
        self.max_workers = max_workers
        self.job_manager = JobManager()
        self.metrics = MetricsCollector()

    def run(self, config: JobConfig, keep_intermediate: bool = False) -> JobMetrics:
        """
        Run a job to completion.

        Args:
            config: Job settings
            keep_intermediate: Leave intermediate files on disk after the run

        Returns:
            JobMetrics for the finished job

        Raises:
            InvalidConfiguration: If the configuration is rejected; nothing is written
            JobFailed: If any map or reduce task failed
        """
        config.validate()

        # A rerun replaces earlier output
        if os.path.exists(config.output_path):
            shutil.rmtree(config.output_path)
        if os.path.exists(config.intermediate_dir):
            shutil.rmtree(config.intermediate_dir)

        job = self.job_manager.create_job(config)
        self.metrics.start_job(config)
        logger.info(f"Executing job {job.job_id} (radius={config.radius}, "
                    f"map tasks={config.num_map_tasks}, reduce tasks={config.num_reduce_tasks}, "
                    f"combiner={config.use_combiner})")

        try:
            map_results = self._run_map_phase(job)
            self.metrics.end_map_phase(job.job_id, map_results)

            self.job_manager.generate_reduce_tasks(job)
            self.job_manager.set_job_status(job.job_id, JobStatus.REDUCE_PHASE)
            self.metrics.start_reduce_phase(job.job_id, config.intermediate_dir)

            reduce_results = self._run_reduce_phase(job)
            self.metrics.end_job(job.job_id, config.output_path, reduce_results)
        except Exception as e:
            self.job_manager.set_job_status(job.job_id, JobStatus.FAILED, str(e))
            raise
        finally:
            if not keep_intermediate and os.path.exists(config.intermediate_dir):
                shutil.rmtree(config.intermediate_dir)

        logger.info(f"Job {job.job_id} completed")
        return self.metrics.get_metrics(job.job_id)

    def _run_map_phase(self, job: Job) -> List[dict]:
        config = job.config
        self.job_manager.generate_map_tasks(job)
        self.job_manager.set_job_status(job.job_id, JobStatus.MAP_PHASE)
        logger.info(f"Starting map phase for job {job.job_id}")

        def run_task(task):
            self.job_manager.mark_map_task(job.job_id, task.task_id, TaskStatus.RUNNING)
            executor = MapExecutor(
                task_id=task.task_id,
                input_path=task.input_path,
                start_offset=task.start_offset,
                end_offset=task.end_offset,
                num_reduce_tasks=config.num_reduce_tasks,
                job_file=config.job_file,
                use_combiner=config.use_combiner,
                job_id=job.job_id,
                intermediate_dir=config.intermediate_dir,
                job_params=config.job_params
            )
            return task, executor.execute()

        return self._run_tasks(job, 'map', job.map_tasks, run_task, self.job_manager.mark_map_task)

    def _run_reduce_phase(self, job: Job) -> List[dict]:
        config = job.config
        logger.info(f"Starting reduce phase for job {job.job_id}")

        def run_task(task):
            self.job_manager.mark_reduce_task(job.job_id, task.task_id, TaskStatus.RUNNING)
            executor = ReduceExecutor(
                task_id=task.task_id,
                partition_id=task.partition_id,
                intermediate_files=task.intermediate_files,
                job_file=config.job_file,
                output_path=config.output_path,
                job_id=job.job_id
            )
            return task, executor.execute()

        return self._run_tasks(job, 'reduce', job.reduce_tasks, run_task,
                               self.job_manager.mark_reduce_task)

    def _run_tasks(self, job: Job, phase: str, tasks: list, run_task, mark) -> List[dict]:
        results = []
        failure: Optional[JobFailed] = None

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = [executor.submit(run_task, task) for task in tasks]
            for future in as_completed(futures):
                task, result = future.result()
                results.append(result)
                if result['success']:
                    mark(job.job_id, task.task_id, TaskStatus.COMPLETED)
                    logger.info(f"{phase.capitalize()} task {task.task_id} completed "
                                f"in {result['execution_time_ms']}ms")
                else:
                    mark(job.job_id, task.task_id, TaskStatus.FAILED)
                    if failure is None:
                        failure = JobFailed(job.job_id, phase, task.task_id, result['error_message'])

        if failure is not None:
            raise failure
        return results


def read_output(output_path: str) -> Dict[str, Dict[str, int]]:
    """
    Load the output of a finished job.

    Returns:
        Dictionary mapping each word to its merged stripe
    """
    stripes = {}
    for filepath in sorted(glob.glob(os.path.join(output_path, "part-*.txt"))):
        with open(filepath, 'r', encoding='utf-8') as f:
            for line in f:
                line = line.rstrip('\n')
                if not line:
                    continue
                word, stripe = line.split('\t', 1)
                stripes[word] = json.loads(stripe)
    return stripes
