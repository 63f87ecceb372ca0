#!/usr/bin/env python3
"""
Job Manager for local stripes jobs
Handles job state management, task generation, and progress tracking
"""

import glob
import os
import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from stripes.config import JobConfig


class JobStatus(Enum):
    """Status of a job"""
    PENDING = "pending"
    MAP_PHASE = "map_phase"
    SHUFFLE_PHASE = "shuffle_phase"
    REDUCE_PHASE = "reduce_phase"
    COMPLETED = "completed"
    FAILED = "failed"


class TaskStatus(Enum):
    """Status of individual map or reduce tasks"""
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class MapTask:
    """Represents a single map task"""
    task_id: int
    input_path: str
    start_offset: int
    end_offset: int
    status: TaskStatus = TaskStatus.PENDING


@dataclass
class ReduceTask:
    """Represents a single reduce task"""
    task_id: int
    partition_id: int
    intermediate_files: List[str] = field(default_factory=list)
    status: TaskStatus = TaskStatus.PENDING


@dataclass
class Job:
    """Represents a complete job"""
    config: JobConfig
    status: JobStatus = JobStatus.PENDING
    map_tasks: List[MapTask] = field(default_factory=list)
    reduce_tasks: List[ReduceTask] = field(default_factory=list)
    start_time: float = 0.0
    end_time: float = 0.0
    error_message: str = ''

    @property
    def job_id(self) -> str:
        return self.config.job_id


class JobManager:
    """Manages jobs and their lifecycle"""

    def __init__(self):
        self.jobs: Dict[str, Job] = {}
        self.lock = threading.Lock()

    def create_job(self, config: JobConfig) -> Job:
        """Create new job from a validated configuration"""
        with self.lock:
            job = Job(config=config, start_time=time.time())
            self.jobs[job.job_id] = job
            return job

    def generate_map_tasks(self, job: Job) -> List[MapTask]:
        """Split the input file into byte ranges, one per map task"""
        config = job.config
        file_size = os.path.getsize(config.input_path)
        chunk_size = file_size // config.num_map_tasks

        map_tasks = []
        for i in range(config.num_map_tasks):
            start = i * chunk_size
            end = file_size if i == config.num_map_tasks - 1 else (i + 1) * chunk_size
            map_tasks.append(MapTask(
                task_id=i,
                input_path=config.input_path,
                start_offset=start,
                end_offset=end
            ))

        job.map_tasks = map_tasks
        return map_tasks

    def generate_reduce_tasks(self, job: Job) -> List[ReduceTask]:
        """Create one reduce task per partition with its intermediate files"""
        config = job.config
        reduce_tasks = []
        for partition_id in range(config.num_reduce_tasks):
            pattern = os.path.join(config.intermediate_dir, f"map-*-reduce-{partition_id}.txt")
            reduce_tasks.append(ReduceTask(
                task_id=partition_id,
                partition_id=partition_id,
                intermediate_files=sorted(glob.glob(pattern))
            ))

        job.reduce_tasks = reduce_tasks
        return reduce_tasks

    def set_job_status(self, job_id: str, status: JobStatus, error_message: str = ''):
        with self.lock:
            job = self.jobs.get(job_id)
            if not job:
                return
            job.status = status
            if error_message:
                job.error_message = error_message
            if status in (JobStatus.COMPLETED, JobStatus.FAILED):
                job.end_time = time.time()

    def mark_map_task(self, job_id: str, task_id: int, status: TaskStatus):
        """Record the outcome of a map task"""
        with self.lock:
            job = self.jobs.get(job_id)
            if job and task_id < len(job.map_tasks):
                job.map_tasks[task_id].status = status

                if all(t.status == TaskStatus.COMPLETED for t in job.map_tasks):
                    job.status = JobStatus.SHUFFLE_PHASE

    def mark_reduce_task(self, job_id: str, task_id: int, status: TaskStatus):
        """Record the outcome of a reduce task"""
        with self.lock:
            job = self.jobs.get(job_id)
            if job and task_id < len(job.reduce_tasks):
                job.reduce_tasks[task_id].status = status

                if all(t.status == TaskStatus.COMPLETED for t in job.reduce_tasks):
                    job.status = JobStatus.COMPLETED
                    job.end_time = time.time()

    def get_job_status(self, job_id: str) -> Optional[Dict]:
        """Get current job status with progress"""
        with self.lock:
            job = self.jobs.get(job_id)
            if not job:
                return None

            map_completed = sum(1 for t in job.map_tasks if t.status == TaskStatus.COMPLETED)
            reduce_completed = sum(1 for t in job.reduce_tasks if t.status == TaskStatus.COMPLETED)
            # Reduce tasks only exist once the map phase is done
            total_tasks = job.config.num_map_tasks + job.config.num_reduce_tasks
            progress = int((map_completed + reduce_completed) / total_tasks * 100) if total_tasks > 0 else 0

            return {
                'status': job.status.value,
                'progress': progress,
                'map_completed': map_completed,
                'map_total': len(job.map_tasks),
                'reduce_completed': reduce_completed,
                'reduce_total': len(job.reduce_tasks),
                'error_message': job.error_message
            }
