"""
Performance metrics collection for local stripes jobs.
"""

import glob
import json
import os
import time
from dataclasses import dataclass, asdict
from typing import Dict, List, Optional

from stripes.config import JobConfig


def _total_size(pattern: str) -> int:
    return sum(os.path.getsize(f) for f in glob.glob(pattern) if os.path.exists(f))


@dataclass
class JobMetrics:
    """Metrics for a single job execution."""

    job_id: str
    start_time: float
    end_time: float
    map_phase_start: float
    map_phase_end: float
    reduce_phase_start: float
    reduce_phase_end: float
    num_map_tasks: int
    num_reduce_tasks: int
    use_combiner: bool
    radius: int
    input_size_bytes: int
    intermediate_size_bytes: int = 0
    output_size_bytes: int = 0
    records_emitted: int = 0
    records_written: int = 0
    words_written: int = 0
    peak_memory_bytes: int = 0
    combiner_reduction_ratio: float = 0.0

    @property
    def total_time_seconds(self) -> float:
        """Total job execution time in seconds."""
        return self.end_time - self.start_time

    @property
    def map_phase_time_seconds(self) -> float:
        """Map phase execution time in seconds."""
        return self.map_phase_end - self.map_phase_start

    @property
    def reduce_phase_time_seconds(self) -> float:
        """Reduce phase execution time in seconds."""
        return self.reduce_phase_end - self.reduce_phase_start

    def to_dict(self) -> dict:
        """Convert metrics to dictionary."""
        data = asdict(self)
        data['total_time_seconds'] = self.total_time_seconds
        return data

    def save_to_file(self, filepath: str):
        """Save metrics to JSON file."""
        with open(filepath, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)


class MetricsCollector:
    """Collects and manages metrics for jobs."""

    def __init__(self):
        self.job_metrics: Dict[str, JobMetrics] = {}

    def start_job(self, config: JobConfig):
        """Initialize metrics tracking for a new job."""
        input_size = os.path.getsize(config.input_path) if os.path.exists(config.input_path) else 0
        now = time.time()

        self.job_metrics[config.job_id] = JobMetrics(
            job_id=config.job_id,
            start_time=now,
            end_time=0,
            map_phase_start=now,
            map_phase_end=0,
            reduce_phase_start=0,
            reduce_phase_end=0,
            num_map_tasks=config.num_map_tasks,
            num_reduce_tasks=config.num_reduce_tasks,
            use_combiner=config.use_combiner,
            radius=config.radius,
            input_size_bytes=input_size
        )

    def end_map_phase(self, job_id: str, map_results: List[dict]):
        """Mark the end of the map phase and tally intermediate record counts."""
        metrics = self.job_metrics.get(job_id)
        if not metrics:
            return

        metrics.map_phase_end = time.time()
        metrics.records_emitted = sum(r.get('records_emitted', 0) for r in map_results)
        metrics.records_written = sum(r.get('records_written', 0) for r in map_results)
        metrics.peak_memory_bytes = max(
            [metrics.peak_memory_bytes] + [r.get('memory_usage_bytes', 0) for r in map_results])

        # Fraction of map output removed by the combiner
        if metrics.records_emitted > 0:
            metrics.combiner_reduction_ratio = \
                1.0 - (metrics.records_written / metrics.records_emitted)

    def start_reduce_phase(self, job_id: str, intermediate_dir: str):
        """Mark the start of the reduce phase and measure intermediate data size."""
        metrics = self.job_metrics.get(job_id)
        if not metrics:
            return

        metrics.reduce_phase_start = time.time()
        metrics.intermediate_size_bytes = _total_size(
            os.path.join(intermediate_dir, "map-*-reduce-*.txt"))

    def end_job(self, job_id: str, output_path: str, reduce_results: List[dict]):
        """Mark job completion and measure output size."""
        metrics = self.job_metrics.get(job_id)
        if not metrics:
            return

        now = time.time()
        metrics.reduce_phase_end = now
        metrics.end_time = now
        metrics.output_size_bytes = _total_size(os.path.join(output_path, "part-*.txt"))
        metrics.words_written = sum(r.get('words_written', 0) for r in reduce_results)
        metrics.peak_memory_bytes = max(
            [metrics.peak_memory_bytes] + [r.get('memory_usage_bytes', 0) for r in reduce_results])

    def get_metrics(self, job_id: str) -> Optional[JobMetrics]:
        """Retrieve metrics for a specific job."""
        return self.job_metrics.get(job_id)
