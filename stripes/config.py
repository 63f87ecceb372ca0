"""
Configuration for stripes jobs.

Defaults come from the environment so the same job can be pointed at a
different data directory or window size without code changes.
"""

import os
import tempfile
import uuid
from dataclasses import dataclass, field

from stripes.emitter import DEFAULT_RADIUS, check_radius
from stripes.errors import InvalidConfiguration
from stripes.worker.function_loader import FunctionLoader

# Configuration from environment
DATA_DIR = os.getenv('STRIPES_DATA_DIR', os.path.join(tempfile.gettempdir(), 'stripes-data'))
RADIUS = os.getenv('STRIPES_RADIUS', str(DEFAULT_RADIUS))
LOG_LEVEL = os.getenv('STRIPES_LOG_LEVEL', 'INFO')

DEFAULT_JOB_FILE = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'job.py')
DEFAULT_NUM_MAP_TASKS = 4
DEFAULT_NUM_REDUCE_TASKS = 2


def parse_radius(value) -> int:
    """
    Convert an externally supplied radius (CLI argument, env var) to an int.

    Raises:
        InvalidConfiguration: If the value is not a non-negative integer
    """
    if isinstance(value, str):
        try:
            value = int(value.strip())
        except ValueError:
            raise InvalidConfiguration(f"Window radius must be an integer, got {value!r}") from None
    return check_radius(value)


@dataclass(frozen=True)
class WindowConfig:
    """Sliding window settings"""
    radius: int = DEFAULT_RADIUS

    def __post_init__(self):
        check_radius(self.radius)

    @classmethod
    def from_env(cls) -> 'WindowConfig':
        return cls(radius=parse_radius(RADIUS))


@dataclass
class JobConfig:
    """Everything needed to run one local co-occurrence job"""
    input_path: str
    output_path: str
    radius: int = DEFAULT_RADIUS
    num_map_tasks: int = DEFAULT_NUM_MAP_TASKS
    num_reduce_tasks: int = DEFAULT_NUM_REDUCE_TASKS
    use_combiner: bool = False
    job_file: str = DEFAULT_JOB_FILE
    data_dir: str = DATA_DIR
    job_id: str = field(default_factory=lambda: f"job-{uuid.uuid4().hex[:8]}")

    @property
    def intermediate_dir(self) -> str:
        return os.path.join(self.data_dir, 'intermediate', self.job_id)

    @property
    def job_params(self) -> dict:
        """Keyword arguments passed to the job's map function"""
        return {'radius': self.radius}

    def validate(self):
        """
        Check the job settings before anything is written.

        Raises:
            InvalidConfiguration: On the first invalid setting found
        """
        WindowConfig(self.radius)
        if self.num_map_tasks < 1:
            raise InvalidConfiguration(f"num_map_tasks must be >= 1, got {self.num_map_tasks}")
        if self.num_reduce_tasks < 1:
            raise InvalidConfiguration(f"num_reduce_tasks must be >= 1, got {self.num_reduce_tasks}")
        if not os.path.isfile(self.input_path):
            raise InvalidConfiguration(f"Input file not found: {self.input_path}")
        if not os.path.isfile(self.job_file):
            raise InvalidConfiguration(f"Job file not found: {self.job_file}")
        FunctionLoader(self.job_file, self.job_params).check()
        if os.path.exists(self.output_path) and not os.path.isdir(self.output_path):
            raise InvalidConfiguration(f"Output path {self.output_path} exists and is not a directory")
        # The output directory is wiped before a run
        output_dir = os.path.abspath(self.output_path)
        input_path = os.path.abspath(self.input_path)
        if os.path.commonpath([output_dir, input_path]) == output_dir:
            raise InvalidConfiguration(f"Output path {self.output_path} contains the input file")
