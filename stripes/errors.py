"""
Exception types raised by the stripes package.
"""


class StripesError(Exception):
    """Base class for all stripes errors"""


class InvalidConfiguration(StripesError, ValueError):
    """A job or window setting is out of range. Fatal, never retried."""


class InvalidStripe(StripesError, ValueError):
    """A stripe violates the positive-count invariant"""


class JobFailed(StripesError):
    """One or more map or reduce tasks of a local job failed"""

    def __init__(self, job_id: str, phase: str, task_id: int, error_message: str):
        self.job_id = job_id
        self.phase = phase
        self.task_id = task_id
        self.error_message = error_message
        super().__init__(f"Job {job_id}: {phase} task {task_id} failed: {error_message}")
