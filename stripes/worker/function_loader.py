"""
Job file loading.

A job file is a plain Python module defining ``map_function(key, value, **params)``
and ``reduce_function(key, values)``, optionally ``combiner_function(key, values)``.
The map function is handed out already bound to the job parameters, so
executors only ever call ``map_func(key, value)``.
"""

import functools
import importlib.util
import inspect
import os

from stripes.errors import InvalidConfiguration

MAP_FUNCTION = 'map_function'
REDUCE_FUNCTION = 'reduce_function'
COMBINER_FUNCTION = 'combiner_function'


class FunctionLoader:
    """Loads a job file once and serves its functions"""

    def __init__(self, job_file: str, job_params: dict = None):
        """
        Args:
            job_file: Path to the job's Python file
            job_params: Keyword arguments bound into the map function (e.g. radius)
        """
        self.job_file = job_file
        self.job_params = dict(job_params or {})
        self.module = None

    def load_module(self):
        """
        Execute the job file as an anonymous module.

        Raises:
            FileNotFoundError: If the job file doesn't exist
            ImportError: If the file cannot be loaded as a module
        """
        if self.module is not None:
            return self.module
        if not os.path.isfile(self.job_file):
            raise FileNotFoundError(f"Job file not found: {self.job_file}")

        spec = importlib.util.spec_from_file_location('stripes_user_job', self.job_file)
        if spec is None or spec.loader is None:
            raise ImportError(f"Cannot load {self.job_file} as a Python module")
        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)
        self.module = module
        return module

    def _function(self, name: str, required: bool = True):
        func = getattr(self.load_module(), name, None)
        if func is None and required:
            raise AttributeError(f"Job file {self.job_file} must define '{name}'")
        if func is not None and not callable(func):
            raise AttributeError(f"'{name}' in {self.job_file} is not callable")
        return func

    def bind_map_function(self):
        """
        Return the map function with the job parameters bound in.

        Raises:
            AttributeError: If the job file has no map function
            InvalidConfiguration: If the map function cannot take the job parameters
        """
        map_func = self._function(MAP_FUNCTION)
        try:
            inspect.signature(map_func).bind('key', 'value', **self.job_params)
        except TypeError as e:
            params = ', '.join(sorted(self.job_params)) or 'no parameters'
            raise InvalidConfiguration(
                f"{MAP_FUNCTION} in {self.job_file} must accept (key, value) and "
                f"the job parameters ({params}): {e}") from None
        if not self.job_params:
            return map_func
        return functools.partial(map_func, **self.job_params)

    def get_reduce_function(self):
        """Raises AttributeError if the job file has no reduce function."""
        return self._function(REDUCE_FUNCTION)

    def get_combiner_function(self):
        """The explicit combiner, else the reducer, else None"""
        return self._function(COMBINER_FUNCTION, required=False) or \
            self._function(REDUCE_FUNCTION, required=False)

    def check(self):
        """
        Load the job file and verify it can run with the job parameters.

        Raises:
            InvalidConfiguration: On any problem with the job file
        """
        try:
            self.bind_map_function()
            self.get_reduce_function()
        except (OSError, ImportError, SyntaxError, AttributeError) as e:
            raise InvalidConfiguration(f"Unusable job file {self.job_file}: {e}") from e
