from worker.model.job import ErrorKind, Job, JobOutcome, OutcomeStatus
from worker.model.options import ExecutionOptions

__all__ = ['ErrorKind', 'Job', 'JobOutcome', 'OutcomeStatus', 'ExecutionOptions']
