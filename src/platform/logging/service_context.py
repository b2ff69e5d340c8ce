"""
Service context extraction for log traceability.

Every log line is tagged with `service@env:instance` so lines from several
replicas can be told apart once aggregated.
"""

import os
from functools import lru_cache


@lru_cache(maxsize=1)
def get_service_context() -> str:
    service_name = os.getenv('SERVICE_NAME', 'ticket-core')
    deploy_env = os.getenv('DEPLOY_ENV', 'local_dev')

    # Container runtimes expose a task/pod identifier; fall back to the PID locally
    instance_id = os.getenv('HOSTNAME', '')[:12] or str(os.getpid())

    return f'{service_name}@{deploy_env}:{instance_id}'
