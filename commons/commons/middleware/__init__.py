from .request_id import request_id_middleware
from .time_log import process_time_log_middleware

__all__ = ["request_id_middleware", "process_time_log_middleware"]
