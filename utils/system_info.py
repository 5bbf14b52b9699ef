# utils/system_info.py

import psutil


def default_worker_count() -> int:
    """Number of available processing units, at least 1"""
    return psutil.cpu_count(logical=True) or 1


def get_system_info() -> dict:
    """Get current system information"""
    memory = psutil.virtual_memory()

    return {
        'cpu_count': psutil.cpu_count(logical=False),
        'cpu_count_logical': psutil.cpu_count(logical=True),
        'memory_total_gb': memory.total / (1024**3),
        'memory_available_gb': memory.available / (1024**3),
        'memory_percent': memory.percent
    }
