"""
Utility modules for the EOR quote engine
"""
from .config_loader import EORConfig, load_eor_config
from .scheduler import JobScheduler, ManualScheduler

__all__ = [
    'EORConfig',
    'load_eor_config',
    'ManualScheduler',
    'JobScheduler',
]
