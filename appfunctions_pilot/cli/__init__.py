"""
AppFunctions Pilot - CLI Module
"""
from .main import main

__all__ = ['main']
