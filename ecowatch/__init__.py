"""
EcoWatch sync client: real-time mirror of sensor, report and chat state
"""

__version__ = "1.0.0"
