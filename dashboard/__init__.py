"""NACOS admin dashboard client"""

__version__ = "1.0.0"
