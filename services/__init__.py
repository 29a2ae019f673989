"""
Long-running services built on the monitoring package.
"""
