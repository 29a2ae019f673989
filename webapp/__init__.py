"""
HTTP control surface for the price monitor.
"""
