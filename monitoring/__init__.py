"""
Monitoring Module

Contains all price-monitoring functionality:
- Browser automation sessions and driver provisioning
- Listing extraction from the marketplace
- Price history persistence
- The background monitor scheduler
"""
