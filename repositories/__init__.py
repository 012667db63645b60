"""
repositories/ - Data Access Layer
==================================
HBDRepository runs the fixed savings queries through the shared pool.
Each backend has its own query catalog; rows come back as plain dicts
and are turned into domain models by the services layer.
"""
