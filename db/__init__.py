"""
db/ - Database Layer
====================
Owns the connection pools for the HAF SQL (PostgreSQL) and HiveSQL
(SQL Server) backends and the exceptions raised by the data access layer.
This layer is the lowest in the architecture and has no dependencies on other layers.
"""
