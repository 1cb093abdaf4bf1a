"""
Syncthing monitoring plugin (check_syncthing).

Queries a Syncthing daemon through its REST API and reports daemon health,
folder synchronization status, and device last-seen times in the format
expected by Nagios-compatible monitoring hosts.
"""

__version__ = "0.1.0"
