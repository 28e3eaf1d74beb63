"""
Core - configuration, auth, errors, database and storage wiring
"""
