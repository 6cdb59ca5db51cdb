"""
Utility modules for the backend.

- normalize: query-param / env-var parsing (to_int, to_date, to_str, to_enum)
"""
