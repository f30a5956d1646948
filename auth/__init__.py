"""auth/ -- Authentication and authorization package for the ticket tracker.

Layer rule: auth/ imports only stdlib, third-party libraries and core/.
It does NOT import from api/ or tickets/.
api/ imports from auth/, not the other way around.
"""
