"""auth/ -- Authentication and authorization package for the threat intel backend.

Layer rule: auth/ imports stdlib, third-party libraries, and core/.
It does NOT import from api/ or orders/.
api/ and orders/ import from auth/, not the other way around.
"""
