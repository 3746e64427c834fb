"""auth/ -- Authentication and authorization package for NGO Manager.

Layer rule: auth/ imports only stdlib, third-party libraries, and core/.
It does NOT import from api/ or ngo/.
api/ imports from auth/, not the other way around.
"""
