"""audit/ -- Persistent audit log (login notices, integrity faults).

Layer rule: audit/ imports only stdlib + third-party libraries + auth.store
helpers. It does NOT import from api/ or albums/.
"""
