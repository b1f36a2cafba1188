"""auth/ -- Session authentication and authorization package for GalleryGate.

Layer rule: auth/ imports only stdlib + third-party libraries + core/.
It does NOT import from api/, albums/, or audit/.
api/ imports from auth/, not the other way around.
"""
