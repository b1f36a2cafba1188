"""albums/ -- Album records and their access metadata.

Layer rule: albums/ does NOT import from api/. Visibility decisions live in
the route layer, which combines AlbumStore data with SessionAuthority.
"""
