"""gridacl - access-control consistency engine for iRODS-style storage grids."""

__version__ = "0.1.0"
