"""Models, readers and a catalog for Doxygen navigation and search data."""
