"""Power allocation systems."""
