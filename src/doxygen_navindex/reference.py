"""Bundled data tables of the cap argument-parser documentation."""

from pathlib import Path

from doxygen_navindex.site import DoxygenSite

REFERENCE_DIR = Path(__file__).parent / "data" / "cap"


def reference_site() -> DoxygenSite:
    """Return a site loader on the bundled cap documentation tables."""
    return DoxygenSite(REFERENCE_DIR)
