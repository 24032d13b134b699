"""Static lure catalog and clarity color bands."""
