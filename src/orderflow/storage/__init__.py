"""Trade file loading and report export."""
