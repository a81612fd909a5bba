"""Static data — directory and binary names of the on-disk layout."""
