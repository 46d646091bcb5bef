"""Key formatting and the background upload worker."""
