"""Backend services for the NaijaTax calculator."""
