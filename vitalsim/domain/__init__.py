"""Domain models and errors shared by the synthesis engine and its adapters."""
