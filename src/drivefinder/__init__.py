"""drivefinder: search a OneDrive from the terminal, one cancellable session at a time."""

__version__ = "0.1.0"
