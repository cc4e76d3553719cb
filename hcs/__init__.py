"""Build and publish apps to the Homey Community Store."""

__version__ = "0.3.0"
