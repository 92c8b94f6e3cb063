"""Screenshot localization for App Store / Google Play listings."""

__version__ = "0.1.0"
