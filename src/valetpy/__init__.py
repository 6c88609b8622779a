"""Route *.test hosts to local project directories."""

__version__ = "0.1.0"
