"""Bank appointment booking flow: availability search, cache and mock backend."""

__version__ = "0.1.0"
