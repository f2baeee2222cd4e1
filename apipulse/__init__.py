"""apipulse: closed-loop HTTP load testing."""

__version__ = "1.0.0"
