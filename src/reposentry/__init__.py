"""reposentry - evaluate development practices across a repository's components."""

__version__ = "0.1.0"
