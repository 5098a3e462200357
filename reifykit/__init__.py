"""Context-supplied ordering, hashing and display, bounded value dispatch, and async step tracing."""

__version__ = "0.1.1"