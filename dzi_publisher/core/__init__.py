"""Core utilities and shared infrastructure.

- config: Configuration loading and validation
- constants: Named constants, marker bodies, environment variable names
- exceptions: Custom exception hierarchy
- ingress: Trigger payload parsing and activity input normalisation
"""
