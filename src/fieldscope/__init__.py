"""
fieldscope: Field Impact Explorer for OpenAPI specifications.

Answers "where is this field used?" across schemas and endpoints, and how
far a change to it would reach.
"""

__version__ = "0.3.0"
