"""
Helper utilities for the unit import & query backend.

This package holds the core of the backend: reading delimited text and Excel
uploads into open-schema records, inferring column types, storing imported
units, and filtering/paginating them with facet options for the listing view.
"""
