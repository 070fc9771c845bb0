"""
Command-line interface for phylodash.

Provides typer-based CLI commands for classifying metadata descriptors,
colouring trees and exporting filtered views.
"""
