"""Command-line front end for the cup stencil renderer."""
