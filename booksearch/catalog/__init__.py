"""
Catalogue package for the book search page.

This package holds the schemas, the clients for the Google Books
catalogue and the GraphQL account API, the view builders and the route
definitions that expose one search session per browser page.
"""
