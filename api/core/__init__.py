"""
Shared, cross-cutting code for the API.

`core/` holds the building blocks every feature uses: the database pool,
schema provisioning, settings, the error taxonomy and the response
envelope. Feature-specific SQL and business rules live in the feature
packages (`contacts/`, `blogs/`, `uploads/`).
"""
