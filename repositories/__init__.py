"""
repositories/ - Data Access Layer
==================================
Typed CRUD per entity on top of `db.connection.Database`.
Repositories take rows from the database and return domain model objects.
"""
