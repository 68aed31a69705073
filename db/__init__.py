"""
db/ - Database Layer
====================
Connection pool, generic CRUD helpers, canonical schema and error taxonomy.
Everything above this layer talks to PostgreSQL through `db.connection.Database`.
"""
