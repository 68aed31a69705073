"""
queries/ - Reporting Queries
============================
Fixed analytical SQL (joins, aggregations, set operations) run through
`db.connection.Database.execute_query`.
"""
